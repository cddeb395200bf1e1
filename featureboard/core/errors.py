"""
Domain errors for FeatureBoard.

Every error carries the HTTP status it maps to so the API layer can render
it with a single exception handler. Messages are meant to be shown to users
as-is.
"""


class FeatureBoardError(Exception):
    """Base class for all domain errors."""

    status_code = 500
    default_message = "Unexpected error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(FeatureBoardError):
    """Malformed or out-of-range input."""

    status_code = 400
    default_message = "Invalid input"


class InvalidTransition(ValidationError):
    """Moderation transition not allowed from the idea's current status."""

    def __init__(self, current_status: str, action: str):
        self.current_status = current_status
        self.action = action
        super().__init__(f"Cannot {action} an idea with status '{current_status}'")


class AuthError(FeatureBoardError):
    status_code = 401
    default_message = "Invalid credentials"


class Forbidden(FeatureBoardError):
    status_code = 403
    default_message = "You do not have permission to perform this action"


class NotFound(FeatureBoardError):
    status_code = 404
    default_message = "Not found"


class AlreadyVoted(FeatureBoardError):
    status_code = 409
    default_message = "You have already voted for this idea"


class NotVoted(FeatureBoardError):
    status_code = 409
    default_message = "You have not voted for this idea"


class AlreadyUsed(FeatureBoardError):
    status_code = 409
    default_message = "Verification token has already been used"


class Expired(FeatureBoardError):
    status_code = 410
    default_message = "Verification token has expired"


class UpstreamError(FeatureBoardError):
    """The identity or email collaborator failed."""

    status_code = 502
    default_message = "Upstream service failed"
