"""
Visibility rules and listing order for ideas.

Admins see everything. Clients see public ideas that are not marked
"won't implement", plus every idea they authored. Anonymous viewers see
nothing.
"""

from typing import List, Optional

from sqlalchemy import and_, false, func, or_

from featureboard.core.errors import Forbidden, ValidationError
from featureboard.models.idea import Idea, IdeaStatus
from featureboard.models.user import ROLE_ADMIN

DAY_MS = 86_400_000

STATUS_ALL = "all"
DEFAULT_SORT = "newest"


def is_admin(user: Optional[dict]) -> bool:
    return bool(user) and user.get("role") == ROLE_ADMIN


def can_view(user: Optional[dict], idea: Idea) -> bool:
    if not user:
        return False
    if is_admin(user):
        return True
    if idea.author_id == user["id"]:
        return True
    return bool(idea.is_public) and idea.status != IdeaStatus.WONT_IMPLEMENT.value


def visibility_clause(user: Optional[dict]):
    """SQL filter matching can_view(). None means no restriction."""
    if not user:
        return false()
    if is_admin(user):
        return None
    return or_(
        Idea.author_id == user["id"],
        and_(Idea.is_public.is_(True), Idea.status != IdeaStatus.WONT_IMPLEMENT.value),
    )


def check_status_filter(user: Optional[dict], status: Optional[str]) -> Optional[str]:
    """Returns the status to filter on, or None when every status is wanted."""
    if not status or status == STATUS_ALL:
        return None
    try:
        status = IdeaStatus(status).value
    except ValueError:
        raise ValidationError(f"Unknown status filter: {status}")
    if status == IdeaStatus.WONT_IMPLEMENT.value and not is_admin(user):
        raise Forbidden("Only administrators can filter by 'wont_implement'")
    return status


def _epoch_ms(column, dialect: str):
    if dialect == "sqlite":
        # julianday of 1970-01-01T00:00:00
        return (func.julianday(column) - 2440587.5) * DAY_MS
    return func.extract("epoch", column) * 1000


def trending_score(dialect: str):
    # Each vote weighs as much as one day of recency
    return _epoch_ms(Idea.updated_at, dialect) + Idea.vote_count * DAY_MS


SORT_ORDERS = {
    "newest": lambda dialect: Idea.created_at.desc(),
    "oldest": lambda dialect: Idea.created_at.asc(),
    "popular": lambda dialect: Idea.vote_count.desc(),
    "updated": lambda dialect: Idea.updated_at.desc(),
    "trending": lambda dialect: trending_score(dialect).desc(),
}


def order_by_for(sort_by: str = DEFAULT_SORT, dialect: str = "postgresql") -> List:
    """ORDER BY clauses for a sort name. Ties go to the newest idea."""
    if sort_by not in SORT_ORDERS:
        raise ValidationError(f"Unknown sort order: {sort_by}. Use one of: {', '.join(SORT_ORDERS)}")
    return [SORT_ORDERS[sort_by](dialect), Idea.created_at.desc()]
