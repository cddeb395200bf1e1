from pydantic import BaseModel, EmailStr


class VerificationRequest(BaseModel):
    email: EmailStr
    first_name: str
    last_name: str


class TokenRequest(BaseModel):
    token: str


class VerifiedIdentity(BaseModel):
    email: EmailStr
    first_name: str
    last_name: str
