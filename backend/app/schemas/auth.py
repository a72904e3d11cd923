"""Auth request/response schemas."""

from typing import Optional

from pydantic import BaseModel


class SignUpRequest(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str
    mobile: str = ""
    password: str
    confirm_password: str
    role: str = "student"  # student | teacher | admin


class SignInRequest(BaseModel):
    email: str
    password: str
    role: Optional[str] = None  # assigned only if the identity has no role yet


class FederatedSignInRequest(BaseModel):
    id_token: str
    role: Optional[str] = None


class RoleUpdateRequest(BaseModel):
    role: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: Optional[str] = None
    next_path: str = "/"
    message: str = ""


class UserResponse(BaseModel):
    id: str
    email: str
    display_name: str
    role: Optional[str] = None
    provider: str
    created_at: str

    class Config:
        from_attributes = True
