"""Authentication and permission schemas."""

from pydantic import BaseModel, ConfigDict


class LoginRequest(BaseModel):
    """Payload for staff login; ``login`` is a username or an email."""

    login: str
    password: str


class TokenResponse(BaseModel):
    """JWT response payload."""

    access_token: str
    token_type: str = "bearer"


class AuthUserResponse(BaseModel):
    """Current staff user."""

    id: int
    username: str
    email: str | None
    role_name: str

    model_config = ConfigDict(from_attributes=True)


class PermissionCheckResponse(BaseModel):
    role: str
    entity: str
    operation: str
    allowed: bool
    reason: str | None = None
    message: str | None = None
