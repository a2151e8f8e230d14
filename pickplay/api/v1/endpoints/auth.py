"""Authentication endpoints (API JWT)."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pickplay.core.security import create_access_token, get_current_user, verify_password
from pickplay.db.session import get_db
from pickplay.models.user import User
from pickplay.schemas.auth import AuthUserResponse, LoginRequest, TokenResponse
from pickplay.services.user_service import get_user_by_login

router: APIRouter = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    try:
        user: User | None = get_user_by_login(db=db, login=payload.login)
    except SQLAlchemyError as exc:
        logger.exception("[AUTH] Account lookup failed during login")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Login failed") from exc
    if user is None or not user.is_active or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect username or password")
    logger.info("[AUTH] Login user_id=%s role=%s", user.id, user.role_name)
    return TokenResponse(access_token=create_access_token(data={"sub": str(user.id), "role": user.role_name}))


@router.get("/me", response_model=AuthUserResponse)
def me(current_user: User = Depends(get_current_user)) -> AuthUserResponse:
    return AuthUserResponse.model_validate(current_user)
