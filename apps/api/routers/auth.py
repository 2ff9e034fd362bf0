"""
Authentication API endpoints.

Provides:
- Sign-up / sign-in (JWT bearer tokens)
- Sign-out (stateless; the client drops its token)
- Current-user info with the role's landing route
- Email confirmation callback (redirect-style)
"""
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import RedirectResponse, Response
from sqlalchemy.orm import Session
from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional
import logging

from core.auth import get_current_user
from core.config import settings
from core.database import get_db
from core.security import create_access_token, ACCESS_TOKEN_EXPIRE_MINUTES
from models import User
from schemas import UserResponse
from services.account_service import (
    authenticate,
    create_user,
    default_route_for,
    onboarding_required,
    onboarding_route,
    send_confirmation,
)
from services.email_confirmation import confirm_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/auth", tags=["auth"])
callback_router = APIRouter(tags=["auth"])

DEFAULT_CALLBACK_NEXT = "/dashboard"
CONFIRMATION_FAILED_ROUTE = "/auth/signin?error=confirmation_failed"


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)  # bcrypt input limit
    role: Literal["athlete", "coach"]


class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int = ACCESS_TOKEN_EXPIRE_MINUTES * 60  # seconds
    user: UserResponse
    default_route: str
    onboarding_required: bool


class MeResponse(BaseModel):
    user: UserResponse
    default_route: str
    onboarding_required: bool
    onboarding_route: Optional[str] = None


def _token_response(db: Session, user: User) -> TokenResponse:
    token = create_access_token({"sub": str(user.id), "role": user.role})
    needs_onboarding = onboarding_required(db, user)
    return TokenResponse(
        access_token=token,
        user=UserResponse.model_validate(user),
        default_route=onboarding_route(user.role) if needs_onboarding else default_route_for(user.role),
        onboarding_required=needs_onboarding,
    )


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def signup(request: SignUpRequest, db: Session = Depends(get_db)):
    """Create an athlete or coach account. The role cannot be changed later."""
    user = create_user(db, request.email, request.password, request.role)
    db.commit()
    send_confirmation(user)
    return _token_response(db, user)


@router.post("/signin", response_model=TokenResponse)
def signin(request: SignInRequest, db: Session = Depends(get_db)):
    user = authenticate(db, request.email, request.password)
    return _token_response(db, user)


@router.post("/signout", status_code=status.HTTP_204_NO_CONTENT)
def signout(current_user: User = Depends(get_current_user)):
    """Tokens are stateless; this exists so clients have one place to call."""
    logger.info(f"User {current_user.id} signed out")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=MeResponse)
def me(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return MeResponse(
        user=UserResponse.model_validate(current_user),
        default_route=default_route_for(current_user.role),
        onboarding_required=onboarding_required(db, current_user),
        onboarding_route=onboarding_route(current_user.role),
    )


def _safe_next(next_path: Optional[str]) -> str:
    """Only same-site relative paths; anything else falls back to the dashboard."""
    if not next_path or not next_path.startswith("/") or next_path.startswith("//") or "\\" in next_path:
        return DEFAULT_CALLBACK_NEXT
    return next_path


@callback_router.get("/auth/callback")
def auth_callback(
    code: Optional[str] = Query(default=None),
    next: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
):
    """
    Complete an email-confirmation code exchange, then send the browser on.

    Success -> WEB_APP_BASE_URL + next (default /dashboard).
    Failure -> /auth/signin?error=confirmation_failed.
    """
    base = settings.WEB_APP_BASE_URL.rstrip("/")
    if code:
        ok, message = confirm_email(db, code)
        if ok:
            db.commit()
            return RedirectResponse(url=f"{base}{_safe_next(next)}", status_code=status.HTTP_303_SEE_OTHER)
        logger.info(f"Email confirmation failed: {message}")
    return RedirectResponse(url=f"{base}{CONFIRMATION_FAILED_ROUTE}", status_code=status.HTTP_303_SEE_OTHER)
