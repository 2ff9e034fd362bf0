"""
Account Service

Sign-up, credential checks, and the role-based landing route.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.config import settings
from core.exceptions import ConflictError, ForbiddenError, UnauthorizedError
from core.security import get_password_hash, verify_password
from models import AthleteProfile, CoachProfile, User
from services.email_confirmation import build_confirmation_url, generate_confirmation_code

logger = logging.getLogger(__name__)

DEFAULT_ROUTES = {
    "athlete": "/athlete-feed",
    "coach": "/profile",
}
FALLBACK_ROUTE = "/profile"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def default_route_for(role: Optional[str]) -> str:
    """Where a signed-in user lands."""
    return DEFAULT_ROUTES.get(role or "", FALLBACK_ROUTE)


def onboarding_required(db: Session, user: User) -> bool:
    if user.role == "athlete":
        return db.get(AthleteProfile, user.id) is None
    if user.role == "coach":
        return db.get(CoachProfile, user.id) is None
    return False


def onboarding_route(role: str) -> Optional[str]:
    return {"athlete": "/onboarding/athlete", "coach": "/onboarding/coach"}.get(role)


def create_user(db: Session, email: str, password: str, role: str) -> User:
    email = normalize_email(email)
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already registered")

    user = User(email=email, password_hash=get_password_hash(password), role=role)
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email already registered")

    logger.info(f"New {role} account: {user.id}")
    return user


def send_confirmation(user: User) -> None:
    """Queue the confirmation email. A broker outage doesn't block sign-up."""
    code = generate_confirmation_code(str(user.id), user.email)
    try:
        from tasks.email_tasks import send_confirmation_email_task
        send_confirmation_email_task.delay(user.email, build_confirmation_url(code))
    except Exception as e:
        logger.warning(f"Could not enqueue confirmation email for {user.id}: {e}")


def authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == normalize_email(email)).first()
    if not user or not verify_password(password, user.password_hash):
        logger.info("Failed sign-in attempt")
        raise UnauthorizedError("Invalid email or password")
    if user.is_blocked:
        raise ForbiddenError("Account is blocked")
    if settings.REQUIRE_EMAIL_CONFIRMATION and user.email_confirmed_at is None:
        raise ForbiddenError("Email not confirmed")
    return user
