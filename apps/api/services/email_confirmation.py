"""
Email Confirmation Service

Sign-up confirmation codes are signed JWTs with purpose="email_confirm".
The callback route exchanges a code for a confirmed account.

Token Structure:
- sub: user id
- email: address the code was issued for (a later email change invalidates it)
- purpose: "email_confirm"
- exp: EMAIL_CONFIRM_TOKEN_TTL_HOURS after issue
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple
from uuid import UUID

from jose import jwt, JWTError
from sqlalchemy.orm import Session

from core.config import settings
from core.security import SECRET_KEY, ALGORITHM
from models import User

logger = logging.getLogger(__name__)

PURPOSE = "email_confirm"


def generate_confirmation_code(user_id: str, email: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email.lower().strip(),
        "purpose": PURPOSE,
        "iat": now,
        "exp": now + timedelta(hours=settings.EMAIL_CONFIRM_TOKEN_TTL_HOURS),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)


def verify_confirmation_code(code: str) -> Optional[dict]:
    """Decode a confirmation code. Returns None if invalid, expired or mis-purposed."""
    try:
        payload = jwt.decode(code, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"Confirmation code rejected: {e}")
        return None

    if payload.get("purpose") != PURPOSE:
        logger.warning("Confirmation code has wrong purpose")
        return None
    if not payload.get("sub") or not payload.get("email"):
        logger.warning("Confirmation code missing required fields")
        return None
    return payload


def build_confirmation_url(code: str) -> str:
    return f"{settings.API_BASE_URL.rstrip('/')}/auth/callback?code={code}"


def confirm_email(db: Session, code: str) -> Tuple[bool, str]:
    """
    Exchange a confirmation code.

    Returns:
        Tuple of (success, message). Confirming twice succeeds.
    """
    payload = verify_confirmation_code(code)
    if not payload:
        return False, "Invalid or expired confirmation code"

    try:
        user_id = UUID(payload["sub"])
    except ValueError:
        return False, "Invalid confirmation code"

    user = db.get(User, user_id)
    if not user or user.email != payload["email"]:
        return False, "Account not found"

    if user.email_confirmed_at is None:
        user.email_confirmed_at = datetime.now(timezone.utc)
        db.flush()
        logger.info(f"Email confirmed for user {user.id}")
    return True, "Email confirmed"
