"""
Authentication and authorization dependencies.

Provides FastAPI dependencies for:
- Getting the current authenticated user
- The explicit per-request session context (`Viewer`)
- Role and coach-verification gates

Gate failures carry the UI route the caller should be sent to:
unauthenticated -> /auth/signin, wrong role -> /dashboard,
unverified coach -> /profile.
"""
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from core.database import get_db
from core.exceptions import ForbiddenError, UnauthorizedError
from core.security import decode_access_token
from models import AthleteProfile, CoachProfile, User

# auto_error=False so missing credentials return 401 (not 403)
security = HTTPBearer(auto_error=False)


@dataclass
class Viewer:
    """Who is making the request, with their role-specific profile if any."""
    user: User
    athlete_profile: Optional[AthleteProfile] = None
    coach_profile: Optional[CoachProfile] = None

    @property
    def id(self) -> UUID:
        return self.user.id

    @property
    def role(self) -> str:
        return self.user.role

    @property
    def is_athlete(self) -> bool:
        return self.user.role == "athlete"

    @property
    def is_coach(self) -> bool:
        return self.user.role == "coach"

    @property
    def is_verified_coach(self) -> bool:
        return self.is_coach and self.coach_profile is not None and self.coach_profile.is_verified


def _user_from_credentials(
    credentials: Optional[HTTPAuthorizationCredentials], db: Session
) -> Optional[User]:
    if not credentials:
        return None
    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise UnauthorizedError("Invalid authentication credentials")

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedError("Invalid token payload")
    try:
        user_id_uuid = UUID(user_id)
    except ValueError:
        raise UnauthorizedError("Invalid user ID format")

    user = db.query(User).filter(User.id == user_id_uuid).first()
    if not user:
        raise UnauthorizedError("User not found")
    if user.is_blocked:
        raise ForbiddenError("Account is blocked")
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """
    Get the current authenticated user from the bearer token.

    Raises UnauthorizedError if the token is missing, invalid, or the user is gone.
    """
    user = _user_from_credentials(credentials, db)
    if user is None:
        raise UnauthorizedError("Not authenticated")
    return user


def get_viewer(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Viewer:
    """Build the request's session context."""
    athlete_profile = None
    coach_profile = None
    if user.role == "athlete":
        athlete_profile = db.get(AthleteProfile, user.id)
    elif user.role == "coach":
        coach_profile = db.get(CoachProfile, user.id)
    return Viewer(user=user, athlete_profile=athlete_profile, coach_profile=coach_profile)


def require_role(allowed_roles: list[str]):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.get("/coach-only")
        def coach_endpoint(viewer: Viewer = Depends(require_role(["coach"]))):
            ...
    """
    def role_checker(viewer: Viewer = Depends(get_viewer)) -> Viewer:
        if viewer.role not in allowed_roles:
            raise ForbiddenError(
                f"Access denied. Required roles: {allowed_roles}",
                redirect_to="/dashboard",
            )
        return viewer

    return role_checker


def require_athlete(viewer: Viewer = Depends(require_role(["athlete"]))) -> Viewer:
    return viewer


def require_coach(viewer: Viewer = Depends(require_role(["coach"]))) -> Viewer:
    return viewer


def require_verified_coach(viewer: Viewer = Depends(require_coach)) -> Viewer:
    """Coach whose profile has been verified by an admin."""
    if not viewer.is_verified_coach:
        raise ForbiddenError(
            "Coach verification required",
            redirect_to="/profile",
        )
    return viewer


def require_admin(viewer: Viewer = Depends(require_role(["admin"]))) -> Viewer:
    return viewer
