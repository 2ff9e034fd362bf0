"""
Tests for sign-up, sign-in, landing routes and the email confirmation callback.
"""
from uuid import uuid4

from core.config import settings
from models import User
from routers.auth import _safe_next
from services.account_service import default_route_for
from services.email_confirmation import generate_confirmation_code, verify_confirmation_code

from conftest import TEST_PASSWORD


class TestSignUp:

    def test_signup_returns_token_and_onboarding_route(self, client, db_session):
        resp = client.post(
            "/v1/auth/signup",
            json={"email": "New.Athlete@Example.com", "password": "longenough1", "role": "athlete"},
        )
        assert resp.status_code == 201
        data = resp.json()
        assert data["access_token"]
        assert data["user"]["email"] == "new.athlete@example.com"
        assert data["user"]["role"] == "athlete"
        assert data["onboarding_required"] is True
        assert data["default_route"] == "/onboarding/athlete"

        assert db_session.query(User).filter(User.email == "new.athlete@example.com").count() == 1

    def test_duplicate_email_conflicts(self, client):
        body = {"email": "dup@example.com", "password": "longenough1", "role": "coach"}
        assert client.post("/v1/auth/signup", json=body).status_code == 201
        resp = client.post("/v1/auth/signup", json={**body, "email": "DUP@example.com"})
        assert resp.status_code == 409

    def test_admin_role_cannot_self_register(self, client):
        resp = client.post(
            "/v1/auth/signup",
            json={"email": "sneaky@example.com", "password": "longenough1", "role": "admin"},
        )
        assert resp.status_code == 422

    def test_short_password_rejected(self, client):
        resp = client.post(
            "/v1/auth/signup",
            json={"email": "short@example.com", "password": "abc", "role": "athlete"},
        )
        assert resp.status_code == 422


class TestSignIn:

    def test_onboarded_athlete_lands_on_feed(self, client, athlete):
        resp = client.post("/v1/auth/signin", json={"email": athlete.email, "password": TEST_PASSWORD})
        assert resp.status_code == 200
        data = resp.json()
        assert data["onboarding_required"] is False
        assert data["default_route"] == "/athlete-feed"

    def test_coach_lands_on_profile(self, client, coach):
        resp = client.post("/v1/auth/signin", json={"email": coach.email, "password": TEST_PASSWORD})
        assert resp.status_code == 200
        assert resp.json()["default_route"] == "/profile"

    def test_wrong_password_is_401(self, client, athlete):
        resp = client.post("/v1/auth/signin", json={"email": athlete.email, "password": "wrong-password"})
        assert resp.status_code == 401
        data = resp.json()
        assert data["error_code"] == "UNAUTHORIZED"
        assert data["redirect_to"] == "/auth/signin"

    def test_blocked_user_cannot_sign_in(self, client, db_session, athlete):
        athlete.is_blocked = True
        db_session.commit()
        resp = client.post("/v1/auth/signin", json={"email": athlete.email, "password": TEST_PASSWORD})
        assert resp.status_code == 403

    def test_unconfirmed_email_blocked_when_required(self, client, athlete, monkeypatch):
        monkeypatch.setattr(settings, "REQUIRE_EMAIL_CONFIRMATION", True)
        resp = client.post("/v1/auth/signin", json={"email": athlete.email, "password": TEST_PASSWORD})
        assert resp.status_code == 403


class TestMe:

    def test_me_requires_token(self, client):
        resp = client.get("/v1/auth/me")
        assert resp.status_code == 401
        assert resp.json()["redirect_to"] == "/auth/signin"

    def test_garbage_token_rejected(self, client):
        resp = client.get("/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401

    def test_me_returns_user(self, client, coach, auth_headers):
        resp = client.get("/v1/auth/me", headers=auth_headers(coach))
        assert resp.status_code == 200
        data = resp.json()
        assert data["user"]["id"] == str(coach.id)
        assert data["default_route"] == "/profile"

    def test_signout(self, client, athlete, auth_headers):
        assert client.post("/v1/auth/signout", headers=auth_headers(athlete)).status_code == 204


class TestDefaultRoutes:

    def test_role_routes(self):
        assert default_route_for("athlete") == "/athlete-feed"
        assert default_route_for("coach") == "/profile"
        assert default_route_for(None) == "/profile"
        assert default_route_for("admin") == "/profile"


class TestConfirmationCallback:
    """GET /auth/callback exchanges the code and redirects the browser."""

    def _base(self):
        return settings.WEB_APP_BASE_URL.rstrip("/")

    def test_success_redirects_to_next(self, client, db_session, athlete):
        code = generate_confirmation_code(str(athlete.id), athlete.email)
        resp = client.get(f"/auth/callback?code={code}&next=/profile", follow_redirects=False)
        assert resp.status_code == 303
        assert resp.headers["location"] == f"{self._base()}/profile"
        db_session.refresh(athlete)
        assert athlete.email_confirmed_at is not None

    def test_success_defaults_to_dashboard(self, client, athlete):
        code = generate_confirmation_code(str(athlete.id), athlete.email)
        resp = client.get(f"/auth/callback?code={code}", follow_redirects=False)
        assert resp.headers["location"] == f"{self._base()}/dashboard"

    def test_confirming_twice_succeeds(self, client, athlete):
        code = generate_confirmation_code(str(athlete.id), athlete.email)
        client.get(f"/auth/callback?code={code}", follow_redirects=False)
        resp = client.get(f"/auth/callback?code={code}", follow_redirects=False)
        assert resp.headers["location"] == f"{self._base()}/dashboard"

    def test_bad_code_redirects_to_signin_error(self, client):
        resp = client.get("/auth/callback?code=garbage", follow_redirects=False)
        assert resp.status_code == 303
        assert resp.headers["location"] == f"{self._base()}/auth/signin?error=confirmation_failed"

    def test_missing_code_redirects_to_signin_error(self, client):
        resp = client.get("/auth/callback", follow_redirects=False)
        assert resp.headers["location"].endswith("/auth/signin?error=confirmation_failed")

    def test_code_for_unknown_user_fails(self, client):
        code = generate_confirmation_code(str(uuid4()), "ghost@example.com")
        resp = client.get(f"/auth/callback?code={code}", follow_redirects=False)
        assert resp.headers["location"].endswith("error=confirmation_failed")

    def test_offsite_next_is_ignored(self, client, athlete):
        code = generate_confirmation_code(str(athlete.id), athlete.email)
        resp = client.get(f"/auth/callback?code={code}&next=//evil.example", follow_redirects=False)
        assert resp.headers["location"] == f"{self._base()}/dashboard"


class TestConfirmationCodes:

    def test_code_round_trip(self):
        user_id = str(uuid4())
        payload = verify_confirmation_code(generate_confirmation_code(user_id, " A@Example.com "))
        assert payload["sub"] == user_id
        assert payload["email"] == "a@example.com"
        assert payload["purpose"] == "email_confirm"

    def test_access_token_is_not_a_confirmation_code(self):
        from core.security import create_access_token

        assert verify_confirmation_code(create_access_token({"sub": str(uuid4())})) is None

    def test_safe_next(self):
        assert _safe_next("/messages") == "/messages"
        assert _safe_next(None) == "/dashboard"
        assert _safe_next("https://evil.example") == "/dashboard"
        assert _safe_next("//evil.example") == "/dashboard"
        assert _safe_next("/\\evil.example") == "/dashboard"
