"""
Tests for coach -> athlete contact requests.
"""
from models import Conversation, Notification


def _send(client, coach, athlete, headers, message="Would love to talk"):
    return client.post(
        "/v1/contact-requests",
        json={"athlete_id": str(athlete.id), "message": message},
        headers=headers,
    )


class TestContactRequests:

    def test_request_notifies_athlete(self, client, db_session, coach, athlete, auth_headers):
        resp = _send(client, coach, athlete, auth_headers(coach))
        assert resp.status_code == 201
        assert resp.json()["status"] == "pending"

        notification = db_session.query(Notification).filter_by(user_id=athlete.id).one()
        assert notification.type == "CONTACT_REQUEST"
        assert str(notification.related_id) == resp.json()["id"]

    def test_duplicate_pending_request_conflicts(self, client, coach, athlete, auth_headers):
        headers = auth_headers(coach)
        assert _send(client, coach, athlete, headers).status_code == 201
        assert _send(client, coach, athlete, headers).status_code == 409

    def test_private_athlete_cannot_be_contacted(self, client, coach, make_athlete, auth_headers):
        hidden = make_athlete(is_public=False)
        assert _send(client, coach, hidden, auth_headers(coach)).status_code == 404

    def test_each_side_lists_their_requests(self, client, coach, athlete, make_coach, auth_headers):
        _send(client, coach, athlete, auth_headers(coach))
        bystander = make_coach()

        assert len(client.get("/v1/contact-requests", headers=auth_headers(athlete)).json()) == 1
        assert len(client.get("/v1/contact-requests", headers=auth_headers(coach)).json()) == 1
        assert client.get("/v1/contact-requests", headers=auth_headers(bystander)).json() == []

    def test_accept_opens_conversation_and_notifies_coach(self, client, db_session, coach, athlete, auth_headers):
        request_id = _send(client, coach, athlete, auth_headers(coach)).json()["id"]

        resp = client.post(
            f"/v1/contact-requests/{request_id}/respond", json={"accept": True}, headers=auth_headers(athlete)
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "accepted"
        assert resp.json()["responded_at"] is not None

        conversation = db_session.query(Conversation).one()
        assert (conversation.athlete_user_id, conversation.coach_user_id) == (athlete.id, coach.id)

        notification = db_session.query(Notification).filter_by(user_id=coach.id).one()
        assert notification.type == "CONTACT_RESPONSE"
        assert notification.related_id == conversation.id

        listing = client.get("/v1/conversations", headers=auth_headers(coach)).json()
        assert [c["id"] for c in listing] == [str(conversation.id)]

    def test_decline_opens_nothing(self, client, db_session, coach, athlete, auth_headers):
        request_id = _send(client, coach, athlete, auth_headers(coach)).json()["id"]
        resp = client.post(
            f"/v1/contact-requests/{request_id}/respond", json={"accept": False}, headers=auth_headers(athlete)
        )
        assert resp.json()["status"] == "declined"
        assert db_session.query(Conversation).count() == 0

        # A declined request no longer blocks a new one.
        assert _send(client, coach, athlete, auth_headers(coach)).status_code == 201

    def test_cannot_respond_twice(self, client, coach, athlete, auth_headers):
        request_id = _send(client, coach, athlete, auth_headers(coach)).json()["id"]
        headers = auth_headers(athlete)
        client.post(f"/v1/contact-requests/{request_id}/respond", json={"accept": True}, headers=headers)
        resp = client.post(f"/v1/contact-requests/{request_id}/respond", json={"accept": False}, headers=headers)
        assert resp.status_code == 409

    def test_only_the_recipient_can_respond(self, client, coach, athlete, make_athlete, auth_headers):
        request_id = _send(client, coach, athlete, auth_headers(coach)).json()["id"]
        other = make_athlete()
        resp = client.post(
            f"/v1/contact-requests/{request_id}/respond", json={"accept": True}, headers=auth_headers(other)
        )
        assert resp.status_code == 404

    def test_dashboard_shows_pending_requests(self, client, coach, athlete, auth_headers):
        _send(client, coach, athlete, auth_headers(coach))
        data = client.get("/v1/dashboard", headers=auth_headers(athlete)).json()
        assert data["pending_contact_requests"] == 1

    def test_profile_lists_received_requests(self, client, coach, athlete, auth_headers):
        request_id = _send(client, coach, athlete, auth_headers(coach)).json()["id"]

        profile = client.get("/v1/profile", headers=auth_headers(athlete)).json()
        assert [r["id"] for r in profile["contact_requests"]] == [request_id]
        assert profile["contact_requests"][0]["status"] == "pending"

        # Coaches see their camps here, not requests.
        assert client.get("/v1/profile", headers=auth_headers(coach)).json()["contact_requests"] == []
