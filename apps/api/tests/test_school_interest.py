"""
Tests for school lookup and athlete -> school interest signals.
"""
from models import AthleteSchoolInterest, CoachProfile
from services import school_service


def _interest_school_ids(client, headers):
    resp = client.get("/v1/schools/interests", headers=headers)
    assert resp.status_code == 200
    return {row["school_id"] for row in resp.json()}


class TestSchoolLookup:

    def test_search_by_name_alphabetical(self, client, athlete, make_school, auth_headers):
        make_school("Zenith University")
        make_school("Alpha College")
        make_school("Coastal Tech")
        headers = auth_headers(athlete)

        names = [s["name"] for s in client.get("/v1/schools", headers=headers).json()]
        assert names == ["Alpha College", "Coastal Tech", "Zenith University"]

        names = [s["name"] for s in client.get("/v1/schools", params={"q": "univ"}, headers=headers).json()]
        assert names == ["Zenith University"]

    def test_location_is_city_and_state(self, client, athlete, make_school, auth_headers):
        make_school("Alpha College", state="OH")
        school = client.get("/v1/schools", headers=auth_headers(athlete)).json()[0]
        assert school["location"] == "Columbus, OH"


class TestInterestToggle:

    def test_add_then_remove_restores_original_set(self, client, athlete, make_school, auth_headers):
        kept = make_school()
        toggled = make_school()
        headers = auth_headers(athlete)
        client.put(f"/v1/schools/{kept.id}/interest", headers=headers)

        before = _interest_school_ids(client, headers)
        assert client.put(f"/v1/schools/{toggled.id}/interest", headers=headers).status_code == 200
        assert _interest_school_ids(client, headers) == before | {str(toggled.id)}
        assert client.delete(f"/v1/schools/{toggled.id}/interest", headers=headers).status_code == 204
        assert _interest_school_ids(client, headers) == before

    def test_defaults_to_like_visible_to_verified_coaches(self, client, athlete, make_school, auth_headers):
        school = make_school()
        data = client.put(f"/v1/schools/{school.id}/interest", headers=auth_headers(athlete)).json()
        assert data["interest_type"] == "LIKE"
        assert data["visibility"] == "PUBLIC_TO_VERIFIED_COACHES"
        assert data["school"]["name"] == school.name

    def test_second_put_updates_instead_of_duplicating(self, client, db_session, athlete, make_school, auth_headers):
        school = make_school()
        headers = auth_headers(athlete)
        client.put(f"/v1/schools/{school.id}/interest", headers=headers)
        resp = client.put(
            f"/v1/schools/{school.id}/interest",
            json={"interest_type": "TOP_CHOICE", "visibility": "PRIVATE"},
            headers=headers,
        )
        assert resp.status_code == 200
        assert resp.json()["interest_type"] == "TOP_CHOICE"
        assert db_session.query(AthleteSchoolInterest).filter_by(athlete_user_id=athlete.id).count() == 1

    def test_concurrent_add_updates_existing_row(
        self, client, db_session, athlete, make_school, auth_headers, lookup_misses_once
    ):
        school = make_school()
        db_session.add(AthleteSchoolInterest(athlete_user_id=athlete.id, school_id=school.id))
        db_session.commit()
        calls = lookup_misses_once(school_service, "get_interest")

        resp = client.put(
            f"/v1/schools/{school.id}/interest",
            json={"interest_type": "TOP_CHOICE"},
            headers=auth_headers(athlete),
        )

        assert resp.status_code == 200
        assert resp.json()["interest_type"] == "TOP_CHOICE"
        assert len(calls) == 2
        assert db_session.query(AthleteSchoolInterest).filter_by(athlete_user_id=athlete.id).count() == 1

    def test_unknown_school_is_404(self, client, athlete, auth_headers):
        resp = client.put(
            "/v1/schools/00000000-0000-0000-0000-000000000001/interest", headers=auth_headers(athlete)
        )
        assert resp.status_code == 404

    def test_removing_missing_interest_is_404(self, client, athlete, make_school, auth_headers):
        school = make_school()
        assert client.delete(f"/v1/schools/{school.id}/interest", headers=auth_headers(athlete)).status_code == 404

    def test_invalid_interest_type_rejected(self, client, athlete, make_school, auth_headers):
        school = make_school()
        resp = client.put(
            f"/v1/schools/{school.id}/interest", json={"interest_type": "LOVE"}, headers=auth_headers(athlete)
        )
        assert resp.status_code == 422


class TestSuggestedSchools:

    def test_excludes_liked_schools(self, db_session, athlete, make_school):
        liked = make_school("Alpha College")
        other = make_school("Beta College")
        school_service.set_interest(db_session, athlete.id, liked.id)
        db_session.commit()

        suggested = school_service.suggested_schools(db_session, athlete.id)
        assert [s.id for s in suggested] == [other.id]

    def test_feed_lists_suggestions(self, client, athlete, make_school, auth_headers):
        make_school("Alpha College")
        resp = client.get("/v1/feed", headers=auth_headers(athlete))
        assert resp.status_code == 200
        data = resp.json()
        assert [s["name"] for s in data["suggested_schools"]] == ["Alpha College"]
        assert data["notifications"] == []


class TestInterestedAthletes:

    def test_lists_visible_interest_in_my_school_newest_first(
        self, client, db_session, coach, make_athlete, auth_headers
    ):
        school_id = db_session.get(CoachProfile, coach.id).school_id
        first = make_athlete(first_name="First")
        second = make_athlete(first_name="Second")
        hidden = make_athlete(first_name="Hidden")
        private_profile = make_athlete(first_name="Private", is_public=False)

        school_service.set_interest(db_session, first.id, school_id)
        school_service.set_interest(db_session, second.id, school_id, interest_type="TOP_CHOICE")
        school_service.set_interest(db_session, hidden.id, school_id, visibility="PRIVATE")
        school_service.set_interest(db_session, private_profile.id, school_id)
        db_session.commit()

        resp = client.get("/v1/athletes/interested", headers=auth_headers(coach))
        assert resp.status_code == 200
        rows = resp.json()
        assert [r["athlete"]["first_name"] for r in rows] == ["Second", "First"]
        assert rows[0]["interest_type"] == "TOP_CHOICE"
        assert rows[0]["athlete"]["interested_in_my_school"] is True

    def test_athlete_detail_shows_visible_interests(self, client, db_session, coach, athlete, auth_headers):
        school_id = db_session.get(CoachProfile, coach.id).school_id
        school_service.set_interest(db_session, athlete.id, school_id)
        db_session.commit()

        resp = client.get(f"/v1/athletes/{athlete.id}", headers=auth_headers(coach))
        assert resp.status_code == 200
        data = resp.json()
        assert data["interests"][0]["is_my_school"] is True
        assert data["is_own_profile"] is False

    def test_private_athlete_detail_is_404_for_coaches(self, client, coach, make_athlete, auth_headers):
        hidden = make_athlete(is_public=False)
        assert client.get(f"/v1/athletes/{hidden.id}", headers=auth_headers(coach)).status_code == 404

    def test_private_athlete_sees_own_detail(self, client, make_athlete, auth_headers):
        hidden = make_athlete(is_public=False)
        resp = client.get(f"/v1/athletes/{hidden.id}", headers=auth_headers(hidden))
        assert resp.status_code == 200
        assert resp.json()["is_own_profile"] is True
