"""
Tests for athlete search: conjunctive filters over public profiles.
"""
from core.auth import Viewer
from models import AthleteSchoolInterest, CoachProfile, SavedAthlete, User
from routers import shortlist
from services.search_service import AthleteSearchFilters, search_athletes


def _ids(resp):
    assert resp.status_code == 200, resp.text
    return {card["user_id"] for card in resp.json()}


class TestSearchFilters:

    def test_returns_public_profiles_only(self, client, coach, make_athlete, auth_headers):
        visible = make_athlete()
        hidden = make_athlete(is_public=False)

        ids = _ids(client.get("/v1/search/athletes", headers=auth_headers(coach)))
        assert str(visible.id) in ids
        assert str(hidden.id) not in ids

    def test_sport_filter_narrows(self, client, coach, make_athlete, auth_headers):
        hooper = make_athlete(sport="Basketball")
        striker = make_athlete(sport="Soccer")
        headers = auth_headers(coach)

        everyone = _ids(client.get("/v1/search/athletes", headers=headers))
        soccer = _ids(client.get("/v1/search/athletes", params={"sport": "Soccer"}, headers=headers))

        assert soccer <= everyone
        assert soccer == {str(striker.id)}
        assert str(hooper.id) in everyone

    def test_filters_are_anded(self, client, coach, make_athlete, auth_headers):
        match = make_athlete(sport="Soccer", state="TX", grad_year=2026, gpa=3.9)
        make_athlete(sport="Soccer", state="TX", grad_year=2027, gpa=3.9)
        make_athlete(sport="Soccer", state="CA", grad_year=2026, gpa=3.9)
        make_athlete(sport="Soccer", state="TX", grad_year=2026, gpa=2.5)
        headers = auth_headers(coach)

        params = {"sport": "Soccer", "state": "TX", "grad_year": 2026, "min_gpa": 3.5}
        assert _ids(client.get("/v1/search/athletes", params=params, headers=headers)) == {str(match.id)}

    def test_adding_a_filter_never_widens(self, client, coach, make_athlete, auth_headers):
        for sport, state in [("Soccer", "TX"), ("Soccer", "CA"), ("Football", "TX")]:
            make_athlete(sport=sport, state=state)
        headers = auth_headers(coach)

        base = _ids(client.get("/v1/search/athletes", params={"sport": "Soccer"}, headers=headers))
        narrower = _ids(
            client.get("/v1/search/athletes", params={"sport": "Soccer", "state": "TX"}, headers=headers)
        )
        assert narrower <= base
        assert len(narrower) == 1

    def test_name_search_matches_first_or_last(self, client, coach, make_athlete, auth_headers):
        sarah = make_athlete(first_name="Sarah", last_name="Williams")
        mike = make_athlete(first_name="Michael", last_name="Davis")
        headers = auth_headers(coach)

        assert _ids(client.get("/v1/search/athletes", params={"search": "sar"}, headers=headers)) == {str(sarah.id)}
        assert _ids(client.get("/v1/search/athletes", params={"search": "DAVIS"}, headers=headers)) == {str(mike.id)}

    def test_lowercase_state_is_accepted(self, client, coach, make_athlete, auth_headers):
        texan = make_athlete(state="TX")
        make_athlete(state="OH")
        ids = _ids(client.get("/v1/search/athletes", params={"state": "tx"}, headers=auth_headers(coach)))
        assert ids == {str(texan.id)}


class TestInterestedInMySchool:

    def test_only_athletes_interested_in_coach_school(self, client, db_session, coach, make_athlete, make_school, auth_headers):
        my_school_id = db_session.get(CoachProfile, coach.id).school_id
        other_school = make_school()
        fan = make_athlete()
        other_fan = make_athlete()
        private_fan = make_athlete()
        db_session.add_all([
            AthleteSchoolInterest(athlete_user_id=fan.id, school_id=my_school_id),
            AthleteSchoolInterest(athlete_user_id=other_fan.id, school_id=other_school.id),
            AthleteSchoolInterest(athlete_user_id=private_fan.id, school_id=my_school_id, visibility="PRIVATE"),
        ])
        db_session.commit()

        resp = client.get(
            "/v1/search/athletes", params={"interested_in_my_school": "true"}, headers=auth_headers(coach)
        )
        cards = resp.json()
        assert [c["user_id"] for c in cards] == [str(fan.id)]
        assert cards[0]["interested_in_my_school"] is True
        assert cards[0]["interests"][0]["is_my_school"] is True

    def test_private_interest_never_shown_on_cards(self, client, db_session, coach, make_athlete, auth_headers):
        my_school_id = db_session.get(CoachProfile, coach.id).school_id
        shy = make_athlete()
        db_session.add(AthleteSchoolInterest(athlete_user_id=shy.id, school_id=my_school_id, visibility="PRIVATE"))
        db_session.commit()

        cards = client.get("/v1/search/athletes", headers=auth_headers(coach)).json()
        card = next(c for c in cards if c["user_id"] == str(shy.id))
        assert card["interests"] == []
        assert card["interested_in_my_school"] is False

    def test_interest_filter_skipped_without_linked_school(self, db_session, coach, make_athlete):
        make_athlete()
        profile = db_session.get(CoachProfile, coach.id)
        profile.school_id = None
        db_session.commit()

        viewer = Viewer(user=db_session.get(User, coach.id), coach_profile=profile)
        unfiltered = search_athletes(db_session, viewer, AthleteSearchFilters())
        filtered = search_athletes(db_session, viewer, AthleteSearchFilters(interested_in_my_school=True))
        assert len(unfiltered) == 1
        assert [c.user_id for c in filtered] == [c.user_id for c in unfiltered]


class TestShortlist:

    def test_save_is_idempotent_and_flags_cards(self, client, coach, athlete, auth_headers):
        headers = auth_headers(coach)
        assert client.put(f"/v1/shortlist/{athlete.id}", headers=headers).status_code == 204
        assert client.put(f"/v1/shortlist/{athlete.id}", headers=headers).status_code == 204

        saved = client.get("/v1/shortlist", headers=headers).json()
        assert [c["user_id"] for c in saved] == [str(athlete.id)]
        assert saved[0]["saved"] is True

        cards = client.get("/v1/search/athletes", headers=headers).json()
        assert cards[0]["saved"] is True

        assert client.delete(f"/v1/shortlist/{athlete.id}", headers=headers).status_code == 204
        assert client.get("/v1/shortlist", headers=headers).json() == []

    def test_cannot_save_private_athlete(self, client, coach, make_athlete, auth_headers):
        hidden = make_athlete(is_public=False)
        assert client.put(f"/v1/shortlist/{hidden.id}", headers=auth_headers(coach)).status_code == 404

    def test_concurrent_save_keeps_single_entry(
        self, client, db_session, coach, athlete, auth_headers, lookup_misses_once
    ):
        db_session.add(SavedAthlete(coach_user_id=coach.id, athlete_user_id=athlete.id))
        db_session.commit()
        calls = lookup_misses_once(shortlist, "_saved")

        headers = auth_headers(coach)
        assert client.put(f"/v1/shortlist/{athlete.id}", headers=headers).status_code == 204

        assert len(calls) == 1
        assert db_session.query(SavedAthlete).filter_by(coach_user_id=coach.id).count() == 1
        assert [c["user_id"] for c in client.get("/v1/shortlist", headers=headers).json()] == [str(athlete.id)]
