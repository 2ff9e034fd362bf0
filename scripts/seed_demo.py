#!/usr/bin/env python3
"""
Seed demo data: schools, three athletes and two verified coaches.

Safe to re-run; users are matched by email and skipped if they exist.

Usage:
    python scripts/seed_demo.py
    python scripts/seed_demo.py --password demo123456

Environment Variables:
    DATABASE_URL (or POSTGRES_*), SECRET_KEY
"""

import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "apps", "api"))

from core.cache import invalidate_school_cache  # noqa: E402
from core.database import get_db_sync  # noqa: E402
from models import School, User  # noqa: E402
from services import school_service  # noqa: E402
from services.account_service import create_user  # noqa: E402
from services.profile_service import add_highlight, add_stat, onboard_coach, upsert_athlete_profile  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DEFAULT_PASSWORD = "demo123456"

SCHOOLS = [
    {"name": "State University", "division": "D1", "city": "Columbus", "state": "OH"},
    {"name": "City College", "division": "D2", "city": "New York", "state": "NY"},
    {"name": "Coastal Tech", "division": "D1", "city": "San Diego", "state": "CA"},
    {"name": "Lakeside College", "division": "D3", "city": "Madison", "state": "WI"},
    {"name": "Mountain State", "division": "D2", "city": "Boulder", "state": "CO"},
    {"name": "Gulf Coast University", "division": "NAIA", "city": "Mobile", "state": "AL"},
]

ATHLETES = [
    {
        "email": "athlete1@demo.com",
        "profile": {
            "first_name": "Alex",
            "last_name": "Johnson",
            "sport": "Basketball",
            "positions": ["PG", "SG"],
            "grad_year": 2025,
            "city": "Los Angeles",
            "state": "CA",
            "bio": "Point guard with five years of varsity experience.",
            "gpa": 3.8,
            "sat_score": 1350,
            "height_feet": 6,
            "height_inches": 2,
            "weight": 180,
        },
        "stat": ("2023-2024", "Points per game", "18.5"),
    },
    {
        "email": "athlete2@demo.com",
        "profile": {
            "first_name": "Sarah",
            "last_name": "Williams",
            "sport": "Soccer",
            "positions": ["M", "F"],
            "grad_year": 2026,
            "city": "Austin",
            "state": "TX",
            "bio": "Midfielder, team captain two seasons running.",
            "gpa": 3.9,
            "height_feet": 5,
            "height_inches": 6,
            "weight": 130,
        },
        "stat": ("2023-2024", "Goals", "14"),
    },
    {
        "email": "athlete3@demo.com",
        "profile": {
            "first_name": "Michael",
            "last_name": "Davis",
            "sport": "Football",
            "positions": ["QB", "WR"],
            "grad_year": 2025,
            "city": "Miami",
            "state": "FL",
            "bio": "Quarterback with a strong arm.",
            "gpa": 3.6,
            "height_feet": 6,
            "height_inches": 1,
            "weight": 195,
        },
        "stat": ("2023-2024", "Passing yards", "2450"),
    },
]

COACHES = [
    {
        "email": "coach1@demo.com",
        "profile": {"school": "State University", "title": "Head Coach", "sports": ["Basketball"]},
    },
    {
        "email": "coach2@demo.com",
        "profile": {"school": "City College", "title": "Assistant Coach", "sports": ["Soccer", "Football"]},
    },
]


def seed_schools(db) -> dict:
    by_name = {}
    for row in SCHOOLS:
        school = db.query(School).filter(School.name == row["name"]).first()
        if school is None:
            school = school_service.create_school(db, **row)
        by_name[school.name] = school
    return by_name


def _existing(db, email: str) -> bool:
    if db.query(User).filter(User.email == email).first():
        logger.info(f"Skipping {email}: already exists")
        return True
    return False


def seed_athletes(db, password: str) -> None:
    for athlete in ATHLETES:
        if _existing(db, athlete["email"]):
            continue
        user = create_user(db, athlete["email"], password, "athlete")
        user.email_confirmed_at = user.created_at
        upsert_athlete_profile(db, user, dict(athlete["profile"]))
        add_highlight(db, user.id, "Season Highlights", "https://example.com/highlights")
        season, key, value = athlete["stat"]
        add_stat(db, user.id, season, key, value, "self_reported")
        logger.info(f"Created athlete: {athlete['email']}")


def seed_coaches(db, password: str, schools: dict) -> None:
    for coach in COACHES:
        if _existing(db, coach["email"]):
            continue
        user = create_user(db, coach["email"], password, "coach")
        user.email_confirmed_at = user.created_at
        fields = dict(coach["profile"])
        fields["school_id"] = schools[fields["school"]].id
        profile = onboard_coach(db, user, fields)
        profile.verification_status = "verified"
        logger.info(f"Created coach: {coach['email']}")


def main():
    parser = argparse.ArgumentParser(description="Seed demo recruiting data")
    parser.add_argument("--password", default=DEFAULT_PASSWORD, help="Password for every demo account")
    args = parser.parse_args()

    db = get_db_sync()
    try:
        schools = seed_schools(db)
        seed_athletes(db, args.password)
        seed_coaches(db, args.password, schools)
        db.commit()
        invalidate_school_cache()
    except Exception:
        db.rollback()
        logger.exception("Seed failed")
        sys.exit(1)
    finally:
        db.close()

    logger.info("Seed complete")


if __name__ == "__main__":
    main()
