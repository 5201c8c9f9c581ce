#!/usr/bin/env python3
"""
Seed the database with demo events.

Events are spread from two weeks in the past to two months ahead so that
every lifecycle status shows up, and a few upcoming ones are cancelled.

Usage:
    python scripts/seed_events.py [--count N] [--reset] [--seed S]
"""
import argparse
import os
import random
import sys
from collections import Counter
from datetime import UTC, datetime, timedelta

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import delete
from sqlmodel import Session

from app.core.database import create_db_and_tables, engine
from app.events.status import resolve_status
from app.models import Event, EventInterest

TITLES = [
    "Revival conference",
    "Prayer seminar",
    "Praise and worship concert",
    "Evangelism day",
    "Spiritual retreat",
    "Youth conference",
    "Bible training seminar",
    "Thanksgiving service",
    "Christian family conference",
    "Night of prayer and intercession",
    "Festival of faith",
    "Christian leadership seminar",
    "Day of fasting and prayer",
    "Women's conference",
    "Men's conference",
    "Youth camp",
    "Easter celebration",
    "Christmas celebration",
    "Baptisms and testimonies",
    "Marriage seminar",
    "Mission day",
    "Open-air service",
    "Worship workshop",
    "Inter-church gathering",
]


def build_event(rng: random.Random, now: datetime) -> Event:
    """Create one random event within [-14 days, +60 days] of now."""
    offset_hours = rng.randint(-14 * 24, 60 * 24)
    start = (now + timedelta(hours=offset_hours)).replace(minute=0, second=0, microsecond=0)
    end = start + timedelta(hours=rng.randint(2, 5))
    event = Event(title=rng.choice(TITLES), start_datetime=start, end_datetime=end)

    # Cancel roughly one upcoming event in ten
    if start > now and rng.random() < 0.1:
        event.cancelled_at = now
        event.cancellation_reason = "Postponed by the organising church"
    return event


def main():
    parser = argparse.ArgumentParser(description="Seed demo events")
    parser.add_argument("--count", type=int, default=40, help="Number of events to create")
    parser.add_argument("--reset", action="store_true", help="Delete existing events first")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for repeatable data")
    args = parser.parse_args()

    if args.count < 1:
        print("Error: --count must be at least 1")
        sys.exit(1)

    rng = random.Random(args.seed)
    now = datetime.now(UTC)

    create_db_and_tables()

    with Session(engine) as session:
        if args.reset:
            session.execute(delete(EventInterest))
            session.execute(delete(Event))
            session.commit()
            print("Existing events removed.")

        events = [build_event(rng, now) for _ in range(args.count)]
        session.add_all(events)
        session.commit()

        summary = Counter(resolve_status(event, now).value for event in events)

    print(f"Created {args.count} events:")
    for status, count in sorted(summary.items()):
        print(f"  {status:<10} {count}")


if __name__ == "__main__":
    main()
