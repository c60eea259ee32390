#!/usr/bin/env python3
"""
Seed the database with sample users and metrics.

    python -m tracking_metrics.seed --users 5 --days 90 --clear

Each user gets one distance and one temperature metric per day, going back
`--days` days from today. Values follow a smooth daily curve with a little
noise; the random generator is seeded so runs are reproducible.
"""
from __future__ import annotations

import argparse
import logging
import math
import random
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from tracking_metrics.core.logging import configure_logging
from tracking_metrics.db.base import SessionLocal
from tracking_metrics.models.metric import MetricRecord
from tracking_metrics.models.user import UserRecord
from tracking_metrics.repositories import metrics as metric_store
from tracking_metrics.units import DistanceUnit, MetricType, TemperatureUnit

logger = logging.getLogger("tracking_metrics.seed")

# Typical daily values, in the unit they are recorded in
PROFILES = {
    MetricType.distance: {"base": 5000.0, "amplitude": 2000.0, "noise": 400.0},
    MetricType.temperature: {"base": 36.8, "amplitude": 0.4, "noise": 0.15},
}
DISTANCE_CHOICES = [DistanceUnit.meter.value, DistanceUnit.feet.value, DistanceUnit.yard.value]
TEMPERATURE_CHOICES = [TemperatureUnit.celsius.value]


def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


def generate_value(metric_type: MetricType, day_index: int, rng: random.Random) -> float:
    p = PROFILES[metric_type]
    weekly = math.sin(2 * math.pi * day_index / 7)
    value = p["base"] + p["amplitude"] * weekly + rng.gauss(0, p["noise"])
    return round(max(value, 0.0), 2)


def clear_database(db: Session) -> None:
    logger.info("Clearing existing data...")
    # Metrics first because of the foreign key
    db.query(MetricRecord).delete()
    db.query(UserRecord).delete()
    db.commit()


def seed_users(db: Session, count: int) -> list[UserRecord]:
    users: list[UserRecord] = []
    for i in range(1, count + 1):
        name = f"user_{i:04d}"
        user = db.query(UserRecord).filter(UserRecord.name == name).first()
        if user is None:
            user = UserRecord(name=name)
            db.add(user)
            db.commit()
            db.refresh(user)
            logger.info("Created user: %s", name)
        users.append(user)
    return users


def seed_metrics(
    db: Session,
    users: list[UserRecord],
    days: int,
    rng: random.Random,
    today: Optional[date] = None,
) -> int:
    end = today or _today()
    total = 0
    for user in users:
        for offset in range(days):
            day = end - timedelta(days=offset)
            metric_store.upsert(
                db, user.id, MetricType.distance,
                generate_value(MetricType.distance, offset, rng),
                rng.choice(DISTANCE_CHOICES), day,
            )
            metric_store.upsert(
                db, user.id, MetricType.temperature,
                generate_value(MetricType.temperature, offset, rng),
                rng.choice(TEMPERATURE_CHOICES), day,
            )
            total += 2
        logger.info("Created %d metrics for user: %s", days * 2, user.name)
    return total


def run(users: int, days: int, clear: bool = False, seed: int = 42) -> int:
    rng = random.Random(seed)
    db = SessionLocal()
    try:
        if clear:
            clear_database(db)
        seeded_users = seed_users(db, users)
        total = seed_metrics(db, seeded_users, days, rng)
    finally:
        db.close()
    logger.info("Seeded %d users and %d metrics", users, total)
    return total


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Seed sample users and metrics.")
    parser.add_argument("--users", type=int, default=5, help="Number of users (default: 5)")
    parser.add_argument("--days", type=int, default=90, help="Days of history per user (default: 90)")
    parser.add_argument("--clear", action="store_true", help="Delete existing users and metrics first")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args(argv)

    configure_logging()
    run(users=args.users, days=args.days, clear=args.clear, seed=args.seed)


if __name__ == "__main__":
    main()
