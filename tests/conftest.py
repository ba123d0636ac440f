"""Shared fixtures for the AthleteSignal tests."""

from datetime import date, timedelta

import pytest

from athlete_signal.analysis.records import DailyRecord
from athlete_signal.db.database import Database


def build_records(start, distances, **fields):
    """One record per day from ``start``; extra fields apply to every day."""
    return [
        DailyRecord(date=start + timedelta(days=offset), distance=distance, **fields)
        for offset, distance in enumerate(distances)
    ]


@pytest.fixture
def make_records():
    return build_records


@pytest.fixture
def memory_db():
    db = Database("sqlite:///:memory:")
    db.create_tables()
    yield db
    db.close()


@pytest.fixture
def start_day():
    return date(2025, 3, 3)  # a Monday
