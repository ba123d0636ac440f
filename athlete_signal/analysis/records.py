"""Daily record model and the preprocessing every analysis relies on.

The engine only ever reads daily records. Callers hand it a date-sorted,
gap-filled sequence, which :func:`materialize_range` produces from whatever
the repository returned (records for a window need not be contiguous).
"""

import logging
from dataclasses import dataclass, asdict
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from ..config import config

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600.0


@dataclass(frozen=True)
class DailyRecord:
    """Merged wearable + GPS data for one calendar day."""

    date: date
    distance: float = 0.0  # miles
    sleep_seconds: Optional[float] = None  # total sleep
    light_sleep_seconds: Optional[float] = None
    rem_sleep_seconds: Optional[float] = None
    deep_sleep_seconds: Optional[float] = None
    sleep_score: Optional[float] = None  # 0-100
    readiness_score: Optional[float] = None  # 0-100
    pace: Optional[float] = None  # min/mile
    heart_rate_avg: Optional[float] = None  # bpm
    heart_rate_max: Optional[float] = None  # bpm
    cadence: Optional[float] = None  # spm

    def __post_init__(self):
        if self.distance is None or self.distance < 0:
            raise ValueError(f"Distance must be non-negative, got {self.distance} on {self.date}")
        for name in ("sleep_seconds", "light_sleep_seconds", "rem_sleep_seconds", "deep_sleep_seconds"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} must be non-negative, got {value} on {self.date}")

    @property
    def has_run(self) -> bool:
        return self.distance > 0

    @property
    def sleep_hours(self) -> Optional[float]:
        if self.sleep_seconds is None:
            return None
        return self.sleep_seconds / SECONDS_PER_HOUR

    @property
    def has_recovery_data(self) -> bool:
        return self.sleep_score is not None or self.readiness_score is not None

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "DailyRecord":
        values = dict(data)
        values["date"] = parse_date(values["date"])
        values["distance"] = float(values.get("distance") or 0.0)
        return cls(**{key: value for key, value in values.items() if key in cls.__dataclass_fields__})

    @classmethod
    def empty(cls, day: date) -> "DailyRecord":
        """A day with no run and no wearable data."""
        return cls(date=day)


@dataclass(frozen=True)
class WeekBucket:
    """Mileage aggregated over one ISO week."""

    iso_year: int
    week: int
    mileage: float
    runs: int


@dataclass(frozen=True)
class PeriodSummary:
    """Aggregate statistics over a date range."""

    days: int
    days_with_runs: int
    days_with_sleep: int
    total_distance: float
    avg_distance: float  # per run day
    avg_sleep_hours: float
    avg_light_hours: float
    avg_rem_hours: float
    avg_deep_hours: float
    avg_sleep_score: Optional[float]
    avg_readiness_score: Optional[float]
    avg_pace: Optional[float]
    avg_heart_rate: Optional[float]
    max_heart_rate: Optional[float]
    avg_cadence: Optional[float]
    sleep_crowns: int
    readiness_crowns: int

    @property
    def total_crowns(self) -> int:
        return self.sleep_crowns + self.readiness_crowns


def parse_date(value) -> date:
    """Accept a date, datetime or ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value).strip()[:10], "%Y-%m-%d").date()


def date_range(start: date, end: date) -> List[date]:
    """Inclusive list of calendar days from start to end."""
    if end < start:
        return []
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def index_by_date(records: Iterable[DailyRecord]) -> Dict[date, DailyRecord]:
    """Map records by date, rejecting duplicate dates."""
    by_date: Dict[date, DailyRecord] = {}
    for record in records:
        if record.date in by_date:
            raise ValueError(f"Duplicate daily record for {record.date}")
        by_date[record.date] = record
    return by_date


def materialize_range(
    records: Iterable[DailyRecord],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[DailyRecord]:
    """Produce one record per calendar day in [start, end].

    Missing days become empty records (zero distance, no sleep or readiness).
    Records outside the range are dropped. When start/end are omitted the
    range spans the supplied records.
    """
    by_date = index_by_date(records)
    if not by_date and (start is None or end is None):
        return []

    start = start or min(by_date)
    end = end or max(by_date)

    filled = []
    missing = 0
    for day in date_range(start, end):
        record = by_date.get(day)
        if record is None:
            record = DailyRecord.empty(day)
            missing += 1
        filled.append(record)

    if missing:
        logger.debug(f"Filled {missing} missing days between {start} and {end}")
    return filled


def ensure_sorted(records: Sequence[DailyRecord]) -> None:
    """Raise if records are not strictly increasing by date."""
    for previous, current in zip(records, records[1:]):
        if current.date <= previous.date:
            raise ValueError(
                f"Daily records must be sorted by date without duplicates "
                f"({previous.date} followed by {current.date})"
            )


def records_up_to(records: Sequence[DailyRecord], as_of: date) -> List[DailyRecord]:
    return [record for record in records if record.date <= as_of]


def records_between(records: Sequence[DailyRecord], start: date, end: date) -> List[DailyRecord]:
    return [record for record in records if start <= record.date <= end]


def week_buckets(records: Sequence[DailyRecord]) -> List[WeekBucket]:
    """Group daily mileage into ISO (year, week) buckets, oldest first."""
    if not records:
        return []

    df = pd.DataFrame(
        {
            "date": pd.to_datetime([record.date for record in records]),
            "distance": [record.distance for record in records],
        }
    )
    iso = df["date"].dt.isocalendar()
    df["iso_year"] = iso["year"].astype(int)
    df["week"] = iso["week"].astype(int)
    df["ran"] = df["distance"] > 0

    grouped = (
        df.groupby(["iso_year", "week"], sort=True)
        .agg(mileage=("distance", "sum"), runs=("ran", "sum"))
        .reset_index()
    )

    return [
        WeekBucket(
            iso_year=int(row.iso_year),
            week=int(row.week),
            mileage=float(row.mileage),
            runs=int(row.runs),
        )
        for row in grouped.itertuples(index=False)
    ]


def distance_weighted_average(
    records: Sequence[DailyRecord], attribute: str
) -> Optional[float]:
    """Average a per-run metric weighted by distance.

    Only days with a run and a positive value for the metric contribute. A
    run without the metric adds no weight, so the result is ``None`` rather
    than a division by zero when nothing qualifies.
    """
    values = []
    weights = []
    for record in records:
        value = getattr(record, attribute)
        if value is not None and value > 0 and record.distance > 0:
            values.append(value)
            weights.append(record.distance)

    if not weights:
        return None
    return float(np.average(values, weights=weights))


def _mean_or_none(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return float(np.mean(values))


def summarize_period(records: Sequence[DailyRecord]) -> PeriodSummary:
    """Summary statistics shown for a date range."""
    run_distances = [record.distance for record in records if record.distance > 0]
    sleep_days = [record for record in records if record.sleep_seconds]
    sleep_scores = [record.sleep_score for record in records if record.sleep_score is not None]
    readiness_scores = [
        record.readiness_score for record in records if record.readiness_score is not None
    ]
    max_hrs = [
        record.heart_rate_max
        for record in records
        if record.heart_rate_max is not None and record.heart_rate_max > 0
    ]

    def stage_average(attribute: str) -> float:
        if not sleep_days:
            return 0.0
        total = sum((getattr(record, attribute) or 0.0) for record in sleep_days)
        return total / len(sleep_days) / SECONDS_PER_HOUR

    total_distance = float(sum(run_distances))
    return PeriodSummary(
        days=len(records),
        days_with_runs=len(run_distances),
        days_with_sleep=len(sleep_days),
        total_distance=total_distance,
        avg_distance=total_distance / len(run_distances) if run_distances else 0.0,
        avg_sleep_hours=_mean_or_none([record.sleep_hours for record in sleep_days]) or 0.0,
        avg_light_hours=stage_average("light_sleep_seconds"),
        avg_rem_hours=stage_average("rem_sleep_seconds"),
        avg_deep_hours=stage_average("deep_sleep_seconds"),
        avg_sleep_score=_mean_or_none(sleep_scores),
        avg_readiness_score=_mean_or_none(readiness_scores),
        avg_pace=distance_weighted_average(records, "pace"),
        avg_heart_rate=distance_weighted_average(records, "heart_rate_avg"),
        max_heart_rate=max(max_hrs) if max_hrs else None,
        avg_cadence=distance_weighted_average(records, "cadence"),
        sleep_crowns=sum(1 for score in sleep_scores if score >= config.CROWN_THRESHOLD),
        readiness_crowns=sum(1 for score in readiness_scores if score >= config.CROWN_THRESHOLD),
    )

