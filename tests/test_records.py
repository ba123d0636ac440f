"""Tests for daily record preprocessing and period statistics."""

import pytest
from datetime import date, timedelta

from athlete_signal.analysis.records import (
    DailyRecord,
    distance_weighted_average,
    ensure_sorted,
    materialize_range,
    summarize_period,
    week_buckets,
)


class TestDailyRecord:
    """Test the daily record model."""

    def test_negative_distance_rejected(self):
        with pytest.raises(ValueError):
            DailyRecord(date=date(2025, 1, 1), distance=-1)

    def test_sleep_hours(self):
        record = DailyRecord(date=date(2025, 1, 1), sleep_seconds=8.5 * 3600)
        assert record.sleep_hours == pytest.approx(8.5)
        assert DailyRecord(date=date(2025, 1, 1)).sleep_hours is None

    def test_from_dict_accepts_iso_strings(self):
        record = DailyRecord.from_dict({"date": "2025-01-02", "distance": None, "sleep_score": 80, "extra": 1})
        assert record.date == date(2025, 1, 2)
        assert record.distance == 0.0
        assert record.sleep_score == 80

    def test_to_dict_round_trip(self):
        record = DailyRecord(date=date(2025, 1, 2), distance=3.1, readiness_score=77)
        assert DailyRecord.from_dict(record.to_dict()) == record


class TestMaterializeRange:
    """Test gap filling into a contiguous calendar range."""

    def test_fills_missing_days(self):
        records = [
            DailyRecord(date=date(2025, 1, 1), distance=3),
            DailyRecord(date=date(2025, 1, 4), distance=5, sleep_score=80),
        ]

        filled = materialize_range(records)

        assert [record.date for record in filled] == [date(2025, 1, day) for day in range(1, 5)]
        assert filled[1].distance == 0
        assert filled[1].sleep_score is None
        assert filled[3].sleep_score == 80

    def test_explicit_range_drops_outside_records(self):
        records = [DailyRecord(date=date(2025, 1, day), distance=1) for day in range(1, 11)]
        filled = materialize_range(records, date(2025, 1, 3), date(2025, 1, 5))
        assert [record.date.day for record in filled] == [3, 4, 5]

    def test_unsorted_input_is_ordered(self):
        records = [DailyRecord(date=date(2025, 1, 3)), DailyRecord(date=date(2025, 1, 1))]
        filled = materialize_range(records)
        ensure_sorted(filled)
        assert len(filled) == 3

    def test_duplicate_dates_rejected(self):
        records = [DailyRecord(date=date(2025, 1, 1)), DailyRecord(date=date(2025, 1, 1), distance=2)]
        with pytest.raises(ValueError):
            materialize_range(records)

    def test_empty_input(self):
        assert materialize_range([]) == []
        assert len(materialize_range([], date(2025, 1, 1), date(2025, 1, 7))) == 7

    def test_ensure_sorted_detects_disorder(self):
        records = [DailyRecord(date=date(2025, 1, 2)), DailyRecord(date=date(2025, 1, 1))]
        with pytest.raises(ValueError):
            ensure_sorted(records)


class TestWeekBuckets:
    """Test ISO week aggregation."""

    def test_groups_by_iso_week(self, make_records):
        # Mon 2025-03-03 .. Sun 2025-03-16 is ISO weeks 10 and 11
        records = make_records(date(2025, 3, 3), [3, 0, 4, 0, 0, 0, 6, 5, 5, 0, 0, 0, 0, 0])

        buckets = week_buckets(records)

        assert [(bucket.iso_year, bucket.week) for bucket in buckets] == [(2025, 10), (2025, 11)]
        assert buckets[0].mileage == pytest.approx(13)
        assert buckets[0].runs == 3
        assert buckets[1].mileage == pytest.approx(10)
        assert buckets[1].runs == 2

    def test_year_boundary_uses_iso_year(self):
        # 2024-12-30 belongs to ISO week 1 of 2025
        records = [DailyRecord(date=date(2024, 12, 30), distance=4), DailyRecord(date=date(2025, 1, 2), distance=2)]
        buckets = week_buckets(records)
        assert len(buckets) == 1
        assert (buckets[0].iso_year, buckets[0].week) == (2025, 1)

    def test_empty(self):
        assert week_buckets([]) == []


class TestWeightedAverages:
    """Test distance-weighted per-run metrics."""

    def test_runs_without_heart_rate_do_not_contribute(self):
        records = [
            DailyRecord(date=date(2025, 1, 1), distance=5),  # no HR or cadence
            DailyRecord(date=date(2025, 1, 2), distance=2, heart_rate_avg=150, cadence=170),
            DailyRecord(date=date(2025, 1, 3), distance=6, heart_rate_avg=140, cadence=180),
        ]

        assert distance_weighted_average(records, "heart_rate_avg") == pytest.approx((150 * 2 + 140 * 6) / 8)
        assert distance_weighted_average(records, "cadence") == pytest.approx((170 * 2 + 180 * 6) / 8)

    def test_no_qualifying_runs_returns_none(self):
        records = [DailyRecord(date=date(2025, 1, 1), distance=5)]
        assert distance_weighted_average(records, "heart_rate_avg") is None
        assert distance_weighted_average(records, "pace") is None

    def test_metric_on_rest_day_ignored(self):
        records = [DailyRecord(date=date(2025, 1, 1), distance=0, heart_rate_avg=120)]
        assert distance_weighted_average(records, "heart_rate_avg") is None


class TestSummarizePeriod:
    """Test period summary statistics."""

    def test_summary(self):
        hour = 3600
        records = [
            DailyRecord(date=date(2025, 1, 1), distance=4, sleep_seconds=8 * hour, light_sleep_seconds=4 * hour,
                        sleep_score=88, readiness_score=90, pace=9.0, heart_rate_max=170),
            DailyRecord(date=date(2025, 1, 2), distance=0, sleep_seconds=6 * hour, light_sleep_seconds=2 * hour,
                        sleep_score=70, readiness_score=60),
            DailyRecord(date=date(2025, 1, 3), distance=6, pace=8.0, heart_rate_max=180),
        ]

        summary = summarize_period(records)

        assert summary.days == 3
        assert summary.days_with_runs == 2
        assert summary.total_distance == pytest.approx(10)
        assert summary.avg_distance == pytest.approx(5)
        assert summary.avg_sleep_hours == pytest.approx(7)
        assert summary.avg_light_hours == pytest.approx(3)
        assert summary.avg_sleep_score == pytest.approx(79)
        assert summary.avg_pace == pytest.approx((9 * 4 + 8 * 6) / 10)
        assert summary.avg_heart_rate is None
        assert summary.max_heart_rate == 180
        assert summary.sleep_crowns == 1
        assert summary.readiness_crowns == 1
        assert summary.total_crowns == 2

    def test_empty_period(self):
        summary = summarize_period([])
        assert summary.total_distance == 0
        assert summary.avg_distance == 0
        assert summary.avg_sleep_score is None
        assert summary.total_crowns == 0
