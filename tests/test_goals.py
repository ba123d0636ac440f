"""Tests for goal progress and the engine state."""

import pytest
from datetime import date, timedelta

from athlete_signal.analysis.goals import (
    EngineState,
    GoalDefinition,
    GoalTracker,
    calculate_progress,
    default_goals,
    metric_values,
    period_window,
)
from athlete_signal.analysis.records import DailyRecord
from athlete_signal.analysis.streaks import StreakState
from athlete_signal.db.goal_store import GoalStore


class TestGoalProgress:
    """Test progress calculation and metric values."""

    def test_defaults(self):
        goals = default_goals()
        assert goals["weekly"]["mileage"].target == 20
        assert goals["weekly"]["runs"].target == 4
        assert goals["monthly"]["mileage"].target == 80
        assert goals["monthly"]["avgReadiness"].target == 85
        assert not any(goal.enabled for metrics in goals.values() for goal in metrics.values())

    @pytest.mark.parametrize(
        "current, target, expected",
        [(10, 20, 50), (30, 20, 100), (0, 20, 0), (-5, 20, 0), (6.66, 20, 33)],
    )
    def test_progress_is_clamped(self, current, target, expected):
        goal = GoalDefinition(enabled=True, target=target, current=current)
        assert calculate_progress(goal) == expected

    def test_disabled_or_zero_target(self):
        assert calculate_progress(GoalDefinition(enabled=False, target=20, current=20)) == 0
        assert calculate_progress(GoalDefinition(enabled=True, target=0, current=5)) == 0

    def test_metric_values(self, start_day):
        records = [
            DailyRecord(date=start_day, distance=3.25, sleep_seconds=7 * 3600, readiness_score=80),
            DailyRecord(date=start_day + timedelta(days=1), distance=0, sleep_seconds=8 * 3600),
            DailyRecord(date=start_day + timedelta(days=2), distance=5, readiness_score=91),
        ]
        values = metric_values(records)
        assert values["mileage"] == pytest.approx(8.2)
        assert values["runs"] == 2
        assert values["avgSleep"] == pytest.approx(7.5)
        assert values["avgReadiness"] == 86

    def test_no_data_averages_are_zero(self, make_records, start_day):
        values = metric_values(make_records(start_day, [0, 0]))
        assert values == {"mileage": 0, "runs": 0, "avgSleep": 0, "avgReadiness": 0}

    def test_period_windows(self):
        today = date(2025, 3, 12)
        assert period_window("weekly", today) == (date(2025, 3, 6), today)
        assert period_window("monthly", today) == (date(2025, 3, 1), today)
        with pytest.raises(ValueError):
            period_window("yearly", today)


class TestGoalTracker:
    """Test goal editing and recomputation."""

    def setup_method(self):
        self.tracker = GoalTracker()

    def test_update_goal(self):
        self.tracker.update_goal("weekly", "mileage", True, 25)
        goal = self.tracker.state.goals["weekly"]["mileage"]
        assert goal.enabled is True
        assert goal.target == 25

    def test_update_goal_rejects_bad_input(self):
        with pytest.raises(ValueError):
            self.tracker.update_goal("daily", "mileage", True, 5)
        with pytest.raises(ValueError):
            self.tracker.update_goal("weekly", "pace", True, 5)
        with pytest.raises(ValueError):
            self.tracker.update_goal("weekly", "mileage", True, -1)

    def test_weekly_and_monthly_windows(self, make_records):
        # Feb 24 .. Mar 12, one mile per day
        records = make_records(date(2025, 2, 24), [1] * 17)
        self.tracker.update_goal("weekly", "mileage", True, 14)
        self.tracker.update_goal("monthly", "runs", True, 24)

        state = self.tracker.update_progress(records, today=date(2025, 3, 12))

        assert state.goals["weekly"]["mileage"].current == pytest.approx(7)
        assert state.goals["monthly"]["runs"].current == 12
        assert state.last_updated == date(2025, 3, 12)

        summary = self.tracker.goal_summary("weekly", "mileage")
        assert summary["progress"] == 50
        assert summary["remaining"] == pytest.approx(7)
        assert summary["is_complete"] is False
        assert summary["unit"] == "mi"

    def test_current_is_recomputed_not_accumulated(self, make_records, start_day):
        records = make_records(start_day, [2] * 7)
        self.tracker.update_progress(records)
        self.tracker.update_progress(records)
        assert self.tracker.state.goals["weekly"]["mileage"].current == pytest.approx(14)

    def test_update_progress_tracks_streaks(self, make_records, start_day):
        state = self.tracker.update_progress(make_records(start_day, [3, 3, 3]))
        assert state.streaks.current_run == 3
        assert state.streaks.best_run == 3

    def test_empty_records_keep_state(self):
        before = self.tracker.state
        assert self.tracker.update_progress([]) is before

    def test_active_goals(self):
        assert self.tracker.active_goals() == []
        self.tracker.update_goal("monthly", "avgSleep", True, 7.5)
        active = self.tracker.active_goals()
        assert len(active) == 1
        assert active[0]["metric"] == "avgSleep"
        assert self.tracker.goal_summary("weekly", "runs") is None


class TestEngineStatePersistence:
    """Test saving and loading goals and streaks."""

    def test_save_and_load(self, memory_db, make_records, start_day):
        store = GoalStore(memory_db)
        tracker = GoalTracker()
        tracker.update_goal("weekly", "runs", True, 5)
        tracker.update_progress(make_records(start_day, [4, 4, 0, 4]))
        tracker.save(store)

        loaded = GoalTracker.load(store)

        assert loaded.state.goals["weekly"]["runs"].enabled is True
        assert loaded.state.goals["weekly"]["runs"].current == 3
        assert loaded.state.streaks == tracker.state.streaks
        assert loaded.state.last_updated == start_day + timedelta(days=3)
        assert store.get("goals")["lastUpdated"] == (start_day + timedelta(days=3)).isoformat()

    def test_load_from_empty_store(self, memory_db):
        state = GoalTracker.load(GoalStore(memory_db)).state
        assert state.streaks == StreakState()
        assert state.last_updated is None
        assert state.goals["weekly"]["mileage"].target == 20

    def test_state_to_dict(self):
        data = EngineState().to_dict()
        assert set(data) == {"goals", "streaks", "lastUpdated"}
        assert data["goals"]["weekly"]["avgSleep"]["target"] == 8
