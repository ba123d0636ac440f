"""Tests for the yearly progression planner."""

import pytest
from datetime import date, timedelta

from athlete_signal.analysis.records import DailyRecord
from athlete_signal.analysis.yearly_planner import (
    PLAN_STORE_KEY,
    CurrentTraining,
    PlanPhase,
    ProgressionType,
    YearlyPlan,
    YearlyProgressionPlanner,
    current_week_of_year,
)
from athlete_signal.db.goal_store import GoalStore

TODAY = date(2025, 6, 30)


class TestPlanGeneration:
    """Test the generated build/maintain plan."""

    def setup_method(self):
        self.planner = YearlyProgressionPlanner(today=TODAY)

    def test_conservative_plan_with_deloads(self):
        plan = self.planner.generate_yearly_plan(starting_mileage=20, target_increase=20)
        step = 4 / 41

        assert plan.year == 2026
        assert len(plan.weeks) == 52
        assert plan.summary.target_mileage == 24
        assert plan.summary.starting_mileage == 20
        assert plan.summary.increase_percent == 20

        assert plan.week(1).planned_mileage == 20.0
        assert plan.week(2).planned_mileage == round(20 + step, 1)
        # Deload is 75% of the build value, which is not advanced by the deload
        assert plan.week(4).planned_mileage == round(0.75 * (20 + 3 * step), 1)
        assert plan.week(4).is_deload_week
        assert plan.week(5).planned_mileage == round(20 + 3 * step, 1)

        assert plan.week(41).phase == PlanPhase.BUILD
        assert plan.week(42).phase == PlanPhase.MAINTAIN
        assert plan.week(42).planned_mileage == 24.0

    def test_deload_weeks(self):
        plan = self.planner.generate_yearly_plan(starting_mileage=20)
        deloads = [week.week for week in plan.weeks if week.is_deload_week]
        assert deloads == list(range(4, 53, 4))
        assert plan.summary.deload_weeks == 13

    def test_no_deload_weeks(self):
        plan = self.planner.generate_yearly_plan(starting_mileage=20, include_deload_weeks=False)
        assert not any(week.is_deload_week for week in plan.weeks)
        assert plan.summary.deload_weeks == 0
        mileages = [week.planned_mileage for week in plan.weeks]
        assert mileages == sorted(mileages)
        assert mileages[-1] == 24.0

    def test_safe_range(self):
        plan = self.planner.generate_yearly_plan(starting_mileage=33)
        for week in plan.weeks:
            assert week.min_mileage <= week.planned_mileage <= week.max_mileage
            assert week.min_mileage == pytest.approx(week.planned_mileage * 0.9, abs=0.01)
            assert week.max_mileage == pytest.approx(week.planned_mileage * 1.1, abs=0.01)

    def test_starting_mileage_floor(self):
        plan = self.planner.generate_yearly_plan(starting_mileage=2)
        assert plan.week(1).planned_mileage == 5.0
        assert plan.summary.starting_mileage == 5.0

    def test_progression_type_sets_rate_cap(self):
        conservative = self.planner.generate_yearly_plan(starting_mileage=20)
        aggressive = self.planner.generate_yearly_plan(
            starting_mileage=20, progression_type=ProgressionType.AGGRESSIVE
        )
        assert conservative.summary.weekly_rate_cap == pytest.approx(0.05)
        assert aggressive.summary.weekly_rate_cap == pytest.approx(0.10)
        assert aggressive.summary.progression_type == ProgressionType.AGGRESSIVE

    def test_custom_progression_cannot_be_generated(self):
        with pytest.raises(ValueError):
            self.planner.generate_yearly_plan(starting_mileage=20, progression_type=ProgressionType.CUSTOM)

    def test_baseline_from_current_training(self):
        training = CurrentTraining(
            total_mileage=500, avg_weekly_mileage=15, max_weekly_mileage=25, weeks_with_runs=20, consistency=80
        )
        plan = self.planner.generate_yearly_plan(current_training=training)
        assert plan.summary.starting_mileage == 15

    def test_no_baseline(self):
        assert self.planner.generate_yearly_plan() is None


class TestCustomPlan:
    """Test validation and creation of user-entered plans."""

    def setup_method(self):
        self.planner = YearlyProgressionPlanner(today=TODAY)

    def test_all_zero_is_rejected(self, memory_db):
        store = GoalStore(memory_db)
        existing = self.planner.generate_yearly_plan(starting_mileage=20)
        self.planner.save_plan(store, existing)
        stored_before = store.get(PLAN_STORE_KEY)

        result = self.planner.save_custom_plan(store, [0] * 52)

        assert result.is_valid is False
        assert result.reason
        assert store.get(PLAN_STORE_KEY) == stored_before

    @pytest.mark.parametrize(
        "values",
        [
            [10] * 51,
            [10] * 53,
            [10] * 51 + [-1],
            [10] * 51 + ["abc"],
            [10] * 51 + [float("nan")],
            None,
        ],
    )
    def test_invalid_input(self, values):
        assert self.planner.validate_weekly_goals(values).is_valid is False
        assert self.planner.create_custom_plan(values) is None

    def test_custom_plan_summary(self):
        values = [0, 0] + [10] * 48 + [16, 0]

        plan = self.planner.create_custom_plan(values)

        assert plan.summary.progression_type == ProgressionType.CUSTOM
        assert plan.summary.starting_mileage == 10
        assert plan.summary.target_mileage == 16
        assert plan.summary.increase_percent == 60
        assert plan.summary.total_year_mileage == 496
        assert all(week.phase == PlanPhase.CUSTOM for week in plan.weeks)
        assert plan.week(51).max_mileage == pytest.approx(17.6)

    def test_save_custom_plan(self, memory_db):
        store = GoalStore(memory_db)
        result = self.planner.save_custom_plan(store, [12.5] * 52)
        assert result.is_valid
        assert self.planner.load_plan(store).week(30).planned_mileage == 12.5


class TestPlanReporting:
    """Test quarterly breakdown, progress checks and persistence."""

    def setup_method(self):
        self.planner = YearlyProgressionPlanner(today=TODAY)
        self.plan = self.planner.create_custom_plan([10] * 13 + [20] * 13 + [30] * 13 + [40] * 13)

    def test_quarterly_breakdown(self):
        quarters = self.planner.quarterly_breakdown(self.plan)
        assert [quarter.quarter for quarter in quarters] == ["Q1", "Q2", "Q3", "Q4"]
        assert [quarter.weeks_count for quarter in quarters] == [13] * 4
        assert quarters[0].total_mileage == 130
        assert quarters[3].avg_weekly_mileage == 40
        assert self.planner.quarterly_breakdown(None) is None

    def test_check_weekly_progress(self):
        progress = self.planner.check_weekly_progress(self.plan, 19, week=20)
        assert progress.planned == 20
        assert progress.is_on_track is True
        assert progress.difference == pytest.approx(-1)
        assert progress.percent_complete == 95

        behind = self.planner.check_weekly_progress(self.plan, 10, week=20)
        assert behind.is_on_track is False

    def test_check_weekly_progress_defaults_to_current_week(self):
        progress = self.planner.check_weekly_progress(self.plan, 30)
        assert progress.week == current_week_of_year(TODAY)

    def test_zero_planned_week_has_no_percent(self):
        plan = self.planner.create_custom_plan([0] + [10] * 51)
        assert self.planner.check_weekly_progress(plan, 3, week=1).percent_complete is None

    def test_progress_without_plan(self):
        assert self.planner.check_weekly_progress(None, 10, week=1) is None
        assert self.planner.check_weekly_progress(self.plan, 10, week=60) is None

    def test_week_zero_is_not_the_current_week(self):
        assert self.planner.check_weekly_progress(self.plan, 10, week=0) is None

    def test_save_load_and_clear(self, memory_db):
        store = GoalStore(memory_db)
        self.planner.save_plan(store, self.plan)

        assert self.planner.load_plan(store) == self.plan
        assert "createdAt" in store.get(PLAN_STORE_KEY)

        self.planner.save_plan(store, None)
        assert self.planner.load_plan(store) is None

    def test_plan_must_have_52_weeks(self):
        with pytest.raises(ValueError):
            YearlyPlan(year=2026, weeks=self.plan.weeks[:10], summary=self.plan.summary)


class TestCurrentTraining:
    """Test baseline analysis and recommendations."""

    def setup_method(self):
        self.planner = YearlyProgressionPlanner(today=date(2025, 1, 26))

    def test_analyze_current_training(self, make_records):
        # Jan 6 .. Jan 26 2025 is ISO weeks 2-4; 2024 days are ignored
        records = make_records(date(2024, 12, 30), [0] * 7 + [2] * 7 + [3] * 7 + [0] * 7)

        training = self.planner.analyze_current_training(records)

        assert training.total_mileage == 35
        assert training.weeks_with_runs == 2
        assert training.max_weekly_mileage == 21
        assert training.consistency == 50

    def test_no_records_this_year(self, make_records):
        records = make_records(date(2024, 3, 1), [5] * 10)
        assert self.planner.analyze_current_training(records) is None

    def test_recommendations(self):
        assert len(self.planner.generate_recommendations(None)) == 1

        low = CurrentTraining(
            total_mileage=50, avg_weekly_mileage=5, max_weekly_mileage=8, weeks_with_runs=2, consistency=30
        )
        messages = self.planner.generate_recommendations(low)
        assert any("consistency" in message for message in messages)
        assert any("base-building" in message for message in messages)
        assert any("deload" in message for message in messages)

    def test_current_week_of_year(self):
        assert current_week_of_year(date(2027, 1, 1)) == 1
        assert current_week_of_year(date(2024, 12, 31)) == 52
        assert current_week_of_year(date(2025, 3, 3)) == 10
