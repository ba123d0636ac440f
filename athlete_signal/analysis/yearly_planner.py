"""Yearly progression planner.

Analyzes the current year's running and builds a 52-week mileage plan for the
next year, either from user-entered weekly values or generated as a linear
build with periodic deload weeks followed by a maintenance phase.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..config import config
from .records import DailyRecord, WeekBucket, week_buckets

logger = logging.getLogger(__name__)

PLAN_STORE_KEY = "yearly_plan"


class ProgressionType(Enum):
    CONSERVATIVE = "conservative"
    AGGRESSIVE = "aggressive"
    CUSTOM = "custom"


class PlanPhase(Enum):
    BUILD = "build"
    MAINTAIN = "maintain"
    CUSTOM = "custom"


@dataclass
class ValidationResult:
    """Result of validating plan input."""
    is_valid: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class WeekPlan:
    """Target mileage for one week of the plan."""

    week: int
    year: int
    planned_mileage: float
    min_mileage: float
    max_mileage: float
    is_deload_week: bool
    phase: PlanPhase

    def to_dict(self) -> Dict:
        return {
            "week": self.week,
            "year": self.year,
            "plannedMileage": self.planned_mileage,
            "minMileage": self.min_mileage,
            "maxMileage": self.max_mileage,
            "isDeloadWeek": self.is_deload_week,
            "phase": self.phase.value,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "WeekPlan":
        return cls(
            week=int(data["week"]),
            year=int(data["year"]),
            planned_mileage=float(data["plannedMileage"]),
            min_mileage=float(data["minMileage"]),
            max_mileage=float(data["maxMileage"]),
            is_deload_week=bool(data["isDeloadWeek"]),
            phase=PlanPhase(data["phase"]),
        )


@dataclass(frozen=True)
class PlanSummary:
    starting_mileage: float
    target_mileage: float
    total_year_mileage: float
    avg_weekly_mileage: float
    increase_percent: int
    deload_weeks: int
    progression_type: ProgressionType
    weekly_rate_cap: Optional[float] = None  # max weekly increase for the progression type

    def to_dict(self) -> Dict:
        return {
            "startingMileage": self.starting_mileage,
            "targetMileage": self.target_mileage,
            "totalYearMileage": self.total_year_mileage,
            "avgWeeklyMileage": self.avg_weekly_mileage,
            "increasePercent": self.increase_percent,
            "deloadWeeks": self.deload_weeks,
            "progressionType": self.progression_type.value,
            "weeklyRateCap": self.weekly_rate_cap,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "PlanSummary":
        return cls(
            starting_mileage=float(data["startingMileage"]),
            target_mileage=float(data["targetMileage"]),
            total_year_mileage=float(data["totalYearMileage"]),
            avg_weekly_mileage=float(data["avgWeeklyMileage"]),
            increase_percent=int(data["increasePercent"]),
            deload_weeks=int(data["deloadWeeks"]),
            progression_type=ProgressionType(data["progressionType"]),
            weekly_rate_cap=data.get("weeklyRateCap"),
        )


@dataclass(frozen=True)
class YearlyPlan:
    """A full year of weekly mileage targets. Always exactly 52 weeks."""

    year: int
    weeks: List[WeekPlan]
    summary: PlanSummary

    def __post_init__(self):
        if len(self.weeks) != config.WEEKS_PER_YEAR:
            raise ValueError(f"A yearly plan needs {config.WEEKS_PER_YEAR} weeks, got {len(self.weeks)}")

    def week(self, number: int) -> Optional[WeekPlan]:
        for week_plan in self.weeks:
            if week_plan.week == number:
                return week_plan
        return None

    def to_dict(self) -> Dict:
        return {
            "year": self.year,
            "plan": [week_plan.to_dict() for week_plan in self.weeks],
            "summary": self.summary.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "YearlyPlan":
        return cls(
            year=int(data["year"]),
            weeks=[WeekPlan.from_dict(week) for week in data["plan"]],
            summary=PlanSummary.from_dict(data["summary"]),
        )


@dataclass(frozen=True)
class CurrentTraining:
    """Baseline derived from this year's running."""

    total_mileage: float
    avg_weekly_mileage: float
    max_weekly_mileage: float
    weeks_with_runs: int
    consistency: int  # percent of elapsed weeks with at least one run
    weekly_mileage: List[WeekBucket] = field(default_factory=list)


@dataclass(frozen=True)
class QuarterSummary:
    quarter: str
    total_mileage: float
    avg_weekly_mileage: float
    weeks_count: int


@dataclass(frozen=True)
class WeeklyProgress:
    week: int
    planned: float
    actual: float
    min: float
    max: float
    is_on_track: bool
    difference: float
    percent_complete: Optional[int]


def _round1(value: float) -> float:
    return round(value, 1)


def current_week_of_year(today: date) -> int:
    """ISO week of ``today``, kept inside the calendar year."""
    iso_year, week, _ = today.isocalendar()
    if iso_year < today.year:
        return 1  # early January days belonging to last year's final ISO week
    if iso_year > today.year:
        return date(today.year, 12, 28).isocalendar()[1]
    return week


class YearlyProgressionPlanner:
    """Build, summarize and track 52-week mileage plans."""

    def __init__(self, today: Optional[date] = None):
        self.today = today or datetime.now().date()
        self.weeks_per_year = config.WEEKS_PER_YEAR
        self.deload_frequency = config.DELOAD_FREQUENCY
        self.deload_reduction = config.DELOAD_REDUCTION
        self.range_fraction = config.SAFE_RANGE_FRACTION

    @property
    def target_year(self) -> int:
        return self.today.year + 1

    def _week_plan(
        self, week: int, year: int, planned: float, is_deload_week: bool, phase: PlanPhase
    ) -> WeekPlan:
        planned = _round1(planned)
        return WeekPlan(
            week=week,
            year=year,
            planned_mileage=planned,
            min_mileage=round(planned * (1 - self.range_fraction), 2),
            max_mileage=round(planned * (1 + self.range_fraction), 2),
            is_deload_week=is_deload_week,
            phase=phase,
        )

    # ------------------------------------------------------------------
    # Baseline analysis
    # ------------------------------------------------------------------

    def analyze_current_training(self, records: Sequence[DailyRecord]) -> Optional[CurrentTraining]:
        """Summarize this calendar year's running.

        Returns:
            CurrentTraining, or None when there are no records this year
        """
        year_records = [record for record in records if record.date.year == self.today.year]
        if not year_records:
            return None

        weekly = week_buckets(year_records)
        mileages = [bucket.mileage for bucket in weekly]
        weeks_with_runs = sum(1 for mileage in mileages if mileage > 0)
        consistency = weeks_with_runs / max(1, current_week_of_year(self.today))

        return CurrentTraining(
            total_mileage=float(round(sum(record.distance for record in year_records))),
            avg_weekly_mileage=_round1(float(np.mean(mileages))) if mileages else 0.0,
            max_weekly_mileage=_round1(max(mileages)) if mileages else 0.0,
            weeks_with_runs=weeks_with_runs,
            consistency=round(consistency * 100),
            weekly_mileage=weekly,
        )

    # ------------------------------------------------------------------
    # Plan construction
    # ------------------------------------------------------------------

    def validate_weekly_goals(self, weekly_goals: Optional[Sequence]) -> ValidationResult:
        """Check user-entered weekly mileage before it becomes a plan."""
        if weekly_goals is None or len(weekly_goals) != self.weeks_per_year:
            count = 0 if weekly_goals is None else len(weekly_goals)
            return ValidationResult(False, f"Expected {self.weeks_per_year} weekly values, got {count}")

        for index, value in enumerate(weekly_goals, start=1):
            try:
                mileage = float(value)
            except (TypeError, ValueError):
                return ValidationResult(False, f"Week {index}: '{value}' is not a number")
            if math.isnan(mileage) or math.isinf(mileage):
                return ValidationResult(False, f"Week {index}: '{value}' is not a number")
            if mileage < 0:
                return ValidationResult(False, f"Week {index}: mileage cannot be negative")

        if all(float(value) == 0 for value in weekly_goals):
            return ValidationResult(False, "At least one week needs planned mileage")

        return ValidationResult(True)

    def create_custom_plan(self, weekly_goals: Sequence) -> Optional[YearlyPlan]:
        """Turn 52 user-entered weekly values into a plan.

        Starting and target mileage come from the first and last non-zero
        weeks so empty weeks at either end don't skew the summary.

        Returns:
            YearlyPlan, or None when the input fails validation
        """
        validation = self.validate_weekly_goals(weekly_goals)
        if not validation.is_valid:
            logger.warning(f"Rejected custom plan: {validation.reason}")
            return None

        year = self.target_year
        weeks = [
            self._week_plan(index, year, float(mileage), False, PlanPhase.CUSTOM)
            for index, mileage in enumerate(weekly_goals, start=1)
        ]

        total = sum(week.planned_mileage for week in weeks)
        non_zero = [week.planned_mileage for week in weeks if week.planned_mileage > 0]
        starting = non_zero[0] if non_zero else 0.0
        target = non_zero[-1] if non_zero else 0.0

        summary = PlanSummary(
            starting_mileage=_round1(starting),
            target_mileage=_round1(target),
            total_year_mileage=float(round(total)),
            avg_weekly_mileage=_round1(total / self.weeks_per_year),
            increase_percent=round((target - starting) / starting * 100) if starting > 0 else 0,
            deload_weeks=0,
            progression_type=ProgressionType.CUSTOM,
        )
        return YearlyPlan(year=year, weeks=weeks, summary=summary)

    def generate_yearly_plan(
        self,
        current_training: Optional[CurrentTraining] = None,
        starting_mileage: Optional[float] = None,
        target_increase: Optional[float] = None,
        include_deload_weeks: bool = True,
        progression_type: ProgressionType = ProgressionType.CONSERVATIVE,
    ) -> Optional[YearlyPlan]:
        """Generate a progressive plan for next year.

        Mileage rises by a constant weekly step for the first 80% of the year
        and then holds at the target. Every fourth week is a deload at 75% of
        the current build mileage; deloads do not advance the build.

        Args:
            current_training: Baseline; its average weekly mileage is used
                when ``starting_mileage`` is not given
            starting_mileage: Weekly mileage to start from (floored at 5)
            target_increase: Percent increase over the year (default 20)
            include_deload_weeks: Insert a deload every fourth week
            progression_type: Conservative (5%/week cap) or aggressive (10%)

        Returns:
            YearlyPlan, or None without any baseline
        """
        if starting_mileage is None:
            if current_training is None:
                return None
            starting_mileage = current_training.avg_weekly_mileage
        if target_increase is None:
            target_increase = config.DEFAULT_TARGET_INCREASE
        progression_type = ProgressionType(progression_type)
        if progression_type == ProgressionType.CUSTOM:
            raise ValueError("Custom plans are created from weekly values, not generated")

        start = max(float(starting_mileage), config.MIN_WEEKLY_MILEAGE)
        target = start * (1 + target_increase / 100)
        weeks_to_target = config.get_weeks_to_target()
        weekly_increase = (target - start) / weeks_to_target

        year = self.target_year
        current_mileage = start
        weeks = []
        for week in range(1, self.weeks_per_year + 1):
            is_deload = include_deload_weeks and week % self.deload_frequency == 0

            if is_deload:
                planned = current_mileage * self.deload_reduction
            elif week <= weeks_to_target:
                planned = current_mileage
                current_mileage += weekly_increase
            else:
                planned = target

            phase = PlanPhase.BUILD if week <= weeks_to_target else PlanPhase.MAINTAIN
            weeks.append(self._week_plan(week, year, planned, is_deload, phase))

        total = sum(week.planned_mileage for week in weeks)
        summary = PlanSummary(
            starting_mileage=_round1(start),
            target_mileage=_round1(target),
            total_year_mileage=float(round(total)),
            avg_weekly_mileage=_round1(total / self.weeks_per_year),
            increase_percent=round((target - start) / start * 100),
            deload_weeks=sum(1 for week in weeks if week.is_deload_week),
            progression_type=progression_type,
            weekly_rate_cap=config.get_progression_rate(progression_type.value),
        )

        logger.info(
            f"Generated {progression_type.value} plan for {year}: "
            f"{summary.starting_mileage} -> {summary.target_mileage} mi/week"
        )
        return YearlyPlan(year=year, weeks=weeks, summary=summary)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def quarterly_breakdown(self, plan: Optional[YearlyPlan]) -> Optional[List[QuarterSummary]]:
        """Sum and average the plan over four fixed 13-week quarters."""
        if plan is None:
            return None

        quarters = []
        size = self.weeks_per_year // 4
        for index in range(4):
            weeks = plan.weeks[index * size:(index + 1) * size]
            total = sum(week.planned_mileage for week in weeks)
            quarters.append(
                QuarterSummary(
                    quarter=f"Q{index + 1}",
                    total_mileage=float(round(total)),
                    avg_weekly_mileage=_round1(total / len(weeks)),
                    weeks_count=len(weeks),
                )
            )
        return quarters

    def generate_recommendations(self, current_training: Optional[CurrentTraining]) -> List[str]:
        """Guidance based on consistency and weekly mileage tier."""
        if current_training is None:
            return ["Start tracking your runs to get personalized recommendations!"]

        recommendations = []

        if current_training.consistency < 50:
            recommendations.append("Focus on consistency first. Try to run at least 3x per week.")
        elif current_training.consistency >= 80:
            recommendations.append("Excellent consistency! You're ready for progressive mileage increases.")

        avg = current_training.avg_weekly_mileage
        if avg < 10:
            recommendations.append("Start with a base-building phase. Gradually increase to 15-20 miles/week.")
        elif avg < 30:
            recommendations.append("You can safely increase weekly mileage by 10-20% next year.")
        elif avg >= 50:
            recommendations.append("High-mileage runner! Focus on quality over quantity with strategic increases.")

        recommendations.append(
            f"Include deload weeks every {self.deload_frequency} weeks to prevent overtraining."
        )
        recommendations.append(
            f"Increase mileage gradually - no more than {config.SAFE_PROGRESSION_RATE:.0%} per week."
        )
        return recommendations

    def check_weekly_progress(
        self, plan: Optional[YearlyPlan], actual_mileage: float, week: Optional[int] = None
    ) -> Optional[WeeklyProgress]:
        """Compare a week's actual mileage with the plan."""
        if plan is None:
            return None
        if week is None:
            week = current_week_of_year(self.today)
        week_plan = plan.week(week)
        if week_plan is None:
            return None

        percent = None
        if week_plan.planned_mileage > 0:
            percent = round(actual_mileage / week_plan.planned_mileage * 100)

        return WeeklyProgress(
            week=week,
            planned=week_plan.planned_mileage,
            actual=actual_mileage,
            min=week_plan.min_mileage,
            max=week_plan.max_mileage,
            is_on_track=week_plan.min_mileage <= actual_mileage <= week_plan.max_mileage,
            difference=actual_mileage - week_plan.planned_mileage,
            percent_complete=percent,
        )

    # ------------------------------------------------------------------
    # Persistence (whole plan only)
    # ------------------------------------------------------------------

    def save_plan(self, store, plan: Optional[YearlyPlan]) -> None:
        """Replace the stored plan; ``None`` clears it."""
        if plan is None:
            store.set(PLAN_STORE_KEY, None)
            logger.info("Cleared yearly plan")
            return
        store.set(PLAN_STORE_KEY, {"plan": plan.to_dict(), "createdAt": datetime.utcnow().isoformat()})
        logger.info(f"Saved yearly plan for {plan.year}")

    def save_custom_plan(self, store, weekly_goals: Sequence) -> ValidationResult:
        """Validate and store a custom plan; the store is untouched on failure."""
        validation = self.validate_weekly_goals(weekly_goals)
        if not validation.is_valid:
            logger.warning(f"Custom plan not saved: {validation.reason}")
            return validation
        self.save_plan(store, self.create_custom_plan(weekly_goals))
        return validation

    @staticmethod
    def load_plan(store) -> Optional[YearlyPlan]:
        stored = store.get(PLAN_STORE_KEY)
        if not stored:
            return None
        try:
            return YearlyPlan.from_dict(stored["plan"])
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring unreadable yearly plan: {e}")
            return None
