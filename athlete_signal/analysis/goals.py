"""Weekly and monthly goal tracking plus the engine state threaded by callers."""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

from ..config import config
from .records import DailyRecord, records_between
from .streaks import StreakState, StreakTracker

logger = logging.getLogger(__name__)

PERIODS = ("weekly", "monthly")
METRICS = ("mileage", "runs", "avgSleep", "avgReadiness")

METRIC_UNITS = {
    "mileage": "mi",
    "runs": "runs",
    "avgSleep": "hrs",
    "avgReadiness": "score",
}


@dataclass
class GoalDefinition:
    """A goal target. ``current`` is always derived from records."""

    enabled: bool = False
    target: float = 0.0
    current: float = 0.0

    def to_dict(self) -> Dict:
        return {"enabled": self.enabled, "target": self.target, "current": self.current}

    @classmethod
    def from_dict(cls, data: Dict) -> "GoalDefinition":
        return cls(
            enabled=bool(data.get("enabled", False)),
            target=float(data.get("target", 0.0)),
            current=float(data.get("current", 0.0)),
        )


Goals = Dict[str, Dict[str, GoalDefinition]]


def default_goals() -> Goals:
    """Fresh goal set, every goal disabled with its default target."""
    return {
        period: {
            metric: GoalDefinition(enabled=False, target=config.get_default_goal_target(period, metric))
            for metric in METRICS
        }
        for period in PERIODS
    }


def goals_to_dict(goals: Goals) -> Dict:
    return {period: {metric: goal.to_dict() for metric, goal in metrics.items()} for period, metrics in goals.items()}


def goals_from_dict(data: Optional[Dict]) -> Goals:
    """Decode stored goals, filling any missing goal with its default."""
    goals = default_goals()
    for period in PERIODS:
        for metric, stored in ((data or {}).get(period) or {}).items():
            if metric in goals[period]:
                goals[period][metric] = GoalDefinition.from_dict(stored)
    return goals


def calculate_progress(goal: GoalDefinition) -> int:
    """Percent complete, clamped to [0, 100]."""
    if not goal.enabled or goal.target <= 0:
        return 0
    progress = round(goal.current / goal.target * 100)
    return max(0, min(100, progress))


def metric_values(records: Sequence[DailyRecord]) -> Dict[str, float]:
    """Current values of every goal metric over a set of days.

    Averages only cover days that have the data; with none the value is 0.
    """
    mileage = sum(record.distance for record in records)
    runs = sum(1 for record in records if record.has_run)

    sleep_hours = [record.sleep_hours for record in records if record.sleep_seconds]
    readiness = [record.readiness_score for record in records if record.readiness_score is not None]

    return {
        "mileage": round(mileage, 1),
        "runs": float(runs),
        "avgSleep": round(sum(sleep_hours) / len(sleep_hours), 1) if sleep_hours else 0.0,
        "avgReadiness": float(round(sum(readiness) / len(readiness))) if readiness else 0.0,
    }


def period_window(period: str, today: date):
    """Inclusive date window a goal period covers."""
    if period == "weekly":
        return today - timedelta(days=6), today
    if period == "monthly":
        return today.replace(day=1), today
    raise ValueError(f"Unknown goal period: {period}")


def recompute_goals(goals: Goals, records: Sequence[DailyRecord], today: date) -> Goals:
    """Recompute every goal's current value; targets and flags are kept."""
    updated: Goals = {}
    for period in PERIODS:
        start, end = period_window(period, today)
        values = metric_values(records_between(records, start, end))
        updated[period] = {
            metric: replace(goal, current=values[metric]) for metric, goal in goals[period].items()
        }
    return updated


@dataclass
class EngineState:
    """Mutable state of the engine, threaded explicitly through calls."""

    goals: Goals = field(default_factory=default_goals)
    streaks: StreakState = field(default_factory=StreakState)
    last_updated: Optional[date] = None

    def to_dict(self) -> Dict:
        return {
            "goals": goals_to_dict(self.goals),
            "streaks": self.streaks.to_dict(),
            "lastUpdated": self.last_updated.isoformat() if self.last_updated else None,
        }

    @classmethod
    def from_dict(cls, goals: Optional[Dict], streaks: Optional[Dict]) -> "EngineState":
        last_updated = (goals or {}).get("lastUpdated")
        return cls(
            goals=goals_from_dict(goals),
            streaks=StreakState.from_dict(streaks),
            last_updated=date.fromisoformat(last_updated) if last_updated else None,
        )


class GoalTracker:
    """Goal editing and progress reporting on top of an EngineState."""

    def __init__(self, state: Optional[EngineState] = None, streak_tracker: Optional[StreakTracker] = None):
        self.state = state or EngineState()
        self.streak_tracker = streak_tracker or StreakTracker()

    @classmethod
    def load(cls, store) -> "GoalTracker":
        """Load goals and streaks from the goal store."""
        goals = store.get("goals")
        streaks = store.get("streaks")
        return cls(EngineState.from_dict(goals, streaks))

    def save(self, store) -> None:
        """Persist goals and streaks in a single store write."""
        data = self.state.to_dict()
        goals = dict(data["goals"], lastUpdated=data["lastUpdated"])
        store.set_many({"goals": goals, "streaks": data["streaks"]})

    def update_goal(self, period: str, metric: str, enabled: bool, target: float) -> None:
        if period not in PERIODS or metric not in METRICS:
            raise ValueError(f"Unknown goal {period}/{metric}")
        if target < 0:
            raise ValueError(f"Goal target must be non-negative, got {target}")
        goal = self.state.goals[period][metric]
        self.state.goals[period][metric] = replace(goal, enabled=enabled, target=float(target))

    def update_progress(self, records: Sequence[DailyRecord], today: Optional[date] = None) -> EngineState:
        """Recompute goal values and streaks from records.

        Everything is computed in memory first; the state is swapped in one
        assignment so a reader never sees a half-updated state.
        """
        if not records:
            return self.state
        today = today or max(record.date for record in records)

        new_state = EngineState(
            goals=recompute_goals(self.state.goals, records, today),
            streaks=self.streak_tracker.update(records, self.state.streaks),
            last_updated=today,
        )
        self.state = new_state
        logger.info(f"Recomputed goal progress and streaks as of {today}")
        return new_state

    def active_goals(self) -> List[Dict]:
        active = []
        for period in PERIODS:
            for metric, goal in self.state.goals[period].items():
                if goal.enabled:
                    active.append(
                        {
                            "period": period,
                            "metric": metric,
                            "target": goal.target,
                            "current": goal.current,
                            "progress": calculate_progress(goal),
                        }
                    )
        return active

    def goal_summary(self, period: str, metric: str) -> Optional[Dict]:
        goal = self.state.goals[period][metric]
        if not goal.enabled:
            return None

        progress = calculate_progress(goal)
        return {
            "period": period,
            "metric": metric,
            "target": goal.target,
            "current": goal.current,
            "remaining": max(0.0, goal.target - goal.current),
            "progress": progress,
            "is_complete": progress >= 100,
            "unit": METRIC_UNITS[metric],
        }
