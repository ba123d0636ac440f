"""Consecutive-day streak tracking against fixed goals."""

from dataclasses import dataclass, replace
from datetime import timedelta
from typing import Callable, Dict, Optional, Sequence

from ..config import config
from .records import DailyRecord


@dataclass(frozen=True)
class StreakState:
    """Current and best-ever streaks for the three tracked goals.

    Best values only ever go up; current values are recomputed from history.
    """

    current_sleep: int = 0
    current_run: int = 0
    current_readiness: int = 0
    best_sleep: int = 0
    best_run: int = 0
    best_readiness: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "consecutiveSleepGoal": self.current_sleep,
            "consecutiveRunDays": self.current_run,
            "consecutiveReadinessGoal": self.current_readiness,
            "bestSleepStreak": self.best_sleep,
            "bestRunStreak": self.best_run,
            "bestReadinessStreak": self.best_readiness,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "StreakState":
        if not data:
            return cls()
        return cls(
            current_sleep=int(data.get("consecutiveSleepGoal", 0)),
            current_run=int(data.get("consecutiveRunDays", 0)),
            current_readiness=int(data.get("consecutiveReadinessGoal", 0)),
            best_sleep=int(data.get("bestSleepStreak", 0)),
            best_run=int(data.get("bestRunStreak", 0)),
            best_readiness=int(data.get("bestReadinessStreak", 0)),
        )


def meets_sleep_goal(record: DailyRecord) -> bool:
    hours = record.sleep_hours
    return hours is not None and hours >= config.SLEEP_GOAL_HOURS


def is_run_day(record: DailyRecord) -> bool:
    return record.has_run


def meets_readiness_goal(record: DailyRecord) -> bool:
    return record.readiness_score is not None and record.readiness_score >= config.READINESS_GOAL_SCORE


class StreakTracker:
    """Count consecutive qualifying days ending at the most recent record."""

    @staticmethod
    def count_streak(records: Sequence[DailyRecord], qualifies: Callable[[DailyRecord], bool]) -> int:
        """Walk back from the latest day until a day fails or is missing.

        A skipped calendar date counts as a missing day and ends the streak.
        """
        ordered = sorted(records, key=lambda record: record.date, reverse=True)

        streak = 0
        expected = ordered[0].date if ordered else None
        for record in ordered:
            if record.date != expected or not qualifies(record):
                break
            streak += 1
            expected = record.date - timedelta(days=1)
        return streak

    def update(self, records: Sequence[DailyRecord], state: Optional[StreakState] = None) -> StreakState:
        """Recompute current streaks and raise best-ever marks.

        Args:
            records: Daily records (any order)
            state: Previous state; its best values are carried forward

        Returns:
            A new StreakState, leaving ``state`` untouched
        """
        state = state or StreakState()

        current_sleep = self.count_streak(records, meets_sleep_goal)
        current_run = self.count_streak(records, is_run_day)
        current_readiness = self.count_streak(records, meets_readiness_goal)

        return replace(
            state,
            current_sleep=current_sleep,
            current_run=current_run,
            current_readiness=current_readiness,
            best_sleep=max(state.best_sleep, current_sleep),
            best_run=max(state.best_run, current_run),
            best_readiness=max(state.best_readiness, current_readiness),
        )
