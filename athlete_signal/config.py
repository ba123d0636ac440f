"""Configuration management for the AthleteSignal training engine."""

import os
from typing import Dict
from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    """Read a float from the environment, falling back on malformed values."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return float(default)
    try:
        return float(raw)
    except ValueError:
        return float(default)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return int(default)
    try:
        return int(raw)
    except ValueError:
        return int(default)


class Config:
    """Application configuration."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./athlete_signal.db")

    # Application
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Workload windows (days)
    ACUTE_WINDOW_DAYS: int = _env_int("ACUTE_WINDOW_DAYS", 7)
    CHRONIC_WINDOW_DAYS: int = _env_int("CHRONIC_WINDOW_DAYS", 28)
    MIN_HISTORY_DAYS: int = _env_int("MIN_HISTORY_DAYS", 7)

    # Acute:Chronic Workload Ratio bands
    ACWR_LOW: float = _env_float("ACWR_LOW", 0.8)  # below = undertrained
    ACWR_OPTIMAL_MAX: float = _env_float("ACWR_OPTIMAL_MAX", 1.3)
    ACWR_MODERATE_MAX: float = _env_float("ACWR_MODERATE_MAX", 1.5)  # above = high risk

    # Recovery levels (0-100 scores). The excellent edge is also the crown threshold.
    RECOVERY_EXCELLENT: float = _env_float("RECOVERY_EXCELLENT", 85)
    RECOVERY_GOOD: float = _env_float("RECOVERY_GOOD", 70)
    RECOVERY_FAIR: float = _env_float("RECOVERY_FAIR", 55)
    CROWN_THRESHOLD: float = RECOVERY_EXCELLENT

    # Streak thresholds
    SLEEP_GOAL_HOURS: float = _env_float("SLEEP_GOAL_HOURS", 8)
    READINESS_GOAL_SCORE: float = CROWN_THRESHOLD

    # Calendar
    CALENDAR_DAYS: int = _env_int("CALENDAR_DAYS", 14)

    # Yearly progression planner
    WEEKS_PER_YEAR: int = 52
    SAFE_PROGRESSION_RATE: float = _env_float("SAFE_PROGRESSION_RATE", 0.10)  # aggressive cap
    RECOMMENDED_PROGRESSION_RATE: float = _env_float("RECOMMENDED_PROGRESSION_RATE", 0.05)
    DELOAD_FREQUENCY: int = _env_int("DELOAD_FREQUENCY", 4)  # every Nth week
    DELOAD_REDUCTION: float = _env_float("DELOAD_REDUCTION", 0.75)
    BUILD_FRACTION: float = _env_float("BUILD_FRACTION", 0.8)  # rest of the year is maintenance
    MIN_WEEKLY_MILEAGE: float = _env_float("MIN_WEEKLY_MILEAGE", 5)
    DEFAULT_TARGET_INCREASE: float = _env_float("DEFAULT_TARGET_INCREASE", 20)  # percent
    SAFE_RANGE_FRACTION: float = 0.10  # min/max = planned -/+ 10%

    # Default goal targets per period
    DEFAULT_GOALS: Dict[str, Dict[str, float]] = {
        "weekly": {
            "mileage": _env_float("GOAL_WEEKLY_MILEAGE", 20),
            "runs": _env_float("GOAL_WEEKLY_RUNS", 4),
            "avgSleep": _env_float("GOAL_WEEKLY_SLEEP", 8),
            "avgReadiness": _env_float("GOAL_WEEKLY_READINESS", 85),
        },
        "monthly": {
            "mileage": _env_float("GOAL_MONTHLY_MILEAGE", 80),
            "runs": _env_float("GOAL_MONTHLY_RUNS", 16),
            "avgSleep": _env_float("GOAL_MONTHLY_SLEEP", 8),
            "avgReadiness": _env_float("GOAL_MONTHLY_READINESS", 85),
        },
    }

    @classmethod
    def get_weeks_to_target(cls) -> int:
        """Number of build weeks before the maintenance phase starts."""
        return int(cls.WEEKS_PER_YEAR * cls.BUILD_FRACTION)

    @classmethod
    def get_progression_rate(cls, progression_type: str) -> float:
        """Weekly increase cap for a progression type."""
        if progression_type == "aggressive":
            return cls.SAFE_PROGRESSION_RATE
        return cls.RECOMMENDED_PROGRESSION_RATE

    @classmethod
    def get_default_goal_target(cls, period: str, metric: str) -> float:
        return cls.DEFAULT_GOALS.get(period, {}).get(metric, 0.0)


config = Config()
