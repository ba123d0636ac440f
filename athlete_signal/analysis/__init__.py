"""Analysis module for training load, recovery and periodization."""

from .records import DailyRecord, materialize_range, summarize_period, week_buckets
from .workload import RiskLevel, WorkloadAnalysis, WorkloadRatioAnalyzer
from .recovery import RecoveryLevel, RecoveryResult, RecoveryScorer
from .recommendations import Recommendation, RecommendationEngine, TrainingIntensity
from .streaks import StreakState, StreakTracker
from .training_calendar import CalendarEntry, CalendarGenerator
from .goals import EngineState, GoalDefinition, GoalTracker
from .yearly_planner import ProgressionType, WeekPlan, YearlyPlan, YearlyProgressionPlanner

__all__ = [
    "DailyRecord",
    "materialize_range",
    "summarize_period",
    "week_buckets",
    "RiskLevel",
    "WorkloadAnalysis",
    "WorkloadRatioAnalyzer",
    "RecoveryLevel",
    "RecoveryResult",
    "RecoveryScorer",
    "Recommendation",
    "RecommendationEngine",
    "TrainingIntensity",
    "StreakState",
    "StreakTracker",
    "CalendarEntry",
    "CalendarGenerator",
    "EngineState",
    "GoalDefinition",
    "GoalTracker",
    "ProgressionType",
    "WeekPlan",
    "YearlyPlan",
    "YearlyProgressionPlanner",
]
