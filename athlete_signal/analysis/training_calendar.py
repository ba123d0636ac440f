"""Per-day recovery and recommendation calendar."""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Sequence

from ..config import config
from .records import DailyRecord, index_by_date, date_range, materialize_range
from .recommendations import Recommendation, RecommendationEngine
from .recovery import RecoveryResult, RecoveryScorer
from .workload import RiskLevel, WorkloadRatioAnalyzer


@dataclass(frozen=True)
class CalendarEntry:
    """One calendar day, evaluated as if it were today."""

    date: date
    distance: float
    recovery: Optional[RecoveryResult]
    risk_level: Optional[RiskLevel]
    recommendation: Optional[Recommendation]

    @property
    def recovery_score(self) -> Optional[float]:
        return self.recovery.score if self.recovery else None

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "distance": self.distance,
            "recovery": self.recovery.to_dict() if self.recovery else None,
            "risk_level": self.risk_level.value if self.risk_level else None,
            "recommendation": self.recommendation.to_dict() if self.recommendation else None,
        }


class CalendarGenerator:
    """Apply recovery scoring and recommendations to every day in a window."""

    def __init__(
        self,
        workload: Optional[WorkloadRatioAnalyzer] = None,
        scorer: Optional[RecoveryScorer] = None,
        engine: Optional[RecommendationEngine] = None,
    ):
        self.workload = workload or WorkloadRatioAnalyzer()
        self.scorer = scorer or RecoveryScorer()
        self.engine = engine or RecommendationEngine()

    def generate(
        self,
        records: Sequence[DailyRecord],
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> List[CalendarEntry]:
        """Build one entry per day in [start, end], inclusive.

        Each day's workload risk only uses data up to and including that day.
        Days without records still get an entry with empty recovery and
        recommendation.

        Args:
            records: Daily records; gaps are filled here
            start: First day (defaults to CALENDAR_DAYS before ``end``)
            end: Last day (defaults to the latest record)
        """
        by_date = index_by_date(records)
        if end is None:
            if not by_date:
                return []
            end = max(by_date)
        if start is None:
            start = end - timedelta(days=config.CALENDAR_DAYS - 1)

        # Look back one chronic window, but never invent days before the first record.
        first_day = min(by_date) if by_date else start
        window_start = start - timedelta(days=self.workload.chronic_days - 1)
        history = materialize_range(by_date.values(), max(window_start, first_day), end)

        entries = []
        for day in date_range(start, end):
            record = by_date.get(day)
            distance = record.distance if record else 0.0
            recovery = self.scorer.score_record(record)

            analysis = self.workload.analyze(history, as_of=day)
            risk_level = analysis.risk_level if analysis.available else None

            recommendation = None
            if recovery is not None:
                recommendation = self.engine.recommend(risk_level, recovery.level, distance)

            entries.append(
                CalendarEntry(
                    date=day,
                    distance=distance,
                    recovery=recovery,
                    risk_level=risk_level,
                    recommendation=recommendation,
                )
            )
        return entries
