"""Acute:Chronic Workload Ratio (ACWR) analysis on daily mileage."""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Optional, Sequence

import numpy as np

from ..config import config
from .records import DailyRecord, ensure_sorted, records_between, records_up_to

logger = logging.getLogger(__name__)


class RiskLevel(Enum):
    """Injury-risk bands of the workload ratio."""

    LOW = "low"  # undertrained
    OPTIMAL = "optimal"
    MODERATE = "moderate"
    HIGH = "high"


RISK_RECOMMENDATIONS = {
    RiskLevel.LOW: "Training load is below your baseline. You can safely build mileage.",
    RiskLevel.OPTIMAL: "Training load is in the optimal range. Maintain your current progression.",
    RiskLevel.MODERATE: "Training load is climbing quickly. Hold mileage steady this week.",
    RiskLevel.HIGH: "Training load spike detected. Back off mileage to reduce injury risk.",
}

INSUFFICIENT_HISTORY = "insufficient_history"
NO_CHRONIC_LOAD = "no_chronic_load"


@dataclass(frozen=True)
class WorkloadAnalysis:
    """Result of a workload ratio analysis.

    When ``available`` is False the numeric fields that could not be derived
    are ``None`` and ``reason`` says why.
    """

    available: bool
    as_of: Optional[date]
    days_of_history: int
    acute_avg: Optional[float] = None
    chronic_avg: Optional[float] = None
    ratio: Optional[float] = None
    risk_level: Optional[RiskLevel] = None
    recommendation: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "available": self.available,
            "as_of": self.as_of.isoformat() if self.as_of else None,
            "days_of_history": self.days_of_history,
            "acute_avg": self.acute_avg,
            "chronic_avg": self.chronic_avg,
            "ratio": self.ratio,
            "risk_level": self.risk_level.value if self.risk_level else None,
            "recommendation": self.recommendation,
            "reason": self.reason,
        }


def classify_risk(ratio: float) -> RiskLevel:
    """Map a workload ratio to its risk band.

    < 0.8 low, [0.8, 1.3] optimal, (1.3, 1.5] moderate, > 1.5 high.
    """
    if ratio < config.ACWR_LOW:
        return RiskLevel.LOW
    if ratio <= config.ACWR_OPTIMAL_MAX:
        return RiskLevel.OPTIMAL
    if ratio <= config.ACWR_MODERATE_MAX:
        return RiskLevel.MODERATE
    return RiskLevel.HIGH


class WorkloadRatioAnalyzer:
    """Compute acute/chronic mileage averages and the resulting injury risk."""

    def __init__(
        self,
        acute_days: Optional[int] = None,
        chronic_days: Optional[int] = None,
        min_history_days: Optional[int] = None,
    ):
        self.acute_days = acute_days or config.ACUTE_WINDOW_DAYS
        self.chronic_days = chronic_days or config.CHRONIC_WINDOW_DAYS
        self.min_history_days = min_history_days or config.MIN_HISTORY_DAYS

    def analyze(
        self, records: Sequence[DailyRecord], as_of: Optional[date] = None
    ) -> WorkloadAnalysis:
        """Analyze workload as of a date (defaults to the latest record).

        Only records on or before ``as_of`` are considered. Each window mean
        runs over the records that fall inside it, so a gap-filled sequence
        averages over calendar days.

        Args:
            records: Date-sorted, gap-filled daily records
            as_of: Last day of both windows

        Returns:
            WorkloadAnalysis, unavailable with fewer than seven days of
            history or when the chronic window holds no mileage

        Raises:
            ValueError: If records are out of order or repeat a date
        """
        ensure_sorted(records)
        if as_of is None:
            as_of = records[-1].date if records else None
        history = records_up_to(records, as_of) if as_of else []

        if len(history) < self.min_history_days:
            logger.warning(
                f"Workload analysis needs {self.min_history_days} days of history, "
                f"got {len(history)}"
            )
            return WorkloadAnalysis(
                available=False,
                as_of=as_of,
                days_of_history=len(history),
                reason=INSUFFICIENT_HISTORY,
            )

        acute = self._window(history, as_of, self.acute_days)
        chronic = self._window(history, as_of, self.chronic_days)

        # as_of past the last record leaves the acute window without data
        if not acute:
            logger.warning(f"No daily records in the {self.acute_days} days ending {as_of}")
            return WorkloadAnalysis(
                available=False,
                as_of=as_of,
                days_of_history=len(history),
                reason=INSUFFICIENT_HISTORY,
            )

        acute_avg = float(np.mean([record.distance for record in acute]))
        chronic_avg = float(np.mean([record.distance for record in chronic]))

        if chronic_avg <= 0:
            return WorkloadAnalysis(
                available=False,
                as_of=as_of,
                days_of_history=len(history),
                acute_avg=acute_avg,
                chronic_avg=chronic_avg,
                reason=NO_CHRONIC_LOAD,
            )

        ratio = acute_avg / chronic_avg
        if not np.isfinite(ratio):
            return WorkloadAnalysis(
                available=False,
                as_of=as_of,
                days_of_history=len(history),
                acute_avg=acute_avg,
                chronic_avg=chronic_avg,
                reason=INSUFFICIENT_HISTORY,
            )
        risk_level = classify_risk(ratio)

        return WorkloadAnalysis(
            available=True,
            as_of=as_of,
            days_of_history=len(history),
            acute_avg=acute_avg,
            chronic_avg=chronic_avg,
            ratio=ratio,
            risk_level=risk_level,
            recommendation=RISK_RECOMMENDATIONS[risk_level],
        )

    @staticmethod
    def _window(history: Sequence[DailyRecord], as_of: date, days: int):
        start = as_of - timedelta(days=days - 1)
        return records_between(history, start, as_of)
