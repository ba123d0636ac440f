"""Recovery scoring from wearable sleep and readiness scores."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..config import config
from .records import DailyRecord


class RecoveryLevel(Enum):
    """Qualitative recovery levels."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


LEVEL_COLORS = {
    RecoveryLevel.EXCELLENT: "#27ae60",
    RecoveryLevel.GOOD: "#f39c12",
    RecoveryLevel.FAIR: "#e67e22",
    RecoveryLevel.POOR: "#e74c3c",
}


@dataclass(frozen=True)
class RecoveryResult:
    """Combined recovery score for one day."""

    score: float
    level: RecoveryLevel
    source: str  # "combined", "sleep" or "readiness"

    @property
    def color(self) -> str:
        return LEVEL_COLORS[self.level]

    def to_dict(self) -> dict:
        return {"score": self.score, "level": self.level.value, "source": self.source}


class RecoveryScorer:
    """Combine sleep and readiness scores into one recovery score."""

    @staticmethod
    def classify(score: float) -> RecoveryLevel:
        """Map a 0-100 score to a recovery level (85 / 70 / 55 edges)."""
        if score >= config.RECOVERY_EXCELLENT:
            return RecoveryLevel.EXCELLENT
        if score >= config.RECOVERY_GOOD:
            return RecoveryLevel.GOOD
        if score >= config.RECOVERY_FAIR:
            return RecoveryLevel.FAIR
        return RecoveryLevel.POOR

    @staticmethod
    def is_crown(score: Optional[float]) -> bool:
        """Whether a score earns a crown badge."""
        return score is not None and score >= config.CROWN_THRESHOLD

    def score(
        self, sleep_score: Optional[float], readiness_score: Optional[float]
    ) -> Optional[RecoveryResult]:
        """Score recovery from whichever inputs are present.

        Returns:
            RecoveryResult, or None when neither score is available. A missing
            day is "no data", never a zero score.
        """
        if sleep_score is not None and readiness_score is not None:
            value = (sleep_score + readiness_score) / 2
            source = "combined"
        elif sleep_score is not None:
            value = sleep_score
            source = "sleep"
        elif readiness_score is not None:
            value = readiness_score
            source = "readiness"
        else:
            return None

        value = float(value)
        return RecoveryResult(score=value, level=self.classify(value), source=source)

    def score_record(self, record: Optional[DailyRecord]) -> Optional[RecoveryResult]:
        if record is None or not record.has_recovery_data:
            return None
        return self.score(record.sleep_score, record.readiness_score)
