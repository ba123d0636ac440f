"""Daily training recommendation from workload risk and recovery."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from .recovery import RecoveryLevel
from .workload import RiskLevel


class TrainingIntensity(Enum):
    """Training intensity vocabulary used for color coding."""

    REST = "rest"
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"


INTENSITY_COLORS = {
    TrainingIntensity.REST: "#e74c3c",
    TrainingIntensity.EASY: "#e67e22",
    TrainingIntensity.MODERATE: "#f39c12",
    TrainingIntensity.HARD: "#27ae60",
}


class TrainingAction(Enum):
    """What to do with mileage."""

    RECOVER = "recover"
    BACK_OFF = "back_off"
    MAINTAIN = "maintain"
    BUILD = "build"


@dataclass(frozen=True)
class Recommendation:
    """Training verdict for one day."""

    intensity: TrainingIntensity
    action: TrainingAction
    text: str

    @property
    def color(self) -> str:
        return INTENSITY_COLORS[self.intensity]

    def to_dict(self) -> dict:
        return {
            "intensity": self.intensity.value,
            "action": self.action.value,
            "text": self.text,
            "color": self.color,
        }


# (risk level, recovery level) -> (intensity, action). A missing risk level
# (not enough history) is keyed as None and falls back on recovery alone.
_PRIORITY_TABLE: Dict[Tuple[Optional[RiskLevel], RecoveryLevel], Tuple[TrainingIntensity, TrainingAction]] = {
    (RiskLevel.LOW, RecoveryLevel.EXCELLENT): (TrainingIntensity.HARD, TrainingAction.BUILD),
    (RiskLevel.LOW, RecoveryLevel.GOOD): (TrainingIntensity.MODERATE, TrainingAction.BUILD),
    (RiskLevel.LOW, RecoveryLevel.FAIR): (TrainingIntensity.EASY, TrainingAction.BUILD),
    (RiskLevel.OPTIMAL, RecoveryLevel.EXCELLENT): (TrainingIntensity.HARD, TrainingAction.MAINTAIN),
    (RiskLevel.OPTIMAL, RecoveryLevel.GOOD): (TrainingIntensity.MODERATE, TrainingAction.MAINTAIN),
    (RiskLevel.OPTIMAL, RecoveryLevel.FAIR): (TrainingIntensity.EASY, TrainingAction.MAINTAIN),
    (RiskLevel.MODERATE, RecoveryLevel.EXCELLENT): (TrainingIntensity.MODERATE, TrainingAction.MAINTAIN),
    (RiskLevel.MODERATE, RecoveryLevel.GOOD): (TrainingIntensity.EASY, TrainingAction.MAINTAIN),
    (RiskLevel.MODERATE, RecoveryLevel.FAIR): (TrainingIntensity.EASY, TrainingAction.BACK_OFF),
    (RiskLevel.HIGH, RecoveryLevel.EXCELLENT): (TrainingIntensity.EASY, TrainingAction.BACK_OFF),
    (RiskLevel.HIGH, RecoveryLevel.GOOD): (TrainingIntensity.EASY, TrainingAction.BACK_OFF),
    (RiskLevel.HIGH, RecoveryLevel.FAIR): (TrainingIntensity.REST, TrainingAction.BACK_OFF),
    (None, RecoveryLevel.EXCELLENT): (TrainingIntensity.HARD, TrainingAction.MAINTAIN),
    (None, RecoveryLevel.GOOD): (TrainingIntensity.MODERATE, TrainingAction.MAINTAIN),
    (None, RecoveryLevel.FAIR): (TrainingIntensity.EASY, TrainingAction.MAINTAIN),
}

_INTENSITY_TEXT = {
    TrainingIntensity.REST: "Take a rest day or a short walk",
    TrainingIntensity.EASY: "Keep it to an easy conversational run",
    TrainingIntensity.MODERATE: "A steady aerobic run is a good fit",
    TrainingIntensity.HARD: "You're primed for a quality workout or long run",
}

_ACTION_TEXT = {
    TrainingAction.RECOVER: "recovery is poor, so let your body catch up.",
    TrainingAction.BACK_OFF: "workload is spiking, so back off mileage.",
    TrainingAction.MAINTAIN: "hold your current mileage.",
    TrainingAction.BUILD: "there is room to build mileage.",
}


class RecommendationEngine:
    """Combine workload risk and recovery into a daily training verdict."""

    def recommend(
        self,
        risk_level: Optional[RiskLevel],
        recovery_level: Optional[RecoveryLevel],
        distance_today: float = 0.0,
    ) -> Optional[Recommendation]:
        """Pick today's training intensity.

        Poor recovery always means rest. Otherwise the workload risk decides
        whether to build, maintain or back off.

        Args:
            risk_level: Workload risk, None when there is not enough history
            recovery_level: Today's recovery level, None when no data
            distance_today: Miles already run today

        Returns:
            Recommendation, or None when recovery data is missing
        """
        if recovery_level is None:
            return None

        if recovery_level == RecoveryLevel.POOR:
            intensity, action = TrainingIntensity.REST, TrainingAction.RECOVER
        else:
            intensity, action = _PRIORITY_TABLE[(risk_level, recovery_level)]

        text = f"{_INTENSITY_TEXT[intensity]}; {_ACTION_TEXT[action]}"
        if distance_today > 0:
            text = f"Already ran {distance_today:.1f} mi today. {text}"

        return Recommendation(intensity=intensity, action=action, text=text)
