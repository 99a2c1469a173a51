"""Proactive help models."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from tastychat.nlp.models import Priority


class OpportunityType(str, Enum):
    FAQ_FATIGUE = "faq_fatigue"
    USER_CONFUSION = "user_confusion"
    DELIVERY_ANXIETY = "delivery_anxiety"
    FRUSTRATED_USER = "frustrated_user"
    POTENTIAL_ORDER = "potential_order"
    INACTIVITY_CHECK = "inactivity_check"
    REPETITIVE_QUESTION = "repetitive_question"


ProactiveAction = Literal[
    "offer_escalation",
    "offer_tracking_notification",
    "escalate_immediately",
    "suggest_faq",
    "suggest_order",
]

PRIORITY_WEIGHT: dict[str, int] = {"urgent": 4, "high": 3, "normal": 2, "low": 1}


class ProactiveOpportunity(BaseModel):
    """A suggestion the assistant may surface without being asked."""

    model_config = ConfigDict(frozen=True)

    type: OpportunityType
    confidence: float = Field(..., ge=0.0, le=1.0)
    message: str = Field(..., description="Default French message")
    action: ProactiveAction
    priority: Priority

    @property
    def rank(self) -> tuple[int, float]:
        return PRIORITY_WEIGHT[self.priority], self.confidence
