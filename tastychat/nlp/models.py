"""Intent classification result models."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Language = Literal["fr", "en", "nl"]
Platform = Literal["ubereats", "deliveroo", "takeaway", "website"]
Priority = Literal["low", "normal", "high", "urgent"]
Polarity = Literal["positive", "neutral", "negative"]


class IntentType(str, Enum):
    """Known customer intents."""

    # FAQ / knowledge
    FAQ_HALAL = "faq_halal"
    FAQ_CERTIFICATIONS = "faq_certifications"
    FAQ_HOURS = "faq_hours"
    FAQ_ORDERING = "faq_ordering"
    FAQ_INGREDIENTS = "faq_ingredients"
    FAQ_MENU = "faq_menu"
    FAQ_DELIVERY = "faq_delivery"

    # Operations
    TRACK_ORDER = "track_order"
    ORDER_STATUS = "order_status"
    DELIVERY_TIME = "delivery_time"

    # Support
    COMPLAINT = "complaint"
    REFUND = "refund"
    MISSING_ITEM = "missing_item"
    WRONG_ORDER = "wrong_order"
    QUALITY_ISSUE = "quality_issue"

    # Account and preferences
    ACCOUNT = "account"
    ALLERGIES = "allergies"
    PREFERENCES = "preferences"

    # Escalation
    CONTACT_SUPPORT = "contact_support"
    SPEAK_AGENT = "speak_agent"

    # Meta
    GREETING = "greeting"
    UNCLEAR = "unclear"
    OUT_OF_SCOPE = "out_of_scope"


FAQ_INTENTS: frozenset[IntentType] = frozenset({
    IntentType.FAQ_HALAL,
    IntentType.FAQ_CERTIFICATIONS,
    IntentType.FAQ_HOURS,
    IntentType.FAQ_ORDERING,
    IntentType.FAQ_INGREDIENTS,
    IntentType.FAQ_MENU,
    IntentType.FAQ_DELIVERY,
})

ISSUE_INTENTS: frozenset[IntentType] = frozenset({
    IntentType.COMPLAINT,
    IntentType.REFUND,
    IntentType.MISSING_ITEM,
    IntentType.WRONG_ORDER,
    IntentType.QUALITY_ISSUE,
})

AGENT_REQUEST_INTENTS: frozenset[IntentType] = frozenset({
    IntentType.CONTACT_SUPPORT,
    IntentType.SPEAK_AGENT,
})

ORDER_INTENTS: frozenset[IntentType] = frozenset({
    IntentType.TRACK_ORDER,
    IntentType.ORDER_STATUS,
    IntentType.DELIVERY_TIME,
})

CONTEXT_INTENTS: frozenset[IntentType] = ORDER_INTENTS | ISSUE_INTENTS

INTENT_DESCRIPTIONS: dict[IntentType, str] = {
    IntentType.FAQ_HALAL: "HALAL certification inquiry",
    IntentType.FAQ_CERTIFICATIONS: "Certifications and credentials",
    IntentType.FAQ_HOURS: "Opening hours",
    IntentType.FAQ_ORDERING: "How to order",
    IntentType.FAQ_INGREDIENTS: "Ingredients and composition",
    IntentType.FAQ_MENU: "Menu items",
    IntentType.FAQ_DELIVERY: "Delivery information",
    IntentType.TRACK_ORDER: "Order tracking",
    IntentType.ORDER_STATUS: "Order status check",
    IntentType.DELIVERY_TIME: "Delivery time estimate",
    IntentType.COMPLAINT: "General complaint",
    IntentType.REFUND: "Refund request",
    IntentType.MISSING_ITEM: "Missing item report",
    IntentType.WRONG_ORDER: "Wrong order received",
    IntentType.QUALITY_ISSUE: "Quality concern",
    IntentType.ACCOUNT: "Account management",
    IntentType.ALLERGIES: "Allergy inquiry",
    IntentType.PREFERENCES: "Dietary preferences",
    IntentType.CONTACT_SUPPORT: "Contact support",
    IntentType.SPEAK_AGENT: "Request human agent",
    IntentType.GREETING: "Greeting",
    IntentType.UNCLEAR: "Unclear intent",
    IntentType.OUT_OF_SCOPE: "Out of scope",
}


class EntityExtraction(BaseModel):
    """Entities pulled from one utterance, back-filled from session metadata."""

    model_config = ConfigDict(frozen=True)

    order_number: str | None = None
    platform: Platform | None = None
    branch: str | None = None
    email: str | None = None
    phone: str | None = None
    allergens: tuple[str, ...] = ()
    priority: Priority = "normal"


class SentimentScore(BaseModel):
    """Lexical sentiment of one utterance."""

    model_config = ConfigDict(frozen=True)

    polarity: Polarity = "neutral"
    intensity: float = Field(default=0.0, ge=-1.0, le=1.0)
    has_complaint: bool = False
    has_urgency: bool = False


class IntentScore(BaseModel):
    """A candidate intent and its confidence."""

    model_config = ConfigDict(frozen=True)

    intent: IntentType
    confidence: float = Field(..., ge=0.0, le=1.0)


class PrimaryIntent(IntentScore):
    """The winning intent plus the utterance tokens it was scored on."""

    tokens: tuple[str, ...] = ()


class IntentResult(BaseModel):
    """Classification of one user utterance. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    primary: PrimaryIntent
    alternatives: tuple[IntentScore, ...] = Field(default=(), max_length=2)
    entities: EntityExtraction = Field(default_factory=EntityExtraction)
    sentiment: SentimentScore = Field(default_factory=SentimentScore)
    requires_context: bool = False
    escalation_flag: bool = False
    language: Language | None = None

    @property
    def intent(self) -> IntentType:
        return self.primary.intent

    @property
    def confidence(self) -> float:
        return self.primary.confidence


def describe_intent(intent: IntentType) -> str:
    """Human-readable label for an intent."""
    return INTENT_DESCRIPTIONS.get(intent, "Unknown intent")


def requires_immediate_escalation(result: IntentResult) -> bool:
    """Whether a turn should go to a human without trying automation first."""
    return (
        result.escalation_flag
        or result.sentiment.intensity < -0.8
        or result.entities.priority == "urgent"
        or result.intent in (IntentType.SPEAK_AGENT, IntentType.REFUND, IntentType.COMPLAINT)
    )
