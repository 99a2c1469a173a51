"""Intent classification: entities, sentiment, language and intent scoring."""

from tastychat.nlp.classifier import IntentClassifier, tokenize
from tastychat.nlp.entities import extract_entities
from tastychat.nlp.language import detect_language
from tastychat.nlp.models import (
    AGENT_REQUEST_INTENTS,
    CONTEXT_INTENTS,
    FAQ_INTENTS,
    ISSUE_INTENTS,
    ORDER_INTENTS,
    EntityExtraction,
    IntentResult,
    IntentScore,
    IntentType,
    PrimaryIntent,
    SentimentScore,
    describe_intent,
    requires_immediate_escalation,
)
from tastychat.nlp.sentiment import analyze_sentiment

__all__ = [
    "AGENT_REQUEST_INTENTS",
    "CONTEXT_INTENTS",
    "FAQ_INTENTS",
    "ISSUE_INTENTS",
    "ORDER_INTENTS",
    "EntityExtraction",
    "IntentClassifier",
    "IntentResult",
    "IntentScore",
    "IntentType",
    "PrimaryIntent",
    "SentimentScore",
    "analyze_sentiment",
    "describe_intent",
    "detect_language",
    "extract_entities",
    "requires_immediate_escalation",
    "tokenize",
]
