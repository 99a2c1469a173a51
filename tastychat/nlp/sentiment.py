"""Keyword sentiment heuristics.

Kept lexical so results are deterministic. Swap for a model behind
`analyze_sentiment` if needed.
"""

import re

from tastychat.nlp.models import EntityExtraction, Polarity, SentimentScore

NEGATIVE_PATTERN = re.compile(
    r"\b(?:wrong|missing|bad|terrible|never|refuse\w*|angry|rude|unhappy|disappointed|awful|"
    r"horrible|worst|hate|disgusting|cold|mauvaise?s?|nul(?:le)?|d[ée]ce?v\w*|d[ée]çue?s?|"
    r"inacceptable|froide?s?|manque|jamais|f[âa]ch[ée]e?|d[ée]gueulasse|slecht|"
    r"verschrikkelijk|teleurgesteld|boos|koud|nooit)\b",
    re.IGNORECASE,
)
POSITIVE_PATTERN = re.compile(
    r"\b(?:great|love|excellent|thanks?|thank\s+you|appreciated|happy|amazing|perfect|"
    r"wonderful|fantastic|delicious|best|merci|super|g[ée]nial|parfait|d[ée]licieux|top|"
    r"bedankt|dank\s+je|lekker|geweldig)\b",
    re.IGNORECASE,
)
URGENCY_PATTERN = re.compile(
    r"\b(?:urgent|asap|now|immediately|waiting|stuck|help|please|emergency|vite|attends|"
    r"bloqu[ée]e?|maintenant|snel|wacht|nu)\b",
    re.IGNORECASE,
)
COMPLAINT_PATTERN = re.compile(
    r"\b(?:problem|issue|complaint|refund|money\s*back|cancel|disappointed|unacceptable|"
    r"plainte|probl[eè]me|rembours\w*|inacceptable|annuler|klacht|probleem|terugbetal\w*)\b",
    re.IGNORECASE,
)

NEGATIVE_WITH_COMPLAINT = -0.9
NEGATIVE = -0.6
POSITIVE = 0.7
STACKED_NEGATIVE_PENALTY = 0.2


def analyze_sentiment(text: str, entities: EntityExtraction) -> SentimentScore:
    """Score polarity, intensity, complaint and urgency for one utterance.

    Intensity is pushed further negative when two or more negative markers
    appear together.
    """
    negative_hits = NEGATIVE_PATTERN.findall(text)
    has_positive = POSITIVE_PATTERN.search(text) is not None
    has_urgency = URGENCY_PATTERN.search(text) is not None
    has_complaint = COMPLAINT_PATTERN.search(text) is not None or entities.priority in (
        "high",
        "urgent",
    )

    polarity: Polarity = "neutral"
    intensity = 0.0
    if negative_hits and has_complaint:
        polarity, intensity = "negative", NEGATIVE_WITH_COMPLAINT
    elif negative_hits:
        polarity, intensity = "negative", NEGATIVE
    elif has_positive:
        polarity, intensity = "positive", POSITIVE

    if len(negative_hits) >= 2:
        intensity = max(-1.0, intensity - STACKED_NEGATIVE_PENALTY)

    return SentimentScore(
        polarity=polarity,
        intensity=intensity,
        has_complaint=has_complaint,
        has_urgency=has_urgency,
    )
