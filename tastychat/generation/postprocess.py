"""Cleanup and sanity checks for model-written replies."""

import re
from dataclasses import dataclass, field

MAX_RESPONSE_CHARS = 500
TRUNCATE_TO = 480
MIN_RESPONSE_CHARS = 10

_AI_DISCLAIMERS = [
    re.compile(r"As an AI[^.]*\.", re.IGNORECASE),
    re.compile(r"I'm an AI[^.]*\.", re.IGNORECASE),
    re.compile(r"I am an artificial intelligence[^.]*\.", re.IGNORECASE),
]
_LEADING_GREETING = re.compile(r"^(Hello|Hi|Bonjour|Salut)[,!]?\s*", re.IGNORECASE)
_SOURCE_TAG = re.compile(r"\[source:([^\]]+)\]")

PLACEHOLDER_PATTERNS = [
    re.compile(r"\[PLACEHOLDER\]", re.IGNORECASE),
    re.compile(r"\[INSERT.*\]", re.IGNORECASE),
    re.compile(r"\[TODO\]", re.IGNORECASE),
    re.compile(r"lorem ipsum", re.IGNORECASE),
]


@dataclass
class CleanedResponse:
    text: str
    sources: list[str] = field(default_factory=list)


def clean_response(text: str, turn_count: int, max_chars: int = MAX_RESPONSE_CHARS) -> CleanedResponse:
    """Strip disclaimers, drop a mid-conversation greeting, pull out source tags, truncate."""
    for pattern in _AI_DISCLAIMERS:
        text = pattern.sub("", text)
    text = text.strip()

    if turn_count > 2:
        text = _LEADING_GREETING.sub("", text)

    sources = [s.strip() for s in _SOURCE_TAG.findall(text)]
    text = _SOURCE_TAG.sub("", text)
    text = re.sub(r"[ \t]{2,}", " ", text).strip()

    if len(text) > max_chars:
        text = text[: max_chars - (MAX_RESPONSE_CHARS - TRUNCATE_TO)] + "..."
    return CleanedResponse(text=text, sources=sources)


def response_issues(text: str) -> list[str]:
    """Reasons a reply must not be shown. Empty means usable."""
    issues: list[str] = []
    if not text.strip():
        issues.append("empty")
    elif len(text.strip()) < MIN_RESPONSE_CHARS:
        issues.append("too_short")
    for pattern in PLACEHOLDER_PATTERNS:
        if pattern.search(text):
            issues.append(f"placeholder:{pattern.pattern}")
    return issues
