"""Marker-word language guess for fr/en/nl."""

import re

from tastychat.nlp.models import Language

_MARKERS: dict[Language, frozenset[str]] = {
    "fr": frozenset({
        "je", "vous", "est-ce", "est", "le", "la", "les", "des", "une", "pour", "avec",
        "ma", "mon", "commande", "bonjour", "merci", "manque", "où", "quand", "quel",
        "quelle", "pas", "c'est", "j'ai", "il", "elle", "sont", "avez",
    }),
    "en": frozenset({
        "the", "is", "my", "order", "where", "hello", "thanks", "please", "what", "when",
        "you", "i", "i'm", "it", "do", "does", "can", "have", "with", "are",
    }),
    "nl": frozenset({
        "de", "het", "een", "ik", "mijn", "bestelling", "waar", "hallo", "bedankt",
        "wanneer", "niet", "jullie", "hebben", "is", "wat", "kan", "zijn", "met",
    }),
}

_WORD = re.compile(r"[\w'-]+")


def detect_language(text: str) -> Language | None:
    """Most likely language, or None when no marker word wins outright."""
    words = _WORD.findall(text.lower())
    counts = {lang: sum(1 for w in words if w in markers) for lang, markers in _MARKERS.items()}
    best = max(counts.values(), default=0)
    if best == 0:
        return None
    winners = [lang for lang, count in counts.items() if count == best]
    return winners[0] if len(winners) == 1 else None
