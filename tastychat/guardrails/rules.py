"""Built-in guardrail rules.

Patterns cover French, English and Dutch phrasing. Rules are data: extend a
validator with `add_rule` instead of editing the defaults.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

from tastychat.guardrails.models import Severity


@dataclass
class RuleContext:
    """Per-call facts available to check functions."""

    session_id: str | None = None
    recent_message_count: int = 0
    max_messages_per_hour: int = 50


@dataclass
class GuardrailRule:
    """An input rule: a pattern, a check function, or both (both must hold)."""

    id: str
    name: str
    severity: Severity
    message: str
    pattern: re.Pattern[str] | None = None
    check: Callable[[str, RuleContext], bool] | None = None
    redact: bool = False
    enabled: bool = True

    def matches(self, text: str, context: RuleContext) -> bool:
        if self.pattern is not None and not self.pattern.search(text):
            return False
        if self.check is not None and not self.check(text, context):
            return False
        return self.pattern is not None or self.check is not None


PROMPT_INJECTION_PATTERN = re.compile(
    r"ignore\s+(?:all\s+)?(?:(?:the|your|previous|prior)\s+)*instructions"
    r"|forget\s+(?:all\s+)?(?:your\s+)?previous"
    r"|system\s+prompt"
    r"|you\s+are\s+now"
    r"|ignore[zr]?\s+(?:toutes\s+)?(?:les\s+|tes\s+|vos\s+)?instructions"
    r"|oublie[zr]?\s+(?:toutes\s+)?(?:les\s+|tes\s+|vos\s+)?instructions"
    r"|tu\s+es\s+maintenant"
    r"|negeer\s+(?:alle\s+)?(?:(?:vorige|eerdere)\s+)?instructies"
    r"|vergeet\s+(?:alle\s+)?(?:vorige|eerdere)",
    re.IGNORECASE,
)

CARD_NUMBER_PATTERN = re.compile(r"\b\d{4}[- ]?\d{4}[- ]?\d{4}[- ]?\d{4}\b")

# US SSN or Belgian national register number (YY.MM.DD-XXX.CC)
NATIONAL_ID_PATTERN = re.compile(r"\b\d{3}-\d{2}-\d{4}\b|\b\d{2}\.\d{2}\.\d{2}-\d{3}\.\d{2}\b")

OFFENSIVE_PATTERN = re.compile(
    r"\b(?:fuck\w*|shit|bitch|asshole|idiot|connard|connasse|putain|merde|encul[ée]|"
    r"salope|klootzak|kut|lul|tering)\b",
    re.IGNORECASE,
)

MEDICAL_PATTERN = re.compile(
    r"\b(?:cure|treat(?:ment)?|diagnos\w*|medical|m[ée]dical\w*|doctor|m[ée]decin|"
    r"prescription|ordonnance|medicine|m[ée]dicament\w*|symptoms?|sympt[oô]mes?|"
    r"dokter|medicijn\w*|behandeling)\b",
    re.IGNORECASE,
)

FOOD_CONTEXT_PATTERN = re.compile(
    r"\b(?:food|menu|dish\w*|meal|plats?|burgers?|pizzas?|repas|nourriture|manger|"
    r"allerg\w*|ingr[ée]dients?|eten|gerecht\w*|maaltijd)\b",
    re.IGNORECASE,
)


def _medical_without_food_context(text: str, _context: RuleContext) -> bool:
    return FOOD_CONTEXT_PATTERN.search(text) is None


def _over_message_limit(_text: str, context: RuleContext) -> bool:
    return context.recent_message_count > context.max_messages_per_hour


def default_input_rules() -> list[GuardrailRule]:
    """Fresh copies of the built-in input rules."""
    return [
        GuardrailRule(
            id="prompt_injection",
            name="Prompt Injection: System Prompt Override",
            severity=Severity.BLOCK,
            message="Je ne peux pas traiter cette demande.",
            pattern=PROMPT_INJECTION_PATTERN,
            redact=True,
        ),
        GuardrailRule(
            id="pii_credit_card",
            name="Credit Card Numbers",
            severity=Severity.ESCALATE,
            message=(
                "Pour votre sécurité, ne partagez jamais vos coordonnées bancaires dans le chat. "
                "Un membre de notre équipe va vous recontacter."
            ),
            pattern=CARD_NUMBER_PATTERN,
            redact=True,
        ),
        GuardrailRule(
            id="pii_national_id",
            name="SSN / National ID",
            severity=Severity.ESCALATE,
            message=(
                "Merci de ne pas partager de numéro d'identification dans le chat. "
                "Un membre de notre équipe va vous recontacter."
            ),
            pattern=NATIONAL_ID_PATTERN,
            redact=True,
        ),
        GuardrailRule(
            id="offensive_language",
            name="Offensive Language",
            severity=Severity.WARNING,
            message="Merci de garder un ton respectueux.",
            pattern=OFFENSIVE_PATTERN,
        ),
        GuardrailRule(
            id="out_of_scope_medical",
            name="Medical Advice Request",
            severity=Severity.ESCALATE,
            message=(
                "Cela ressemble à une question médicale. Veuillez consulter un professionnel "
                "de santé. Pour les allergènes de nos plats, notre équipe peut vous renseigner."
            ),
            pattern=MEDICAL_PATTERN,
            check=_medical_without_food_context,
        ),
        GuardrailRule(
            id="rate_limit_messages",
            name="Rate Limit: Too Many Messages",
            severity=Severity.BLOCK,
            message="Vous avez atteint la limite de messages. Veuillez réessayer plus tard.",
            check=_over_message_limit,
        ),
    ]


HALLUCINATION_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"I\s+can\s+(?:definitely|absolutely)\s+(?:promise|guarantee)\b.*\brefund",
        r"we\s+will\s+(?:definitely|absolutely)\s+deliver\b.*\b(?:hours?|minutes?)",
        r"(?:we|I)\s+guarantee\b.*\b(?:refund|deliver\w*)",
        r"je\s+(?:vous\s+)?(?:garantis|promets)\b.*\b(?:rembours\w*|livr\w*)",
        r"nous\s+(?:vous\s+)?garantissons\b.*\b(?:rembours\w*|livr\w*)",
        r"(?:ik|wij)\s+(?:garanderen?|beloven?)\b.*\b(?:terugbetal\w*|lever\w*|bezorg\w*)",
        r"take\s+(?:aspirin|ibuprofen|paracetamol)",
        r"prenez\s+(?:de\s+l'|du\s+)?(?:aspirine|ibuprof[eè]ne|parac[ée]tamol)",
        r"you\s+should\s+try\s+(?:mcdonald|kfc|subway|burger\s+king)",
        r"your\s+credit\s+card\b.*\bis\b.*\d{4}",
    )
)

REFUSAL_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"refund\b.*\bnot\s+possible",
        r"we\s+cannot\s+(?:help|assist)",
        r"I\s+(?:don't|don’t|do\s+not|cannot|can't)\s+know",
        r"out\s+of\s+(?:my|our)\s+hands",
        r"je\s+ne\s+(?:peux|sais)\s+pas\s+(?:vous\s+)?(?:aider|r[ée]pondre)",
        r"nous\s+ne\s+pouvons\s+pas\s+(?:vous\s+)?(?:aider|rembourser)",
        r"rembours\w*\b.*\b(?:impossible|pas\s+possible)",
        r"ik\s+kan\s+(?:u|je)\s+niet\s+helpen",
    )
)

HALLUCINATION_DISCLAIMER = (
    "[Cette information ne peut pas être confirmée. Notre équipe support vous répondra.]"
)
