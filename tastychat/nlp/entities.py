"""Regex entity extraction for customer utterances (fr/en/nl)."""

import re
from typing import TYPE_CHECKING

from tastychat.nlp.models import EntityExtraction, Platform, Priority

if TYPE_CHECKING:
    from tastychat.conversation.models import ConversationContext

ORDER_NUMBER_PATTERN = re.compile(
    r"\b(?:order|commande|bestelling|tracking|suivi)\b\s*"
    r"(?:n[°o]\.?|num[ée]ro|number|nummer|nr\.?)?\s*#?\s*(\d{4,12})\b",
    re.IGNORECASE,
)
HASH_ORDER_PATTERN = re.compile(r"#\s*(\d{4,12})\b")

PLATFORM_PATTERNS: tuple[tuple[re.Pattern[str], Platform], ...] = (
    (re.compile(r"uber\s*eats?|ubereats", re.IGNORECASE), "ubereats"),
    (re.compile(r"deliveroo", re.IGNORECASE), "deliveroo"),
    (re.compile(r"takeaway|just\s*eat", re.IGNORECASE), "takeaway"),
    (re.compile(r"\b(?:site\s*web|website|tastyfood\.be)\b", re.IGNORECASE), "website"),
)

BRANCH_PATTERNS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\bangleur\b", re.IGNORECASE), "angleur"),
    (re.compile(r"\bsaint[\s-]gilles\b", re.IGNORECASE), "saint-gilles"),
    (re.compile(r"\bwandre\b", re.IGNORECASE), "wandre"),
    (re.compile(r"\bseraing\b", re.IGNORECASE), "seraing"),
    (re.compile(r"\bjemeppe\b", re.IGNORECASE), "jemeppe"),
)

EMAIL_PATTERN = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+")
PHONE_PATTERN = re.compile(r"(?<![\d#])\+?\d{2,3}[\s.-]?\d{2,3}[\s.-]?\d{2,3}[\s.-]?\d{2,3}(?!\d)")

# canonical allergen -> surface forms
ALLERGEN_PATTERNS: dict[str, re.Pattern[str]] = {
    name: re.compile(rf"\b(?:{forms})\b", re.IGNORECASE)
    for name, forms in {
        "peanut": r"peanuts?|arachides?|cacahu[eè]tes?|pinda'?s?",
        "nut": r"nuts?|noix|noten",
        "gluten": r"gluten",
        "dairy": r"dairy|lait|laitiers?|zuivel|melk",
        "soy": r"soy|soja",
        "shellfish": r"shellfish|crustac[ée]s?|schaaldieren",
        "sesame": r"sesame|s[ée]same|sesam",
        "lactose": r"lactose",
        "egg": r"eggs?|[oœ]eufs?|eieren",
        "wheat": r"wheat|bl[ée]|tarwe",
        "fish": r"fish|poissons?|vis",
    }.items()
}

URGENT_PATTERN = re.compile(
    r"\b(?:urgent|urgence|asap|immediately|imm[ée]diatement|emergency|dringend|spoed)\b",
    re.IGNORECASE,
)
HIGH_PRIORITY_PATTERN = re.compile(
    r"\b(?:problem|issue|wrong|missing|complaint|manque|manquant\w*|probl[eè]me|erreur|"
    r"plainte|verkeerd|ontbreekt|probleem|klacht)\b",
    re.IGNORECASE,
)
LOW_PRIORITY_PATTERN = re.compile(
    r"\b(?:question|wondering|curious|je\s+me\s+demande|vraag|vraagje)\b",
    re.IGNORECASE,
)


def _first_group(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    return match.group(1) if match else None


def detect_priority(text: str) -> Priority:
    """Priority from urgency and problem keywords."""
    if URGENT_PATTERN.search(text):
        return "urgent"
    if HIGH_PRIORITY_PATTERN.search(text):
        return "high"
    if LOW_PRIORITY_PATTERN.search(text):
        return "low"
    return "normal"


def extract_entities(
    text: str,
    context: "ConversationContext | None" = None,
) -> EntityExtraction:
    """Extract order number, platform, branch, contact details and allergens.

    Branch and platform not mentioned in the utterance are inherited from
    the session metadata.
    """
    order_number = _first_group(ORDER_NUMBER_PATTERN, text) or _first_group(
        HASH_ORDER_PATTERN, text
    )

    platform: Platform | None = next(
        (name for pattern, name in PLATFORM_PATTERNS if pattern.search(text)), None
    )
    branch = next((name for pattern, name in BRANCH_PATTERNS if pattern.search(text)), None)

    email_match = EMAIL_PATTERN.search(text)
    email = email_match.group(0) if email_match else None

    phone = None
    for match in PHONE_PATTERN.finditer(text):
        digits = re.sub(r"\D", "", match.group(0))
        if digits != order_number:
            phone = match.group(0).strip()
            break

    allergens = tuple(name for name, pattern in ALLERGEN_PATTERNS.items() if pattern.search(text))

    if context is not None:
        branch = branch or context.metadata.current_branch
        platform = platform or context.metadata.current_platform

    return EntityExtraction(
        order_number=order_number,
        platform=platform,
        branch=branch,
        email=email,
        phone=phone,
        allergens=allergens,
        priority=detect_priority(text),
    )
