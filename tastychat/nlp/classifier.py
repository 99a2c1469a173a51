"""Hybrid keyword + embedding intent classifier.

Keyword rules give each intent a base score. When an embedding provider is
configured, the utterance is compared against a handful of exemplar phrases
per intent and a strong match fills part of the remaining headroom:

    score = keyword + (1 - keyword) * semantic_weight * scaled_similarity

so a semantic match can only raise a keyword score, never lower it. Any
embedding failure degrades to keyword-only scoring.
"""

import re
from typing import TYPE_CHECKING

import numpy as np

from tastychat.config.models.engine import ClassifierConfig
from tastychat.nlp.entities import extract_entities
from tastychat.nlp.language import detect_language
from tastychat.nlp.models import (
    CONTEXT_INTENTS,
    IntentResult,
    IntentScore,
    IntentType,
    PrimaryIntent,
)
from tastychat.nlp.sentiment import analyze_sentiment
from tastychat.observability.logging import get_logger
from tastychat.providers.embedding.base import EmbeddingError, EmbeddingProvider

if TYPE_CHECKING:
    from tastychat.conversation.models import ConversationContext

logger = get_logger(__name__)

IT = IntentType

# (pattern, {intent: score}); an intent keeps the best score of all rules that fire
KEYWORD_RULES: tuple[tuple[re.Pattern[str], dict[IntentType, float]], ...] = tuple(
    (re.compile(pattern, re.IGNORECASE), scores)
    for pattern, scores in (
        (
            r"\b(?:hello|hi|hey|bonjour|salut|bonsoir|coucou|hallo|goedemiddag|goedendag)\b",
            {IT.GREETING: 0.95},
        ),
        (r"\b(?:halal|hallal|avs)\b", {IT.FAQ_HALAL: 0.85, IT.FAQ_CERTIFICATIONS: 0.75}),
        (
            r"\b(?:certif|afsca|hygi[eè]ne|hygiene)",
            {IT.FAQ_CERTIFICATIONS: 0.9, IT.FAQ_HALAL: 0.6},
        ),
        (
            r"\b(?:track|tracking|where\s+is\s+my|o[uù]\s+est\s+ma|suivi|suivre|waar\s+is|volgen)",
            {IT.TRACK_ORDER: 0.80, IT.ORDER_STATUS: 0.75, IT.DELIVERY_TIME: 0.70},
        ),
        (
            r"\b(?:how\s+long|when\s+will|combien\s+de\s+temps|quand\s+(?:va|arrive)|"
            r"hoe\s+lang|wanneer\s+komt|eta\b)",
            {IT.DELIVERY_TIME: 0.85},
        ),
        (
            r"\b(?:livr(?:ez|aison|er|ent)|deliver(?:y|ies)?\s+(?:zone|area|fee|cost)|"
            r"do\s+you\s+deliver|bezorg)",
            {IT.FAQ_DELIVERY: 0.85},
        ),
        (
            r"\b(?:complain|plainte|pas\s+content|m[ée]content|klacht|d[ée][çc]u|"
            r"disappointed|inacceptable|unacceptable)",
            {IT.COMPLAINT: 0.80},
        ),
        (r"\b(?:manqu|missing|ontbre|forgot|oubli)", {IT.MISSING_ITEM: 0.90}),
        (
            r"\b(?:wrong\s+(?:order|item)|mauvaise\s+commande|erreur\s+de\s+commande|"
            r"pas\s+(?:ce\s+que\s+j'ai|la\s+bonne)|verkeerde?\s+bestelling)",
            {IT.WRONG_ORDER: 0.90},
        ),
        (
            r"\b(?:cold|froide?s?\b|br[uû]l|burnt|pas\s+cuit|raw\b|stale|rassis|koud|"
            r"quality|qualit[ée]|d[ée]gueu)",
            {IT.QUALITY_ISSUE: 0.85},
        ),
        (r"\b(?:refund|rembours|money\s+back|terugbetal|geld\s+terug)", {IT.REFUND: 0.85}),
        (r"\b(?:order|commander|acheter|bestellen|kopen)\b", {IT.FAQ_ORDERING: 0.75}),
        (
            r"\b(?:hours|horaires?|heures?\s+d'ouverture|ouvert|ferm[ée]|opening|closing|"
            r"closed|openingsuren|openingstijden|gesloten)",
            {IT.FAQ_HOURS: 0.85},
        ),
        (
            r"\b(?:menu|carte|plats?|burgers?|pizzas?|tacos|dishes|gerechten|kaart)\b",
            {IT.FAQ_MENU: 0.80},
        ),
        (
            r"\b(?:ingr[ée]dient|allerg|contain|contient|gluten|lactose|arachide|peanut|"
            r"noix|noten|s[ée]same)",
            {IT.FAQ_INGREDIENTS: 0.85, IT.ALLERGIES: 0.80},
        ),
        (
            r"\b(?:agent|human|humain|real\s+person|une\s+personne|quelqu'un|medewerker|"
            r"iemand)\b",
            {IT.SPEAK_AGENT: 0.9, IT.CONTACT_SUPPORT: 0.75},
        ),
        (r"\b(?:help|aide|aidez|hulp|helpen)", {IT.CONTACT_SUPPORT: 0.6}),
        (
            r"\b(?:account|compte|mot\s+de\s+passe|password|login|connexion|profil|wachtwoord)",
            {IT.ACCOUNT: 0.8},
        ),
        (
            r"\b(?:pr[ée]f[ée]r|preference|vegan|v[ée]g[ée]tarien|vegetari|spicy|[ée]pic[ée]|"
            r"piquant|pikant)",
            {IT.PREFERENCES: 0.6},
        ),
        (
            r"\b(?:weather|m[ée]t[ée]o|politi|football|bitcoin|crypto|joke|blague|weer\b)",
            {IT.OUT_OF_SCOPE: 0.8},
        ),
    )
)

INTENT_EXEMPLARS: dict[IntentType, tuple[str, ...]] = {
    IT.FAQ_HALAL: ("Is your meat halal?", "Est-ce que la viande est halal ?", "Is het vlees halal?"),
    IT.FAQ_CERTIFICATIONS: (
        "Which certifications do you have?",
        "Avez-vous un certificat AFSCA ?",
    ),
    IT.FAQ_HOURS: ("What time do you open?", "Quels sont vos horaires ?", "Wanneer zijn jullie open?"),
    IT.FAQ_ORDERING: ("How can I place an order?", "Comment passer commande ?"),
    IT.FAQ_INGREDIENTS: ("What is in this burger?", "Quels sont les ingrédients ?"),
    IT.FAQ_MENU: ("What is on the menu?", "Qu'est-ce qu'il y a à la carte ?"),
    IT.FAQ_DELIVERY: ("Do you deliver to my area?", "Vous livrez à Liège ?"),
    IT.TRACK_ORDER: ("Where is my order?", "Où est ma commande ?", "Waar is mijn bestelling?"),
    IT.ORDER_STATUS: ("What is the status of my order?", "Quel est le statut de ma commande ?"),
    IT.DELIVERY_TIME: ("How long until my food arrives?", "Dans combien de temps je suis livré ?"),
    IT.COMPLAINT: ("I want to make a complaint", "Je veux faire une réclamation"),
    IT.REFUND: ("I want my money back", "Je veux être remboursé"),
    IT.MISSING_ITEM: ("Something is missing from my bag", "Il manque un article dans mon sac"),
    IT.WRONG_ORDER: ("I received the wrong order", "Ce n'est pas ma commande"),
    IT.QUALITY_ISSUE: ("The food arrived cold", "Le repas est arrivé froid"),
    IT.ACCOUNT: ("I cannot log into my account", "Je n'arrive pas à me connecter"),
    IT.ALLERGIES: ("I am allergic to peanuts", "Je suis allergique au gluten"),
    IT.PREFERENCES: ("Do you have vegetarian options?", "Avez-vous des plats végétariens ?"),
    IT.CONTACT_SUPPORT: ("How do I contact support?", "Comment contacter le service client ?"),
    IT.SPEAK_AGENT: ("I want to talk to a human", "Je veux parler à une personne"),
    IT.GREETING: ("Hello there", "Bonjour", "Hallo"),
    IT.OUT_OF_SCOPE: ("What is the weather today?", "Raconte-moi une blague"),
}

TRACKING_BOOST = 0.15
RESOLVED_COMPLAINT_BOOST = 0.1
CONTEXT_LOOKBACK = 5

_TOKEN = re.compile(r"[\w'-]+")


def tokenize(utterance: str) -> tuple[str, ...]:
    """Lowercase word tokens of an utterance."""
    return tuple(_TOKEN.findall(utterance.lower().strip()))


class IntentClassifier:
    """Classifies one utterance into an IntentResult. Never raises for bad input."""

    def __init__(
        self,
        embedding_provider: EmbeddingProvider | None = None,
        config: ClassifierConfig | None = None,
    ):
        self._config = config or ClassifierConfig()
        self._embeddings = embedding_provider if self._config.use_embeddings else None
        self._exemplar_matrix: np.ndarray | None = None
        self._exemplar_intents: list[IntentType] = []

    async def classify(
        self,
        utterance: str,
        context: "ConversationContext | None" = None,
    ) -> IntentResult:
        tokens = tokenize(utterance)
        entities = extract_entities(utterance, context)
        sentiment = analyze_sentiment(utterance, entities)

        scores = self._keyword_scores(utterance)
        if context is not None:
            self._apply_context_boosts(scores, context)
        if self._embeddings is not None and tokens:
            await self._blend_semantic(utterance, scores)

        floor = self._config.confidence_floor
        ranked = sorted(
            ((intent, score) for intent, score in scores.items() if score > floor),
            key=lambda item: item[1],
            reverse=True,
        )

        if ranked:
            best_intent, best_score = ranked[0]
            primary = PrimaryIntent(intent=best_intent, confidence=best_score, tokens=tokens)
            alternatives = tuple(
                IntentScore(intent=intent, confidence=score) for intent, score in ranked[1:3]
            )
        else:
            primary = PrimaryIntent(intent=IntentType.UNCLEAR, confidence=0.0, tokens=tokens)
            alternatives = ()

        escalation_flag = (
            sentiment.intensity < -0.7
            or sentiment.has_complaint
            or entities.priority == "urgent"
        )

        result = IntentResult(
            primary=primary,
            alternatives=alternatives,
            entities=entities,
            sentiment=sentiment,
            requires_context=primary.intent in CONTEXT_INTENTS,
            escalation_flag=escalation_flag,
            language=detect_language(utterance),
        )
        logger.debug(
            "intent_classified",
            intent=result.intent.value,
            confidence=round(result.confidence, 3),
            escalation_flag=escalation_flag,
            language=result.language,
        )
        return result

    def _keyword_scores(self, utterance: str) -> dict[IntentType, float]:
        scores: dict[IntentType, float] = {}
        for pattern, rule_scores in KEYWORD_RULES:
            if pattern.search(utterance):
                for intent, score in rule_scores.items():
                    scores[intent] = max(scores.get(intent, 0.0), score)
        return scores

    def _apply_context_boosts(
        self,
        scores: dict[IntentType, float],
        context: "ConversationContext",
    ) -> None:
        recent = [t.intent.intent for t in context.turns[-CONTEXT_LOOKBACK:] if t.intent]

        # Boosts only sharpen intents the utterance already hints at
        if IntentType.TRACK_ORDER in recent:
            for intent in (IntentType.TRACK_ORDER, IntentType.ORDER_STATUS):
                if intent in scores:
                    scores[intent] = min(1.0, scores[intent] + TRACKING_BOOST)

        if IntentType.COMPLAINT in context.metadata.resolved_intents:
            for intent in (IntentType.REFUND, IntentType.SPEAK_AGENT):
                if intent in scores:
                    scores[intent] = min(1.0, scores[intent] + RESOLVED_COMPLAINT_BOOST)

    async def _blend_semantic(self, utterance: str, scores: dict[IntentType, float]) -> None:
        assert self._embeddings is not None
        try:
            matrix = await self._exemplars()
            vector = np.asarray(await self._embeddings.embed_single(utterance), dtype=float)
        except EmbeddingError as e:
            logger.warning("embedding_unavailable_keyword_only", error=str(e))
            return

        norm = np.linalg.norm(vector)
        if norm == 0:
            return
        similarities = matrix @ (vector / norm)

        best: dict[IntentType, float] = {}
        for intent, similarity in zip(self._exemplar_intents, similarities, strict=True):
            best[intent] = max(best.get(intent, -1.0), float(similarity))

        min_sim = self._config.min_similarity
        weight = self._config.semantic_weight
        for intent, similarity in best.items():
            if similarity < min_sim:
                continue
            scaled = (similarity - min_sim) / (1.0 - min_sim) if min_sim < 1.0 else 1.0
            keyword = scores.get(intent, 0.0)
            scores[intent] = min(1.0, keyword + (1.0 - keyword) * weight * scaled)

    async def _exemplars(self) -> np.ndarray:
        """Row-normalized exemplar matrix, embedded once and cached."""
        if self._exemplar_matrix is not None:
            return self._exemplar_matrix

        assert self._embeddings is not None
        intents = [intent for intent, phrases in INTENT_EXEMPLARS.items() for _ in phrases]
        phrases = [phrase for group in INTENT_EXEMPLARS.values() for phrase in group]
        response = await self._embeddings.embed(phrases)

        matrix = np.asarray(response.embeddings, dtype=float)
        norms = np.linalg.norm(matrix, axis=1, keepdims=True)
        norms[norms == 0] = 1.0
        self._exemplar_matrix = matrix / norms
        self._exemplar_intents = intents
        logger.info("intent_exemplars_embedded", count=len(phrases))
        return self._exemplar_matrix
