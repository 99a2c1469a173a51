"""Tests for the hybrid intent classifier."""

import pytest

from tastychat.config.models.engine import ClassifierConfig
from tastychat.conversation.models import ConversationContext, Turn
from tastychat.nlp.classifier import IntentClassifier, tokenize
from tastychat.nlp.models import IntentResult, IntentType, PrimaryIntent
from tastychat.providers.embedding import MockEmbeddingProvider


@pytest.fixture
def classifier() -> IntentClassifier:
    """Keyword-only classifier."""
    return IntentClassifier()


class TestTokenize:
    def test_lowercases_and_splits(self) -> None:
        assert tokenize("  Où est MA commande? ") == ("où", "est", "ma", "commande")

    def test_empty(self) -> None:
        assert tokenize("") == ()


class TestKeywordClassification:
    """Tests for keyword-only scoring."""

    @pytest.mark.asyncio
    async def test_greeting(self, classifier: IntentClassifier) -> None:
        result = await classifier.classify("Bonjour")

        assert result.intent == IntentType.GREETING
        assert result.confidence == pytest.approx(0.95)
        assert result.language == "fr"
        assert result.escalation_flag is False

    @pytest.mark.asyncio
    async def test_halal_question_with_alternative(self, classifier: IntentClassifier) -> None:
        result = await classifier.classify("Est-ce que la viande est halal ?")

        assert result.intent == IntentType.FAQ_HALAL
        assert result.confidence == pytest.approx(0.85)
        assert result.alternatives[0].intent == IntentType.FAQ_CERTIFICATIONS
        assert result.requires_context is False
        assert result.escalation_flag is False

    @pytest.mark.asyncio
    async def test_missing_item_is_flagged_for_escalation(
        self, classifier: IntentClassifier
    ) -> None:
        result = await classifier.classify("Il manque un article dans ma commande 12345")

        assert result.intent == IntentType.MISSING_ITEM
        assert result.entities.order_number == "12345"
        assert result.entities.priority == "high"
        assert result.sentiment.has_complaint is True
        assert result.requires_context is True
        assert result.escalation_flag is True

    @pytest.mark.asyncio
    async def test_nothing_matches_is_unclear(self, classifier: IntentClassifier) -> None:
        result = await classifier.classify("xyz qqq")

        assert result.intent == IntentType.UNCLEAR
        assert result.confidence == 0.0
        assert result.alternatives == ()

    @pytest.mark.asyncio
    async def test_empty_input_never_raises(self, classifier: IntentClassifier) -> None:
        result = await classifier.classify("")

        assert result.intent == IntentType.UNCLEAR
        assert result.primary.tokens == ()

    @pytest.mark.asyncio
    async def test_alternatives_capped_at_two(self, classifier: IntentClassifier) -> None:
        result = await classifier.classify("where is my order, track it please")

        assert result.intent == IntentType.TRACK_ORDER
        assert len(result.alternatives) <= 2

    @pytest.mark.asyncio
    async def test_urgent_message_sets_escalation(self, classifier: IntentClassifier) -> None:
        result = await classifier.classify("C'est urgent, je veux parler à un agent")

        assert result.entities.priority == "urgent"
        assert result.escalation_flag is True
        assert result.intent == IntentType.SPEAK_AGENT


class TestContextBoosts:
    """Tests for context-aware score adjustments."""

    @staticmethod
    def _context_with(intent: IntentType) -> ConversationContext:
        turn = Turn(
            role="user",
            content="earlier",
            intent=IntentResult(primary=PrimaryIntent(intent=intent, confidence=0.8)),
        )
        return ConversationContext(session_id="s", turns=[turn])

    @pytest.mark.asyncio
    async def test_recent_tracking_boosts_tracking(self, classifier: IntentClassifier) -> None:
        context = self._context_with(IntentType.TRACK_ORDER)

        result = await classifier.classify("where is my order", context)

        assert result.intent == IntentType.TRACK_ORDER
        assert result.confidence == pytest.approx(0.95)

    @pytest.mark.asyncio
    async def test_boost_does_not_create_new_intents(self, classifier: IntentClassifier) -> None:
        context = self._context_with(IntentType.TRACK_ORDER)

        result = await classifier.classify("Bonjour", context)

        assert result.intent == IntentType.GREETING
        assert IntentType.TRACK_ORDER not in {a.intent for a in result.alternatives}

    @pytest.mark.asyncio
    async def test_resolved_complaint_boosts_refund(self, classifier: IntentClassifier) -> None:
        context = ConversationContext(session_id="s")
        context.metadata.resolved_intents.add(IntentType.COMPLAINT)

        result = await classifier.classify("I want a refund", context)

        assert result.intent == IntentType.REFUND
        assert result.confidence == pytest.approx(0.95)

    @pytest.mark.asyncio
    async def test_branch_inherited_from_session(self, classifier: IntentClassifier) -> None:
        context = ConversationContext(session_id="s")
        context.metadata.current_branch = "wandre"

        result = await classifier.classify("What are your opening hours?", context)

        assert result.intent == IntentType.FAQ_HOURS
        assert result.entities.branch == "wandre"


class TestSemanticBlend:
    """Tests for embedding similarity blending."""

    @pytest.mark.asyncio
    async def test_exemplar_match_lifts_unmatched_intent(self) -> None:
        target = [1.0] + [0.0] * 383
        provider = MockEmbeddingProvider(
            fixed={"yo can I grab food": target, "How can I place an order?": target}
        )
        classifier = IntentClassifier(provider, ClassifierConfig(semantic_weight=0.5, min_similarity=0.5))

        result = await classifier.classify("yo can I grab food")

        assert result.intent == IntentType.FAQ_ORDERING
        assert result.confidence == pytest.approx(0.5)

    @pytest.mark.asyncio
    async def test_exemplars_embedded_once(self) -> None:
        provider = MockEmbeddingProvider()
        classifier = IntentClassifier(provider)

        await classifier.classify("Bonjour")
        await classifier.classify("Hello")

        # one exemplar batch plus one call per utterance
        assert len(provider.call_history) == 3

    @pytest.mark.asyncio
    async def test_embedding_failure_degrades_to_keywords(self) -> None:
        classifier = IntentClassifier(MockEmbeddingProvider(fail=True))

        result = await classifier.classify("Est-ce que la viande est halal ?")

        assert result.intent == IntentType.FAQ_HALAL
        assert result.confidence == pytest.approx(0.85)

    @pytest.mark.asyncio
    async def test_embeddings_disabled_by_config(self) -> None:
        provider = MockEmbeddingProvider()
        classifier = IntentClassifier(provider, ClassifierConfig(use_embeddings=False))

        await classifier.classify("Bonjour")

        assert provider.call_history == []
