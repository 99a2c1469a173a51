"""Tests for entity extraction."""

from tastychat.conversation.models import ConversationContext
from tastychat.nlp.entities import detect_priority, extract_entities


class TestExtractEntities:
    """Tests for extract_entities."""

    def test_order_platform_and_branch(self) -> None:
        entities = extract_entities("Ma commande #98765 sur Deliveroo à Angleur")

        assert entities.order_number == "98765"
        assert entities.platform == "deliveroo"
        assert entities.branch == "angleur"

    def test_hash_order_number_without_keyword(self) -> None:
        assert extract_entities("C'est le #123456").order_number == "123456"

    def test_short_numbers_are_not_orders(self) -> None:
        assert extract_entities("order 12").order_number is None

    def test_email(self) -> None:
        entities = extract_entities("Vous pouvez m'écrire à jane.doe@example.com")
        assert entities.email == "jane.doe@example.com"

    def test_phone(self) -> None:
        entities = extract_entities("Appelez-moi au 0470 12 34 56")
        assert entities.phone is not None

    def test_order_number_is_not_a_phone(self) -> None:
        entities = extract_entities("order 12345678")
        assert entities.order_number == "12345678"
        assert entities.phone is None

    def test_allergens_are_canonicalised(self) -> None:
        entities = extract_entities("Je suis allergique aux arachides et au gluten")
        assert entities.allergens == ("peanut", "gluten")

    def test_uber_eats_spellings(self) -> None:
        assert extract_entities("commandé via Uber Eats").platform == "ubereats"
        assert extract_entities("ubereats").platform == "ubereats"

    def test_session_backfill(self) -> None:
        context = ConversationContext(session_id="s")
        context.metadata.current_branch = "seraing"
        context.metadata.current_platform = "takeaway"

        entities = extract_entities("Vous êtes ouverts ?", context)

        assert entities.branch == "seraing"
        assert entities.platform == "takeaway"

    def test_utterance_wins_over_session(self) -> None:
        context = ConversationContext(session_id="s")
        context.metadata.current_branch = "seraing"

        assert extract_entities("et à Wandre ?", context).branch == "wandre"


class TestDetectPriority:
    def test_urgent(self) -> None:
        assert detect_priority("C'est urgent") == "urgent"

    def test_high(self) -> None:
        assert detect_priority("J'ai un problème") == "high"

    def test_low(self) -> None:
        assert detect_priority("Just a question") == "low"

    def test_normal(self) -> None:
        assert detect_priority("Hello") == "normal"
