"""Tests for lexical sentiment and language detection."""

import pytest

from tastychat.nlp.language import detect_language
from tastychat.nlp.models import (
    EntityExtraction,
    IntentResult,
    IntentType,
    PrimaryIntent,
    SentimentScore,
    describe_intent,
    requires_immediate_escalation,
)
from tastychat.nlp.sentiment import analyze_sentiment


class TestAnalyzeSentiment:
    """Tests for analyze_sentiment."""

    def test_negative_with_complaint(self) -> None:
        score = analyze_sentiment("This is terrible, I want a refund", EntityExtraction())

        assert score.polarity == "negative"
        assert score.intensity == pytest.approx(-0.9)
        assert score.has_complaint is True

    def test_stacked_negatives_deepen_intensity(self) -> None:
        score = analyze_sentiment("The food was cold and terrible", EntityExtraction())

        assert score.polarity == "negative"
        assert score.intensity == pytest.approx(-0.8)
        assert score.has_complaint is False

    def test_positive(self) -> None:
        score = analyze_sentiment("Merci, c'était délicieux !", EntityExtraction())

        assert score.polarity == "positive"
        assert score.intensity == pytest.approx(0.7)

    def test_high_priority_counts_as_complaint(self) -> None:
        score = analyze_sentiment("ok", EntityExtraction(priority="high"))
        assert score.has_complaint is True

    def test_urgency(self) -> None:
        assert analyze_sentiment("please help", EntityExtraction()).has_urgency is True

    def test_neutral(self) -> None:
        score = analyze_sentiment("What time is it", EntityExtraction())
        assert score == SentimentScore()


class TestDetectLanguage:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Où est ma commande ?", "fr"),
            ("Where is my order?", "en"),
            ("Waar is mijn bestelling?", "nl"),
            ("12345", None),
        ],
    )
    def test_detect(self, text: str, expected: str | None) -> None:
        assert detect_language(text) == expected


class TestIntentHelpers:
    def test_describe_intent(self) -> None:
        assert describe_intent(IntentType.FAQ_HALAL) == "HALAL certification inquiry"

    def test_immediate_escalation_for_agent_request(self) -> None:
        result = IntentResult(primary=PrimaryIntent(intent=IntentType.SPEAK_AGENT, confidence=0.9))
        assert requires_immediate_escalation(result) is True

    def test_no_immediate_escalation_for_faq(self) -> None:
        result = IntentResult(primary=PrimaryIntent(intent=IntentType.FAQ_MENU, confidence=0.9))
        assert requires_immediate_escalation(result) is False
