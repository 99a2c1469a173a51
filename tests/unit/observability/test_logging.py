"""Tests for structured logging and PII scrubbing."""

import json

import pytest
import structlog

from tastychat.observability.logging import PIIRedactor, get_logger, redact_text, setup_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    """Restore structlog defaults after each test."""
    yield
    structlog.reset_defaults()


class TestRedactText:
    """Tests for redact_text."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("carte 4111 1111 1111 1111 svp", "carte [CARD] svp"),
            ("mail client@example.com", "mail [EMAIL]"),
            ("appelez le +32 4 123 45 67", "appelez le [PHONE]"),
            ("ssn 123-45-6789", "ssn [NATIONAL_ID]"),
            ("registre 85.07.30-033.61", "registre [NATIONAL_ID]"),
            ("commande 12345", "commande 12345"),
        ],
    )
    def test_patterns(self, text: str, expected: str) -> None:
        assert redact_text(text) == expected


class TestPIIRedactor:
    """Tests for the PIIRedactor processor."""

    def test_sensitive_keys_replaced(self) -> None:
        redactor = PIIRedactor()

        event = redactor(None, "info", {"event": "x", "user_email": "a@b.be", "api_key": "sk-1"})

        assert event["user_email"] == "[REDACTED]"
        assert event["api_key"] == "[REDACTED]"
        assert event["event"] == "x"

    def test_none_sensitive_value_kept(self) -> None:
        event = PIIRedactor()(None, "info", {"email": None})

        assert event["email"] is None

    def test_nested_values_scrubbed(self) -> None:
        event = PIIRedactor()(
            None,
            "info",
            {"event": "ticket_opened", "data": {"note": "mail a@b.be"}, "lines": ["4111111111111111"]},
        )

        assert event["data"] == {"note": "mail [EMAIL]"}
        assert event["lines"] == ["[CARD]"]


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_json_output_is_redacted(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(level="INFO", format="json")

        get_logger("test").info("ticket_opened", user_email="a@b.be", message="card 4111 1111 1111 1111")

        line = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert line["event"] == "ticket_opened"
        assert line["user_email"] == "[REDACTED]"
        assert line["message"] == "card [CARD]"
        assert line["level"] == "info"

    def test_level_filters(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(level="WARNING", format="json")

        get_logger("test").info("hidden")

        assert capsys.readouterr().err == ""

    def test_redaction_can_be_disabled(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(level="INFO", format="json", redact_pii=False)

        get_logger("test").info("raw", user_email="a@b.be")

        line = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert line["user_email"] == "a@b.be"
