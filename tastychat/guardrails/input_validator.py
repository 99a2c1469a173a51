"""Rule-based validation of user messages before any model call."""

from tastychat.guardrails.models import GuardrailViolation, Severity, ValidatedInput
from tastychat.guardrails.rules import GuardrailRule, RuleContext, default_input_rules
from tastychat.observability.logging import get_logger
from tastychat.observability.metrics import GUARDRAIL_VIOLATIONS
from tastychat.utils.rate_limit import SlidingWindowRateLimiter

logger = get_logger(__name__)

REDACTION = "[REDACTED]"


class InputValidator:
    """Runs enabled input rules and returns a sanitized copy of the message.

    Every call with a session id counts toward that session's rolling-hour
    message total.
    """

    def __init__(
        self,
        rules: list[GuardrailRule] | None = None,
        rate_limiter: SlidingWindowRateLimiter | None = None,
        max_messages_per_hour: int = 50,
    ) -> None:
        self._rules = rules if rules is not None else default_input_rules()
        self._rate_limiter = rate_limiter or SlidingWindowRateLimiter(window_seconds=3600)
        self._max_messages = max_messages_per_hour

    @property
    def rules(self) -> list[GuardrailRule]:
        return list(self._rules)

    def add_rule(self, rule: GuardrailRule) -> None:
        self._rules.append(rule)

    def disable_rule(self, rule_id: str) -> None:
        for rule in self._rules:
            if rule.id == rule_id:
                rule.enabled = False

    def validate(self, text: str, session_id: str | None = None) -> ValidatedInput:
        recent = self._rate_limiter.record(f"messages:{session_id}") if session_id else 0
        context = RuleContext(
            session_id=session_id,
            recent_message_count=recent,
            max_messages_per_hour=self._max_messages,
        )

        violations: list[GuardrailViolation] = []
        sanitized = text
        risk = "low"

        for rule in self._rules:
            if not rule.enabled or not rule.matches(text, context):
                continue

            violations.append(
                GuardrailViolation(
                    rule_id=rule.id,
                    rule_name=rule.name,
                    severity=rule.severity,
                    message=rule.message,
                    context={"session_id": session_id} if session_id else None,
                )
            )
            GUARDRAIL_VIOLATIONS.labels(rule_id=rule.id, severity=rule.severity.value).inc()

            if rule.severity == Severity.BLOCK:
                risk = "high"
            elif rule.severity == Severity.ESCALATE and risk != "high":
                risk = "medium"

            if rule.redact and rule.pattern is not None:
                sanitized = rule.pattern.sub(REDACTION, sanitized)

        is_valid = not any(v.severity == Severity.BLOCK for v in violations)
        if violations:
            logger.warning(
                "input_guardrail_triggered",
                session_id=session_id,
                rules=[v.rule_id for v in violations],
                is_valid=is_valid,
                risk=risk,
            )

        return ValidatedInput(
            is_valid=is_valid,
            original=text,
            sanitized=sanitized,
            violations=violations,
            risk=risk,
        )
