"""Input validation and output filtering combined for one turn."""

from collections.abc import Awaitable, Callable

from tastychat.guardrails.input_validator import InputValidator
from tastychat.guardrails.models import (
    GuardrailDecision,
    Severity,
    ValidatedInput,
    ValidatedOutput,
)
from tastychat.guardrails.output_filter import OutputFilter

OutputSource = str | Callable[[str], Awaitable[str]]


class GuardrailsEngine:
    """Runs the input pass, then (only if it passes) produces and filters output."""

    def __init__(
        self,
        input_validator: InputValidator | None = None,
        output_filter: OutputFilter | None = None,
    ) -> None:
        self.input_validator = input_validator or InputValidator()
        self.output_filter = output_filter or OutputFilter()

    def validate_input(self, text: str, session_id: str | None = None) -> ValidatedInput:
        return self.input_validator.validate(text, session_id)

    def filter_output(self, output: str, rag_documents: list[str] | None = None) -> ValidatedOutput:
        return self.output_filter.filter(output, rag_documents)

    async def process_message(
        self,
        user_message: str,
        llm_output: OutputSource,
        *,
        session_id: str | None = None,
        rag_documents: list[str] | None = None,
    ) -> GuardrailDecision:
        """Validate input, then obtain and filter output.

        `llm_output` may be a string or an async callable taking the sanitized
        message; the callable is never awaited when the input is rejected.
        """
        validated = self.validate_input(user_message, session_id)

        if not validated.is_valid:
            blocking = validated.first_blocking
            assert blocking is not None
            return GuardrailDecision(
                approved=False,
                input=validated,
                escalate=True,
                escalation_reason=blocking.message,
                response=blocking.message,
            )

        output = llm_output if isinstance(llm_output, str) else await llm_output(validated.sanitized)
        filtered = self.filter_output(output, rag_documents)

        escalate = filtered.should_escalate or validated.should_escalate
        reason = filtered.escalation_reason
        if reason is None and validated.should_escalate:
            reason = next(
                (v.message for v in validated.violations if v.severity == Severity.ESCALATE), None
            )

        return GuardrailDecision(
            approved=filtered.is_valid and not filtered.should_escalate,
            input=validated,
            output=filtered,
            escalate=escalate,
            escalation_reason=reason,
            response=filtered.filtered,
        )
