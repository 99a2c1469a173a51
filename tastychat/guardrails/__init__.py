"""Guardrails: input validation before generation, output filtering after."""

from tastychat.guardrails.engine import GuardrailsEngine
from tastychat.guardrails.input_validator import REDACTION, InputValidator
from tastychat.guardrails.models import (
    GuardrailDecision,
    GuardrailViolation,
    Severity,
    ValidatedInput,
    ValidatedOutput,
)
from tastychat.guardrails.output_filter import OutputFilter, lexical_overlap
from tastychat.guardrails.rules import GuardrailRule, RuleContext, default_input_rules

__all__ = [
    "REDACTION",
    "GuardrailDecision",
    "GuardrailRule",
    "GuardrailViolation",
    "GuardrailsEngine",
    "InputValidator",
    "OutputFilter",
    "RuleContext",
    "Severity",
    "ValidatedInput",
    "ValidatedOutput",
    "default_input_rules",
    "lexical_overlap",
]
