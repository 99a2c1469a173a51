"""Guardrail result models."""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from tastychat.conversation.models import utc_now


class Severity(str, Enum):
    """What a rule hit does to the turn."""

    WARNING = "warning"  # log only
    BLOCK = "block"  # reject, no model call
    ESCALATE = "escalate"  # allow, flag for a human


class GuardrailViolation(BaseModel):
    """One rule hit. Lives for a single response cycle."""

    model_config = ConfigDict(frozen=True)

    rule_id: str
    rule_name: str
    severity: Severity
    message: str
    requires_escalation: bool = Field(
        default=False, description="Escalate even though severity is not escalate"
    )
    timestamp: datetime = Field(default_factory=utc_now)
    context: dict[str, Any] | None = None


class ValidatedInput(BaseModel):
    """Result of input validation; `sanitized` has violating spans redacted."""

    is_valid: bool
    original: str
    sanitized: str
    violations: list[GuardrailViolation] = Field(default_factory=list)
    risk: Literal["low", "medium", "high"] = "low"

    @property
    def should_escalate(self) -> bool:
        return any(v.severity == Severity.ESCALATE or v.requires_escalation for v in self.violations)

    @property
    def first_blocking(self) -> GuardrailViolation | None:
        return next((v for v in self.violations if v.severity == Severity.BLOCK), None)


class ValidatedOutput(BaseModel):
    """Result of output filtering."""

    is_valid: bool
    original: str
    filtered: str
    violations: list[GuardrailViolation] = Field(default_factory=list)
    should_escalate: bool = False
    escalation_reason: str | None = None


class GuardrailDecision(BaseModel):
    """Combined input + output verdict for one turn."""

    approved: bool
    input: ValidatedInput
    output: ValidatedOutput | None = Field(
        default=None, description="None when input validation short-circuited"
    )
    escalate: bool = False
    escalation_reason: str | None = None
    response: str = Field(default="", description="Text to show the user")
