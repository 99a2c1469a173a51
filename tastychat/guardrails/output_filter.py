"""Rule-based filtering of model output before it reaches the user."""

import re

from tastychat.guardrails.models import GuardrailViolation, Severity, ValidatedOutput
from tastychat.guardrails.rules import (
    HALLUCINATION_DISCLAIMER,
    HALLUCINATION_PATTERNS,
    REFUSAL_PATTERNS,
)
from tastychat.observability.logging import get_logger
from tastychat.observability.metrics import GUARDRAIL_VIOLATIONS

logger = get_logger(__name__)

_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")
_WORD = re.compile(r"[^\W\d_]+(?:['’-][^\W\d_]+)*", re.UNICODE)
CONTENT_WORD_MIN_LENGTH = 5


def content_words(text: str) -> list[str]:
    """Lowercased words long enough to carry meaning."""
    return [w.lower() for w in _WORD.findall(text) if len(w) >= CONTENT_WORD_MIN_LENGTH]


def lexical_overlap(response: str, documents: list[str]) -> float:
    """Share of the response's content words that also appear in the documents."""
    words = content_words(response)
    if not words:
        return 1.0
    vocabulary = set(content_words(" ".join(documents)))
    return sum(1 for w in words if w in vocabulary) / len(words)


class OutputFilter:
    """Blocks unsupported promises, flags refusals and checks grounding."""

    def __init__(
        self,
        overlap_threshold: float = 0.3,
        hallucination_patterns: tuple[re.Pattern[str], ...] = HALLUCINATION_PATTERNS,
        refusal_patterns: tuple[re.Pattern[str], ...] = REFUSAL_PATTERNS,
    ) -> None:
        self._overlap_threshold = overlap_threshold
        self._hallucinations = hallucination_patterns
        self._refusals = refusal_patterns

    def filter(self, output: str, rag_documents: list[str] | None = None) -> ValidatedOutput:
        violations: list[GuardrailViolation] = []
        escalation_reason: str | None = None

        sentences = _SENTENCE_SPLIT.split(output.strip()) if output.strip() else []
        kept: list[str] = []
        for sentence in sentences:
            hit = next((p for p in self._hallucinations if p.search(sentence)), None)
            if hit is None:
                kept.append(sentence)
                continue
            violations.append(
                GuardrailViolation(
                    rule_id="hallucination",
                    rule_name="Hallucination Detection",
                    severity=Severity.BLOCK,
                    message="Output contains unsupported claims.",
                    context={"pattern": hit.pattern},
                )
            )
            if not kept or kept[-1] != HALLUCINATION_DISCLAIMER:
                kept.append(HALLUCINATION_DISCLAIMER)
            escalation_reason = "Potential hallucination detected"
        filtered = " ".join(kept)

        for pattern in self._refusals:
            if pattern.search(output):
                violations.append(
                    GuardrailViolation(
                        rule_id="refusal",
                        rule_name="Escalation Trigger",
                        severity=Severity.ESCALATE,
                        message="Response suggests the customer cannot be helped automatically.",
                        context={"pattern": pattern.pattern},
                    )
                )
                escalation_reason = escalation_reason or "Assistant unable to help"
                break

        if rag_documents:
            overlap = lexical_overlap(output, rag_documents)
            if overlap < self._overlap_threshold:
                violations.append(
                    GuardrailViolation(
                        rule_id="rag_consistency",
                        rule_name="RAG Context Consistency",
                        severity=Severity.WARNING,
                        message="Response may not be consistent with knowledge base.",
                        requires_escalation=True,
                        context={"overlap": round(overlap, 3)},
                    )
                )
                escalation_reason = escalation_reason or "Response consistency with KB needs verification"

        for v in violations:
            GUARDRAIL_VIOLATIONS.labels(rule_id=v.rule_id, severity=v.severity.value).inc()

        is_valid = not any(v.severity == Severity.BLOCK for v in violations)
        should_escalate = any(
            v.severity in (Severity.BLOCK, Severity.ESCALATE) or v.requires_escalation
            for v in violations
        )
        if violations:
            logger.warning(
                "output_guardrail_triggered",
                rules=[v.rule_id for v in violations],
                is_valid=is_valid,
                should_escalate=should_escalate,
            )

        return ValidatedOutput(
            is_valid=is_valid,
            original=output,
            filtered=filtered,
            violations=violations,
            should_escalate=should_escalate,
            escalation_reason=escalation_reason,
        )
