"""Prometheus metrics for tastychat."""

from prometheus_client import Counter, Histogram

TURNS_PROCESSED = Counter(
    "tastychat_turns_processed_total",
    "Chat turns processed by the engine",
    labelnames=["strategy", "outcome"],
)

TURN_LATENCY = Histogram(
    "tastychat_turn_latency_seconds",
    "End-to-end latency of one chat turn",
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

ESCALATIONS = Counter(
    "tastychat_escalations_total",
    "Turns flagged for human follow-up",
    labelnames=["reason"],
)

GUARDRAIL_VIOLATIONS = Counter(
    "tastychat_guardrail_violations_total",
    "Guardrail rule hits",
    labelnames=["rule_id", "severity"],
)

LLM_CALLS = Counter(
    "tastychat_llm_calls_total",
    "Language-model calls issued by the engine",
    labelnames=["purpose", "outcome"],
)

TOOL_EXECUTIONS = Counter(
    "tastychat_tool_executions_total",
    "Tool handler executions",
    labelnames=["tool", "success"],
)

PROACTIVE_SHOWN = Counter(
    "tastychat_proactive_shown_total",
    "Proactive help messages surfaced to users",
    labelnames=["opportunity"],
)
