"""Tuning knobs for the conversation engine components."""

from pydantic import BaseModel, Field, model_validator


class ClassifierConfig(BaseModel):
    """Intent classifier settings."""

    confidence_floor: float = Field(
        default=0.1, ge=0.0, le=1.0, description="Minimum score for a primary intent"
    )
    use_embeddings: bool = Field(default=True, description="Blend in embedding similarity")
    semantic_weight: float = Field(
        default=0.5, ge=0.0, le=1.0, description="Share of headroom filled by similarity"
    )
    min_similarity: float = Field(
        default=0.5, ge=-1.0, le=1.0, description="Similarity below this contributes nothing"
    )


class ContextWindowConfig(BaseModel):
    """Context window budget and pruning."""

    max_tokens: int = Field(default=4000, gt=0, description="Token budget for model context")
    chars_per_token: int = Field(default=4, gt=0, description="Token estimate divisor")
    warning_ratio: float = Field(default=0.70, gt=0.0, lt=1.0)
    critical_ratio: float = Field(default=0.85, gt=0.0, le=1.0)
    recent_turns: int = Field(default=5, ge=1, description="Turns always kept verbatim")
    max_retained_turns: int = Field(default=20, ge=1, description="Hard cap after pruning")
    inactivity_minutes: int = Field(default=30, gt=0, description="Idle time before closing")

    @model_validator(mode="after")
    def _ordered_ratios(self) -> "ContextWindowConfig":
        if self.warning_ratio >= self.critical_ratio:
            raise ValueError("warning_ratio must be lower than critical_ratio")
        return self


class GuardrailsConfig(BaseModel):
    """Guardrail thresholds."""

    max_messages_per_hour: int = Field(default=50, gt=0)
    overlap_threshold: float = Field(default=0.3, ge=0.0, le=1.0)


class GenerationConfig(BaseModel):
    """Response generation limits."""

    llm_calls_per_hour: int = Field(default=100, gt=0, description="Process-wide LLM budget")
    history_turns: int = Field(default=8, ge=0, description="Recent turns sent to the model")
    max_response_chars: int = Field(default=500, gt=20)
    escalation_confidence: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Below this, complaints escalate and unmatched turns get fallback text",
    )


class ToolsConfig(BaseModel):
    """Function-calling loop limits."""

    max_iterations: int = Field(default=10, ge=1, description="Hard ceiling on tool calls")
    max_tokens: int = Field(default=1024, gt=0)


class RetrievalConfig(BaseModel):
    """Knowledge base retrieval."""

    enabled: bool = Field(default=True)
    top_k: int = Field(default=6, ge=1)
    min_score: float = Field(default=0.4, ge=-1.0, le=1.0)


class ProactiveConfig(BaseModel):
    """Proactive help throttling."""

    min_interval_seconds: int = Field(default=120, ge=0)
    min_confidence: float = Field(default=0.6, ge=0.0, le=1.0)


class SupportConfig(BaseModel):
    """Ticketing and notifications."""

    ticket_timeout_hours: int = Field(default=24, gt=0)
    webhook_url: str | None = Field(default=None, description="Notification endpoint")
    webhook_secret: str | None = Field(default=None, description="HMAC signing secret")
