"""Model-backed reply generation.

Every call goes through the process-wide hourly budget. When the budget is
spent, the provider fails, or the reply does not pass the sanity checks, the
static fallback text is returned instead, so callers always get something to
show.
"""

import time

from pydantic import BaseModel, Field

from tastychat.config.models.engine import GenerationConfig
from tastychat.config.models.providers import LLMConfig
from tastychat.conversation.models import ConversationContext
from tastychat.conversation.window import ContextWindowManager
from tastychat.generation.fallback import fallback_response
from tastychat.generation.postprocess import clean_response, response_issues
from tastychat.nlp.models import IntentResult
from tastychat.observability.logging import get_logger
from tastychat.observability.metrics import LLM_CALLS
from tastychat.providers.llm.base import LLMMessage, ProviderError
from tastychat.providers.llm.executor import LLMExecutor
from tastychat.utils.rate_limit import SlidingWindowRateLimiter

logger = get_logger(__name__)

LLM_BUDGET_KEY = "llm_calls"


class GenerationResult(BaseModel):
    """Reply text and how it was produced."""

    response: str = Field(..., min_length=1)
    sources: list[str] = Field(default_factory=list)
    model: str | None = None
    used_fallback: bool = False
    fallback_reason: str | None = Field(
        default=None, description="budget_exhausted, provider_error or invalid_response"
    )
    generation_time_ms: float = Field(default=0.0, ge=0)


class ResponseGenerator:
    """Generate replies with the language model under a shared call budget."""

    def __init__(
        self,
        llm_executor: LLMExecutor,
        window: ContextWindowManager | None = None,
        rate_limiter: SlidingWindowRateLimiter | None = None,
        config: GenerationConfig | None = None,
        llm_config: LLMConfig | None = None,
    ) -> None:
        self._llm_executor = llm_executor
        self._window = window or ContextWindowManager()
        self._rate_limiter = rate_limiter or SlidingWindowRateLimiter(window_seconds=3600)
        self._config = config or GenerationConfig()
        self._llm_config = llm_config or LLMConfig()

    def acquire_budget(self) -> bool:
        """Reserve one model call. False when the hourly budget is spent."""
        result = self._rate_limiter.check(LLM_BUDGET_KEY, self._config.llm_calls_per_hour)
        if not result.allowed:
            logger.warning(
                "llm_budget_exhausted",
                limit=result.limit,
                reset_at=result.reset_at.isoformat(),
            )
            LLM_CALLS.labels(purpose="generation", outcome="budget_exhausted").inc()
        return result.allowed

    def build_messages(
        self,
        user_message: str,
        context: ConversationContext,
        system_prompt: str,
    ) -> list[LLMMessage]:
        """System prompt, pruned recent history, then the user message with session facts.

        `context` must not already contain the current user turn.
        """
        llm_context = self._window.build_llm_context(context)
        recent = llm_context.history[-self._config.history_turns :] if self._config.history_turns else []

        messages = [LLMMessage(role="system", content=system_prompt)]
        messages.extend(LLMMessage(role=t.role, content=t.content) for t in recent)
        messages.append(
            LLMMessage(
                role="user",
                content=f"[Session Context]\n{llm_context.metadata}\n\n{user_message}",
            )
        )
        return messages

    async def generate(
        self,
        user_message: str,
        intent: IntentResult,
        context: ConversationContext,
        system_prompt: str,
    ) -> GenerationResult:
        start = time.perf_counter()

        if not self.acquire_budget():
            return self._fallback(intent, "budget_exhausted", start)

        messages = self.build_messages(user_message, context, system_prompt)
        try:
            llm_response = await self._llm_executor.generate(
                messages,
                max_tokens=self._llm_config.max_tokens,
                temperature=self._llm_config.temperature,
                stop_sequences=self._llm_config.stop_sequences,
            )
        except ProviderError as e:
            LLM_CALLS.labels(purpose="generation", outcome="error").inc()
            logger.warning(
                "generation_failed",
                session_id=context.session_id,
                error=str(e),
            )
            return self._fallback(intent, "provider_error", start)

        LLM_CALLS.labels(purpose="generation", outcome="success").inc()
        cleaned = clean_response(
            llm_response.content,
            turn_count=len(context.turns),
            max_chars=self._config.max_response_chars,
        )

        issues = response_issues(cleaned.text)
        if issues:
            logger.warning(
                "generation_rejected",
                session_id=context.session_id,
                issues=issues,
                model=llm_response.model,
            )
            return self._fallback(intent, "invalid_response", start)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(
            "response_generated",
            session_id=context.session_id,
            response_length=len(cleaned.text),
            sources=cleaned.sources,
            elapsed_ms=round(elapsed_ms, 2),
            model=llm_response.model,
        )
        return GenerationResult(
            response=cleaned.text,
            sources=cleaned.sources,
            model=llm_response.model,
            generation_time_ms=elapsed_ms,
        )

    def finalize(self, text: str, context: ConversationContext) -> str | None:
        """Clean and check text produced elsewhere (e.g. the tool loop). None if unusable."""
        cleaned = clean_response(text, len(context.turns), self._config.max_response_chars)
        return None if response_issues(cleaned.text) else cleaned.text

    @staticmethod
    def _fallback(intent: IntentResult, reason: str, start: float) -> GenerationResult:
        return GenerationResult(
            response=fallback_response(intent),
            used_fallback=True,
            fallback_reason=reason,
            generation_time_ms=(time.perf_counter() - start) * 1000,
        )
