"""Reply generation: prompts, model calls, cleanup and static fallbacks."""

from tastychat.generation.fallback import ERROR_APOLOGY, fallback_response
from tastychat.generation.generator import LLM_BUDGET_KEY, GenerationResult, ResponseGenerator
from tastychat.generation.postprocess import clean_response, response_issues
from tastychat.generation.prompts import build_system_prompt

__all__ = [
    "ERROR_APOLOGY",
    "LLM_BUDGET_KEY",
    "GenerationResult",
    "ResponseGenerator",
    "build_system_prompt",
    "clean_response",
    "fallback_response",
    "response_issues",
]
