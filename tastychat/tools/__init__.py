"""Tool registry, built-in tools and the function-calling orchestrator."""

from tastychat.tools.models import (
    OrchestrationResult,
    ToolCategory,
    ToolContext,
    ToolExecutionError,
    ToolInputError,
    ToolNotFoundError,
    ToolResult,
)
from tastychat.tools.orchestrator import ToolOrchestrator
from tastychat.tools.registry import ToolRegistry, validate_input

__all__ = [
    "OrchestrationResult",
    "ToolCategory",
    "ToolContext",
    "ToolExecutionError",
    "ToolInputError",
    "ToolNotFoundError",
    "ToolOrchestrator",
    "ToolRegistry",
    "ToolResult",
    "validate_input",
]
