"""Tool registry and orchestration models."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from tastychat.conversation.models import utc_now
from tastychat.providers.llm.base import StopReason, ToolSchema
from tastychat.support.repository import OrderRepository, TicketRepository


class ToolCategory(str, Enum):
    ORDER = "order"
    BRANCH = "branch"
    TICKET = "ticket"


@dataclass
class ToolContext:
    """Collaborators and caller identity available to tool handlers."""

    session_id: str | None = None
    user_email: str | None = None
    orders: OrderRepository | None = None
    tickets: TicketRepository | None = None
    clock: Callable[[], datetime] = utc_now

    def now(self) -> datetime:
        return self.clock()


ToolHandler = Callable[[dict[str, Any], ToolContext], Awaitable[Any]]


@dataclass(frozen=True)
class RegisteredTool:
    definition: ToolSchema
    handler: ToolHandler
    category: ToolCategory


class ToolResult(BaseModel):
    """Trace of one tool execution within an orchestration call."""

    tool_name: str
    input: dict[str, Any] = Field(default_factory=dict)
    output: Any = None
    error: str | None = None
    success: bool
    execution_time_ms: float = Field(..., ge=0.0)
    call_id: str | None = None


OrchestrationStopReason = StopReason | Literal["max_iterations", "budget_exhausted"]


class OrchestrationResult(BaseModel):
    """Final answer of a tool-augmented generation."""

    final_response: str
    tools_used: list[ToolResult] = Field(default_factory=list)
    stop_reason: OrchestrationStopReason
    iterations: int = Field(default=0, description="Tool rounds executed")
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def truncated(self) -> bool:
        return self.stop_reason == "max_iterations"


class ToolNotFoundError(Exception):
    """Requested tool is not registered or not allowed for this call."""

    def __init__(self, name: str):
        super().__init__(f"Tool not found: {name}")
        self.name = name


class ToolInputError(Exception):
    """Tool input does not satisfy the tool's input schema."""


class ToolExecutionError(Exception):
    """Tool handler failed."""

