"""Registry of callable tools."""

from typing import Any

from tastychat.observability.logging import get_logger
from tastychat.providers.llm.base import ToolSchema
from tastychat.tools.models import (
    RegisteredTool,
    ToolCategory,
    ToolContext,
    ToolExecutionError,
    ToolHandler,
    ToolInputError,
    ToolNotFoundError,
)

logger = get_logger(__name__)

_JSON_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "integer": (int,),
    "number": (int, float),
    "boolean": (bool,),
    "object": (dict,),
    "array": (list,),
}


def validate_input(schema: dict[str, Any], data: dict[str, Any]) -> None:
    """Check required fields and primitive property types.

    Raises:
        ToolInputError: On the first violation found
    """
    for name in schema.get("required", []):
        if data.get(name) in (None, ""):
            raise ToolInputError(f"Missing required field: {name}")

    properties = schema.get("properties", {})
    for name, value in data.items():
        expected = properties.get(name, {}).get("type")
        if expected is None or value is None:
            continue
        allowed = _JSON_TYPES.get(expected)
        # bool is an int subclass; only accept it where booleans are expected
        is_bool_mismatch = isinstance(value, bool) and expected != "boolean"
        if allowed is not None and (not isinstance(value, allowed) or is_bool_mismatch):
            raise ToolInputError(f"Field '{name}' must be of type {expected}")


class ToolRegistry:
    """Name -> tool map populated once at startup.

    Registering an existing name replaces it; registration is code-controlled.
    """

    def __init__(self) -> None:
        self._tools: dict[str, RegisteredTool] = {}

    def register(
        self,
        definition: ToolSchema,
        handler: ToolHandler,
        category: ToolCategory,
    ) -> None:
        if definition.name in self._tools:
            logger.debug("tool_replaced", tool=definition.name)
        self._tools[definition.name] = RegisteredTool(definition, handler, category)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def get(self, name: str) -> ToolSchema | None:
        tool = self._tools.get(name)
        return tool.definition if tool else None

    def definitions(self, names: list[str] | None = None) -> list[ToolSchema]:
        """Definitions of all tools, or of the named subset in registry order."""
        return [
            t.definition for t in self._tools.values() if names is None or t.definition.name in names
        ]

    async def execute(self, name: str, data: dict[str, Any], context: ToolContext) -> Any:
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)

        validate_input(tool.definition.input_schema, data)
        try:
            return await tool.handler(data, context)
        except (ToolInputError, ToolExecutionError):
            raise
        except Exception as e:
            raise ToolExecutionError(f"Tool execution failed: {e}") from e
