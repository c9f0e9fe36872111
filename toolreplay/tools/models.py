"""
toolreplay Tool Models - Data structures for LLM tool calling
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Callable, Optional


@dataclass
class ToolDefinition:
    """
    A tool the model may call mid-conversation.

    Attributes:
        name: Tool name (used in function-call directives)
        description: What the tool does (shown to the model)
        parameters: JSON Schema for the arguments
        executor: Function(args: dict) -> Any, sync or async
    """
    name: str
    description: str
    parameters: Dict[str, Any]
    executor: Callable

    def to_openai_schema(self) -> Dict[str, Any]:
        """Convert to OpenAI function-calling tool schema."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


@dataclass
class ToolCall:
    """
    Represents a tool call from LLM response

    Attributes:
        id: Unique call ID from LLM; empty for legacy ``function_call`` directives
        name: Tool name
        arguments: Parsed arguments dict
    """
    id: str
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_legacy(self) -> bool:
        return not self.id


@dataclass
class ToolResult:
    """
    Result of a tool execution

    Attributes:
        tool_call_id: ID of the tool call this result is for
        name: Name of the tool that produced it
        content: String result content
        is_error: Whether execution failed
        data: Optional structured data for further processing
    """
    tool_call_id: str
    name: str
    content: str
    is_error: bool = False
    data: Optional[Dict[str, Any]] = None
