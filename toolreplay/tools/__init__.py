"""
toolreplay Tools - Tool calling system for LLM function calling

Provides:
- ToolDefinition: Define tools with schemas
- ToolRegistry: Register and manage tools
- ToolExecutor: Execute tools with LLM loop
- ToolInvocationCounter: Count how often a tool fired
- @tool decorator: Build tools from type hints

Usage:
    from toolreplay.tools import ToolRegistry, ToolInvocationCounter

    counter = ToolInvocationCounter("doSomething")
    registry = ToolRegistry([counter.as_tool()])
"""

from .models import (
    ToolDefinition,
    ToolCall,
    ToolResult,
)
from .registry import ToolRegistry
from .executor import ToolExecutor
from .counter import ToolInvocationCounter
from .decorator import tool

__all__ = [
    # Models
    "ToolDefinition",
    "ToolCall",
    "ToolResult",
    # Registry
    "ToolRegistry",
    # Executor
    "ToolExecutor",
    # Counter
    "ToolInvocationCounter",
    # Decorator
    "tool",
]
