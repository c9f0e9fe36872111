"""
Tool invocation counter - observe how often a tool callback fires.
"""

import copy
import logging
from typing import Any, Dict, List, Optional

from .models import ToolDefinition

logger = logging.getLogger(__name__)

_DEFAULT_PARAMETERS: Dict[str, Any] = {
    "type": "object",
    "properties": {"content": {"type": "string", "description": "the content"}},
    "required": ["content"],
}


class ToolInvocationCounter:
    """
    Counts invocations of one tool during an exchange.

    ``on_invoke`` never raises: any argument shape is accepted and recorded,
    and a fixed result is returned so the calling protocol can continue.

    Example:
        counter = ToolInvocationCounter("doSomething")
        registry.register(counter.as_tool())
        ...
        assert counter.count() == 1
    """

    def __init__(self, name: str = "doSomething", result: str = "ignored"):
        self.name = name
        self.result = result
        self._count = 0
        self.calls: List[Any] = []

    def on_invoke(self, args: Any = None) -> str:
        self._count += 1
        try:
            recorded = copy.deepcopy(args)
        except Exception:
            # Uncopyable payloads are recorded by reference
            recorded = args
        self.calls.append(recorded)
        logger.debug(f"Tool '{self.name}' invoked ({self._count})")
        return self.result

    def count(self) -> int:
        return self._count

    def reset(self) -> None:
        self._count = 0
        self.calls.clear()

    def as_tool(
        self,
        description: Optional[str] = None,
        parameters: Optional[Dict[str, Any]] = None,
    ) -> ToolDefinition:
        """Expose this counter as a tool the agent can call"""
        return ToolDefinition(
            name=self.name,
            description=description or "Invoked by the LLM.",
            parameters=parameters if parameters is not None else copy.deepcopy(_DEFAULT_PARAMETERS),
            executor=self.on_invoke,
        )
