"""
toolreplay Tool Registry - Per-exchange table of callable tools
"""

import logging
from typing import Dict, List, Optional

from ..errors import ConfigurationError
from .models import ToolDefinition

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Registry for the tools available to one agent.

    Registries are constructed explicitly and owned by whoever builds the
    agent; there is no process-wide instance.

    Usage:
        registry = ToolRegistry()
        registry.register(ToolDefinition(
            name="doSomething",
            description="Do something",
            parameters={...},
            executor=do_something,
        ))

        # Get tool schemas for LLM
        schemas = registry.get_tools_schema()
    """

    def __init__(self, tools: Optional[List[ToolDefinition]] = None):
        self._tools: Dict[str, ToolDefinition] = {}
        for t in tools or []:
            self.register(t)

    def register(self, tool: ToolDefinition) -> None:
        """
        Register a tool definition

        Args:
            tool: ToolDefinition to register

        Raises:
            ConfigurationError: If tool with same name already exists
        """
        if tool.name in self._tools:
            raise ConfigurationError(f"Tool '{tool.name}' already registered")

        self._tools[tool.name] = tool
        logger.info(f"Registered tool: {tool.name}")

    def unregister(self, name: str) -> bool:
        """Remove a tool; returns False if it was not registered"""
        return self._tools.pop(name, None) is not None

    def get_tool(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools.keys())

    def get_tools_schema(self, names: Optional[List[str]] = None) -> List[dict]:
        """
        Get OpenAI-format schemas for the given tools (all tools when None).

        Unknown names are skipped with a warning.
        """
        if names is None:
            names = self.names()

        schemas = []
        for name in names:
            tool = self._tools.get(name)
            if tool is None:
                logger.warning(f"Tool '{name}' not found in registry")
                continue
            schemas.append(tool.to_openai_schema())
        return schemas
