"""
Chat service - one user message in, one answer out, tools resolved in between.
"""

import logging
from typing import Optional

from .protocols import LLMClientProtocol
from .tools.executor import ToolExecutor
from .tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ChatService:
    """
    Wraps a ToolExecutor behind ``chat(message) -> str``.

    Each call is an independent exchange; no history is kept between calls.

    Example:
        service = ChatService(llm_client, ToolRegistry([counter.as_tool()]))
        answer = await service.chat("ignored...")
    """

    def __init__(
        self,
        llm_client: LLMClientProtocol,
        registry: ToolRegistry,
        system_prompt: Optional[str] = None,
        max_iterations: int = 10,
    ):
        self.registry = registry
        self.system_prompt = system_prompt
        self.executor = ToolExecutor(llm_client, registry, max_iterations=max_iterations)

    async def chat(self, message: str) -> str:
        messages = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.append({"role": "user", "content": message})

        answer = await self.executor.run_with_tools(messages)
        logger.debug(f"Exchange finished: {answer!r}")
        return answer
