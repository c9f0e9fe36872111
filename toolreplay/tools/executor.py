"""
toolreplay tool executor - the agent side of a tool-calling exchange

Sends the conversation to the model, resolves every function-call directive
against the registry, feeds the results back and returns the first plain-text
answer. Both directive formats are replayed the way the model sent them:
legacy ``function_call`` directives get a ``function`` role reply, current
``tool_calls`` get one ``tool`` role reply per call id.
"""

import inspect
import json
import logging
from typing import Any, Dict, List, Optional

from ..protocols import LLMClientProtocol
from .models import ToolCall, ToolResult
from .registry import ToolRegistry

logger = logging.getLogger(__name__)

GIVE_UP_MESSAGE = "I'm having trouble completing this task. Please try again with a simpler request."


class ToolExecutor:
    """
    Drives the request -> directive -> tool -> request loop.

    Usage:
        executor = ToolExecutor(llm_client, ToolRegistry([counter.as_tool()]))
        answer = await executor.run_with_tools([{"role": "user", "content": "ignored..."}])
    """

    def __init__(
        self,
        llm_client: LLMClientProtocol,
        registry: ToolRegistry,
        max_iterations: int = 10,
    ):
        """
        Args:
            llm_client: Model client (required)
            registry: Tools the model may call
            max_iterations: Upper bound on model round-trips per exchange
        """
        if llm_client is None:
            raise ValueError("llm_client is required")

        self.llm_client = llm_client
        self.registry = registry
        self.max_iterations = max_iterations

    async def run_with_tools(
        self,
        messages: List[Dict[str, Any]],
        tool_names: Optional[List[str]] = None,
        llm_config: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Run one exchange to its final answer.

        Args:
            messages: Opening messages; the list is not modified
            tool_names: Tools offered to the model (all registered when None)
            llm_config: Per-call model overrides

        Returns:
            The model's final text, or GIVE_UP_MESSAGE once
            ``max_iterations`` round-trips were spent on directives
        """
        schemas = self.registry.get_tools_schema(tool_names)
        if not schemas:
            logger.warning("Registry offers no tools; the model can only answer in text")

        conversation = list(messages)
        for round_trip in range(1, self.max_iterations + 1):
            logger.debug(f"Model round-trip {round_trip}/{self.max_iterations}")

            response = await self.llm_client.chat_completion(
                messages=conversation,
                tools=schemas or None,
                config=llm_config,
            )
            if not response.tool_calls:
                return response.content or ""

            conversation.append(self._assistant_turn(response.content, response.tool_calls))
            for call in response.tool_calls:
                result = await self.execute_tool(call)
                conversation.append(self._result_turn(call, result))
                logger.info(f"Tool '{call.name}' {'failed' if result.is_error else 'ran'}")

        logger.error(f"Exchange still asking for tools after {self.max_iterations} round-trips")
        return GIVE_UP_MESSAGE

    async def execute_tool(self, tool_call: ToolCall) -> ToolResult:
        """
        Run one directive. Never raises: unknown tools and tool exceptions
        become error results the model gets to see.
        """
        definition = self.registry.get_tool(tool_call.name)
        if definition is None:
            return self._error_result(tool_call, f"Error: Unknown tool '{tool_call.name}'")

        try:
            value = definition.executor(tool_call.arguments)
            if inspect.isawaitable(value):
                value = await value
        except Exception as e:
            logger.error(f"Tool '{tool_call.name}' raised: {e}", exc_info=True)
            return self._error_result(tool_call, f"Error executing {tool_call.name}: {e}")

        if isinstance(value, dict):
            return ToolResult(
                tool_call_id=tool_call.id,
                name=tool_call.name,
                content=json.dumps(value, ensure_ascii=False, indent=2),
                data=value,
            )
        return ToolResult(
            tool_call_id=tool_call.id,
            name=tool_call.name,
            content="" if value is None else str(value),
        )

    @staticmethod
    def _error_result(tool_call: ToolCall, content: str) -> ToolResult:
        return ToolResult(tool_call_id=tool_call.id, name=tool_call.name, content=content, is_error=True)

    @staticmethod
    def _assistant_turn(content: Optional[str], tool_calls: List[ToolCall]) -> Dict[str, Any]:
        """Echo the model's directive back into the conversation"""
        turn: Dict[str, Any] = {"role": "assistant", "content": content or None}

        # A legacy directive is a single call without an id
        if len(tool_calls) == 1 and tool_calls[0].is_legacy:
            call = tool_calls[0]
            turn["function_call"] = {"name": call.name, "arguments": json.dumps(call.arguments)}
            return turn

        turn["tool_calls"] = [
            {
                "id": call.id,
                "type": "function",
                "function": {"name": call.name, "arguments": json.dumps(call.arguments)},
            }
            for call in tool_calls
        ]
        return turn

    @staticmethod
    def _result_turn(tool_call: ToolCall, result: ToolResult) -> Dict[str, Any]:
        if tool_call.is_legacy:
            return {"role": "function", "name": result.name, "content": result.content}
        return {"role": "tool", "tool_call_id": result.tool_call_id, "content": result.content}
