"""
toolreplay LLM client base - shared types for the agent's model client

This module provides:
- StopReason: why a completion ended
- LLMConfig: endpoint, credential and sampling settings
- LLMResponse: one parsed completion (text or tool calls)
- BaseLLMClient: abstract client; subclasses implement ``_call_api``
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ..tools.models import ToolCall, ToolDefinition


class StopReason(str, Enum):
    """Why the model stopped producing output"""
    END_TURN = "end_turn"       # final text
    MAX_TOKENS = "max_tokens"   # truncated
    TOOL_USE = "tool_use"       # function-call directive


@dataclass
class LLMConfig:
    """
    Settings the agent uses to reach a chat-completions endpoint.

    Attributes:
        api_key: Bearer credential
        model: Model name put in every request body
        base_url: Endpoint root, e.g. "http://127.0.0.1:8089/v1"
        temperature: Sampling temperature
        max_tokens: Completion length limit
        timeout: Per-request timeout in seconds
        max_retries: SDK-level retries; 0 against a scripted driver
        default_headers: Extra headers sent with each request
    """
    api_key: Optional[str] = None
    model: str = "gpt-3.5-turbo"
    base_url: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 1024
    timeout: float = 60.0
    max_retries: int = 2
    default_headers: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Request-body parameters derived from this config"""
        return {
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }


@dataclass
class Usage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class LLMResponse:
    """
    One parsed completion.

    Either ``content`` carries the final text, or ``tool_calls`` lists the
    directives the agent must resolve before asking again.
    """
    content: str
    tool_calls: Optional[List[ToolCall]] = None
    stop_reason: StopReason = StopReason.END_TURN
    usage: Optional[Usage] = None
    model: Optional[str] = None
    raw_response: Optional[Any] = None


class BaseLLMClient(ABC):
    """
    Abstract chat-completions client.

    Satisfies LLMClientProtocol, so any subclass can drive a ToolExecutor.
    Subclasses own the SDK client in ``self._client`` and release it in
    ``close()``.
    """

    provider: str = "unknown"

    def __init__(self, config: Optional[LLMConfig] = None, **kwargs):
        """
        Args:
            config: Base settings; a default LLMConfig is built from
                ``kwargs`` when None
            **kwargs: Field overrides applied on top of ``config``
        """
        if config is None:
            config = LLMConfig(**kwargs)
        else:
            for key, value in kwargs.items():
                if hasattr(config, key):
                    setattr(config, key, value)

        self.config = config
        self._client = None

    @abstractmethod
    async def _call_api(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        **kwargs
    ) -> LLMResponse:
        """Send one request and parse the reply"""

    async def chat_completion(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Union[Dict[str, Any], ToolDefinition]]] = None,
        config: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> LLMResponse:
        """
        Ask the model for the next turn of the conversation.

        Args:
            messages: Conversation so far
            tools: Tool schemas or ToolDefinitions offered to the model
            config: Per-call overrides (model, temperature, ...)

        Returns:
            LLMResponse carrying either text or tool calls
        """
        schemas = None
        if tools:
            schemas = [self._format_tool(t) if isinstance(t, ToolDefinition) else t for t in tools]

        params = dict(kwargs)
        params.update(config or {})
        return await self._call_api(messages, schemas, **params)

    def _format_tool(self, tool: ToolDefinition) -> Dict[str, Any]:
        return tool.to_openai_schema()

    async def close(self) -> None:
        if self._client is not None and hasattr(self._client, "close"):
            await self._client.close()
        self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
