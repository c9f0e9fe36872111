"""
toolreplay OpenAI client - the agent's chat-completions client

Understands both directive formats a scripted endpoint may answer with:
- ``tool_calls`` (finish reason ``tool_calls``), one ToolCall per entry
- legacy ``function_call`` (finish reason ``function_call``), turned into a
  single ToolCall with an empty id

Requests go through an optional injected ``httpx.AsyncClient``, which is how
the harness routes them into a driver without opening a socket.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional

import httpx
from openai import AsyncOpenAI

from ..tools.models import ToolCall
from .base import BaseLLMClient, LLMConfig, LLMResponse, StopReason, Usage

logger = logging.getLogger(__name__)

_FINISH_REASONS = {
    "stop": StopReason.END_TURN,
    "content_filter": StopReason.END_TURN,
    "length": StopReason.MAX_TOKENS,
    "tool_calls": StopReason.TOOL_USE,
    "function_call": StopReason.TOOL_USE,
}


class OpenAIClient(BaseLLMClient):
    """
    Chat-completions client on the ``openai`` SDK.

    Example:
        client = OpenAIClient(
            LLMConfig(api_key="whatever", base_url="http://127.0.0.1:8089/v1", max_retries=0),
            http_client=httpx.AsyncClient(transport=driver.as_transport()),
        )
        reply = await client.chat_completion([{"role": "user", "content": "ignored..."}])
    """

    provider = "openai"

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        **kwargs
    ):
        """
        Args:
            config: Full settings; when None, ``model`` must be given in kwargs
                and ``api_key`` falls back to OPENAI_API_KEY
            http_client: httpx client every request is sent through
            **kwargs: LLMConfig fields
        """
        if config is None:
            if "model" not in kwargs:
                raise ValueError("model is required when no LLMConfig is given")
            kwargs.setdefault("api_key", os.environ.get("OPENAI_API_KEY"))
            config, kwargs = LLMConfig(**kwargs), {}

        super().__init__(config, **kwargs)
        self._http_client = http_client

    def _sdk(self) -> AsyncOpenAI:
        if self._client is None:
            cfg = self.config
            self._client = AsyncOpenAI(
                api_key=cfg.api_key,
                base_url=cfg.base_url,
                timeout=cfg.timeout,
                max_retries=cfg.max_retries,
                default_headers=cfg.default_headers or None,
                http_client=self._http_client,
            )
        return self._client

    async def _call_api(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        **kwargs
    ) -> LLMResponse:
        body = self.config.to_dict()
        for key in ("model", "temperature", "max_tokens"):
            if key in kwargs:
                body[key] = kwargs[key]
        body["messages"] = messages
        if tools:
            body["tools"] = tools
            body["tool_choice"] = kwargs.get("tool_choice", "auto")
        if "stop" in kwargs:
            body["stop"] = kwargs["stop"]

        completion = await self._sdk().chat.completions.create(**body)
        choice = completion.choices[0]
        logger.debug(f"Completion {completion.id} finished with {choice.finish_reason!r}")

        return LLMResponse(
            content=choice.message.content or "",
            tool_calls=self._parse_tool_calls(choice.message),
            stop_reason=self._parse_stop_reason(choice.finish_reason),
            usage=self._parse_usage(completion.usage),
            model=completion.model,
            raw_response=completion,
        )

    def _parse_tool_calls(self, message: Any) -> Optional[List[ToolCall]]:
        """Directives of one assistant message; legacy function_call only when no tool_calls"""
        calls = []
        for tc in message.tool_calls or []:
            fn = getattr(tc, "function", None)
            if fn is not None:
                calls.append(ToolCall(id=tc.id, name=fn.name, arguments=self._parse_arguments(fn.name, fn.arguments)))

        legacy = getattr(message, "function_call", None)
        if not calls and legacy is not None:
            args = self._parse_arguments(legacy.name, legacy.arguments)
            calls.append(ToolCall(id="", name=legacy.name, arguments=args))

        return calls or None

    @staticmethod
    def _parse_arguments(name: str, raw: Optional[str]) -> Dict[str, Any]:
        if not raw:
            return {}
        try:
            args = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Invalid JSON arguments for '{name}': {raw!r}")
            return {}
        return args if isinstance(args, dict) else {"value": args}

    @staticmethod
    def _parse_usage(usage: Any) -> Optional[Usage]:
        if usage is None:
            return None
        return Usage(usage.prompt_tokens, usage.completion_tokens, usage.total_tokens)

    def _parse_stop_reason(self, finish_reason: Optional[str]) -> StopReason:
        return _FINISH_REASONS.get(finish_reason, StopReason.END_TURN)
