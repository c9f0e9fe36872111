"""
toolreplay protocols - the seams between the agent side and its collaborators

Anything with a matching ``chat_completion`` can feed a ToolExecutor, and
anything with a matching ``chat`` can sit behind the chat socket.
"""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class LLMClientProtocol(Protocol):
    """
    Model client used by the tool executor.

    The returned object must expose ``content`` and ``tool_calls``
    (see toolreplay.llm.LLMResponse).
    """

    async def chat_completion(
        self,
        messages: List[Dict[str, Any]],
        tools: Optional[List[Dict[str, Any]]] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> Any:
        ...


@runtime_checkable
class ChatBotProtocol(Protocol):
    """One user message in, one reply out"""

    async def chat(self, message: str) -> str:
        ...
