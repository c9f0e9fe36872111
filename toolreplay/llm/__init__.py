"""
toolreplay LLM Client - Chat-completions clients used by the agent side

Usage:
    from toolreplay.llm import OpenAIClient, LLMConfig

    config = LLMConfig(model="gpt-3.5-turbo", api_key="whatever",
                       base_url="http://localhost:8089/v1")
    client = OpenAIClient(config=config)
    response = await client.chat_completion(messages=[...])
"""

from .base import BaseLLMClient, LLMConfig, LLMResponse, StopReason, Usage
from .openai_client import OpenAIClient

__all__ = [
    "BaseLLMClient",
    "LLMConfig",
    "LLMResponse",
    "StopReason",
    "Usage",
    "OpenAIClient",
]
