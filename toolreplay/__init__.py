"""
toolreplay - Scripted replay of tool-calling LLM exchanges

Quick start:
    from toolreplay import ExchangeHarness, ScriptedExchangeDriver, register_tool_scenario

    driver = ScriptedExchangeDriver()
    register_tool_scenario(driver)

    async with ExchangeHarness(driver=driver) as harness:
        await harness.invoke(expected_calls=1)
"""

from .errors import (
    AssertionMismatch,
    ConfigurationError,
    ToolReplayError,
    UnmatchedRequestError,
)
from .exchange import (
    InboundRequest,
    RequestMatcher,
    ScenarioState,
    ScriptedExchangeDriver,
    ScriptedResponse,
    ScriptedRule,
    register_tool_scenario,
    script_tool_exchange,
)
from .tools import (
    ToolCall,
    ToolDefinition,
    ToolExecutor,
    ToolInvocationCounter,
    ToolRegistry,
    ToolResult,
    tool,
)
from .config import HarnessConfig, load_config
from .chat import ChatService
from .harness import ExchangeHarness

__version__ = "0.1.0"

__all__ = [
    # Errors
    "AssertionMismatch",
    "ConfigurationError",
    "ToolReplayError",
    "UnmatchedRequestError",
    # Exchange
    "InboundRequest",
    "RequestMatcher",
    "ScenarioState",
    "ScriptedExchangeDriver",
    "ScriptedResponse",
    "ScriptedRule",
    "register_tool_scenario",
    "script_tool_exchange",
    # Tools
    "ToolCall",
    "ToolDefinition",
    "ToolExecutor",
    "ToolInvocationCounter",
    "ToolRegistry",
    "ToolResult",
    "tool",
    # Harness
    "HarnessConfig",
    "load_config",
    "ChatService",
    "ExchangeHarness",
]
