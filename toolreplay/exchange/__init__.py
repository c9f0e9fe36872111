"""
toolreplay Exchange - Scripted replay of multi-turn HTTP exchanges

Provides:
- ScriptedExchangeDriver: Rule table and scenario state machine
- ScenarioState / ScriptedRule / RequestMatcher / ScriptedResponse: Script building blocks
- script_tool_exchange: Register a whole tool-calling conversation

Usage:
    from toolreplay.exchange import ScriptedExchangeDriver, script_tool_exchange

    driver = ScriptedExchangeDriver()
    script_tool_exchange(driver, tool_calls=1)
    transport = driver.as_transport()
"""

from .models import (
    InboundRequest,
    RequestMatcher,
    ScenarioState,
    ScriptedResponse,
    ScriptedRule,
)
from .driver import ScriptedExchangeDriver
from .scenarios import (
    FINAL_REPLY,
    TOOL_ARGUMENTS,
    TOOL_NAME,
    completions_matcher,
    function_call_body,
    register_tool_scenario,
    script_tool_exchange,
    text_body,
)

__all__ = [
    # Models
    "InboundRequest",
    "RequestMatcher",
    "ScenarioState",
    "ScriptedResponse",
    "ScriptedRule",
    # Driver
    "ScriptedExchangeDriver",
    # Scenarios
    "FINAL_REPLY",
    "TOOL_ARGUMENTS",
    "TOOL_NAME",
    "completions_matcher",
    "function_call_body",
    "register_tool_scenario",
    "script_tool_exchange",
    "text_body",
]
