"""
Scripted chat-completion scenarios.

Builders for OpenAI-compatible response bodies and helpers that register
whole tool-calling conversations on a driver.
"""

import json
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from ..errors import ConfigurationError
from .driver import ScriptedExchangeDriver
from .models import RequestMatcher, ScenarioState, ScriptedResponse, ScriptedRule

COMPLETIONS_PATH = "/v1/chat/completions"
DEFAULT_CREDENTIAL = "whatever"
DEFAULT_MODEL = "gpt-3.5-turbo-0613"

TOOL_NAME = "doSomething"
TOOL_ARGUMENTS = {"content": "Hello"}
FINAL_REPLY = "Do something has been called."


def function_call_body(
    name: str,
    arguments: Dict[str, Any],
    completion_id: str = "chatcmpl-8GRu1BOlVqip3s1EKxD1YDJENPZNm",
    created: int = 1698931197,
    model: str = DEFAULT_MODEL,
) -> str:
    """Chat-completion body asking the caller to invoke a function"""
    return json.dumps({
        "id": completion_id,
        "object": "chat.completion",
        "created": created,
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {
                    "role": "assistant",
                    "content": None,
                    "function_call": {
                        "name": name,
                        "arguments": json.dumps(arguments, indent=2),
                    },
                },
                "finish_reason": "function_call",
            }
        ],
        "usage": {"prompt_tokens": 97, "completion_tokens": 52, "total_tokens": 149},
    }, indent=2)


def text_body(
    content: str,
    completion_id: str = "chatcmpl-8GRu6o9Qf9JFAebDqpj76H5fl6Naz",
    created: int = 1698931202,
    model: str = DEFAULT_MODEL,
) -> str:
    """Chat-completion body carrying the final answer"""
    return json.dumps({
        "id": completion_id,
        "object": "chat.completion",
        "created": created,
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 159, "completion_tokens": 13, "total_tokens": 172},
    }, indent=2)


def completions_matcher(
    credential: str = DEFAULT_CREDENTIAL,
    path: str = COMPLETIONS_PATH,
) -> RequestMatcher:
    return RequestMatcher.post(path, headers={"Authorization": f"Bearer {credential}"})


def script_tool_exchange(
    driver: ScriptedExchangeDriver,
    tool_calls: int = 1,
    *,
    tool_name: str = TOOL_NAME,
    arguments: Optional[Dict[str, Any]] = None,
    reply: str = FINAL_REPLY,
    credential: str = DEFAULT_CREDENTIAL,
    path: str = COMPLETIONS_PATH,
    states: Optional[Sequence[Enum]] = None,
) -> List[ScriptedRule]:
    """
    Script ``tool_calls`` function-call turns followed by one text turn.

    The turns walk through ``states`` (default: every member of the driver's
    state enum, starting with its initial state) and the last turn moves back
    to the first state, so the script can be replayed after ``reset()``.

    Args:
        driver: Driver to register the rules on
        tool_calls: Number of function-call turns before the answer
        tool_name: Function the model asks for
        arguments: Arguments of each function call
        reply: Final text content
        credential: Bearer credential the requests must carry
        path: Completions endpoint path
        states: Ordered states to walk through

    Returns:
        The registered rules, in turn order

    Raises:
        ConfigurationError: If there are fewer states than turns
    """
    if tool_calls < 0:
        raise ConfigurationError("tool_calls must be >= 0")

    if states is None:
        states = [driver.initial_state] + [
            s for s in driver.state_type if s != driver.initial_state
        ]
    states = list(states)

    turns = tool_calls + 1
    if turns > len(states):
        raise ConfigurationError(
            f"A {turns}-turn script needs {turns} states, only {len(states)} available"
        )

    matcher = completions_matcher(credential, path)
    args = arguments if arguments is not None else TOOL_ARGUMENTS
    rules = []
    for turn in range(turns):
        from_state = states[turn]
        if turn < tool_calls:
            body = function_call_body(tool_name, args)
            to_state = states[turn + 1]
        else:
            body = text_body(reply)
            to_state = states[0]
        rules.append(driver.stub_for(matcher, ScriptedResponse(body=body), from_state, to_state))
    return rules


def register_tool_scenario(
    driver: ScriptedExchangeDriver,
    credential: str = DEFAULT_CREDENTIAL,
) -> List[ScriptedRule]:
    """The two-turn "Tool" scenario: STARTED -> STEP_TWO -> STARTED"""
    return script_tool_exchange(
        driver,
        tool_calls=1,
        credential=credential,
        states=[ScenarioState.STARTED, ScenarioState.STEP_TWO],
    )
