"""
toolreplay Exchange Driver - Deterministic replay of a scripted multi-turn exchange

The driver owns a rule table keyed by scenario state. Each inbound request
is matched against the rules of the current state; the matching rule's
response is returned and the driver moves to the rule's next state.

Note:
    A driver is not thread-safe. Use one driver per test case; tests that
    run in parallel must each construct their own.
"""

import logging
from enum import Enum
from typing import List, Optional, Tuple

import httpx

from ..errors import ConfigurationError, UnmatchedRequestError
from .models import (
    InboundRequest,
    RequestMatcher,
    ScenarioState,
    ScriptedResponse,
    ScriptedRule,
)

logger = logging.getLogger(__name__)


class ScriptedExchangeDriver:
    """
    Scripted request/response table with a scenario state machine.

    Usage:
        driver = ScriptedExchangeDriver()
        matcher = RequestMatcher.post("/v1/chat/completions")
        driver.stub_for(matcher, first, ScenarioState.STARTED, ScenarioState.STEP_TWO)
        driver.stub_for(matcher, second, ScenarioState.STEP_TWO, ScenarioState.STARTED)

        response = driver.handle_request(request)   # -> first
        response = driver.handle_request(request)   # -> second

        driver.reset()  # back to STARTED, rules kept
    """

    def __init__(self, initial_state: Enum = ScenarioState.STARTED):
        self.initial_state = initial_state
        self.current_state = initial_state
        self._rules: List[ScriptedRule] = []
        self.served_requests: List[Tuple[InboundRequest, ScriptedRule]] = []
        self.unmatched_requests: List[InboundRequest] = []

    @property
    def state_type(self) -> type:
        return type(self.initial_state)

    @property
    def rules(self) -> List[ScriptedRule]:
        return list(self._rules)

    # ===== Setup =====

    def register_rule(self, rule: ScriptedRule) -> None:
        """
        Add a rule to the table.

        Raises:
            ConfigurationError: If the rule's states do not belong to this
                driver's state enum, or if an existing rule for the same
                state could match the same request
        """
        for state in (rule.from_state, rule.to_state):
            if not isinstance(state, self.state_type):
                raise ConfigurationError(
                    f"State {state!r} is not a {self.state_type.__name__} member"
                )

        for existing in self._rules:
            if existing.from_state != rule.from_state:
                continue
            if existing.matcher == rule.matcher:
                raise ConfigurationError(
                    f"Duplicate rule for {rule.matcher.method} {rule.matcher.path} "
                    f"in state {rule.from_state!r}"
                )
            if existing.matcher.overlaps(rule.matcher):
                raise ConfigurationError(
                    f"Ambiguous rule for {rule.matcher.method} {rule.matcher.path} "
                    f"in state {rule.from_state!r}: overlaps an existing rule"
                )

        self._rules.append(rule)
        logger.info(
            f"Registered rule: {rule.matcher.method} {rule.matcher.path} "
            f"[{rule.from_state.value} -> {rule.to_state.value}]"
        )

    def stub_for(
        self,
        matcher: RequestMatcher,
        response: ScriptedResponse,
        from_state: Optional[Enum] = None,
        to_state: Optional[Enum] = None,
    ) -> ScriptedRule:
        """Build and register a rule; states default to the initial state"""
        rule = ScriptedRule(
            matcher=matcher,
            from_state=from_state if from_state is not None else self.initial_state,
            response=response,
            to_state=to_state if to_state is not None else self.initial_state,
        )
        self.register_rule(rule)
        return rule

    def transitions(self) -> List[Tuple[Enum, RequestMatcher, Enum]]:
        """Exhaustive transition table as (from_state, matcher, to_state)"""
        return [(r.from_state, r.matcher, r.to_state) for r in self._rules]

    # ===== Replay =====

    def handle_request(self, request: InboundRequest) -> ScriptedResponse:
        """
        Match a request against the current state and advance.

        Args:
            request: Inbound request description

        Returns:
            The scripted response of the matching rule

        Raises:
            UnmatchedRequestError: If no rule for the current state matches
        """
        for rule in self._rules:
            if rule.from_state == self.current_state and rule.matcher.matches(request):
                logger.debug(
                    f"Matched {request.method} {request.path}: "
                    f"{rule.from_state.value} -> {rule.to_state.value}"
                )
                self.current_state = rule.to_state
                self.served_requests.append((request, rule))
                return rule.response

        self.unmatched_requests.append(request)
        logger.warning(
            f"Unmatched request {request.method} {request.path} "
            f"in state {self.current_state.value!r}"
        )
        raise UnmatchedRequestError(request, self.current_state)

    def as_transport(self) -> httpx.MockTransport:
        """Expose the driver as an httpx transport (no network involved)"""

        def handler(request: httpx.Request) -> httpx.Response:
            return self.handle_request(InboundRequest.from_httpx(request)).to_httpx()

        return httpx.MockTransport(handler)

    # ===== Lifecycle =====

    def reset(self) -> None:
        """Return to the initial state and clear request logs; rules are kept"""
        self.current_state = self.initial_state
        self.served_requests.clear()
        self.unmatched_requests.clear()

    def reset_all(self) -> None:
        """Reset state and logs and drop every rule"""
        self.reset()
        self._rules.clear()
