"""Tests for toolreplay.exchange.driver — rule table and scenario state machine

Tests cover:
- register_rule: distinct rules accepted, duplicates and overlaps rejected
- handle_request: ordered replay, state transitions, unmatched requests
- reset / reset_all
- as_transport: driving the table through httpx
"""

from enum import Enum

import httpx
import pytest

from toolreplay.errors import ConfigurationError, UnmatchedRequestError
from toolreplay.exchange import (
    RequestMatcher,
    ScenarioState,
    ScriptedExchangeDriver,
    ScriptedResponse,
    ScriptedRule,
)

STARTED = ScenarioState.STARTED
STEP_TWO = ScenarioState.STEP_TWO

CHAT = RequestMatcher.post("/v1/chat/completions", {"Authorization": "Bearer whatever"})
RESPONSE_A = ScriptedResponse(body='{"turn": "A"}')
RESPONSE_B = ScriptedResponse(body='{"turn": "B"}')


class OtherState(Enum):
    ONE = "one"
    TWO = "two"


@pytest.fixture
def two_turn_driver(driver):
    driver.stub_for(CHAT, RESPONSE_A, STARTED, STEP_TWO)
    driver.stub_for(CHAT, RESPONSE_B, STEP_TWO, STARTED)
    return driver


# =========================================================================
# register_rule
# =========================================================================


class TestRegisterRule:

    def test_distinct_pairs_accepted(self, driver):
        driver.register_rule(ScriptedRule(CHAT, STARTED, RESPONSE_A, STEP_TWO))
        driver.register_rule(ScriptedRule(CHAT, STEP_TWO, RESPONSE_B, STARTED))
        driver.register_rule(ScriptedRule(RequestMatcher.post("/v1/embeddings"), STARTED, RESPONSE_A, STARTED))
        assert len(driver.rules) == 3

    def test_duplicate_pair_rejected(self, driver):
        driver.register_rule(ScriptedRule(CHAT, STARTED, RESPONSE_A, STEP_TWO))
        with pytest.raises(ConfigurationError, match="Duplicate"):
            driver.register_rule(ScriptedRule(CHAT, STARTED, RESPONSE_B, STARTED))
        assert len(driver.rules) == 1

    def test_overlapping_matcher_rejected(self, driver):
        driver.register_rule(ScriptedRule(CHAT, STARTED, RESPONSE_A, STEP_TWO))
        loose = RequestMatcher.post("/v1/chat/completions")
        with pytest.raises(ConfigurationError, match="Ambiguous"):
            driver.register_rule(ScriptedRule(loose, STARTED, RESPONSE_B, STARTED))

    def test_conflicting_credentials_accepted(self, driver):
        other = RequestMatcher.post("/v1/chat/completions", {"Authorization": "Bearer other"})
        driver.register_rule(ScriptedRule(CHAT, STARTED, RESPONSE_A, STEP_TWO))
        driver.register_rule(ScriptedRule(other, STARTED, RESPONSE_B, STARTED))
        assert len(driver.rules) == 2

    def test_foreign_state_enum_rejected(self, driver):
        with pytest.raises(ConfigurationError, match="not a ScenarioState"):
            driver.register_rule(ScriptedRule(CHAT, OtherState.ONE, RESPONSE_A, STEP_TWO))

    def test_custom_state_enum(self):
        custom = ScriptedExchangeDriver(initial_state=OtherState.ONE)
        custom.stub_for(CHAT, RESPONSE_A, OtherState.ONE, OtherState.TWO)
        assert custom.transitions() == [(OtherState.ONE, CHAT, OtherState.TWO)]

    def test_stub_for_defaults_to_initial_state(self, driver):
        rule = driver.stub_for(CHAT, RESPONSE_A)
        assert rule.from_state is STARTED
        assert rule.to_state is STARTED


# =========================================================================
# handle_request
# =========================================================================


class TestHandleRequest:

    def test_two_turn_cycle(self, two_turn_driver, completion_request):
        assert two_turn_driver.handle_request(completion_request) is RESPONSE_A
        assert two_turn_driver.current_state is STEP_TWO
        assert two_turn_driver.handle_request(completion_request) is RESPONSE_B
        assert two_turn_driver.current_state is STARTED

    def test_cycle_is_repeatable(self, two_turn_driver, completion_request):
        for _ in range(3):
            assert two_turn_driver.handle_request(completion_request) is RESPONSE_A
            assert two_turn_driver.handle_request(completion_request) is RESPONSE_B
        assert two_turn_driver.current_state is STARTED
        assert len(two_turn_driver.served_requests) == 6

    def test_unscripted_request_raises(self, two_turn_driver, make_request):
        request = make_request(path="/v1/completions")
        with pytest.raises(UnmatchedRequestError) as exc_info:
            two_turn_driver.handle_request(request)
        assert exc_info.value.request is request
        assert exc_info.value.state is STARTED
        assert two_turn_driver.unmatched_requests == [request]

    def test_unmatched_does_not_advance(self, two_turn_driver, completion_request, make_request):
        with pytest.raises(UnmatchedRequestError):
            two_turn_driver.handle_request(make_request(auth="Bearer wrong"))
        assert two_turn_driver.current_state is STARTED
        assert two_turn_driver.handle_request(completion_request) is RESPONSE_A

    def test_rule_for_other_state_does_not_fire(self, driver, completion_request):
        driver.stub_for(CHAT, RESPONSE_B, STEP_TWO, STARTED)
        with pytest.raises(UnmatchedRequestError):
            driver.handle_request(completion_request)

    def test_empty_table_never_falls_back(self, driver, completion_request):
        with pytest.raises(UnmatchedRequestError):
            driver.handle_request(completion_request)


# =========================================================================
# reset / reset_all
# =========================================================================


class TestReset:

    def test_reset_returns_to_initial_state(self, two_turn_driver, completion_request):
        two_turn_driver.handle_request(completion_request)
        assert two_turn_driver.current_state is STEP_TWO

        two_turn_driver.reset()

        assert two_turn_driver.current_state is STARTED
        assert two_turn_driver.served_requests == []
        assert len(two_turn_driver.rules) == 2
        assert two_turn_driver.handle_request(completion_request) is RESPONSE_A

    def test_reset_clears_unmatched(self, driver, make_request):
        with pytest.raises(UnmatchedRequestError):
            driver.handle_request(make_request())
        driver.reset()
        assert driver.unmatched_requests == []

    def test_reset_all_drops_rules(self, two_turn_driver, completion_request):
        two_turn_driver.handle_request(completion_request)
        two_turn_driver.reset_all()
        assert two_turn_driver.rules == []
        assert two_turn_driver.current_state is STARTED


# =========================================================================
# as_transport
# =========================================================================


class TestTransport:

    def test_replays_through_httpx(self, two_turn_driver):
        with httpx.Client(transport=two_turn_driver.as_transport(), base_url="http://stub") as client:
            first = client.post("/v1/chat/completions", headers={"Authorization": "Bearer whatever"}, json={})
            second = client.post("/v1/chat/completions", headers={"Authorization": "Bearer whatever"}, json={})

        assert first.json() == {"turn": "A"}
        assert second.json() == {"turn": "B"}
        assert first.headers["content-type"] == "application/json"
        assert two_turn_driver.current_state is STARTED

    def test_unmatched_propagates(self, two_turn_driver):
        with httpx.Client(transport=two_turn_driver.as_transport(), base_url="http://stub") as client:
            with pytest.raises(UnmatchedRequestError):
                client.post("/v1/chat/completions", json={})
