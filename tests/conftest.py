"""Shared fixtures: fresh driver, counter and request factory per test."""

import pytest

from toolreplay.exchange import InboundRequest, ScriptedExchangeDriver
from toolreplay.tools import ToolInvocationCounter


def _make_request(
    path: str = "/v1/chat/completions",
    auth: str = "Bearer whatever",
    method: str = "POST",
    body: bytes = b"{}",
) -> InboundRequest:
    headers = {"Authorization": auth} if auth is not None else {}
    return InboundRequest(method=method, path=path, headers=headers, body=body)


@pytest.fixture
def driver():
    return ScriptedExchangeDriver()


@pytest.fixture
def counter():
    return ToolInvocationCounter("doSomething")


@pytest.fixture
def make_request():
    return _make_request


@pytest.fixture
def completion_request():
    return _make_request()
