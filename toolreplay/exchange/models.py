"""
toolreplay Exchange Models - Data structures for scripted request/response replay
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Tuple

import httpx


class ScenarioState(str, Enum):
    """Position of the driver inside a scripted multi-turn conversation"""
    STARTED = "Started"
    STEP_TWO = "Step two"
    STEP_THREE = "Step three"


@dataclass
class InboundRequest:
    """
    A request as seen by the driver.

    Attributes:
        method: HTTP method, upper-cased
        path: Request path including the query string
        headers: Header map with lower-cased names
        body: Raw request body (never inspected by matching)
    """
    method: str
    path: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def __post_init__(self):
        self.method = self.method.upper()
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    @classmethod
    def from_httpx(cls, request: httpx.Request) -> "InboundRequest":
        """Build from an httpx request (its body must already be read)"""
        return cls(
            method=request.method,
            path=request.url.raw_path.decode("ascii"),
            headers=dict(request.headers.items()),
            body=request.content,
        )


@dataclass(frozen=True)
class RequestMatcher:
    """
    Predicate over method, exact path and required headers.

    Example:
        RequestMatcher.post(
            "/v1/chat/completions",
            headers={"Authorization": "Bearer whatever"},
        )
    """
    method: str
    path: str
    headers: Tuple[Tuple[str, str], ...] = ()

    def __post_init__(self):
        # Normalise so that equality and hashing ignore header-name case and order
        object.__setattr__(self, "method", self.method.upper())
        normalised = tuple(sorted((k.lower(), v) for k, v in dict(self.headers).items()))
        object.__setattr__(self, "headers", normalised)

    @classmethod
    def post(cls, path: str, headers: Dict[str, str] = None) -> "RequestMatcher":
        return cls(method="POST", path=path, headers=tuple((headers or {}).items()))

    def matches(self, request: InboundRequest) -> bool:
        if request.method != self.method or request.path != self.path:
            return False
        return all(request.headers.get(name) == value for name, value in self.headers)

    def overlaps(self, other: "RequestMatcher") -> bool:
        """True if some request could satisfy both matchers"""
        if self.method != other.method or self.path != other.path:
            return False
        mine = dict(self.headers)
        for name, value in other.headers:
            if name in mine and mine[name] != value:
                return False
        return True


@dataclass(frozen=True)
class ScriptedResponse:
    """Canned response returned when a rule fires"""
    body: str = ""
    status: int = 200
    headers: Tuple[Tuple[str, str], ...] = (("Content-Type", "application/json"),)

    def to_httpx(self) -> httpx.Response:
        return httpx.Response(
            status_code=self.status,
            headers=list(self.headers),
            content=self.body.encode("utf-8"),
        )


@dataclass(frozen=True)
class ScriptedRule:
    """
    A scripted transition: when ``matcher`` accepts a request while the
    driver is in ``from_state``, answer with ``response`` and move to
    ``to_state``.
    """
    matcher: RequestMatcher
    from_state: Enum
    response: ScriptedResponse
    to_state: Enum
