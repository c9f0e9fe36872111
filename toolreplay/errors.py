"""
toolreplay errors - Exception hierarchy shared by the driver, tools and harness

All errors are fail-fast: nothing in the package retries or recovers them.
"""

from typing import Any, Optional


class ToolReplayError(Exception):
    """Base class for all toolreplay errors"""


class ConfigurationError(ToolReplayError):
    """Raised at setup time for an invalid script, tool table or config file"""


class UnmatchedRequestError(ToolReplayError):
    """
    Raised when no scripted rule matches a request in the current state.

    Attributes:
        request: The InboundRequest that went unmatched (may be None when
            the error is reconstructed from a transport failure)
        state: Scenario state the driver was in
    """

    def __init__(self, request: Any = None, state: Any = None, message: Optional[str] = None):
        self.request = request
        self.state = state
        if message is None:
            if request is not None:
                message = (
                    f"No scripted rule matches {request.method} {request.path} "
                    f"in state {state!r}"
                )
            else:
                message = f"Unmatched request in state {state!r}"
        super().__init__(message)


class AssertionMismatch(ToolReplayError, AssertionError):
    """
    Raised when an exchange result diverges from what the test expected.

    Subclasses AssertionError so test runners report it as a failed assertion.
    """

    def __init__(self, what: str, expected: Any, actual: Any):
        self.what = what
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {what} == {expected!r}, got {actual!r}")
