"""
Exchange harness - run one scripted tool-calling exchange and check its outcome.

The harness owns the scoped resources of a test case: driver state and
counter are reset on entry, the LLM client is built against the driver
(in-process transport or a real stub server), and everything is released
on exit even when an assertion failed.

Usage::

    driver = ScriptedExchangeDriver()
    register_tool_scenario(driver)

    async with ExchangeHarness(HarnessConfig(), driver=driver) as harness:
        await harness.invoke(expected_calls=1)
"""

import logging
from typing import Optional

import httpx
import openai

from .chat import ChatService
from .config import HarnessConfig
from .errors import AssertionMismatch, ToolReplayError, UnmatchedRequestError
from .exchange.driver import ScriptedExchangeDriver
from .exchange.scenarios import FINAL_REPLY, TOOL_NAME
from .llm.base import LLMConfig
from .llm.openai_client import OpenAIClient
from .server.stub import StubServer
from .tools.counter import ToolInvocationCounter
from .tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ExchangeHarness:
    """
    Scoped driver + agent + counter for one test case.

    Args:
        config: Harness settings (transport, credential, prompt, ...)
        driver: Scripted driver; a fresh one is created when None
        counter: Counter exposed to the model as a tool
        expected_reply: Final text ``invoke`` expects
        system_prompt: Optional system message for every exchange
    """

    def __init__(
        self,
        config: Optional[HarnessConfig] = None,
        driver: Optional[ScriptedExchangeDriver] = None,
        counter: Optional[ToolInvocationCounter] = None,
        expected_reply: str = FINAL_REPLY,
        system_prompt: Optional[str] = None,
    ):
        self.config = config or HarnessConfig()
        self.driver = driver or ScriptedExchangeDriver()
        self.counter = counter or ToolInvocationCounter(TOOL_NAME)
        self.registry = ToolRegistry([self.counter.as_tool()])
        self.expected_reply = expected_reply
        self.system_prompt = system_prompt

        self.service: Optional[ChatService] = None
        self._server: Optional[StubServer] = None
        self._http_client: Optional[httpx.AsyncClient] = None
        self._llm_client: Optional[OpenAIClient] = None

    # ===== Lifecycle =====

    def setup(self) -> None:
        """Reset scenario state and invocation count (rules are kept)"""
        self.driver.reset()
        self.counter.reset()

    async def start(self) -> None:
        config = self.config
        if config.transport == "http":
            self._server = StubServer(self.driver, host=config.host, port=config.port)
            await self._server.start_async()
            config = config.with_port(self._server.port)
        else:
            self._http_client = httpx.AsyncClient(transport=self.driver.as_transport())

        self._llm_client = OpenAIClient(
            config=LLMConfig(
                api_key=config.api_key,
                model=config.model,
                base_url=config.base_url,
                timeout=config.timeout,
                max_retries=0,
            ),
            http_client=self._http_client,
        )
        self.service = ChatService(
            self._llm_client,
            self.registry,
            system_prompt=self.system_prompt,
            max_iterations=config.max_iterations,
        )
        logger.debug(f"Harness started ({config.transport}) against {config.base_url}")

    async def stop(self) -> None:
        try:
            if self._llm_client is not None:
                await self._llm_client.close()
            if self._http_client is not None:
                await self._http_client.aclose()
        finally:
            self._llm_client = None
            self._http_client = None
            self.service = None
            if self._server is not None:
                self._server.stop()
                self._server = None

    async def __aenter__(self) -> "ExchangeHarness":
        self.setup()
        try:
            await self.start()
        except BaseException:
            await self.stop()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    # ===== Exchange =====

    async def chat(self, message: str) -> str:
        """
        Run one exchange and return the final text.

        Raises:
            UnmatchedRequestError: If a request of the exchange had no scripted rule
        """
        if self.service is None:
            raise ToolReplayError("Harness not started; use 'async with ExchangeHarness(...)'")

        baseline = len(self.driver.unmatched_requests)
        try:
            return await self.service.chat(message)
        except UnmatchedRequestError:
            # In-process transport: depending on the openai release the driver's
            # error either reaches us as is or wrapped in APIConnectionError
            raise
        except openai.APIError as e:
            # Wrapped transport error, or the stub server's 404 over HTTP
            unmatched = self.driver.unmatched_requests[baseline:]
            if unmatched:
                raise UnmatchedRequestError(unmatched[0], self.driver.current_state) from e
            raise

    async def invoke(self, expected_calls: int) -> str:
        """
        Send the configured prompt and check reply and invocation count.

        Args:
            expected_calls: Number of times the tool must have been called
                since the last ``setup()``

        Raises:
            AssertionMismatch: If the reply or the count differ
        """
        actual = await self.chat(self.config.prompt)
        if actual != self.expected_reply:
            raise AssertionMismatch("reply", self.expected_reply, actual)
        if self.counter.count() != expected_calls:
            raise AssertionMismatch("tool invocation count", expected_calls, self.counter.count())
        return actual
