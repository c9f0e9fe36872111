"""Serve a ScriptedExchangeDriver over real HTTP (FastAPI app + uvicorn thread)."""

import asyncio
import logging
import threading
import time
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from ..errors import ConfigurationError, UnmatchedRequestError
from ..exchange.driver import ScriptedExchangeDriver
from ..exchange.models import InboundRequest

logger = logging.getLogger(__name__)

_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def create_stub_app(driver: ScriptedExchangeDriver) -> FastAPI:
    """FastAPI app that answers every request from *driver*; unmatched -> 404"""
    app = FastAPI(title="toolreplay-stub")

    @app.api_route("/{path:path}", methods=_METHODS)
    async def replay(request: Request):
        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"
        inbound = InboundRequest(
            method=request.method,
            path=path,
            headers=dict(request.headers),
            body=await request.body(),
        )
        try:
            scripted = driver.handle_request(inbound)
        except UnmatchedRequestError as e:
            return JSONResponse(
                status_code=404,
                content={
                    "error": "unmatched request",
                    "method": inbound.method,
                    "path": inbound.path,
                    "state": e.state.value,
                },
            )
        return Response(
            content=scripted.body,
            status_code=scripted.status,
            headers=dict(scripted.headers),
        )

    return app


class StubServer:
    """
    Background uvicorn server bound to one driver.

    Usage:
        with StubServer(driver, port=0) as server:
            httpx.post(f"{server.url}/v1/chat/completions", ...)
        # port released here, even if the block raised
    """

    def __init__(
        self,
        driver: ScriptedExchangeDriver,
        host: str = "127.0.0.1",
        port: int = 8089,
        startup_timeout: float = 5.0,
    ):
        self.driver = driver
        self.host = host
        self.port = port
        self.startup_timeout = startup_timeout
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start serving; blocks the calling thread until the port is bound"""
        if not self._launch():
            return
        deadline = time.monotonic() + self.startup_timeout
        while not self._poll_started(deadline):
            time.sleep(0.01)
        self._on_started()

    async def start_async(self) -> None:
        """Like start(), but yields to the running event loop while waiting"""
        if not self._launch():
            return
        deadline = time.monotonic() + self.startup_timeout
        while not self._poll_started(deadline):
            await asyncio.sleep(0.01)
        self._on_started()

    def _launch(self) -> bool:
        if self._server is not None:
            logger.warning("Stub server already running")
            return False

        config = uvicorn.Config(
            create_stub_app(self.driver),
            host=self.host,
            port=self.port,
            log_level="warning",
            lifespan="off",
        )
        self._server = uvicorn.Server(config)
        self._thread = threading.Thread(
            target=self._serve, args=(self._server,), name="toolreplay-stub", daemon=True
        )
        self._thread.start()
        return True

    def _serve(self, server: uvicorn.Server) -> None:
        try:
            server.run()
        except SystemExit as e:
            # uvicorn exits when the socket cannot be bound
            logger.error(f"Stub server on {self.host}:{self.port} exited with code {e.code}")

    def _poll_started(self, deadline: float) -> bool:
        if self._server.started:
            return True
        if not self._thread.is_alive():
            self._server = None
            self._thread = None
            raise ConfigurationError(f"Stub server could not bind {self.host}:{self.port}")
        if time.monotonic() > deadline:
            self.stop()
            raise ConfigurationError(
                f"Stub server did not start within {self.startup_timeout}s"
            )
        return False

    def _on_started(self) -> None:
        self.port = self._bound_port()
        logger.info(f"Stub server listening on {self.url}")

    def _bound_port(self) -> int:
        for server in getattr(self._server, "servers", None) or []:
            for sock in server.sockets:
                return sock.getsockname()[1]
        return self.port

    def stop(self) -> None:
        if self._server is None:
            return
        self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout=self.startup_timeout)
        self._server = None
        self._thread = None
        logger.info(f"Stub server on {self.url} stopped")

    def __enter__(self) -> "StubServer":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
