"""WebSocket chat endpoint: greet on open, answer every text frame."""

import logging

from fastapi import APIRouter, FastAPI, WebSocket, WebSocketDisconnect

from ..protocols import ChatBotProtocol

logger = logging.getLogger(__name__)

DEFAULT_GREETING = "Hello, how can I help you?"


def create_chat_router(
    bot: ChatBotProtocol,
    greeting: str = DEFAULT_GREETING,
    path: str = "/chatbot",
) -> APIRouter:
    router = APIRouter()

    @router.websocket(path)
    async def chatbot(websocket: WebSocket):
        await websocket.accept()
        await websocket.send_text(greeting)
        try:
            while True:
                message = await websocket.receive_text()
                await websocket.send_text(await bot.chat(message))
        except WebSocketDisconnect:
            logger.info("Chat socket closed by client")

    return router


def create_chat_app(
    bot: ChatBotProtocol,
    greeting: str = DEFAULT_GREETING,
    path: str = "/chatbot",
) -> FastAPI:
    app = FastAPI(title="toolreplay-chat")
    app.include_router(create_chat_router(bot, greeting, path))
    return app
