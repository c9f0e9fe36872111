"""HTTP surfaces: the scripted stub server and the chat WebSocket."""

from .stub import StubServer, create_stub_app
from .chat_socket import create_chat_app, create_chat_router

__all__ = [
    "StubServer",
    "create_stub_app",
    "create_chat_app",
    "create_chat_router",
]
