"""
API Module - network interface of the game server.

Players talk to the server over a single WebSocket carrying JSON frames.
Inbound frames decode into a closed set of client intents; outbound
frames are Welcome (once) and State (after every change).

A small HTTP surface covers health checks and the static client.
"""

from .schemas import (
    # Client -> Server
    ClientMessage,
    JoinMessage,
    TypedProgressMessage,
    SubmitWordMessage,
    # Server -> Client
    ServerMessage,
    WelcomeMessage,
    StateMessage,
    PlayerInfo,
    # Codec
    decode_client_message,
    decode_server_message,
    encode_server_message,
    encode_client_message,
)
from .app import create_app

__all__ = [
    "ClientMessage",
    "JoinMessage",
    "TypedProgressMessage",
    "SubmitWordMessage",
    "ServerMessage",
    "WelcomeMessage",
    "StateMessage",
    "PlayerInfo",
    "decode_client_message",
    "decode_server_message",
    "encode_server_message",
    "encode_client_message",
    "create_app",
]
