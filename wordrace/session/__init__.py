"""
Session Module - per-connection actors and snapshot fan-out.

A session represents one connected player:
- Joins the shared game on accept
- Owns a bounded outbox drained by its own writer task
- Forwards decoded intents to the shared state
- Leaves the game when the socket closes

Connections never share anything except the SharedGameState.
"""

from .outbox import Outbox
from .broadcast import BroadcastDispatcher
from .connection import PlayerConnection, Transport

__all__ = [
    "Outbox",
    "BroadcastDispatcher",
    "PlayerConnection",
    "Transport",
]
