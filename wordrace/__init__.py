"""
Wordrace - Authoritative real-time word-race game server.

Players connect over a WebSocket, race to type the current target word,
and the first correct submission wins the round. The server owns the
single source of truth and provides:
- Atomic round transitions under concurrent submissions
- Snapshot broadcast to every connected player
- Failure isolation between connections
"""

__version__ = "0.1.0"
