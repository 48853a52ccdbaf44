"""
Exception hierarchy for the game server.

Only failures live here. Semantic no-ops (an unknown player id, a wrong
guess) are not exceptions; they leave state untouched.
"""


class WordRaceError(Exception):
    """Base class for all server errors."""
    pass


class ProtocolError(WordRaceError):
    """A client frame could not be decoded into a known message."""
    def __init__(self, reason: str, frame: str | None = None):
        self.reason = reason
        self.frame = frame
        super().__init__(f"Bad client message: {reason}")


class DeliveryError(WordRaceError):
    """An outbound frame could not be queued for a connection."""
    pass


class StateAccessError(WordRaceError):
    """
    The shared state is unusable.

    Raised when a previous lock holder failed mid-mutation, so the state
    may be half-applied. Fatal to the calling connection only.
    """
    pass
