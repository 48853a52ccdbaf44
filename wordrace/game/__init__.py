"""
Game Core - the authoritative game state and its rules.

The core:
1. Picks target words from a fixed bank
2. Owns the single GameState and serializes every mutation
3. Advances rounds when a submission matches the active word
4. Derives immutable snapshots for broadcast
"""

from .exceptions import WordRaceError, ProtocolError, DeliveryError, StateAccessError
from .state import GameState, Player, PlayerStanding, Snapshot, sanitize_typed, matches_word
from .words import WORD_BANK, choose_word
from .shared import SharedGameState

__all__ = [
    "WordRaceError",
    "ProtocolError",
    "DeliveryError",
    "StateAccessError",
    "GameState",
    "Player",
    "PlayerStanding",
    "Snapshot",
    "sanitize_typed",
    "matches_word",
    "WORD_BANK",
    "choose_word",
    "SharedGameState",
]
