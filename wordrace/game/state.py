"""
Game State - the authoritative data model and its derived snapshots.

Design principles:
- One mutable GameState per process, mutated only by SharedGameState
- Snapshots are immutable and fully derived, safe to hand to any task
- Player identity is the numeric id; names carry no meaning
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..session.outbox import Outbox


# Counters behave like unsigned 32-bit integers that stop at the top.
COUNTER_MAX = 2**32 - 1


def saturating_increment(value: int, limit: int = COUNTER_MAX) -> int:
    """Add one, never exceeding `limit`."""
    return value + 1 if value < limit else limit


def sanitize_typed(raw_text: str, word_length: int) -> str:
    """
    Reduce raw input to a comparable typing prefix.

    Keeps ASCII letters only, lowercases them, and truncates to the
    length of the active word:
        sanitize_typed("Br1Dge-Extra", 6) -> "brdgee"
    """
    letters = (c.lower() for c in raw_text if c.isascii() and c.isalpha())
    return "".join(letters)[:word_length]


def matches_word(raw_word: str, current_word: str) -> bool:
    """Whitespace-trimmed, ASCII case-insensitive comparison."""
    return _ascii_lower(raw_word.strip()) == _ascii_lower(current_word)


def _ascii_lower(text: str) -> str:
    return "".join(c.lower() if c.isascii() else c for c in text)


@dataclass
class Player:
    """
    A connected player.

    The outbox is the player's outbound delivery path. It is None for
    players driven directly through SharedGameState (tests, tooling).
    """
    player_id: int
    name: str
    score: int = 0
    typed: str = ""
    outbox: Outbox | None = field(default=None, repr=False, compare=False)


@dataclass
class GameState:
    """
    The single source of truth for an in-progress game.

    Never touched directly by connections: SharedGameState owns it and
    serializes every mutation.
    """
    current_word: str
    round: int = 1
    winner_last_round: str | None = None
    players: dict[int, Player] = field(default_factory=dict)
    next_player_id: int = 1

    def allocate_id(self) -> int:
        """Hand out the next id. Ids are never reused."""
        player_id = self.next_player_id
        self.next_player_id += 1
        return player_id

    def snapshot(self) -> Snapshot:
        """Derive the broadcastable view of this instant."""
        standings = sorted(
            (
                PlayerStanding(
                    id=p.player_id,
                    name=p.name,
                    score=p.score,
                    typed=p.typed,
                )
                for p in self.players.values()
            ),
            key=lambda s: (-s.score, s.id),
        )
        return Snapshot(
            round=self.round,
            current_word=self.current_word,
            winner_last_round=self.winner_last_round,
            players=tuple(standings),
        )


@dataclass(frozen=True)
class PlayerStanding:
    """One row of the scoreboard."""
    id: int
    name: str
    score: int
    typed: str


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable view of GameState at one instant.

    Players are ordered by descending score, then ascending id.
    """
    round: int
    current_word: str
    winner_last_round: str | None
    players: tuple[PlayerStanding, ...] = ()

    def player(self, player_id: int) -> PlayerStanding | None:
        for standing in self.players:
            if standing.id == player_id:
                return standing
        return None

    @property
    def player_ids(self) -> list[int]:
        return [standing.id for standing in self.players]
