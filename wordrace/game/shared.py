"""
Shared Game State - the one place game state is mutated.

Every public operation runs as a single indivisible unit under an
exclusive lock. The lock is only ever held across in-memory work:
snapshots are encoded and queued onto outboxes (non-blocking), while the
actual socket writes happen later in each connection's writer task.

Because each operation publishes its snapshot before releasing the lock,
every outbox sees snapshots in the same total order as the mutations.

Round lifecycle:
    The game lives in a single state, awaiting a submission. A submission
    matching the active word triggers one atomic transition:
    round += 1, winner recorded, new word chosen, all typed progress cleared.
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator, Sequence
import logging
import random
import threading

from .exceptions import StateAccessError
from .state import (
    GameState,
    Player,
    Snapshot,
    matches_word,
    sanitize_typed,
    saturating_increment,
)
from .words import WORD_BANK, choose_word

if TYPE_CHECKING:
    from ..session.broadcast import BroadcastDispatcher
    from ..session.outbox import Outbox

logger = logging.getLogger(__name__)


class SharedGameState:
    """
    Thread-safe owner of the process-wide GameState.

    Usage:
        game = SharedGameState()

        player_id, snapshot = game.join("ada")
        snapshot = game.update_typed(player_id, "Bri")
        snapshot = game.submit_word(player_id, "bridge")
        snapshot = game.leave(player_id)
    """

    def __init__(
        self,
        word_bank: Sequence[str] = WORD_BANK,
        dispatcher: BroadcastDispatcher | None = None,
        rng: random.Random | None = None,
        first_word: str | None = None,
    ):
        if dispatcher is None:
            from ..session.broadcast import BroadcastDispatcher
            dispatcher = BroadcastDispatcher()

        self._word_bank = tuple(word_bank)
        self._rng = rng
        self._dispatcher = dispatcher
        self._lock = threading.Lock()
        self._poisoned = False
        self._state = GameState(
            current_word=first_word or choose_word(None, self._word_bank, rng),
        )

    @property
    def dispatcher(self) -> BroadcastDispatcher:
        return self._dispatcher

    @contextmanager
    def _exclusive(self) -> Iterator[GameState]:
        """
        Hold the lock for one operation.

        An exception escaping a mutation may leave GameState half-applied,
        so the lock is marked poisoned and all later access fails.
        """
        with self._lock:
            if self._poisoned:
                raise StateAccessError("game state lock poisoned by an earlier failure")
            try:
                yield self._state
            except Exception as exc:
                self._poisoned = True
                raise StateAccessError(f"game state lock poisoned: {exc}") from exc

    # =========================================================================
    # Operations
    # =========================================================================

    def join(
        self,
        name: str | None = None,
        outbox: Outbox | None = None,
    ) -> tuple[int, Snapshot]:
        """
        Register a new player.

        With an outbox, the newcomer receives Welcome followed by the
        snapshot; everyone else receives the snapshot.
        """
        with self._exclusive() as state:
            player_id = state.allocate_id()
            player = Player(
                player_id=player_id,
                name=name if name is not None else f"player-{player_id}",
                outbox=outbox,
            )
            state.players[player_id] = player
            snapshot = state.snapshot()

            pruned = []
            if outbox is not None and not self._dispatcher.welcome(player, snapshot):
                del state.players[player_id]
                pruned.append(player_id)
                snapshot = state.snapshot()
            pruned += self._dispatcher.broadcast(state.players, snapshot, exclude=player_id)

        logger.info("Player %d joined as %r", player_id, player.name)
        self._log_pruned(pruned)
        return player_id, snapshot

    def update_typed(self, player_id: int, raw_text: str) -> Snapshot:
        """Store the sanitized typing progress of a player."""
        with self._exclusive() as state:
            player = state.players.get(player_id)
            if player is not None:
                player.typed = sanitize_typed(raw_text, len(state.current_word))
            snapshot, pruned = self._publish(state)

        self._log_pruned(pruned)
        return snapshot

    def submit_word(self, player_id: int, raw_word: str) -> Snapshot:
        """
        Check a guess against the active word.

        The first matching submission wins the round. Anything else,
        including a guess from an unknown player, changes nothing.
        """
        with self._exclusive() as state:
            player = state.players.get(player_id)
            won = player is not None and matches_word(raw_word, state.current_word)
            if won:
                solved = state.current_word
                self._advance_round(state, player)
            snapshot, pruned = self._publish(state)

        if won:
            logger.info(
                "Round %d won by player %d (%r) with %r",
                snapshot.round - 1, player_id, snapshot.winner_last_round, solved,
            )
        self._log_pruned(pruned)
        return snapshot

    def rename(self, player_id: int, name: str) -> Snapshot:
        """Change a display name. Names need not be unique."""
        with self._exclusive() as state:
            player = state.players.get(player_id)
            if player is not None:
                player.name = name
            snapshot, pruned = self._publish(state)

        self._log_pruned(pruned)
        return snapshot

    def leave(self, player_id: int) -> Snapshot:
        """Remove a player from the registry."""
        with self._exclusive() as state:
            player = state.players.pop(player_id, None)
            snapshot, pruned = self._publish(state)

        if player is not None:
            logger.info("Player %d (%r) left", player_id, player.name)
        self._log_pruned(pruned)
        return snapshot

    def snapshot(self) -> Snapshot:
        """Current view without mutating anything."""
        with self._exclusive() as state:
            return state.snapshot()

    @property
    def player_count(self) -> int:
        with self._exclusive() as state:
            return len(state.players)

    # =========================================================================
    # Internals (lock held)
    # =========================================================================

    def _advance_round(self, state: GameState, winner: Player) -> None:
        """Apply the round transition for a correct submission."""
        winner.score = saturating_increment(winner.score)
        state.winner_last_round = winner.name
        state.round = saturating_increment(state.round)
        state.current_word = choose_word(state.current_word, self._word_bank, self._rng)
        for player in state.players.values():
            player.typed = ""

    def _publish(self, state: GameState) -> tuple[Snapshot, list[int]]:
        snapshot = state.snapshot()
        pruned = self._dispatcher.broadcast(state.players, snapshot)
        return snapshot, pruned

    @staticmethod
    def _log_pruned(pruned: list[int]) -> None:
        for player_id in pruned:
            logger.info("Dropped player %d after failed delivery", player_id)
