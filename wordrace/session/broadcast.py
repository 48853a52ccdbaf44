"""
Broadcast Dispatcher - fans one snapshot out to every connection.

Each snapshot is encoded once and the same frame is offered to every
outbox. A sink that refuses the frame is retired on the spot: its player
is removed from the registry and its outbox closed. There is no retry and
no health probing; a failed offer is the only pruning signal.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from ..api.schemas import StateMessage, WelcomeMessage, encode_server_message

if TYPE_CHECKING:
    from ..game.state import Player, Snapshot
    from .outbox import Outbox


class BroadcastDispatcher:
    """
    Delivers server messages to player outboxes.

    Called with the game lock held, so nothing here may block.
    """

    def broadcast(
        self,
        players: dict[int, Player],
        snapshot: Snapshot,
        exclude: int | None = None,
    ) -> list[int]:
        """
        Offer the snapshot to every player with an outbox.

        Players whose delivery fails are removed from `players`.

        Returns:
            Ids of the pruned players
        """
        frame = encode_server_message(StateMessage.from_snapshot(snapshot))
        failed = []
        for player_id, player in players.items():
            if player_id == exclude or player.outbox is None:
                continue
            try:
                player.outbox.offer(frame)
            except Exception:
                failed.append(player_id)

        for player_id in failed:
            self._retire(players.pop(player_id))
        return failed

    def welcome(self, player: Player, snapshot: Snapshot) -> bool:
        """
        Greet a newcomer with its id followed by the current snapshot.

        Returns False (and closes the outbox) if delivery failed.
        """
        try:
            self.send(player.outbox, WelcomeMessage.for_player(player.player_id))
            self.send(player.outbox, StateMessage.from_snapshot(snapshot))
        except Exception:
            self._retire(player)
            return False
        return True

    def send(self, outbox: Outbox, message: WelcomeMessage | StateMessage) -> None:
        """Deliver one message to a single connection."""
        outbox.offer(encode_server_message(message))

    @staticmethod
    def _retire(player: Player) -> None:
        if player.outbox is not None:
            player.outbox.close()
