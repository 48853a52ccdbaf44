"""
Connection Actor - one player's session from accept to close.

Lifecycle:
1. Join the game; Welcome and the first snapshot land in our outbox
2. Writer task drains the outbox onto the socket
3. Reader loop decodes frames and forwards intents to the shared state;
   each intent is broadcast to every player, not just this one
4. On close or read error, leave the game so others see the departure

Failure handling:
- Malformed frames are logged and skipped, the connection stays up
- A failed socket write closes the outbox; the next broadcast prunes us
- Once the outbox is closed (pruned or failed write) the reader stops
  and the socket is closed, so a dropped client gets a close frame
- A poisoned game state ends this connection only
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Protocol, Union
import asyncio
import logging

from ..api.schemas import (
    JoinMessage,
    TypedProgressMessage,
    SubmitWordMessage,
    decode_client_message,
)
from ..config import WORDRACE_OUTBOX_SIZE
from ..game.exceptions import ProtocolError, StateAccessError
from .outbox import Outbox

if TYPE_CHECKING:
    from ..game.shared import SharedGameState
    from ..game.state import Snapshot

logger = logging.getLogger(__name__)

ClientIntent = Union[JoinMessage, TypedProgressMessage, SubmitWordMessage]


class Transport(Protocol):
    """What the transport listener provides for one connection."""

    async def receive_frame(self) -> str | None:
        """Next text frame, or None on a clean close. Raises on read errors."""
        ...

    async def send_frame(self, frame: str) -> None:
        ...

    async def close(self) -> None:
        """Close the socket from the server side."""
        ...


class PlayerConnection:
    """
    Usage:
        connection = PlayerConnection(game, transport)
        await connection.run()  # returns once the client is gone
    """

    def __init__(
        self,
        game: SharedGameState,
        transport: Transport,
        outbox_size: int = WORDRACE_OUTBOX_SIZE,
    ):
        self.game = game
        self.transport = transport
        self.outbox = Outbox(outbox_size)
        self.player_id: int | None = None

    async def run(self) -> None:
        try:
            self.player_id, _ = self.game.join(outbox=self.outbox)
        except StateAccessError as exc:
            logger.error("Refusing connection: %s", exc)
            self.outbox.close()
            return

        writer = asyncio.create_task(self._write_loop())
        reader = asyncio.create_task(self._read_loop())
        try:
            await asyncio.wait({reader, writer}, return_when=asyncio.FIRST_COMPLETED)
            if reader.done():
                reader.result()
            else:
                # Outbox closed under us: pruned, or a socket write failed.
                logger.info("Player %d dropped, closing connection", self.player_id)
                reader.cancel()
                await self.transport.close()
        except StateAccessError as exc:
            logger.error("Player %d connection failed: %s", self.player_id, exc)
        except Exception as exc:
            logger.warning("Player %d websocket read error: %s", self.player_id, exc)
        finally:
            reader.cancel()
            await asyncio.wait({reader})
            self._depart()
            self.outbox.close()
            await writer

    def handle(self, message: ClientIntent) -> Snapshot:
        """Forward one decoded intent to the shared state."""
        if isinstance(message, JoinMessage):
            return self.game.rename(self.player_id, message.data.name)
        if isinstance(message, TypedProgressMessage):
            return self.game.update_typed(self.player_id, message.data.typed)
        return self.game.submit_word(self.player_id, message.data.word)

    async def _read_loop(self) -> None:
        while True:
            frame = await self.transport.receive_frame()
            if frame is None:
                return
            try:
                message = decode_client_message(frame)
            except ProtocolError as exc:
                logger.warning("Player %d sent bad client message: %s", self.player_id, exc.reason)
                continue
            self.handle(message)

    async def _write_loop(self) -> None:
        async for frame in self.outbox:
            try:
                await self.transport.send_frame(frame)
            except Exception as exc:
                logger.warning("Player %d websocket write error: %s", self.player_id, exc)
                self.outbox.close()
                return

    def _depart(self) -> None:
        try:
            self.game.leave(self.player_id)
        except StateAccessError as exc:
            logger.error("Player %d could not leave cleanly: %s", self.player_id, exc)
