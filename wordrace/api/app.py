"""
FastAPI Application - transport listener for the game server.

Endpoints:
    WS     /ws               Player connection (JSON frames, see schemas)
    GET    /health           Health check
    GET    /api/v1/state     Current snapshot as a State message
    GET    /*                Static client files, when WORDRACE_STATIC_DIR exists

Each accepted WebSocket is handed to a PlayerConnection, which owns the
rest of its lifetime. All connections share one SharedGameState.
"""

from pathlib import Path
from typing import Any
import logging

from .. import __version__
from ..config import ALLOWED_ORIGINS, WORDRACE_OUTBOX_SIZE, WORDRACE_STATIC_DIR
from ..game.shared import SharedGameState
from ..session.connection import PlayerConnection
from .schemas import HealthResponse, StateMessage

logger = logging.getLogger(__name__)


class WebSocketTransport:
    """Adapts a Starlette WebSocket to the text-frame Transport protocol."""

    def __init__(self, websocket: Any):
        self.websocket = websocket

    async def receive_frame(self) -> str | None:
        while True:
            message = await self.websocket.receive()
            if message["type"] == "websocket.disconnect":
                return None
            text = message.get("text")
            if text is not None:
                return text
            # Binary frames carry nothing we understand.

    async def send_frame(self, frame: str) -> None:
        await self.websocket.send_text(frame)

    async def close(self) -> None:
        try:
            await self.websocket.close()
        except Exception as exc:
            # The peer or a failed send may have closed it already.
            logger.debug("WebSocket close failed: %s", exc)


def create_app(
    game: SharedGameState | None = None,
    static_dir: str | None = WORDRACE_STATIC_DIR,
    outbox_size: int = WORDRACE_OUTBOX_SIZE,
):
    """
    Create the FastAPI application.

    Args:
        game: Optional SharedGameState (creates new if not provided)
        static_dir: Directory served at "/" if it exists
        outbox_size: Frames buffered per connection

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, WebSocket
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.staticfiles import StaticFiles
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    app = FastAPI(
        title="Wordrace",
        description="Authoritative real-time word-race game server.",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    shared_game = game or SharedGameState()
    app.state.game = shared_game

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """
        Player connection.

        Messages from server:
        - Welcome: assigned player id (first frame)
        - State: full snapshot after every change

        Messages from client:
        - Join: set display name
        - TypedProgress: in-progress typing
        - SubmitWord: guess the current word
        """
        await websocket.accept()
        connection = PlayerConnection(
            shared_game,
            WebSocketTransport(websocket),
            outbox_size=outbox_size,
        )
        await connection.run()

    # =========================================================================
    # HTTP Endpoints
    # =========================================================================

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            version=__version__,
            players=shared_game.player_count,
        )

    @app.get("/api/v1/state", response_model=StateMessage, tags=["Game"])
    async def get_state() -> StateMessage:
        """The snapshot a newly connected player would receive."""
        return StateMessage.from_snapshot(shared_game.snapshot())

    # Mounted last so it never shadows the routes above.
    if static_dir and Path(static_dir).is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    elif static_dir:
        logger.debug("Static directory %r not found, serving API only", static_dir)

    return app
