"""
Pydantic Schemas for the wire protocol.

Every frame is one JSON object tagged by "type" with its payload under
"data". Each direction is a closed union: a frame whose "type" is not
listed below is a decode error.

Client -> Server:
- Join: {"type": "Join", "data": {"name": str}}
- TypedProgress: {"type": "TypedProgress", "data": {"typed": str}}
- SubmitWord: {"type": "SubmitWord", "data": {"word": str}}

Server -> Client:
- Welcome: {"type": "Welcome", "data": {"player_id": int}}
- State: {"type": "State", "data": {"round": int, "current_word": str,
          "players": [...], "winner_last_round": str | null}}
"""

from __future__ import annotations
from enum import Enum
from typing import Annotated, Literal, Optional, Union, TYPE_CHECKING
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from ..game.exceptions import ProtocolError

if TYPE_CHECKING:
    from ..game.state import Snapshot


# =============================================================================
# Enums
# =============================================================================

class MessageType(str, Enum):
    """Discriminants used on the wire."""
    # Client -> Server
    JOIN = "Join"
    TYPED_PROGRESS = "TypedProgress"
    SUBMIT_WORD = "SubmitWord"

    # Server -> Client
    WELCOME = "Welcome"
    STATE = "State"


# =============================================================================
# Client Messages
# =============================================================================

class JoinData(BaseModel):
    """Sets the sender's display name."""
    name: str


class TypedProgressData(BaseModel):
    """Raw in-progress text; the server sanitizes it."""
    typed: str


class SubmitWordData(BaseModel):
    """A full guess at the active word."""
    word: str


class JoinMessage(BaseModel):
    type: Literal["Join"] = "Join"
    data: JoinData


class TypedProgressMessage(BaseModel):
    type: Literal["TypedProgress"] = "TypedProgress"
    data: TypedProgressData


class SubmitWordMessage(BaseModel):
    type: Literal["SubmitWord"] = "SubmitWord"
    data: SubmitWordData


ClientMessage = Annotated[
    Union[JoinMessage, TypedProgressMessage, SubmitWordMessage],
    Field(discriminator="type"),
]


# =============================================================================
# Server Messages
# =============================================================================

class PlayerInfo(BaseModel):
    """One scoreboard row."""
    id: int = Field(ge=0)
    name: str
    score: int = Field(ge=0)
    typed: str = ""

    model_config = {"from_attributes": True}


class WelcomeData(BaseModel):
    player_id: int = Field(ge=0)


class StateData(BaseModel):
    """Full game snapshot."""
    round: int = Field(ge=1)
    current_word: str
    players: list[PlayerInfo] = Field(default_factory=list)
    winner_last_round: Optional[str] = None

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> StateData:
        return cls(
            round=snapshot.round,
            current_word=snapshot.current_word,
            players=[PlayerInfo.model_validate(p) for p in snapshot.players],
            winner_last_round=snapshot.winner_last_round,
        )


class WelcomeMessage(BaseModel):
    type: Literal["Welcome"] = "Welcome"
    data: WelcomeData

    @classmethod
    def for_player(cls, player_id: int) -> WelcomeMessage:
        return cls(data=WelcomeData(player_id=player_id))


class StateMessage(BaseModel):
    type: Literal["State"] = "State"
    data: StateData

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> StateMessage:
        return cls(data=StateData.from_snapshot(snapshot))


ServerMessage = Annotated[
    Union[WelcomeMessage, StateMessage],
    Field(discriminator="type"),
]


# =============================================================================
# Codec
# =============================================================================

_client_adapter: TypeAdapter[ClientMessage] = TypeAdapter(ClientMessage)
_server_adapter: TypeAdapter[ServerMessage] = TypeAdapter(ServerMessage)


def decode_client_message(frame: str | bytes) -> ClientMessage:
    """
    Decode one inbound frame.

    Raises:
        ProtocolError: invalid JSON, unknown "type", or a bad payload
    """
    try:
        return _client_adapter.validate_json(frame)
    except ValidationError as exc:
        raise ProtocolError(_summarize(exc), _as_text(frame)) from exc


def decode_server_message(frame: str | bytes) -> ServerMessage:
    """Decode a server frame (used by clients and tests)."""
    try:
        return _server_adapter.validate_json(frame)
    except ValidationError as exc:
        raise ProtocolError(_summarize(exc), _as_text(frame)) from exc


def encode_server_message(message: WelcomeMessage | StateMessage) -> str:
    return message.model_dump_json()


def encode_client_message(message: JoinMessage | TypedProgressMessage | SubmitWordMessage) -> str:
    return message.model_dump_json()


def _summarize(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ())) or "frame"
    return f"{location}: {error.get('msg', 'invalid')}"


def _as_text(frame: str | bytes) -> str:
    if isinstance(frame, bytes):
        return frame.decode("utf-8", errors="replace")
    return frame


# =============================================================================
# HTTP Responses
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    service: str = "wordrace"
    version: str
    players: int = 0
