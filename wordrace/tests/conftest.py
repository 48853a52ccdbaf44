"""
Pytest fixtures for Wordrace tests.
"""

import random

import pytest

from ..api.schemas import decode_server_message
from ..game.exceptions import DeliveryError
from ..game.shared import SharedGameState


TEST_BANK = ("bridge", "forest", "candle")


class RecordingOutbox:
    """Stands in for a connection's outbox and keeps every frame."""

    def __init__(self):
        self.frames: list[str] = []
        self.closed = False

    def offer(self, frame: str) -> None:
        if self.closed:
            raise DeliveryError("outbox closed")
        self.frames.append(frame)

    def close(self) -> None:
        self.closed = True

    def messages(self):
        return [decode_server_message(frame) for frame in self.frames]

    def last_state(self):
        states = [m for m in self.messages() if m.type == "State"]
        return states[-1].data if states else None


class FailingOutbox(RecordingOutbox):
    """An outbox whose socket is gone."""

    def offer(self, frame: str) -> None:
        raise DeliveryError("socket closed")


@pytest.fixture
def rng() -> random.Random:
    """Seeded RNG so word choices repeat across runs."""
    return random.Random(1234)


@pytest.fixture
def game(rng: random.Random) -> SharedGameState:
    """A game whose first word is 'bridge'."""
    return SharedGameState(word_bank=TEST_BANK, rng=rng, first_word="bridge")


@pytest.fixture
def outbox_factory():
    """Build recording outboxes; pass failing=True for a dead sink."""
    def make(failing: bool = False) -> RecordingOutbox:
        return FailingOutbox() if failing else RecordingOutbox()
    return make
