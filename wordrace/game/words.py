"""
Word Selector - picks the next target word from a fixed bank.
"""

from __future__ import annotations
import random
from typing import Sequence

WORD_BANK: tuple[str, ...] = (
    "apple", "bridge", "candle", "dragon", "ember", "forest", "galaxy",
    "harbor", "island", "jungle", "kitten", "lantern", "meteor", "nebula",
    "orange", "planet", "quartz", "rocket", "sunrise", "thunder", "violet",
    "whisper", "xylophone", "yonder", "zephyr",
)

FALLBACK_WORD = "apple"


def choose_word(
    previous: str | None = None,
    bank: Sequence[str] = WORD_BANK,
    rng: random.Random | None = None,
) -> str:
    """
    Uniformly choose a word from the bank.

    When the bank holds more than one word the result always differs from
    `previous`. A single-word bank returns that word; an empty bank returns
    FALLBACK_WORD.
    """
    rng = rng or random
    if not bank:
        return FALLBACK_WORD
    if previous is None or len(bank) <= 1:
        return rng.choice(bank)
    # A bank of repeated identical words would never terminate.
    if all(word == previous for word in bank):
        return previous
    while True:
        pick = rng.choice(bank)
        if pick != previous:
            return pick
