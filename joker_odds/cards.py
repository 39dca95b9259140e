"""
cards.py

Card model shared by the predicates and the sampler.

Ranks are indices 0-12 (2 through ace, ace = 12) and suits are indices 0-3.
Predicates never see Card objects directly; they take a "cards array", an
int64 array of shape (n, 2) holding one [suit, rank] row per card.
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Tuple

import numpy as np
from numba import njit

NUM_RANKS = 13
NUM_SUITS = 4
MAX_CARDS = 12
CARDS_PER_DECK = NUM_RANKS * NUM_SUITS

# Deck code for a joker; real cards are suit * NUM_RANKS + rank
JOKER = -1

STR_RANKS = '23456789TJQKA'
R2, R3, R4, R5, R6, R7, R8, R9, R10, RJ, RQ, RK, RA = range(NUM_RANKS)


class Suit(IntEnum):
    CLUBS = 0
    DIAMONDS = 1
    HEARTS = 2
    SPADES = 3


SUIT_SYMBOLS = {Suit.CLUBS: '♣', Suit.DIAMONDS: '♦', Suit.HEARTS: '♥', Suit.SPADES: '♠'}


@dataclass(frozen=True)
class Card:
    suit: int  # 0-3, see Suit
    rank: int  # 0-12, deuce to ace (J=9, Q=10, K=11, A=12)

    def __str__(self):
        return f"{STR_RANKS[self.rank]}{SUIT_SYMBOLS[Suit(self.suit)]}"

    @property
    def code(self) -> int:
        return self.suit * NUM_RANKS + self.rank

    @classmethod
    def from_code(cls, code: int) -> 'Card':
        if code < 0 or code >= CARDS_PER_DECK:
            raise ValueError(f"Not a card code: {code}")
        return cls(code // NUM_RANKS, code % NUM_RANKS)


def format_hand(codes: Iterable[int]) -> str:
    """Render a drawn hand of deck codes, e.g. "A♠ 7♦ Jk" with Jk for a joker."""
    return " ".join("Jk" if code == JOKER else str(Card.from_code(int(code))) for code in codes)


def to_cards_array(cards: Iterable[Card]) -> np.ndarray:
    """Convert Card objects to the (n, 2) [suit, rank] array used by the predicates."""
    rows = [(c.suit, c.rank) for c in cards]
    if not rows:
        return np.empty((0, 2), dtype=np.int64)
    return np.array(rows, dtype=np.int64)


@njit
def decode_hand(codes: np.ndarray) -> Tuple[np.ndarray, int]:
    """
    Split a drawn hand of deck codes into its real cards and a joker count.
    """
    jokers = 0
    for i in range(codes.shape[0]):
        if codes[i] < 0:
            jokers += 1

    cards = np.empty((codes.shape[0] - jokers, 2), np.int64)
    j = 0
    for i in range(codes.shape[0]):
        code = codes[i]
        if code >= 0:
            cards[j, 0] = code // NUM_RANKS
            cards[j, 1] = code % NUM_RANKS
            j += 1
    return cards, jokers
