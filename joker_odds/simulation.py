"""
simulation.py

Monte Carlo estimate of how often a random hand contains each hand category.

estimator = MonteCarloEstimator(SimulationConfig(cards=7, jokers=2, seed=1))
result = estimator.run()
result.probabilities()
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np
from numba import njit

from joker_odds.cards import CARDS_PER_DECK, JOKER, decode_hand, format_hand
from joker_odds.config import SimulationConfig
from joker_odds.hand_categories import (
    FLUSH, N_AND_M_OF_A_KIND, N_OF_A_KIND, N_PAIRS, STRAIGHT, STRAIGHT_FLUSH,
    SUITED_N_AND_M_OF_A_KIND, SUITED_N_OF_A_KIND,
    count_hits, is_flush, is_flush_house, is_flush_n, is_full_house,
    is_full_mansion, is_n_of_a_kind, is_straight, is_straight_flush,
    is_three_pair, is_two_pair, is_two_triplet,
)
from joker_odds.logging_config import get_logger

logger = get_logger(__name__)

Predicate = Callable[[np.ndarray, int], bool]
Rule = Tuple[int, int, int]


@njit
def draw_into(scratch: np.ndarray, offsets: np.ndarray, hands: np.ndarray) -> None:
    """
    Partial Fisher-Yates over one shared scratch deck: for hand h, position i
    swaps with i + offsets[h, i] and the swapped-in item is dealt. The scratch
    deck stays a permutation of the deck, so the next hand is just as uniform.
    """
    for h in range(hands.shape[0]):
        for i in range(hands.shape[1]):
            j = i + offsets[h, i]
            picked = scratch[j]
            scratch[j] = scratch[i]
            scratch[i] = picked
            hands[h, i] = picked


class Deck:
    """
    D full 52-card decks plus J jokers, stored as int16 deck codes
    (suit * 13 + rank, JOKER for a joker).
    """

    def __init__(self, decks: int = 1, jokers: int = 0):
        self.decks = decks
        self.jokers = jokers
        single = np.arange(CARDS_PER_DECK, dtype=np.int16)
        self.codes = np.concatenate([
            np.tile(single, decks),
            np.full(jokers, JOKER, dtype=np.int16),
        ])
        self.scratch = self.codes.copy()

    def __len__(self):
        return len(self.codes)

    def draw_hands(self, rng: np.random.Generator, count: int, hand_size: int) -> np.ndarray:
        """
        Draw `count` independent hands of `hand_size` items, each without
        replacement. Only the (count, hand_size) swap offsets and the hands
        themselves are allocated; the deck is shuffled in place.
        """
        n = len(self.codes)
        if hand_size > n:
            raise ValueError(f"Cannot draw {hand_size} items from a deck of {n}")

        offsets = rng.integers(0, n - np.arange(hand_size), size=(count, hand_size))
        hands = np.empty((count, hand_size), dtype=self.codes.dtype)
        draw_into(self.scratch, offsets, hands)
        return hands


@dataclass
class Category:
    """
    A named hand category with its predicate and running hit count. `rule`
    is the (kind, a, b) row the batch kernel evaluates; categories without
    one are scored hand by hand through `predicate`.
    """
    name: str
    predicate: Predicate
    count: int = 0
    rule: Optional[Rule] = None

    def evaluate(self, cards: np.ndarray, jokers: int) -> bool:
        return bool(self.predicate(cards, jokers))

    def record(self, cards: np.ndarray, jokers: int) -> bool:
        hit = self.evaluate(cards, jokers)
        if hit:
            self.count += 1
        return hit


# --- predicate bindings ---

def n_of_a_kind(n: int) -> Predicate:
    def predicate(cards, jokers):
        return is_n_of_a_kind(cards, n, jokers)
    return predicate


def straight(size: int) -> Predicate:
    def predicate(cards, jokers):
        return is_straight(cards, jokers, size)
    return predicate


def flush(size: int) -> Predicate:
    def predicate(cards, jokers):
        return is_flush(cards, jokers, size)
    return predicate


def straight_flush(size: int) -> Predicate:
    def predicate(cards, jokers):
        return is_straight_flush(cards, jokers, size)
    return predicate


def flush_n(n: int) -> Predicate:
    def predicate(cards, jokers):
        return is_flush_n(cards, n, jokers)
    return predicate


def build_catalog(hand_size: int) -> List[Category]:
    """Fresh categories for the given hand size (5 or 6)."""
    categories = [
        Category("Pair", n_of_a_kind(2), rule=(N_OF_A_KIND, 2, 0)),
        Category("3 of a kind", n_of_a_kind(3), rule=(N_OF_A_KIND, 3, 0)),
        Category("4 of a kind", n_of_a_kind(4), rule=(N_OF_A_KIND, 4, 0)),
        Category("5 of a kind", n_of_a_kind(5), rule=(N_OF_A_KIND, 5, 0)),
        Category("2 pair", is_two_pair, rule=(N_PAIRS, 2, 0)),
    ]
    if hand_size == 5:
        categories += [
            Category("Straight", straight(5), rule=(STRAIGHT, 5, 0)),
            Category("Flush", flush(5), rule=(FLUSH, 5, 0)),
            Category("Full House", is_full_house, rule=(N_AND_M_OF_A_KIND, 3, 2)),
            Category("Flush House", is_flush_house, rule=(SUITED_N_AND_M_OF_A_KIND, 3, 2)),
            Category("Strt Flush", straight_flush(5), rule=(STRAIGHT_FLUSH, 5, 0)),
            Category("Flush 5", flush_n(5), rule=(SUITED_N_OF_A_KIND, 5, 0)),
        ]
    elif hand_size == 6:
        categories += [
            Category("3 pair", is_three_pair, rule=(N_PAIRS, 3, 0)),
            Category("6 of a kind", n_of_a_kind(6), rule=(N_OF_A_KIND, 6, 0)),
            Category("Two Triplet", is_two_triplet, rule=(N_AND_M_OF_A_KIND, 3, 3)),
            Category("Straight", straight(6), rule=(STRAIGHT, 6, 0)),
            Category("Flush", flush(6), rule=(FLUSH, 6, 0)),
            Category("Full Mansion", is_full_mansion, rule=(N_AND_M_OF_A_KIND, 4, 2)),
            Category("Strt Flush", straight_flush(6), rule=(STRAIGHT_FLUSH, 6, 0)),
            Category("Flush 6", flush_n(6), rule=(SUITED_N_OF_A_KIND, 6, 0)),
        ]
    else:
        raise ValueError(f"Unsupported hand size: {hand_size}")
    return categories


def rule_table(categories: List[Category]) -> Optional[np.ndarray]:
    """(len(categories), 3) int64 rule rows, or None if any category has no rule."""
    if any(c.rule is None for c in categories):
        return None
    return np.array([c.rule for c in categories], dtype=np.int64).reshape(len(categories), 3)


# --- confidence intervals ---

def wald_interval(count: int, iterations: int, z: float = 3.0) -> Tuple[float, float]:
    """Return (p, half_width) of the Wald binomial interval p +/- z*sqrt(p(1-p)/n)."""
    if iterations <= 0:
        return 0.0, 0.0
    p = count / iterations
    return p, z * math.sqrt(p * (1.0 - p) / iterations)


def intervals_overlap(a: Tuple[float, float], b: Tuple[float, float]) -> bool:
    p1, ci1 = a
    p2, ci2 = b
    return p1 - ci1 <= p2 + ci2 and p2 - ci2 <= p1 + ci1


def has_overlap(categories: List[Category], iterations: int, z: float = 3.0) -> bool:
    """
    True if any two categories have overlapping intervals. Categories that
    have never been hit are left out.
    """
    intervals = [
        wald_interval(c.count, iterations, z) for c in categories if c.count > 0
    ]
    for i in range(len(intervals)):
        for j in range(i + 1, len(intervals)):
            if intervals_overlap(intervals[i], intervals[j]):
                return True
    return False


@dataclass
class SimulationResult:
    iterations: int
    categories: List[Category] = field(default_factory=list)
    converged: bool = False

    def rows(self) -> List[Category]:
        """Categories ordered by count, then name, both descending."""
        return sorted(self.categories, key=lambda c: (c.count, c.name), reverse=True)

    def probabilities(self) -> Dict[str, float]:
        if self.iterations == 0:
            return {c.name: 0.0 for c in self.categories}
        return {c.name: c.count / self.iterations for c in self.categories}


class MonteCarloEstimator:
    """
    Sample hands batch by batch until no two categories have overlapping
    confidence intervals.

    Parameters
    ----------
    config : SimulationConfig
        Deck, hand size and convergence settings.
    rng : numpy.random.Generator | None
        Random source; built from config.seed when omitted.
    categories : list[Category] | None
        Categories to tally; defaults to build_catalog(config.hand_size).

    Notes
    -----
    If two categories have the same true probability their intervals never
    separate and the run only ends at config.max_iterations (or when the
    caller stops it).
    """

    def __init__(self, config: SimulationConfig,
                 rng: Optional[np.random.Generator] = None,
                 categories: Optional[List[Category]] = None):
        self.config = config.validate()
        self.rng = rng if rng is not None else np.random.default_rng(config.seed)
        self.deck = Deck(config.decks, config.jokers)
        self.categories = categories if categories is not None else build_catalog(config.hand_size)
        self.rules = rule_table(self.categories)
        self.iterations = 0

    def record_hand(self, codes: np.ndarray) -> None:
        cards, jokers = decode_hand(codes)
        for category in self.categories:
            category.record(cards, jokers)

    def record_hands(self, hands: np.ndarray) -> None:
        if self.rules is None:
            for codes in hands:
                self.record_hand(codes)
            return
        hits = count_hits(hands, self.rules)
        for category, hit in zip(self.categories, hits):
            category.count += int(hit)

    def run_batch(self, size: Optional[int] = None) -> int:
        """Sample `size` hands (default batch_size) and return the total so far."""
        remaining = size if size is not None else self.config.batch_size
        while remaining > 0:
            chunk = min(remaining, self.config.chunk_size)
            hands = self.deck.draw_hands(self.rng, chunk, self.config.cards)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"Sample hand: {format_hand(hands[0])}")
            self.record_hands(hands)
            remaining -= chunk
            self.iterations += chunk
        return self.iterations

    def converged(self) -> bool:
        return self.iterations > 0 and not has_overlap(
            self.categories, self.iterations, self.config.z_score
        )

    def run(self, on_batch: Optional[Callable[[int], None]] = None) -> SimulationResult:
        logger.info(
            f"Sampling {self.config.cards}-card hands from {len(self.deck)} items "
            f"({self.config.decks} deck(s), {self.config.jokers} joker(s)), "
            f"{len(self.categories)} categories"
        )
        max_iterations = self.config.max_iterations
        while True:
            size = self.config.batch_size
            if max_iterations is not None:
                size = min(size, max_iterations - self.iterations)
            self.run_batch(size)
            if on_batch is not None:
                on_batch(self.iterations)

            if self.converged():
                logger.info(f"Intervals separated after {self.iterations} iterations")
                return SimulationResult(self.iterations, self.categories, True)
            if max_iterations is not None and self.iterations >= max_iterations:
                logger.warning(
                    f"Stopped at max_iterations={max_iterations} with overlapping intervals"
                )
                return SimulationResult(self.iterations, self.categories, False)
            logger.debug(f"Intervals still overlap after {self.iterations} iterations")
