"""
hand_categories.py

Joker-aware hand category predicates.

Every predicate takes a cards array (int64, shape (n, 2), [suit, rank] rows)
plus a joker count and answers whether some assignment of the jokers makes the
hand contain the category. Jokers are wildcards for both rank and suit, and
each predicate gets the full joker pool: they are not consumed across checks.
Categories are independent, so one hand can satisfy several of them.

The predicates are thin wrappers over histogram kernels (the has_* functions).
The sampler skips the cards array entirely: count_hits tallies a whole chunk
of drawn deck codes into histograms it allocates once per chunk.
"""
import numpy as np
from numba import njit

from joker_odds.cards import NUM_RANKS, NUM_SUITS

# Rule kinds understood by check_rule; a rule is a (kind, a, b) row
N_OF_A_KIND = 0
N_PAIRS = 1
N_AND_M_OF_A_KIND = 2
STRAIGHT = 3
FLUSH = 4
STRAIGHT_FLUSH = 5
SUITED_N_AND_M_OF_A_KIND = 6
SUITED_N_OF_A_KIND = 7


# --- aggregates ---

@njit
def rank_counts(cards: np.ndarray) -> np.ndarray:
    counts = np.zeros(NUM_RANKS, np.int64)
    for i in range(cards.shape[0]):
        counts[cards[i, 1]] += 1
    return counts


@njit
def suit_counts(cards: np.ndarray) -> np.ndarray:
    counts = np.zeros(NUM_SUITS, np.int64)
    for i in range(cards.shape[0]):
        counts[cards[i, 0]] += 1
    return counts


@njit
def suit_rank_counts(cards: np.ndarray) -> np.ndarray:
    """Per-suit rank histogram, shape (NUM_SUITS, NUM_RANKS)."""
    counts = np.zeros((NUM_SUITS, NUM_RANKS), np.int64)
    for i in range(cards.shape[0]):
        counts[cards[i, 0], cards[i, 1]] += 1
    return counts


@njit
def straight_cell(ranks: np.ndarray, cell: int) -> int:
    # cell 0 is the ace playing low, cell r + 1 is rank r
    rank = NUM_RANKS - 1 if cell == 0 else cell - 1
    return 1 if ranks[rank] > 0 else 0


@njit
def ranks_for_straight(cards: np.ndarray) -> np.ndarray:
    """
    Presence bitmap of length NUM_RANKS + 1.

    Cell rank + 1 is set for every rank held. Cell 0 mirrors the ace cell so
    the ace can also play low (A-2-3-4-5); nothing else wraps.
    """
    ranks = rank_counts(cards)
    present = np.zeros(NUM_RANKS + 1, np.int64)
    for cell in range(NUM_RANKS + 1):
        present[cell] = straight_cell(ranks, cell)
    return present


@njit
def fill_counts(codes: np.ndarray, counts: np.ndarray,
                ranks: np.ndarray, suits: np.ndarray) -> int:
    """
    Tally one hand of deck codes into preallocated histograms and return its
    joker count.
    """
    counts[:, :] = 0
    ranks[:] = 0
    suits[:] = 0
    jokers = 0
    for i in range(codes.shape[0]):
        code = codes[i]
        if code < 0:
            jokers += 1
        else:
            suit = code // NUM_RANKS
            rank = code % NUM_RANKS
            counts[suit, rank] += 1
            ranks[rank] += 1
            suits[suit] += 1
    return jokers


# --- histogram kernels ---

@njit
def has_n_of_a_kind(ranks: np.ndarray, n: int, jokers: int) -> bool:
    if jokers >= n:
        return True
    for rank in range(NUM_RANKS):
        if ranks[rank] + jokers >= n:
            return True
    return False


@njit
def has_n_pairs(ranks: np.ndarray, n: int, jokers: int) -> bool:
    """
    Completing an odd leftover card costs one joker per pair while a pair made
    of jokers alone costs two, so singletons are filled first.
    """
    remaining = jokers
    pairs = 0
    for rank in range(NUM_RANKS):
        count = ranks[rank]
        if count % 2 == 1 and remaining > 0:
            remaining -= 1
            count += 1
        pairs += count // 2
    pairs += remaining // 2
    return pairs >= n


@njit
def has_n_and_m_of_a_kind(ranks: np.ndarray, n: int, m: int, jokers: int) -> bool:
    """
    One rank reaches n copies and a second group reaches m (n >= m).

    The second group may come from what is left of the first rank after n
    copies are set aside, so five of a kind also counts as a full house.
    Topping up the tallest rank first uses the fewest jokers.
    """
    first = 0
    second = 0
    for rank in range(NUM_RANKS):
        count = ranks[rank]
        if count > first:
            second = first
            first = count
        elif count > second:
            second = count

    remaining = jokers
    if first < n:
        needed = n - first
        if needed > remaining:
            return False
        remaining -= needed
        first = n
    first -= n

    if first + remaining >= m:
        return True
    return second + remaining >= m


@njit
def has_flush(suits: np.ndarray, jokers: int, size: int) -> bool:
    return suits.max() + jokers >= size


@njit
def has_straight(ranks: np.ndarray, jokers: int, size: int) -> bool:
    """
    Slide a window of `size` cells over the straight bitmap. A window is
    completed by jokers when its gaps number no more than the jokers held.
    """
    if size > NUM_RANKS + 1:
        return False
    if jokers >= size:
        return True

    window_sum = 0
    for cell in range(NUM_RANKS + 1):
        window_sum += straight_cell(ranks, cell)
        if cell >= size:
            window_sum -= straight_cell(ranks, cell - size)
        if cell >= size - 1 and window_sum + jokers >= size:
            return True
    return False


@njit
def has_straight_flush(counts: np.ndarray, jokers: int, size: int) -> bool:
    for suit in range(NUM_SUITS):
        if has_straight(counts[suit], jokers, size):
            return True
    return False


@njit
def has_suited_n_and_m_of_a_kind(counts: np.ndarray, n: int, m: int, jokers: int) -> bool:
    for suit in range(NUM_SUITS):
        if has_n_and_m_of_a_kind(counts[suit], n, m, jokers):
            return True
    return False


@njit
def has_suited_n_of_a_kind(counts: np.ndarray, n: int, jokers: int) -> bool:
    for suit in range(NUM_SUITS):
        if has_n_of_a_kind(counts[suit], n, jokers):
            return True
    return False


# --- predicates on a cards array ---

@njit
def is_n_of_a_kind(cards: np.ndarray, n: int, jokers: int) -> bool:
    return has_n_of_a_kind(rank_counts(cards), n, jokers)


@njit
def is_n_pairs(cards: np.ndarray, n: int, jokers: int) -> bool:
    return has_n_pairs(rank_counts(cards), n, jokers)


@njit
def is_n_and_m_of_a_kind(cards: np.ndarray, n: int, m: int, jokers: int) -> bool:
    return has_n_and_m_of_a_kind(rank_counts(cards), n, m, jokers)


@njit
def is_two_pair(cards: np.ndarray, jokers: int) -> bool:
    return is_n_pairs(cards, 2, jokers)


@njit
def is_three_pair(cards: np.ndarray, jokers: int) -> bool:
    return is_n_pairs(cards, 3, jokers)


@njit
def is_full_house(cards: np.ndarray, jokers: int) -> bool:
    return is_n_and_m_of_a_kind(cards, 3, 2, jokers)


@njit
def is_full_mansion(cards: np.ndarray, jokers: int) -> bool:
    return is_n_and_m_of_a_kind(cards, 4, 2, jokers)


@njit
def is_two_triplet(cards: np.ndarray, jokers: int) -> bool:
    return is_n_and_m_of_a_kind(cards, 3, 3, jokers)


@njit
def is_flush(cards: np.ndarray, jokers: int, size: int) -> bool:
    return has_flush(suit_counts(cards), jokers, size)


@njit
def is_straight(cards: np.ndarray, jokers: int, size: int) -> bool:
    return has_straight(rank_counts(cards), jokers, size)


@njit
def is_straight_flush(cards: np.ndarray, jokers: int, size: int) -> bool:
    return has_straight_flush(suit_rank_counts(cards), jokers, size)


@njit
def is_flush_house(cards: np.ndarray, jokers: int) -> bool:
    return has_suited_n_and_m_of_a_kind(suit_rank_counts(cards), 3, 2, jokers)


@njit
def is_flush_n(cards: np.ndarray, n: int, jokers: int) -> bool:
    return has_suited_n_of_a_kind(suit_rank_counts(cards), n, jokers)


# --- batch evaluation ---

@njit
def check_rule(kind: int, a: int, b: int, counts: np.ndarray,
               ranks: np.ndarray, suits: np.ndarray, jokers: int) -> bool:
    if kind == N_OF_A_KIND:
        return has_n_of_a_kind(ranks, a, jokers)
    if kind == N_PAIRS:
        return has_n_pairs(ranks, a, jokers)
    if kind == N_AND_M_OF_A_KIND:
        return has_n_and_m_of_a_kind(ranks, a, b, jokers)
    if kind == STRAIGHT:
        return has_straight(ranks, jokers, a)
    if kind == FLUSH:
        return has_flush(suits, jokers, a)
    if kind == STRAIGHT_FLUSH:
        return has_straight_flush(counts, jokers, a)
    if kind == SUITED_N_AND_M_OF_A_KIND:
        return has_suited_n_and_m_of_a_kind(counts, a, b, jokers)
    if kind == SUITED_N_OF_A_KIND:
        return has_suited_n_of_a_kind(counts, a, jokers)
    return False


@njit
def count_hits(hands: np.ndarray, rules: np.ndarray) -> np.ndarray:
    """
    Count, for each (kind, a, b) row of `rules`, how many rows of `hands`
    (deck codes, JOKER < 0) contain that category.
    """
    hits = np.zeros(rules.shape[0], np.int64)
    counts = np.zeros((NUM_SUITS, NUM_RANKS), np.int64)
    ranks = np.zeros(NUM_RANKS, np.int64)
    suits = np.zeros(NUM_SUITS, np.int64)
    for h in range(hands.shape[0]):
        jokers = fill_counts(hands[h], counts, ranks, suits)
        for c in range(rules.shape[0]):
            if check_rule(rules[c, 0], rules[c, 1], rules[c, 2], counts, ranks, suits, jokers):
                hits[c] += 1
    return hits
