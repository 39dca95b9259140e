"""
config.py

Simulation settings: defaults ship in config.yaml next to this module and can
be replaced by a user file or overridden field by field from the command line.
"""
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

import yaml

from joker_odds.cards import CARDS_PER_DECK, MAX_CARDS

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), 'config.yaml')

SUPPORTED_HAND_SIZES = (5, 6)


@dataclass
class SimulationConfig:
    """Deck, hand and convergence settings for one run."""
    cards: int = 7
    decks: int = 1
    jokers: int = 0
    hand_size: int = 5
    batch_size: int = 100_000
    chunk_size: int = 10_000
    z_score: float = 3.0
    seed: Optional[int] = None
    max_iterations: Optional[int] = None  # None = run until converged

    @property
    def deck_size(self) -> int:
        return CARDS_PER_DECK * self.decks + self.jokers

    @classmethod
    def from_dict(cls, values: Optional[Dict[str, Any]]) -> 'SimulationConfig':
        values = values or {}
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown simulation setting(s): {', '.join(unknown)}")
        return cls(**values)

    def with_overrides(self, **overrides) -> 'SimulationConfig':
        """Return a copy with every override that is not None applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def validate(self) -> 'SimulationConfig':
        if self.cards > MAX_CARDS:
            raise ValueError(f"cards must be at most {MAX_CARDS}, got {self.cards}")
        if self.cards < 1:
            raise ValueError(f"cards must be at least 1, got {self.cards}")
        if self.hand_size not in SUPPORTED_HAND_SIZES:
            raise ValueError(f"hand_size must be 5 or 6, got {self.hand_size}")
        if self.decks < 0:
            raise ValueError(f"decks cannot be negative, got {self.decks}")
        if self.jokers < 0:
            raise ValueError(f"jokers cannot be negative, got {self.jokers}")
        if self.deck_size < self.cards:
            raise ValueError(
                f"Deck of {self.deck_size} items is too small to draw {self.cards} cards"
            )
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {self.chunk_size}")
        if self.z_score <= 0:
            raise ValueError(f"z_score must be positive, got {self.z_score}")
        if self.max_iterations is not None and self.max_iterations < 1:
            raise ValueError(f"max_iterations must be positive, got {self.max_iterations}")
        return self


def read_config_file(path: Optional[str] = None) -> Dict[str, Any]:
    path = path or DEFAULT_CONFIG_PATH
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Could not parse config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data

