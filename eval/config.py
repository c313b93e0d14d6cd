from __future__ import annotations

import json
from dataclasses import dataclass, asdict
from typing import Optional


VALID_VARIANTS = {"dice", "tiles"}


def required_unseen(num_players: int, start_items: int) -> int:
    """Largest unseen count any seat can face: everyone else's items at the start."""
    return num_players * start_items - 1


@dataclass
class GameConfig:
    variant: str = "dice"
    num_players: int = 4
    start_items: int = 5
    human_index: Optional[int] = None
    use_exact: bool = False
    ones_are_wild: bool = True
    use_palafico: bool = True
    max_pattern_size: int = 5
    seed: Optional[int] = None

    def validate(self) -> None:
        if self.variant not in VALID_VARIANTS:
            raise ValueError(f"Invalid variant: {self.variant}")
        if not isinstance(self.num_players, int) or self.num_players < 2:
            raise ValueError("num_players must be an integer >= 2")
        if not isinstance(self.start_items, int) or self.start_items <= 0:
            raise ValueError("start_items must be a positive integer")
        if self.human_index is not None and not 0 <= self.human_index < self.num_players:
            raise ValueError(f"human_index must be in [0, {self.num_players})")
        if not isinstance(self.max_pattern_size, int) or self.max_pattern_size <= 0:
            raise ValueError("max_pattern_size must be a positive integer")

    @property
    def max_unseen(self) -> int:
        return required_unseen(self.num_players, self.start_items)

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @staticmethod
    def from_json(s: str) -> GameConfig:
        return GameConfig(**json.loads(s))


@dataclass
class PrecomputeConfig:
    variant: str = "tiles"
    max_pattern_size: int = 5
    max_unseen: int = 29
    trials: int = 1000
    workers: int = 1
    chunk_size: int = 64
    seed: Optional[int] = None

    def validate(self) -> None:
        if self.variant not in VALID_VARIANTS:
            raise ValueError(f"Invalid variant: {self.variant}")
        if not isinstance(self.max_pattern_size, int) or self.max_pattern_size <= 0:
            raise ValueError("max_pattern_size must be a positive integer")
        if not isinstance(self.max_unseen, int) or self.max_unseen < 0:
            raise ValueError("max_unseen must be a non-negative integer")
        if not isinstance(self.trials, int) or self.trials <= 0:
            raise ValueError("trials must be a positive integer")
        if not isinstance(self.workers, int) or self.workers <= 0:
            raise ValueError("workers must be a positive integer")
        if not isinstance(self.chunk_size, int) or self.chunk_size <= 0:
            raise ValueError("chunk_size must be a positive integer")

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @staticmethod
    def from_json(s: str) -> PrecomputeConfig:
        return PrecomputeConfig(**json.loads(s))
