from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from sim.game import Game
from sim.orchestrator import GameOrchestrator
from sim.variants import DiceVariant, TileVariant
from precompute.lookup import LookupTable
from agents.human_agent import HumanAgent
from agents.lookup_agent import LookupAgent, PolicyConfig

from .config import GameConfig

logger = logging.getLogger(__name__)


def make_variant(cfg: GameConfig, words: Optional[Iterable[str]] = None):
    """Dice need nothing else; tiles need the dictionary (EmptyPatternSetError if it is unusable)."""
    if cfg.variant == "dice":
        return DiceVariant(ones_are_wild=cfg.ones_are_wild, use_palafico=cfg.use_palafico)
    if words is None:
        raise ValueError("the tile variant needs a dictionary")
    return TileVariant.from_words(words, cfg.max_pattern_size)


def load_table(path: str, variant, cfg: GameConfig) -> LookupTable:
    """Load a table and reject it unless it covers every key this game can ask for."""
    return LookupTable.load(path, variant_name=variant.name, max_pattern_size=variant.max_pattern_size,
                            max_unseen=cfg.max_unseen)


def make_game(cfg: GameConfig, variant) -> Game:
    return Game(variant, num_players=cfg.num_players, start_items=cfg.start_items,
                use_exact=cfg.use_exact, seed=cfg.seed)


def make_agents(cfg: GameConfig, table: Optional[LookupTable], policy: Optional[PolicyConfig] = None,
                human: Optional[HumanAgent] = None) -> List:
    agents = []
    for seat in range(cfg.num_players):
        if cfg.human_index is not None and seat == cfg.human_index:
            agents.append(human or HumanAgent(name=f"human_{seat}"))
        else:
            agents.append(LookupAgent(table, policy, name=f"lookup_{seat}"))
    return agents


def run_game(cfg: GameConfig, variant, table: Optional[LookupTable], policy: Optional[PolicyConfig] = None,
             agents: Optional[List] = None) -> Tuple[int, GameOrchestrator]:
    """Play one full game. Returns (winner, orchestrator)."""
    cfg.validate()
    game = make_game(cfg, variant)
    orch = GameOrchestrator(game, agents if agents is not None else make_agents(cfg, table, policy))
    winner = orch.run()
    logger.info(f"Game finished after {game.round_num} rounds and {orch.turns} turns, winner {winner}")
    return winner, orch
