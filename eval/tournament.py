from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional

from tqdm import tqdm

from sim.game import Game
from sim.orchestrator import GameOrchestrator
from agents.random_agent import RandomAgent
from agents.lookup_agent import LookupAgent

from .config import GameConfig

logger = logging.getLogger(__name__)

AGENTS = {
    'random': RandomAgent,
    'lookup': LookupAgent,
}


def make_agent(name, table, policy=None, seed=None, seat=0):
    cls = AGENTS.get(name)
    if cls is None:
        raise ValueError(f"Unknown agent: {name}")
    if name == 'lookup':
        return cls(table, policy, name=f"lookup_{seat}")
    return cls(name=f"{name}_{seat}", seed=seed)


def play_match(cfg: GameConfig, variant, table, agent_names: List[str], games: int = 30,
               seed: Optional[int] = None, policy=None, progress: bool = False) -> List[Dict]:
    """
    Play `games` AI-only games; seat i plays agent_names[i % len(agent_names)].
    Returns one row per game.
    """
    cfg.validate()
    if games <= 0:
        raise ValueError("games must be positive")
    if not agent_names:
        raise ValueError("at least one agent type is required")
    rows: List[Dict] = []
    seats = [agent_names[i % len(agent_names)] for i in range(cfg.num_players)]

    for g in tqdm(range(games), desc="Playing games", unit="game", disable=not progress):
        game_seed = None if seed is None else seed + g
        game = Game(variant, num_players=cfg.num_players, start_items=cfg.start_items,
                    use_exact=cfg.use_exact, seed=game_seed)
        agents = [make_agent(name, table, policy, seed=None if game_seed is None else game_seed * 100 + i, seat=i)
                  for i, name in enumerate(seats)]
        orch = GameOrchestrator(game, agents)
        t0 = time.time()
        winner = orch.run()
        t1 = time.time()
        rows.append({
            "game": g,
            "seed": game_seed,
            "winner": winner,
            "winner_agent": seats[winner],
            "rounds": game.round_num,
            "turns": orch.turns,
            "total_time_ms": int((t1 - t0) * 1000),
        })
        logger.debug(f"Game {g}: winner {winner} ({seats[winner]}) after {orch.turns} turns")
    return rows
