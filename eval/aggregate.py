from __future__ import annotations

from typing import List, Dict, Tuple


def wilson_ci(k: int, n: int, z: float = 1.959963984540054) -> Tuple[float, float]:
    if n == 0:
        return float("nan"), float("nan")
    p = k / n
    denom = 1 + z * z / n
    center = (p + z * z / (2 * n)) / denom
    half = z * ((p * (1 - p) / n + z * z / (4 * n * n)) ** 0.5) / denom
    return center - half, center + half


def aggregate_win_rates(rows: List[Dict], agent_names: List[str], num_players: int) -> List[Dict]:
    """
    Win rate per agent type over all games, with Wilson interval and the share
    of seats the type held (its win rate under pure chance).
    Returns rows with keys: agent, seats, games, wins, win_rate, ci_low, ci_high, expected
    """
    if not agent_names:
        raise ValueError("at least one agent type is required")
    seats = [agent_names[i % len(agent_names)] for i in range(num_players)]
    n = len(rows)
    out: List[Dict] = []
    for agent in sorted(set(seats)):
        k = sum(1 for r in rows if r.get("winner_agent") == agent)
        wr = k / n if n > 0 else float("nan")
        lo, hi = wilson_ci(k, n)
        out.append({
            "agent": agent,
            "seats": seats.count(agent),
            "games": n,
            "wins": k,
            "win_rate": wr,
            "ci_low": lo,
            "ci_high": hi,
            "expected": seats.count(agent) / num_players,
        })
    return out
