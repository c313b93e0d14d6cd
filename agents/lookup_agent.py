from __future__ import annotations

import json
import logging
from dataclasses import dataclass, asdict, fields
from typing import Dict, Optional

from sim.errors import NotComputedError
from sim.game import Action, legal_bets_after

logger = logging.getLogger(__name__)


@dataclass
class PolicyConfig:
    raise_threshold: float = 0.5
    call_threshold: float = 0.5
    exact_threshold: float = 0.6
    tie_epsilon: float = 1e-9
    max_candidates: Optional[int] = None

    def validate(self) -> None:
        for name in ("raise_threshold", "call_threshold", "exact_threshold"):
            v = getattr(self, name)
            if not isinstance(v, (int, float)) or not 0.0 <= v <= 1.0:
                raise ValueError(f"{name} must be a probability in [0, 1]")
        if self.tie_epsilon < 0:
            raise ValueError("tie_epsilon must be non-negative")
        if self.max_candidates is not None and (not isinstance(self.max_candidates, int) or self.max_candidates <= 0):
            raise ValueError("max_candidates must be a positive integer or None")

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @staticmethod
    def from_dict(data: Dict) -> PolicyConfig:
        # private keys ('_description' etc.) are documentation only
        data = {k: v for k, v in data.items() if not str(k).startswith("_")}
        known = {f.name for f in fields(PolicyConfig)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown policy settings: {sorted(unknown)}")
        cfg = PolicyConfig(**data)
        cfg.validate()
        return cfg

    @staticmethod
    def from_json(s: str) -> PolicyConfig:
        return PolicyConfig.from_dict(json.loads(s))


def load_policy_config(path: str) -> PolicyConfig:
    with open(path, "r", encoding="utf-8") as f:
        return PolicyConfig.from_dict(json.load(f))


def uniform_distribution(unseen):
    return tuple([1.0 / (unseen + 1)] * (unseen + 1))


def prob_at_least(dist, needed):
    if needed <= 0:
        return 1.0
    return min(1.0, sum(dist[needed:]))


def prob_exactly(dist, needed):
    if needed < 0 or needed >= len(dist):
        return 0.0
    return dist[needed]


class _Estimator:
    """P(bet true) for one decision: own-hand count plus the table's unseen distribution."""

    def __init__(self, variant, hand, unseen, wilds_active, table):
        self.variant = variant
        self.hand = hand
        self.unseen = unseen
        self.wilds_active = wilds_active
        self.table = table
        self._dists = {}

    def distribution(self, pattern):
        key = self.variant.pattern_key(pattern, self.wilds_active)
        dist = self._dists.get(key)
        if dist is None:
            try:
                if self.table is None:
                    raise NotComputedError(key, self.unseen)
                dist = self.table.get(key, self.unseen)
            except NotComputedError as e:
                logger.debug(f"{e}; assuming a uniform count distribution")
                dist = uniform_distribution(self.unseen)
            self._dists[key] = dist
        return dist

    def needed(self, bet):
        qty, pattern = bet
        return qty - self.variant.count_occurrences(pattern, self.hand, self.wilds_active)

    def p_true(self, bet):
        return prob_at_least(self.distribution(bet[1]), self.needed(bet))

    def p_exact(self, bet):
        return prob_exactly(self.distribution(bet[1]), self.needed(bet))


def decide(obs, hand, table, config=None):
    """
    Choose the next action from an observation snapshot.

    Raises: the smallest bet (in bet order) whose P(true) clears raise_threshold.
    Calls: when P(current bet false) clears call_threshold and is at least the
    best raise's P(true), or when no raise clears the threshold and calling is
    still the better gamble. Exact: when enabled and P(exact) clears its
    threshold and beats both.
    """
    cfg = config or PolicyConfig()
    game = obs['_game']
    variant = game.variant
    current = obs['current_bet']
    total = sum(obs['item_counts'])
    wilds_active = not obs['palafico_active']
    est = _Estimator(variant, hand, total - len(hand), wilds_active, table)

    candidates = legal_bets_after(variant, current, variant.candidate_patterns(hand), total,
                                  obs['palafico_pattern'] if obs['palafico_active'] else None)
    if cfg.max_candidates is not None:
        candidates = candidates[:cfg.max_candidates]
    scored = [(bet, est.p_true(bet)) for bet in candidates]

    best = None
    if scored:
        best_p = max(p for _, p in scored)
        # least commitment among near-equal probabilities
        best = next((b, p) for b, p in scored if p >= best_p - cfg.tie_epsilon)
    safe = next(((b, p) for b, p in scored if p >= cfg.raise_threshold), None)

    if current is None:
        if best is None:
            raise RuntimeError("no legal opening bet for this hand")
        choice = safe or best
        logger.debug(f"Opening with {variant.format_bet(choice[0])} (P={choice[1]:.3f})")
        return Action.bet(*choice[0])

    p_false = 1.0 - est.p_true(current)
    best_p = best[1] if best is not None else -1.0

    if game.use_exact:
        p_exact = est.p_exact(current)
        if p_exact >= cfg.exact_threshold and p_exact > best_p and p_exact > p_false:
            logger.debug(f"Exact on {variant.format_bet(current)} (P={p_exact:.3f})")
            return Action.exact()

    if best is None:
        return Action.call()
    if safe is not None:
        if p_false >= cfg.call_threshold and p_false >= best_p:
            logger.debug(f"Calling {variant.format_bet(current)} (P(false)={p_false:.3f})")
            return Action.call()
        logger.debug(f"Raising to {variant.format_bet(safe[0])} (P={safe[1]:.3f}, P(false)={p_false:.3f})")
        return Action.bet(*safe[0])
    if p_false >= best_p:
        logger.debug(f"No safe raise, calling {variant.format_bet(current)} (P(false)={p_false:.3f})")
        return Action.call()
    logger.debug(f"No safe raise, best gamble {variant.format_bet(best[0])} (P={best_p:.3f})")
    return Action.bet(*best[0])


class LookupAgent:
    def __init__(self, table, config=None, name='lookup'):
        self.name = name
        self.table = table
        self.config = config or PolicyConfig()
        self.config.validate()

    def select_action(self, obs):
        return decide(obs, obs['my_hand'], self.table, self.config)
