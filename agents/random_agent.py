# agents/random_agent.py
import random
from sim.game import Action, legal_bets_after


class RandomAgent:
    def __init__(self, name='random', seed=None, call_prob=0.3):
        self.name = name
        self.rng = random.Random(seed)
        self.call_prob = call_prob

    def select_action(self, obs):
        variant = obs['_game'].variant
        current = obs['current_bet']
        locked = obs['palafico_pattern'] if obs['palafico_active'] else None
        # never call without a bet
        if current is not None and self.rng.random() < self.call_prob:
            return Action.call()
        bets = legal_bets_after(variant, current, variant.candidate_patterns(obs['my_hand']),
                                sum(obs['item_counts']), locked)
        if not bets:
            return Action.call()
        # pick among the lower bets so random games stay plausible
        q, pattern = self.rng.choice(bets[:max(1, len(bets) // 4)])
        return Action.bet(q, pattern)
