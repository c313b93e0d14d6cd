"""
Variant-agnostic rules engine: bets, calls, exact calls, eliminations.

One Game instance owns the authoritative state (item counts, real hands, turn,
outstanding bet). Agents only ever see `observation(player)` snapshots.
"""

import logging
import random
from dataclasses import dataclass, field
from itertools import chain
from typing import List, Optional

from sim.errors import GameOverError, GameRuleError, IllegalBetError, IllegalCallError, OutOfTurnError

logger = logging.getLogger(__name__)


class Action:
    @staticmethod
    def bet(qty, pattern):
        return ("bet", int(qty), pattern)

    @staticmethod
    def call():
        return ("call",)

    @staticmethod
    def exact():
        return ("exact",)

    @staticmethod
    def is_bet(a):
        return a[0] == 'bet'

    @staticmethod
    def qty(a):
        return a[1] if Action.is_bet(a) else None

    @staticmethod
    def pattern(a):
        return a[2] if Action.is_bet(a) else None

    @staticmethod
    def to_str(a):
        if a[0] == 'bet':
            return f"bet {a[1]}x{a[2]}"
        return a[0]


def legal_bets_after(variant, current_bet, patterns, limit, locked_pattern=None):
    """
    Bets on `patterns` with quantity 1..limit that strictly exceed `current_bet`,
    sorted by the variant's bet order. `locked_pattern` (palafico) drops every
    other pattern.
    """
    current_key = None if current_bet is None else variant.bet_key(current_bet)
    bets = []
    for pattern in patterns:
        if not variant.is_valid_pattern(pattern):
            continue
        pattern = variant.canonical(pattern)
        if locked_pattern is not None and pattern != locked_pattern:
            continue
        for q in range(1, limit + 1):
            if current_key is None or variant.bet_key((q, pattern)) > current_key:
                bets.append((q, pattern))
    bets.sort(key=variant.bet_key)
    return bets


@dataclass
class RoundResult:
    """Outcome of a resolved call or exact call."""
    kind: str
    caller: int
    bet: tuple
    bet_maker: int
    true_count: int
    bet_true: bool
    loser: Optional[int]
    gainer: Optional[int] = None
    eliminated: bool = False
    hands: List[list] = field(default_factory=list)


class Game:
    def __init__(self, variant, num_players=3, start_items=5, use_exact=False, max_items=None, seed=None, rng=None):
        if num_players < 2:
            raise ValueError("a game needs at least two players")
        if start_items < 1:
            raise ValueError("start_items must be positive")
        self.variant = variant
        self.num_players = num_players
        self.start_items = start_items
        self.use_exact = use_exact
        self.max_items = start_items if max_items is None else max_items
        self.rng = rng or random.Random(seed)

        self.item_counts = [start_items] * num_players
        self.hands = [[] for _ in range(num_players)]
        self.current_player = 0
        self.current_bet = None
        self.bet_maker = None
        self.palafico_active = False
        self.palafico_pattern = None
        self.round_num = 0
        self.round_over = True
        self.last_result = None

    # --- state queries ---

    def active_players(self):
        return [i for i, c in enumerate(self.item_counts) if c > 0]

    @property
    def is_over(self):
        return len(self.active_players()) <= 1

    @property
    def winner(self):
        alive = self.active_players()
        return alive[0] if len(alive) == 1 else None

    @property
    def wilds_active(self):
        return not self.palafico_active

    def total_items(self):
        return sum(self.item_counts)

    def next_active(self, idx):
        n = self.num_players
        for offset in range(1, n + 1):
            cand = (idx + offset) % n
            if self.item_counts[cand] > 0:
                return cand
        return idx

    def true_count(self, pattern):
        """Ground-truth occurrences of `pattern` across every real hand."""
        return self.variant.count_occurrences(pattern, chain.from_iterable(self.hands), self.wilds_active)

    def observation(self, player):
        return {
            'player_idx': player,
            'my_hand': list(self.hands[player]),
            'item_counts': list(self.item_counts),
            'current_bet': self.current_bet,
            'bet_maker': self.bet_maker,
            'palafico_active': self.palafico_active,
            'palafico_pattern': self.palafico_pattern,
            'round_num': self.round_num,
            '_game': self,
        }

    # --- round lifecycle ---

    def new_round(self, hands=None):
        """Deal fresh hands to every active player and clear the outstanding bet."""
        if self.is_over:
            raise GameOverError(f"game is over, player {self.winner} won")
        if self.item_counts[self.current_player] <= 0:
            self.current_player = self.next_active(self.current_player)

        for i, count in enumerate(self.item_counts):
            if count <= 0:
                self.hands[i] = []
            elif hands is not None and hands[i] is not None:
                if len(hands[i]) != count:
                    raise ValueError(f"player {i} holds {count} items, got a hand of {len(hands[i])}")
                self.hands[i] = list(hands[i])
            else:
                self.hands[i] = self.variant.deal(self.rng, count)

        self.current_bet = None
        self.bet_maker = None
        self.palafico_pattern = None
        self.palafico_active = self.variant.palafico_applies(self.item_counts[self.current_player])
        self.round_num += 1
        self.round_over = False
        logger.debug(f"Round {self.round_num}: player {self.current_player} starts, items {self.item_counts}"
                     + (" (palafico)" if self.palafico_active else ""))

    def _check_turn(self, player):
        if self.is_over:
            raise GameOverError(f"game is over, player {self.winner} won")
        if self.round_over:
            raise GameRuleError("no round in progress, start one with new_round()")
        if player != self.current_player:
            raise OutOfTurnError(f"it is player {self.current_player}'s turn, not player {player}'s")

    # --- betting ---

    def check_bet(self, bet):
        """Raise IllegalBetError unless `bet` may follow the outstanding bet."""
        try:
            qty, pattern = bet
        except (TypeError, ValueError):
            raise IllegalBetError(f"malformed bet {bet!r}")
        if not isinstance(qty, int) or qty < 1:
            raise IllegalBetError(f"bet quantity must be a positive integer, got {qty!r}")
        if not self.variant.is_valid_pattern(pattern):
            raise IllegalBetError(f"{pattern!r} is not a pattern that can be bet on")
        pattern = self.variant.canonical(pattern)
        if self.palafico_active and self.palafico_pattern is not None and pattern != self.palafico_pattern:
            raise IllegalBetError(f"palafico round: bets must stay on {self.palafico_pattern}")
        if self.current_bet is not None:
            if self.variant.bet_key((qty, pattern)) <= self.variant.bet_key(self.current_bet):
                raise IllegalBetError(
                    f"{self.variant.format_bet((qty, pattern))} does not exceed "
                    f"{self.variant.format_bet(self.current_bet)}")
        return qty, pattern

    def is_legal_bet(self, bet):
        try:
            self.check_bet(bet)
        except IllegalBetError:
            return False
        return True

    def propose_bet(self, player, bet):
        self._check_turn(player)
        bet = self.check_bet(bet)
        if self.palafico_active and self.palafico_pattern is None:
            self.palafico_pattern = bet[1]
        self.current_bet = bet
        self.bet_maker = player
        logger.info(f"Player {player} bets {self.variant.format_bet(bet)}")
        self.current_player = self.next_active(player)
        return bet

    def legal_bets(self, patterns=None, limit_quantity=None):
        """
        Every bet strictly above the outstanding one, for the given patterns
        (default: the current player's candidate patterns), with quantities up to
        `limit_quantity` (default: all items on the table).
        """
        if patterns is None:
            patterns = self.variant.candidate_patterns(self.hands[self.current_player])
        limit = self.total_items() if limit_quantity is None else limit_quantity
        return legal_bets_after(self.variant, self.current_bet, patterns, limit, self.palafico_pattern)

    def legal_actions(self, patterns=None):
        actions = [Action.bet(q, p) for q, p in self.legal_bets(patterns)]
        if self.current_bet is not None:
            actions.append(Action.call())
            if self.use_exact:
                actions.append(Action.exact())
        return actions

    # --- challenges ---

    def call(self, player):
        """Challenge the outstanding bet; the wrong side loses one item."""
        self._check_turn(player)
        if self.current_bet is None:
            raise IllegalCallError("there is no bet to call")
        qty, pattern = self.current_bet
        count = self.true_count(pattern)
        bet_true = count >= qty
        loser = player if bet_true else self.bet_maker
        logger.info(f"Player {player} calls {self.variant.format_bet(self.current_bet)}: there were {count}, "
                    f"the bet was {'good' if bet_true else 'bad'}")
        return self._resolve('call', player, count, bet_true, loser=loser)

    def exact(self, player):
        """Claim the outstanding bet is exactly right: a hit regains one item, a miss loses one."""
        self._check_turn(player)
        if not self.use_exact:
            raise IllegalCallError("exact calls are disabled for this game")
        if self.current_bet is None:
            raise IllegalCallError("there is no bet to call exact")
        qty, pattern = self.current_bet
        count = self.true_count(pattern)
        logger.info(f"Player {player} calls exact on {self.variant.format_bet(self.current_bet)}: there were {count}")
        if count == qty:
            return self._resolve('exact', player, count, True, loser=None, gainer=player)
        return self._resolve('exact', player, count, False, loser=player)

    def _resolve(self, kind, caller, count, bet_true, loser, gainer=None):
        result = RoundResult(
            kind=kind, caller=caller, bet=self.current_bet, bet_maker=self.bet_maker,
            true_count=count, bet_true=bet_true, loser=loser, gainer=gainer,
            hands=[list(h) for h in self.hands],
        )
        if loser is not None:
            self.item_counts[loser] -= 1
            if self.item_counts[loser] == 0:
                result.eliminated = True
                self.hands[loser] = []
                logger.info(f"Player {loser} is eliminated")
            else:
                logger.info(f"Player {loser} loses an item, now has {self.item_counts[loser]}")
            self.current_player = loser
        else:
            if self.item_counts[gainer] < self.max_items:
                self.item_counts[gainer] += 1
                logger.info(f"Player {gainer} gains an item, now has {self.item_counts[gainer]}")
            self.current_player = gainer

        self.current_bet = None
        self.bet_maker = None
        self.palafico_pattern = None
        self.round_over = True
        self.last_result = result
        if self.is_over:
            logger.info(f"Player {self.winner} wins!")
        return result
