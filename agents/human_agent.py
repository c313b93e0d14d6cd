"""
Text-input seat for a human player.

Input syntax: "2.6" bets two sixes, "cat" bets one "act", "3.cat" three of them;
"p" calls, "x" calls exact. Rule violations come back through reject() and the
player is asked again.
"""

from sim.errors import IllegalBetError
from sim.game import Action


def parse_action(text, variant):
    line = text.strip().lower()
    if line in ('p', 'call', 'perudo'):
        return Action.call()
    if line in ('x', 'exact', 'calza'):
        return Action.exact()
    qty, sep, pattern = line.partition('.')
    if not sep:
        qty, pattern = '1', line
    try:
        qty = int(qty)
        pattern = variant.parse_pattern(pattern)
    except ValueError as e:
        raise IllegalBetError(f"could not read a bet from {text!r}") from e
    return Action.bet(qty, pattern)


class HumanAgent:
    human = True

    def __init__(self, name='human', read=input, write=print):
        self.name = name
        self.read = read
        self.write = write

    def select_action(self, obs):
        variant = obs['_game'].variant
        while True:
            self.write(f"Items left: {obs['item_counts']} ({sum(obs['item_counts'])})")
            self.write(f"Your hand: {' '.join(str(i) for i in obs['my_hand'])}")
            if obs['current_bet'] is None:
                prompt = "Enter bet (2.6=two sixes, 2.cat=two 'cat'): "
            else:
                self.write(f"Current bet: {variant.format_bet(obs['current_bet'])} by player {obs['bet_maker']}")
                prompt = "Enter bet, p=call, x=exact: "
            try:
                return parse_action(self.read(prompt), variant)
            except IllegalBetError as e:
                self.write(str(e))

    def reject(self, error):
        self.write(f"Not allowed: {error}")

    def round_finished(self, result):
        shown = ' | '.join(f"{i}: {' '.join(str(x) for x in h)}" for i, h in enumerate(result.hands) if h)
        self.write(f"Hands: {shown}")
        self.write(f"There were {result.true_count}; " + (
            f"player {result.loser} loses an item" if result.loser is not None
            else f"player {result.gainer} called it exactly"))
