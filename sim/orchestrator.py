"""
Turn loop driving a Game with one agent per seat.

Agents implement `select_action(obs) -> action tuple`. An agent with a truthy
`human` attribute gets its rule violations back through `reject(error)` and is
asked again; for every other agent a violation is a bug and propagates.
"""

import logging

from sim.errors import GameRuleError
from sim.game import Action

logger = logging.getLogger(__name__)


class GameOrchestrator:
    def __init__(self, game, agents):
        if len(agents) != game.num_players:
            raise ValueError(f"need {game.num_players} agents, got {len(agents)}")
        self.game = game
        self.agents = agents
        self.history = []  # (round_num, player_idx, action)
        self.round_results = []
        self.turns = 0

    def _apply(self, player, action):
        game = self.game
        if Action.is_bet(action):
            game.propose_bet(player, (Action.qty(action), Action.pattern(action)))
            return None
        if action[0] == 'call':
            return game.call(player)
        if action[0] == 'exact':
            return game.exact(player)
        raise GameRuleError(f"unknown action {action!r}")

    def play_turn(self):
        """Ask the current player for an action and apply it. Returns the RoundResult if the round ended."""
        game = self.game
        if game.round_over:
            game.new_round()
        player = game.current_player
        agent = self.agents[player]
        while True:
            action = agent.select_action(game.observation(player))
            try:
                result = self._apply(player, action)
            except GameRuleError as e:
                if not getattr(agent, 'human', False):
                    logger.error(f"Agent {getattr(agent, 'name', player)} chose an illegal action {action!r}: {e}")
                    raise
                agent.reject(e)
                continue
            break

        self.turns += 1
        self.history.append((game.round_num, player, action))
        if result is not None:
            self.round_results.append(result)
            for a in self.agents:
                notify = getattr(a, 'round_finished', None)
                if callable(notify):
                    notify(result)
        return result

    def run(self, max_turns=None):
        """Play until one player remains; returns the winner's index."""
        game = self.game
        logger.info(f"Game commencing: {game.num_players} players, {game.variant.name}")
        while not game.is_over:
            if max_turns is not None and self.turns >= max_turns:
                raise RuntimeError(f"game did not finish within {max_turns} turns")
            self.play_turn()
        return game.winner
