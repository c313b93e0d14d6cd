"""
Unit tests for the turn loop and the human input adapter.
"""

import pytest
from agents.human_agent import HumanAgent, parse_action
from agents.random_agent import RandomAgent
from sim.errors import IllegalBetError, IllegalCallError
from sim.game import Action, Game
from sim.orchestrator import GameOrchestrator
from sim.variants import DiceVariant


class _Scripted:
    """Agent that replays a fixed list of actions."""

    def __init__(self, actions, name='scripted'):
        self.actions = list(actions)
        self.name = name
        self.finished = []

    def select_action(self, obs):
        return self.actions.pop(0)

    def round_finished(self, result):
        self.finished.append(result)


def _human(lines):
    out = []
    feed = iter(lines)
    return HumanAgent(name='you', read=lambda prompt: next(feed), write=out.append), out


class TestParseAction:
    def test_calls(self, dice_variant):
        assert parse_action('p', dice_variant) == Action.call()
        assert parse_action(' CALL ', dice_variant) == Action.call()
        assert parse_action('x', dice_variant) == Action.exact()

    def test_dice_bets(self, dice_variant):
        assert parse_action('2.6', dice_variant) == Action.bet(2, 6)
        assert parse_action('4', dice_variant) == Action.bet(1, 4)

    def test_tile_bets(self, tile_variant):
        assert parse_action('3.cat', tile_variant) == Action.bet(3, 'act')
        assert parse_action('tea', tile_variant) == Action.bet(1, 'aet')

    def test_garbage(self, dice_variant):
        with pytest.raises(IllegalBetError):
            parse_action('two.six', dice_variant)
        with pytest.raises(IllegalBetError):
            parse_action('2.', dice_variant)


class TestGameOrchestrator:
    def test_agent_count_must_match(self, sample_game):
        with pytest.raises(ValueError):
            GameOrchestrator(sample_game, [RandomAgent(), RandomAgent()])

    def test_play_turn_starts_round_and_records(self):
        game = Game(DiceVariant(), num_players=2, start_items=5, seed=3)
        a, b = _Scripted([Action.bet(1, 2)]), _Scripted([Action.call()])
        orch = GameOrchestrator(game, [a, b])
        assert orch.play_turn() is None
        assert game.round_num == 1
        result = orch.play_turn()
        assert result is not None
        assert orch.history == [(1, 0, Action.bet(1, 2)), (1, 1, Action.call())]
        assert orch.round_results == [result]
        assert a.finished == [result] and b.finished == [result]
        assert game.total_items() == 9

    def test_ai_violation_is_fatal(self):
        game = Game(DiceVariant(), num_players=2, start_items=5, seed=3)
        orch = GameOrchestrator(game, [_Scripted([Action.call()]), _Scripted([])])
        with pytest.raises(IllegalCallError):
            orch.play_turn()

    def test_human_violation_reprompts(self):
        game = Game(DiceVariant(), num_players=2, start_items=5, seed=3)
        human, out = _human(['p', 'abc', '0.3', '2.3'])
        orch = GameOrchestrator(game, [human, _Scripted([])])
        orch.play_turn()
        assert game.current_bet == (2, 3)
        assert orch.history == [(1, 0, Action.bet(2, 3))]
        rejections = [line for line in out if line.startswith('Not allowed')]
        # 'p' with no bet and '0.3' reach the game; 'abc' is caught while parsing
        assert len(rejections) == 2
        assert any('could not read' in line for line in out)

    def test_human_sees_round_summary(self):
        game = Game(DiceVariant(), num_players=2, start_items=5, seed=3)
        human, out = _human(['p'])
        orch = GameOrchestrator(game, [_Scripted([Action.bet(1, 2)]), human])
        orch.play_turn()
        orch.play_turn()
        assert any(line.startswith('Hands:') for line in out)
        assert any('loses an item' in line for line in out)

    def test_run_returns_winner(self):
        game = Game(DiceVariant(), num_players=3, start_items=2, seed=8)
        agents = [RandomAgent(name=f'r{i}', seed=i) for i in range(3)]
        winner = GameOrchestrator(game, agents).run()
        assert winner == game.winner
        assert game.item_counts[winner] > 0
        assert sum(1 for c in game.item_counts if c > 0) == 1

    def test_run_turn_limit(self):
        game = Game(DiceVariant(), num_players=3, start_items=5, seed=8)
        agents = [RandomAgent(name=f'r{i}', seed=i) for i in range(3)]
        with pytest.raises(RuntimeError):
            GameOrchestrator(game, agents).run(max_turns=1)
