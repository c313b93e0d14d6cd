import pytest

from agents.human_agent import HumanAgent
from agents.lookup_agent import LookupAgent
from eval.config import GameConfig
from eval.runner import load_table, make_agents, make_game, make_variant, run_game
from eval.tournament import make_agent, play_match
from precompute.lookup import LookupTable
from sim.errors import EmptyPatternSetError, IncompatibleTableError
from sim.variants import DiceVariant, TileVariant


def test_make_variant():
    assert isinstance(make_variant(GameConfig(variant="dice")), DiceVariant)
    tiles = make_variant(GameConfig(variant="tiles", max_pattern_size=2), ["cat", "dog"])
    assert isinstance(tiles, TileVariant)
    assert tiles.max_pattern_size == 2
    with pytest.raises(ValueError):
        make_variant(GameConfig(variant="tiles"))
    with pytest.raises(EmptyPatternSetError):
        make_variant(GameConfig(variant="tiles"), ["", "42"])


def test_make_agents_places_human():
    cfg = GameConfig(num_players=3, human_index=1)
    agents = make_agents(cfg, None)
    assert isinstance(agents[1], HumanAgent)
    assert isinstance(agents[0], LookupAgent) and isinstance(agents[2], LookupAgent)


def test_make_game_uses_config():
    cfg = GameConfig(num_players=3, start_items=2, use_exact=True)
    game = make_game(cfg, make_variant(cfg))
    assert game.item_counts == [2, 2, 2]
    assert game.use_exact


def test_load_table_rejects_small_table(tmp_path):
    path = str(tmp_path / "t.pkl")
    LookupTable.build(DiceVariant(), max_unseen=3, trials=10, seed=1).save(path)
    cfg = GameConfig(num_players=2, start_items=2)
    assert len(load_table(path, make_variant(cfg), cfg)) > 0
    big = GameConfig(num_players=4, start_items=5)
    with pytest.raises(IncompatibleTableError):
        load_table(path, make_variant(big), big)


def test_run_game_ai_only():
    cfg = GameConfig(num_players=3, start_items=2, seed=4)
    winner, orch = run_game(cfg, make_variant(cfg), None)
    assert winner == orch.game.winner


def test_make_agent_unknown():
    with pytest.raises(ValueError):
        make_agent("oracle", None)


def test_play_match_rows():
    cfg = GameConfig(num_players=3, start_items=2)
    variant = make_variant(cfg)
    rows = play_match(cfg, variant, None, ["lookup", "random"], games=4, seed=10)
    assert [r["game"] for r in rows] == [0, 1, 2, 3]
    for r in rows:
        assert r["winner_agent"] == ["lookup", "random", "lookup"][r["winner"]]
        assert r["turns"] > 0
    again = play_match(cfg, variant, None, ["lookup", "random"], games=4, seed=10)
    assert [r["winner"] for r in again] == [r["winner"] for r in rows]
    with pytest.raises(ValueError):
        play_match(cfg, variant, None, ["random"], games=0)


def test_play_match_needs_agents():
    cfg = GameConfig(num_players=2, start_items=2)
    with pytest.raises(ValueError):
        play_match(cfg, make_variant(cfg), None, [], games=1)
