import math

import pytest

from eval.aggregate import aggregate_win_rates, wilson_ci


def test_wilson_basic():
    low, high = wilson_ci(50, 100)
    assert 0.4 < low < 0.6
    assert 0.5 < high < 0.7


def test_wilson_empty():
    low, high = wilson_ci(0, 0)
    assert math.isnan(low) and math.isnan(high)


def test_aggregate_win_rates_by_agent():
    rows = [
        {"game": 0, "winner": 0, "winner_agent": "lookup"},
        {"game": 1, "winner": 2, "winner_agent": "lookup"},
        {"game": 2, "winner": 1, "winner_agent": "random"},
        {"game": 3, "winner": 0, "winner_agent": "lookup"},
    ]
    out = aggregate_win_rates(rows, ["lookup", "random"], 3)
    assert [r["agent"] for r in out] == ["lookup", "random"]
    lookup = out[0]
    assert lookup["seats"] == 2
    assert lookup["wins"] == 3
    assert abs(lookup["win_rate"] - 0.75) < 1e-9
    assert abs(lookup["expected"] - 2 / 3) < 1e-9
    assert lookup["ci_low"] < 0.75 < lookup["ci_high"]
    assert out[1]["wins"] == 1


def test_aggregate_needs_agents():
    with pytest.raises(ValueError):
        aggregate_win_rates([], [], 3)
