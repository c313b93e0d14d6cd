import pytest
from sim.game import Game
from sim.variants import DiceVariant, TileVariant
from precompute.lookup import LookupTable


@pytest.fixture
def dice_variant():
    """Dice with ones wild and palafico rounds"""
    return DiceVariant()


@pytest.fixture
def sample_words():
    """Small dictionary for tile games"""
    return ['cat', 'hate', 'dog', 'tea', 'tee', 'oat', 'zebra']


@pytest.fixture
def tile_variant(sample_words):
    """Tile variant over sample_words, patterns of up to 3 letters"""
    return TileVariant.from_words(sample_words, 3)


@pytest.fixture
def sample_game(dice_variant):
    """Provides a 3 player dice game with 5 dice each"""
    return Game(dice_variant, num_players=3, start_items=5, seed=42)


@pytest.fixture
def flat_dice_table():
    """Every dice key with a symmetric distribution over 2 unseen dice"""
    entries = {}
    for key in DiceVariant().lookup_patterns():
        entries[(key, 2)] = (0.25, 0.5, 0.25)
    return LookupTable('dice', 1, 2, 100, entries)
