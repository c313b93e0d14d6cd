"""
Sample deals for testing rule resolution.

Each scenario returns the hands to pass to Game.new_round(hands=...) together
with what the table really holds, so tests can check call outcomes without
depending on the RNG.
"""


class DiceDeals:
    """Fixed dice deals"""

    @staticmethod
    def two_fours_no_ones():
        """Two players, five dice each, exactly two 4s and no wild ones"""
        return {
            'hands': [[4, 2, 3, 5, 6], [4, 2, 3, 5, 6]],
            'true_counts': {4: 2, 2: 2, 1: 0},
        }

    @staticmethod
    def ones_count_as_wild():
        """Two 5s and two wild ones: four 5s while wilds are on, two without"""
        return {
            'hands': [[5, 1, 2], [5, 1, 3]],
            'true_counts': {5: 4, 1: 2, 2: 3},
            'counts_without_wilds': {5: 2, 1: 2, 2: 1},
        }

    @staticmethod
    def palafico_start():
        """Starting player is down to one die"""
        return {
            'item_counts': [1, 3],
            'hands': [[6], [6, 1, 2]],
            'true_counts_without_wilds': {6: 2, 1: 1},
        }


class TileDeals:
    """Fixed tile deals"""

    @staticmethod
    def cat_twice():
        """Two complete copies of 'act' across both hands, one spare 'a'"""
        return {
            'hands': [['c', 'a', 't', 'a'], ['t', 'c', 'x', 'q']],
            'true_counts': {'act': 2, 'a': 2, 'tea': 0},
        }
