"""
Game variants: the rule details that differ between dice (Perudo) and tiles (Scrabrudo).

The Game state machine holds one variant object and calls into it for everything
variant specific. Both classes expose the same capability set:

    name, universe, max_pattern_size
    deal(rng, n)                         -> new hand of n items
    canonical(pattern)                   -> canonical pattern value
    is_valid_pattern(pattern)            -> may this pattern be bet on at all
    pattern_key(pattern, wilds_active)   -> lookup table key
    requirements(pattern, wilds_active)  -> [(matching items, needed), ...]
    key_requirements(pattern_key)        -> same, starting from a lookup key
    count_occurrences(pattern, items, wilds_active)
    bet_key(bet)                         -> sort key giving the strict bet order
    lookup_patterns()                    -> every key the lookup table should hold
    candidate_patterns(hand)             -> patterns the AI considers betting on
    palafico_applies(item_count)         -> special one-item round hook
    format_bet(bet), parse_pattern(text)

A pattern occurs once for every complete, disjoint copy of its requirements in a
pool of items, so "aab" occurs twice in "aaaabbb" and a die face occurs once per
matching die.
"""

from collections import Counter
from itertools import combinations

from precompute.patterns import dice_patterns, extract_patterns
from sim.errors import EmptyPatternSetError


def count_matches(reqs, items):
    """Occurrences of a requirement list in `items` (minimum over requirements)."""
    counts = Counter(items)
    best = None
    for group, needed in reqs:
        have = sum(counts[i] for i in group) // needed
        if best is None or have < best:
            best = have
    return best if best is not None else 0


class DiceVariant:
    """Six-sided dice with ones wild and the palafico (one die left) round."""

    name = 'dice'
    universe = (1, 2, 3, 4, 5, 6)
    max_pattern_size = 1
    WILD = 1

    def __init__(self, ones_are_wild=True, use_palafico=True):
        self.ones_are_wild = ones_are_wild
        self.use_palafico = use_palafico

    def deal(self, rng, n):
        return [rng.randint(1, 6) for _ in range(n)]

    def canonical(self, pattern):
        return int(pattern)

    def is_valid_pattern(self, pattern):
        return isinstance(pattern, int) and not isinstance(pattern, bool) and 1 <= pattern <= 6

    def pattern_key(self, pattern, wilds_active):
        face = self.canonical(pattern)
        if face == self.WILD or (wilds_active and self.ones_are_wild):
            return str(face)
        # faces counted without wilds (palafico rounds, or wilds switched off)
        return f"={face}"

    def requirements(self, pattern, wilds_active):
        face = self.canonical(pattern)
        if face != self.WILD and wilds_active and self.ones_are_wild:
            return [((face, self.WILD), 1)]
        return [((face,), 1)]

    def key_requirements(self, pattern_key):
        if pattern_key.startswith('='):
            return self.requirements(int(pattern_key[1:]), wilds_active=False)
        return self.requirements(int(pattern_key), wilds_active=True)

    def count_occurrences(self, pattern, items, wilds_active):
        return count_matches(self.requirements(pattern, wilds_active), items)

    def bet_key(self, bet):
        qty, face = bet
        if face == self.WILD and self.ones_are_wild:
            # a bet on n wilds sits between 2n and 2n + 1 of any other face
            return (2 * qty, 7)
        return (qty, face)

    def lookup_patterns(self):
        modes = {False, self.ones_are_wild}
        return sorted({self.pattern_key(f, w) for f in dice_patterns() for w in modes})

    def candidate_patterns(self, hand):
        return dice_patterns()

    def palafico_applies(self, item_count):
        return self.use_palafico and item_count == 1

    def format_bet(self, bet):
        return f"{bet[0]}x{bet[1]}"

    def parse_pattern(self, text):
        return int(text.strip())


class TileVariant:
    """
    Letter tiles a-z. A bet names a pattern that must be a sub-multiset of some
    dictionary word; the valid patterns come from precompute.patterns.extract_patterns.
    """

    name = 'tiles'
    universe = tuple('abcdefghijklmnopqrstuvwxyz')

    def __init__(self, patterns):
        self.patterns = frozenset(self.canonical(p) for p in patterns)
        if not self.patterns:
            raise EmptyPatternSetError("no usable patterns: the dictionary is empty or has no valid words")
        self.max_pattern_size = max(len(p) for p in self.patterns)

    @classmethod
    def from_words(cls, words, max_pattern_size):
        return cls(extract_patterns(words, max_pattern_size))

    def deal(self, rng, n):
        return [rng.choice(self.universe) for _ in range(n)]

    def canonical(self, pattern):
        return ''.join(sorted(pattern.lower()))

    def is_valid_pattern(self, pattern):
        return isinstance(pattern, str) and self.canonical(pattern) in self.patterns

    def pattern_key(self, pattern, wilds_active):
        return self.canonical(pattern)

    def requirements(self, pattern, wilds_active):
        return [((letter,), n) for letter, n in sorted(Counter(self.canonical(pattern)).items())]

    def key_requirements(self, pattern_key):
        return self.requirements(pattern_key, wilds_active=False)

    def count_occurrences(self, pattern, items, wilds_active):
        return count_matches(self.requirements(pattern, wilds_active), items)

    def bet_key(self, bet):
        qty, pattern = bet
        pattern = self.canonical(pattern)
        return (qty, len(pattern), pattern)

    def lookup_patterns(self):
        return sorted(self.patterns, key=lambda p: (len(p), p))

    def candidate_patterns(self, hand):
        """Valid sub-patterns of the hand plus every valid single letter."""
        letters = sorted(self.canonical(''.join(hand)))
        found = {l for l in self.universe if l in self.patterns}
        for size in range(2, min(len(letters), self.max_pattern_size) + 1):
            for combo in combinations(letters, size):
                p = ''.join(combo)
                if p in self.patterns:
                    found.add(p)
        return sorted(found, key=lambda p: (len(p), p))

    def palafico_applies(self, item_count):
        return False

    def format_bet(self, bet):
        return f"{bet[0]}x{bet[1]}"

    def parse_pattern(self, text):
        return self.canonical(text.strip())
