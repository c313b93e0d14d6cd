"""
Error kinds shared by the rules engine, the lookup table and the pattern extractor.

Rule violations (GameRuleError subclasses) raised for a human seat are passed back
to that seat for another attempt; raised for an AI seat they are fatal.
NotComputedError is recoverable by the decision policy. IncompatibleTableError and
EmptyPatternSetError abort startup.
"""


class GameRuleError(Exception):
    """Base class for actions the rules do not allow."""


class IllegalBetError(GameRuleError):
    """Proposed bet does not exceed the outstanding bet, or names an unusable pattern."""


class IllegalCallError(GameRuleError):
    """Call (or exact) with no outstanding bet to challenge."""


class OutOfTurnError(GameRuleError):
    """Action submitted by a player whose turn it is not."""


class GameOverError(GameRuleError):
    """Action submitted after a single player remains."""


class TableError(Exception):
    """Base class for lookup table problems."""


class NotComputedError(TableError, KeyError):
    """Lookup key absent from the table (pattern too long, or unseen count out of range)."""

    def __init__(self, pattern_key, unseen):
        super().__init__(f"no precomputed distribution for pattern {pattern_key!r} with {unseen} unseen items")
        self.pattern_key = pattern_key
        self.unseen = unseen

    def __str__(self):
        return self.args[0]


class IncompatibleTableError(TableError):
    """Persisted table was built for another variant or for smaller parameters."""


class EmptyPatternSetError(ValueError):
    """The dictionary yielded no usable patterns for the requested hand size."""
