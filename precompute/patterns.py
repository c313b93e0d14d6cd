"""
Pattern extraction: every sub-pattern an AI might want odds for.

For tiles a pattern is a sorted letter string. Each dictionary word contributes
itself and all of its sub-multisets, e.g. HATE gives
AEHT, AET, AHT, EHT, AE, AH, AT, EH, ET, HT, A, E, H, T.
"""

import logging
import re
from itertools import combinations

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r'^[a-z]+$')


def sort_word(word):
    """Sorts a word by its letters."""
    return ''.join(sorted(word))


def sub_patterns(word, max_size):
    """All sorted sub-multisets of `word` with 1..max_size letters."""
    letters = sort_word(word)
    found = set()
    for size in range(1, min(len(letters), max_size) + 1):
        # combinations of a sorted sequence come out sorted
        found.update(''.join(c) for c in combinations(letters, size))
    return found


def extract_patterns(words, max_size):
    """
    Union of sub_patterns over the dictionary, ordered by (length, text).

    Malformed records (anything but a-z after lowercasing) are skipped, so an
    empty or unusable dictionary simply yields an empty list.
    """
    if max_size < 1:
        raise ValueError("max_size must be at least 1")
    patterns = set()
    skipped = 0
    for raw in words:
        word = raw.strip().lower()
        if not _WORD_RE.match(word):
            skipped += 1
            continue
        patterns |= sub_patterns(word, max_size)
    if skipped:
        logger.debug(f"Skipped {skipped} malformed dictionary records")
    logger.info(f"Extracted {len(patterns)} patterns of up to {max_size} letters")
    return sorted(patterns, key=lambda p: (len(p), p))


def dice_patterns():
    """The six die faces; every face can be bet on."""
    return [1, 2, 3, 4, 5, 6]


def load_words(path):
    """One word per line; blank lines dropped."""
    logger.info(f"Loading dictionary from {path}")
    with open(path, 'r', encoding='utf-8') as f:
        return [line.strip() for line in f if line.strip()]
