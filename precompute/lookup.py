"""
Lookup table: (pattern key, unseen count) -> occurrence-count distribution.

Built once offline by Monte Carlo, persisted with pickle, then loaded at game
start and shared read-only by every AI seat. A key that was never computed
raises NotComputedError; what to do about it is the caller's decision.
"""

import logging
import os
import pickle

from precompute.montecarlo import estimate_all
from sim.errors import IncompatibleTableError, NotComputedError

logger = logging.getLogger(__name__)

FORMAT_TAG = 'scrabrudo-lookup'
FORMAT_VERSION = 1


def default_path(variant_name, max_pattern_size, trials, data_dir='data'):
    return os.path.join(data_dir, f"lookup_{variant_name}_{max_pattern_size}_{trials}.pkl")


def _key_size(pattern_key):
    return len(pattern_key.lstrip('='))


class LookupTable:
    def __init__(self, variant_name, max_pattern_size, max_unseen, trials, entries=None):
        self.variant_name = variant_name
        self.max_pattern_size = int(max_pattern_size)
        self.max_unseen = int(max_unseen)
        self.trials = int(trials)
        self._entries = dict(entries or {})

    def __len__(self):
        return len(self._entries)

    def __contains__(self, key):
        return key in self._entries

    def keys(self):
        return self._entries.keys()

    def __repr__(self):
        return (f"LookupTable({self.variant_name!r}, max_pattern_size={self.max_pattern_size}, "
                f"max_unseen={self.max_unseen}, trials={self.trials}, entries={len(self)})")

    @classmethod
    def build(cls, variant, max_unseen, trials, patterns=None, seed=None, workers=1, chunk_size=64, progress=False):
        """
        Monte Carlo every pattern key (default: variant.lookup_patterns()) for
        unseen counts 0..max_unseen.
        """
        keys = list(variant.lookup_patterns() if patterns is None else patterns)
        max_size = max((_key_size(k) for k in keys), default=0)
        table = cls(variant.name, max_size, max_unseen, trials)

        def _store(key, dist):
            table._entries[key] = dist

        estimate_all(variant, keys, max_unseen, trials, seed=seed, workers=workers, chunk_size=chunk_size,
                     on_result=_store, progress=progress)
        logger.info(f"Built {table!r}")
        return table

    def get(self, pattern_key, unseen):
        try:
            return self._entries[(pattern_key, unseen)]
        except KeyError:
            raise NotComputedError(pattern_key, unseen) from None

    def check_compatible(self, variant_name=None, max_pattern_size=None, max_unseen=None):
        """Raise IncompatibleTableError if this table cannot serve the requested game."""
        if variant_name is not None and variant_name != self.variant_name:
            raise IncompatibleTableError(f"table was built for {self.variant_name!r}, not {variant_name!r}")
        if max_pattern_size is not None and max_pattern_size > self.max_pattern_size:
            raise IncompatibleTableError(
                f"table covers patterns of up to {self.max_pattern_size} items, game needs {max_pattern_size}")
        if max_unseen is not None and max_unseen > self.max_unseen:
            raise IncompatibleTableError(
                f"table covers up to {self.max_unseen} unseen items, game needs {max_unseen}")

    def save(self, path):
        data = {
            'format': FORMAT_TAG,
            'version': FORMAT_VERSION,
            'variant': self.variant_name,
            'max_pattern_size': self.max_pattern_size,
            'max_unseen': self.max_unseen,
            'trials': self.trials,
            'entries': self._entries,
        }
        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, 'wb') as f:
            pickle.dump(data, f, protocol=pickle.HIGHEST_PROTOCOL)
        os.replace(tmp_path, path)
        logger.info(f"Saved {len(self)} lookup entries to {path}")

    @classmethod
    def load(cls, path, variant_name=None, max_pattern_size=None, max_unseen=None):
        logger.info(f"Loading lookup table from {path}")
        with open(path, 'rb') as f:
            try:
                data = pickle.load(f)
            except (pickle.UnpicklingError, EOFError, AttributeError, ValueError) as e:
                raise IncompatibleTableError(f"{path} is not a lookup table: {e}") from e
        if not isinstance(data, dict) or data.get('format') != FORMAT_TAG:
            raise IncompatibleTableError(f"{path} is not a lookup table")
        if data.get('version') != FORMAT_VERSION:
            raise IncompatibleTableError(f"{path} has format version {data.get('version')}, expected {FORMAT_VERSION}")
        table = cls(data['variant'], data['max_pattern_size'], data['max_unseen'], data['trials'], data['entries'])
        table.check_compatible(variant_name, max_pattern_size, max_unseen)
        return table
