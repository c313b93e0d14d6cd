"""
Monte Carlo estimation of pattern occurrence counts among unseen items.

For a pattern and an unseen-item count u, draw u items per trial from the
variant's generation model (uniform over its universe), count how many disjoint
copies of the pattern the sample holds, and histogram the counts into u + 1
buckets. The exact multinomial calculation is intractable for realistic tables,
so the estimate carries O(1/sqrt(trials)) standard error.

Work is split into independent (pattern, u) items, each with its own seed spawned
from one SeedSequence, so the table comes out the same whatever the worker count.
"""

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed

import numpy as np
from tqdm import tqdm

logger = logging.getLogger(__name__)

# rows sampled per numpy batch, keeps memory flat for large trial counts
_BATCH_ROWS = 65536


def index_requirements(variant, pattern_key):
    """The pattern's requirements with items replaced by universe indices."""
    index = {item: i for i, item in enumerate(variant.universe)}
    return [([index[i] for i in group], needed) for group, needed in variant.key_requirements(pattern_key)]


def count_occurrences_batch(samples, reqs):
    """Occurrences per row of a (trials, u) array of item indices."""
    occ = None
    for group, needed in reqs:
        matched = np.isin(samples, group).sum(axis=1) // needed
        occ = matched if occ is None else np.minimum(occ, matched)
    return occ


def _histogram(reqs, n_items, unseen, trials, rng):
    hist = np.zeros(unseen + 1, dtype=np.int64)
    if unseen == 0:
        hist[0] = trials
        return hist
    remaining = trials
    while remaining > 0:
        rows = min(remaining, _BATCH_ROWS)
        samples = rng.integers(0, n_items, size=(rows, unseen), dtype=np.int16)
        occ = count_occurrences_batch(samples, reqs)
        hist += np.bincount(occ, minlength=unseen + 1)[:unseen + 1]
        remaining -= rows
    return hist


def _to_distribution(hist, trials):
    return tuple(float(x) for x in hist / trials)


def estimate_distribution(variant, pattern_key, unseen, trials, seed=None):
    """Empirical P(exactly k occurrences) for k = 0..unseen."""
    if trials < 1:
        raise ValueError("trials must be at least 1")
    if unseen < 0:
        raise ValueError("unseen must be non-negative")
    rng = np.random.default_rng(seed)
    reqs = index_requirements(variant, pattern_key)
    return _to_distribution(_histogram(reqs, len(variant.universe), unseen, trials, rng), trials)


def work_items(pattern_keys, max_unseen):
    return [(key, u) for key in pattern_keys for u in range(max_unseen + 1)]


def _run_chunk(chunk, n_items, trials):
    """Worker: estimate a chunk of (key, u, reqs, seed) tasks."""
    out = []
    for key, unseen, reqs, seed in chunk:
        rng = np.random.default_rng(seed)
        out.append(((key, unseen), _to_distribution(_histogram(reqs, n_items, unseen, trials, rng), trials)))
    return out


def estimate_all(variant, pattern_keys, max_unseen, trials, seed=None, workers=1, chunk_size=64,
                 on_result=None, progress=False):
    """
    Estimate every (pattern_key, u) for u in 0..max_unseen.

    Returns {(pattern_key, u): distribution}. With workers > 1 chunks of work
    items go to a process pool; results are merged by key as they complete and
    `on_result(key, distribution)` is called for each. Interrupting cancels the
    chunks not yet started and keeps whatever was merged.
    """
    if trials < 1:
        raise ValueError("trials must be at least 1")
    if max_unseen < 0:
        raise ValueError("max_unseen must be non-negative")
    chunk_size = max(1, int(chunk_size))

    items = work_items(pattern_keys, max_unseen)
    seeds = np.random.SeedSequence(seed).spawn(len(items))
    reqs_by_key = {key: index_requirements(variant, key) for key in pattern_keys}
    tasks = [(key, u, reqs_by_key[key], s) for (key, u), s in zip(items, seeds)]
    chunks = [tasks[i:i + chunk_size] for i in range(0, len(tasks), chunk_size)]
    n_items = len(variant.universe)

    logger.info(f"Estimating {len(tasks)} work items ({len(pattern_keys)} patterns x {max_unseen + 1} unseen counts, "
                f"{trials} trials each) on {max(1, workers)} worker(s)")

    results = {}
    bar = tqdm(total=len(tasks), desc="Monte Carlo", unit="item", dynamic_ncols=True, disable=not progress)

    def _merge(chunk_results):
        for key, dist in chunk_results:
            results[key] = dist
            if on_result is not None:
                on_result(key, dist)
        bar.update(len(chunk_results))

    try:
        if not workers or workers <= 1:
            for chunk in chunks:
                _merge(_run_chunk(chunk, n_items, trials))
        else:
            ex = ProcessPoolExecutor(max_workers=workers)
            try:
                futures = [ex.submit(_run_chunk, chunk, n_items, trials) for chunk in chunks]
                for fut in as_completed(futures):
                    _merge(fut.result())
            except KeyboardInterrupt:
                logger.warning(f"Interrupted with {len(results)}/{len(tasks)} work items done, cancelling the rest")
                raise
            finally:
                ex.shutdown(wait=False, cancel_futures=True)
    finally:
        bar.close()
    return results
