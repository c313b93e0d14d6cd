from __future__ import annotations

import os
from typing import List, Dict

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402


def save_win_rates(aggregates: List[Dict], out_dir: str, title: str | None = None) -> str:
    """
    Save a bar chart of win rate per agent type with Wilson error bars and the
    chance level as a marker. Returns the path written.
    """
    names = [r["agent"] for r in aggregates]
    rates = [r["win_rate"] for r in aggregates]
    err_lo = [max(0.0, r["win_rate"] - r["ci_low"]) for r in aggregates]
    err_hi = [max(0.0, r["ci_high"] - r["win_rate"]) for r in aggregates]

    fig, ax = plt.subplots(figsize=(6, 4))
    xs = list(range(len(names)))
    ax.bar(xs, rates, yerr=[err_lo, err_hi], capsize=4, label="win rate")
    ax.scatter(xs, [r["expected"] for r in aggregates], color="black", marker="_", s=400, zorder=3,
               label="chance")
    ax.set_xticks(xs)
    ax.set_xticklabels(names)
    ax.set_ylim(0, 1)
    ax.set_ylabel("win rate")
    if title:
        ax.set_title(title)
    ax.legend(loc="best")
    ax.grid(True, axis="y", alpha=0.3)

    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, "win_rates.png")
    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)
    return path
