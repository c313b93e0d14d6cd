from __future__ import annotations

import argparse
import csv
import json
import logging
import os
from datetime import datetime
from typing import List

from sim.errors import EmptyPatternSetError, IncompatibleTableError
from precompute.lookup import LookupTable, default_path
from precompute.patterns import load_words
from agents.lookup_agent import load_policy_config

from .config import GameConfig, PrecomputeConfig
from .runner import make_variant, load_table, run_game
from .tournament import play_match
from .aggregate import aggregate_win_rates
from .plots import save_win_rates

logger = logging.getLogger(__name__)

DEFAULT_DICT = os.path.join("data", "scrabble.txt")

MATCHES_SCHEMA = [
    "game",
    "seed",
    "winner",
    "winner_agent",
    "rounds",
    "turns",
    "total_time_ms",
]


def _ensure_out_dir(out: str | None, name: str) -> str:
    if out:
        base = out
    else:
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        base = os.path.join("eval", "results", f"{name}_{ts}")
    os.makedirs(base, exist_ok=True)
    return base


def _write_json(path: str, obj) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, ensure_ascii=False)


def _write_csv(path: str, rows: List[dict], schema: List[str]) -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=schema)
        writer.writeheader()
        for r in rows:
            writer.writerow({k: r.get(k) for k in schema})


def _words_for(variant: str, path: str):
    return load_words(path) if variant == "tiles" else None


def _game_config(args: argparse.Namespace) -> GameConfig:
    cfg = GameConfig(
        variant=args.variant,
        num_players=args.players,
        start_items=args.start_items,
        human_index=getattr(args, "human_index", None),
        use_exact=args.exact,
        ones_are_wild=not args.no_wilds,
        use_palafico=not args.no_palafico,
        max_pattern_size=args.max_pattern_size,
        seed=args.seed,
    )
    cfg.validate()
    return cfg


def _table_path(args: argparse.Namespace, variant) -> str:
    return args.table or default_path(variant.name, variant.max_pattern_size, args.trials)


def cmd_precompute(args: argparse.Namespace) -> int:
    cfg = PrecomputeConfig(
        variant=args.variant,
        max_pattern_size=args.max_pattern_size,
        max_unseen=args.max_unseen,
        trials=args.trials,
        workers=args.workers,
        chunk_size=args.chunk_size,
        seed=args.seed,
    )
    cfg.validate()
    variant = make_variant(GameConfig(variant=cfg.variant, max_pattern_size=cfg.max_pattern_size),
                           _words_for(cfg.variant, args.dict))
    table = LookupTable.build(variant, cfg.max_unseen, cfg.trials, seed=cfg.seed, workers=cfg.workers,
                              chunk_size=cfg.chunk_size, progress=not args.quiet)
    out = args.out or default_path(variant.name, variant.max_pattern_size, cfg.trials)
    table.save(out)
    print(f"Done. {len(table)} entries saved to: {out}")
    return 0


def cmd_play(args: argparse.Namespace) -> int:
    cfg = _game_config(args)
    variant = make_variant(cfg, _words_for(cfg.variant, args.dict))
    table = load_table(_table_path(args, variant), variant, cfg)
    policy = load_policy_config(args.config) if args.config else None
    winner, orch = run_game(cfg, variant, table, policy)
    print(f"Player {winner} wins after {orch.game.round_num} rounds!")
    return 0


def cmd_tournament(args: argparse.Namespace) -> int:
    cfg = _game_config(args)
    variant = make_variant(cfg, _words_for(cfg.variant, args.dict))
    agent_names = [a.strip() for a in args.agents.split(",") if a.strip()]
    table = None
    if "lookup" in agent_names:
        table = load_table(_table_path(args, variant), variant, cfg)
    policy = load_policy_config(args.config) if args.config else None

    out_dir = _ensure_out_dir(args.out, "tournament")
    rows = play_match(cfg, variant, table, agent_names, games=args.games, seed=args.seed, policy=policy,
                      progress=not args.quiet)
    _write_csv(os.path.join(out_dir, "matches.csv"), rows, MATCHES_SCHEMA)

    aggr = aggregate_win_rates(rows, agent_names, cfg.num_players)
    _write_json(os.path.join(out_dir, "summary.json"), {
        "config": json.loads(cfg.to_json()),
        "agents": agent_names,
        "games": args.games,
        "aggregates": aggr,
    })
    if not args.no_plot:
        save_win_rates(aggr, out_dir, title=f"Win rate, {cfg.variant}, {cfg.num_players} players")

    for r in aggr:
        print(f"{r['agent']:>8}: {r['wins']}/{r['games']} wins ({r['win_rate']:.3f}, "
              f"95% CI {r['ci_low']:.3f}-{r['ci_high']:.3f}, chance {r['expected']:.3f})")
    print(f"Done. Outputs saved to: {out_dir}")
    return 0


def _add_game_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--variant", choices=["dice", "tiles"], default="dice")
    p.add_argument("--players", type=int, default=4, help="Number of players")
    p.add_argument("--start-items", type=int, default=5, help="Dice or tiles per player at the start")
    p.add_argument("--max-pattern-size", type=int, default=5, help="Longest tile pattern that can be bet on")
    p.add_argument("--dict", default=DEFAULT_DICT, help="Dictionary file, one word per line (tiles only)")
    p.add_argument("--table", default=None, help="Lookup table (defaults to data/lookup_<variant>_<size>_<trials>.pkl)")
    p.add_argument("--trials", type=int, default=1000, help="Trials of the default table to load")
    p.add_argument("--config", default=None, help="Policy JSON file")
    p.add_argument("--exact", action="store_true", help="Allow exact calls")
    p.add_argument("--no-wilds", action="store_true", help="Ones are not wild")
    p.add_argument("--no-palafico", action="store_true", help="No special round at one die")
    p.add_argument("--seed", type=int, default=None)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="scrabrudo", description="Dice and tile bluffing games with precomputed odds")
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    p.add_argument("--quiet", action="store_true", help="No progress bars")
    sub = p.add_subparsers(dest="cmd", required=True)

    # precompute
    p_pre = sub.add_parser("precompute", help="Build and save a lookup table")
    p_pre.add_argument("--variant", choices=["dice", "tiles"], default="tiles")
    p_pre.add_argument("--dict", default=DEFAULT_DICT, help="Dictionary file, one word per line")
    p_pre.add_argument("--max-pattern-size", type=int, default=5)
    p_pre.add_argument("--max-unseen", type=int, default=29, help="Largest unseen item count to cover")
    p_pre.add_argument("--trials", type=int, default=1000, help="Monte Carlo trials per entry")
    p_pre.add_argument("--workers", type=int, default=1, help="Worker processes")
    p_pre.add_argument("--chunk-size", type=int, default=64, help="Work items per worker task")
    p_pre.add_argument("--seed", type=int, default=None)
    p_pre.add_argument("--out", default=None, help="Output path")
    p_pre.set_defaults(func=cmd_precompute)

    # play
    p_play = sub.add_parser("play", help="Play a game against the AI")
    _add_game_args(p_play)
    p_play.add_argument("--human-index", type=int, default=0, help="Seat of the human player")
    p_play.set_defaults(func=cmd_play)

    # tournament
    p_tour = sub.add_parser("tournament", help="Play AI-only games and report win rates")
    _add_game_args(p_tour)
    p_tour.add_argument("--agents", default="lookup,random", help="Comma-separated agent types, assigned by seat")
    p_tour.add_argument("--games", type=int, default=30)
    p_tour.add_argument("--out", default=None, help="Output directory (defaults to eval/results/tournament_<ts>)")
    p_tour.add_argument("--no-plot", action="store_true", help="Do not generate plot")
    p_tour.set_defaults(func=cmd_tournament)

    return p


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        return args.func(args)
    except (IncompatibleTableError, EmptyPatternSetError, FileNotFoundError) as e:
        logger.error(f"Cannot start: {e}")
        return 2
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
