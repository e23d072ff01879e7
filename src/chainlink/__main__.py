from __future__ import annotations

import argparse
import json
import logging

from chainlink.app_config import RunConfig
from chainlink.catalog import get_mode_info, picker_items
from chainlink.modes.loader import UnknownModeError, builtin_mode_ids, load_mode
from chainlink.simulate import run

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="chainlink", description="ChainLink game-mode engine: headless session runner")
    parser.add_argument(
        "--mode",
        default="blitz",
        help=f"Mode id or alias ({', '.join(builtin_mode_ids())}) or a 'module:Class' path.",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible runs.")
    parser.add_argument("--puzzles", type=int, default=20, help="Number of simulated puzzle attempts.")
    parser.add_argument("--fail-rate", type=float, default=0.2, help="Probability a simulated attempt fails.")
    parser.add_argument("--solve-seconds", type=float, default=6.0, help="Average simulated solve time.")
    parser.add_argument("--round-puzzles", type=int, default=4, help="Tournament: attempts per round.")
    parser.add_argument("--topic-puzzles", type=int, default=5, help="Practice: attempts per topic.")
    parser.add_argument(
        "--option",
        action="append",
        default=[],
        metavar="KEY=JSON",
        help="Mode option passed to initialize(), e.g. --option lives=5 --option topic='\"food\"'.",
    )
    parser.add_argument(
        "--persist",
        action="store_true",
        help="Store results under the state dir (override with CHAINLINK_STATE_DIR).",
    )
    parser.add_argument(
        "--player-level",
        type=int,
        default=None,
        help="Player level used for mode unlocks; locked modes are refused.",
    )
    parser.add_argument("--list-modes", action="store_true", help="List the modes and their unlock state, then exit.")
    parser.add_argument("--json", dest="json_output", action="store_true", help="Print the final result as JSON.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.list_modes:
        level = args.player_level if args.player_level is not None else 1
        for item in picker_items(player_level=level):
            print(f"{item.id}\t{item.label}")
        return 0

    if args.player_level is not None:
        try:
            mode_id = load_mode(mode=str(args.mode)).id
        except UnknownModeError as exc:
            parser.error(str(exc))
        info = get_mode_info(mode_id)
        if info is not None and not info.is_unlocked(player_level=args.player_level):
            logger.error("%s unlocks at level %s", info.name, info.unlock_level)
            return 1

    options: dict = {}
    for item in args.option:
        key, sep, value = str(item).partition("=")
        if not sep or not key.strip():
            parser.error(f"--option expects KEY=JSON, got {item!r}")
        try:
            options[key.strip()] = json.loads(value)
        except ValueError:
            options[key.strip()] = value

    cfg = RunConfig(
        mode=str(args.mode),
        seed=args.seed,
        puzzles=int(args.puzzles),
        fail_rate=float(args.fail_rate),
        solve_seconds=float(args.solve_seconds),
        round_puzzles=int(args.round_puzzles),
        topic_puzzles=int(args.topic_puzzles),
        persist=bool(args.persist),
        json_output=bool(args.json_output),
        mode_config=options or None,
    )
    result = run(cfg)
    if result is None:
        return 1
    if cfg.json_output:
        print(json.dumps(result.to_payload(), indent=2, sort_keys=True))
    else:
        print(
            f"{result.mode_id}: score={result.final_score} puzzles={result.puzzles_completed} "
            f"time={result.time_played_seconds}s best_streak={result.best_streak}"
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
