"""Command-line front end: analyze a replay folder and print the results.

Usage:
    melee-stats replays/ --tag "EG#0" --ranked-only
    melee-stats replays/ --tag eg --opponent bird --character Sheik --json
"""

import argparse
import asyncio
import logging
import signal
import sys

from melee_stats import __version__
from melee_stats.analyze import CancelToken, analyze
from melee_stats.errors import AnalysisFailure
from melee_stats.events import CallbackSink
from melee_stats.filters import FilterCriteria


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Win rates and matchup stats from a folder of Slippi replays")
    p.add_argument("--version", action="version", version=f"melee-stats {__version__}")
    p.add_argument("folder", help="Folder containing .slp replays (searched recursively).")
    p.add_argument("--tag", action="append", default=[], help="Your display name or connect code (repeatable, substring match).")
    p.add_argument("--opponent", action="append", default=[], help="Only games against this opponent (repeatable).")
    p.add_argument("--ignore", action="append", default=[], help="Exclude games against this opponent (repeatable).")
    p.add_argument("--character", default=None, help="Only games where you played this character.")
    p.add_argument("--opponent-character", default=None, help="Only games against this character.")
    p.add_argument("--ranked-only", action="store_true", help="Only Slippi ranked games.")
    p.add_argument("--json", action="store_true", help="Print the full report as JSON.")
    p.add_argument("-v", "--verbose", action="store_true", help="Log progress details.")
    return p


def criteria_from_args(args: argparse.Namespace) -> FilterCriteria:
    return FilterCriteria(
        self_tags=tuple(args.tag),
        opponent_tags=tuple(args.opponent),
        ignored_opponents=tuple(args.ignore),
        self_character=args.character,
        opponent_character=args.opponent_character,
        ranked_only=args.ranked_only,
    )


def _print_progress(event) -> None:
    print(f"\r  {event.processed}/{event.total} replays", end="", file=sys.stderr, flush=True)


def print_report(report) -> None:
    s = report.summary
    if s.cancelled:
        print("(cancelled, partial results)")
    if not report.found_games:
        print(report.message)
        print(f"  Replays scanned: {s.replays_scanned}/{s.total_replays}, skipped: {s.skipped_replays}")
        return

    print(f"Games: {s.total_games}  Wins: {s.total_wins}  Win rate: {s.win_rate}%")
    print(f"Analyzed time: {s.analyzed_time}  Replays scanned: {s.replays_scanned}/{s.total_replays}"
          f"  Skipped: {s.skipped_replays}  Newly cached: {report.run.new_replays_cached}")

    for title, name in [("Stages", "stages"), ("Opponents", "opponents"), ("Matchups", "matchups")]:
        df = report.table(name)
        if df.empty:
            continue
        print(f"\n{title}:")
        print(df.head(15).to_string(index=False))

    m = report.misc
    print("\nMisc:")
    print(f"  L-cancel rate: {m.avg_l_cancel_rate}  Tech success: {m.tech_success_rate}")
    print(f"  Wavedashes/game: {m.avg_wavedashes}  Dash dances/game: {m.avg_dash_dances}"
          f"  Rolls/game: {m.avg_rolls}  Ledge grabs/game: {m.avg_ledgegrabs}")
    print(f"  Stocks taken/lost: {m.total_stocks_taken}/{m.total_stocks_lost}"
          f"  Top throw: {m.top_throw_dir} ({m.top_throw_count})  Best win streak: {m.best_win_streak}")


async def _run(args: argparse.Namespace):
    token = CancelToken()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, token.cancel)
    except (NotImplementedError, RuntimeError):
        pass  # Windows: Ctrl-C raises KeyboardInterrupt instead

    sink = CallbackSink(on_progress=None if args.json else _print_progress)
    return await analyze(args.folder, criteria_from_args(args), token=token, sink=sink)


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    result = asyncio.run(_run(args))
    if not args.json:
        print(file=sys.stderr)

    if isinstance(result, AnalysisFailure):
        print(f"Error: {result.message}", file=sys.stderr)
        return 1

    if args.json:
        print(result.to_json(indent=2))
    else:
        print_report(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
