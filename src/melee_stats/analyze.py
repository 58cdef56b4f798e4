"""Analyze a folder of replays: discovery, caching, classification, aggregation.

Typical usage:
    import asyncio
    from melee_stats import FilterCriteria, analyze

    criteria = FilterCriteria(self_tags=["EG#0"], ranked_only=True)
    report = asyncio.run(analyze("replays", criteria))
    print(report.summary.win_rate)

Files are processed strictly one at a time. The loop yields to the event
loop between files, which is the only point where a cancellation request or
outbound events can interleave with the work.
"""

import asyncio
import logging
from pathlib import Path
from typing import Callable

from melee_stats.aggregate import AggregateState
from melee_stats.cache import ReplayCache, hash_replay_file
from melee_stats.decode import decode_replay
from melee_stats.errors import AnalysisError, AnalysisFailure, FolderNotFoundError
from melee_stats.events import CancelledEvent, EventSink, MatchEvent, NullSink, ProgressEvent
from melee_stats.filters import FilterCriteria, resolve_character_filter
from melee_stats.outcome import Exclusion, MatchFact, classify_match, self_action_counts
from melee_stats.report import AnalysisReport, build_report

logger = logging.getLogger(__name__)

REPLAY_GLOB = "*.slp"

Decoder = Callable[[Path], dict]


class CancelToken:
    """Cooperative cancellation flag for a single analysis run."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


def find_replays(folder: str | Path) -> list[Path]:
    """All .slp files under ``folder`` (recursive), in sorted order.

    Raises:
        FolderNotFoundError: if ``folder`` is not a readable directory.
    """
    folder = Path(folder)
    if not folder.is_dir():
        raise FolderNotFoundError(f"Replay folder not found: {folder}")
    try:
        return sorted(p for p in folder.rglob(REPLAY_GLOB) if p.is_file())
    except OSError as e:
        raise FolderNotFoundError(f"Could not read replay folder {folder}: {e}") from e


def _load_match(path: Path, cache: ReplayCache, decoder: Decoder) -> dict:
    """Return the cached summary for ``path``, decoding and caching on a miss."""
    try:
        content_hash = hash_replay_file(path)
    except OSError as e:
        logger.warning("Could not hash %s, decoding without caching: %s", path.name, e)
        content_hash = None

    if content_hash is not None:
        cached = cache.get(content_hash)
        if cached is not None:
            logger.debug("Cache hit for %s", path.name)
            return cached

    match = decoder(path)
    if content_hash is not None:
        cache.put(content_hash, match)
    return match


def _ticker_event(fact: MatchFact) -> MatchEvent:
    return MatchEvent(
        self_name=fact.self_name or fact.self_code or "P1",
        opponent=fact.opponent_name or fact.opponent_code or "P2",
        stage=fact.stage,
        self_won=fact.won,
    )


async def run_analysis(
    folder: str | Path,
    criteria: FilterCriteria,
    *,
    token: CancelToken | None = None,
    sink: EventSink | None = None,
    decoder: Decoder | None = None,
) -> AnalysisReport:
    """Analyze every replay under ``folder`` and build a report.

    Raises:
        AnalysisError: on corpus-level failures (folder unreadable, cache
            write failure). Per-file problems never raise.
    """
    token = token or CancelToken()
    sink = sink or NullSink()
    decoder = decoder or decode_replay

    files = find_replays(folder)
    cache = ReplayCache.load(folder)
    self_filter = resolve_character_filter(criteria.self_character)
    opponent_filter = resolve_character_filter(criteria.opponent_character)
    state = AggregateState()
    cancelled = False

    logger.info("Analyzing %d replay(s) in %s", len(files), folder)

    for i, path in enumerate(files):
        if token.cancelled:
            cancelled = True
            logger.info("Analysis cancelled after %d of %d replay(s)", i, len(files))
            sink.cancelled(CancelledEvent())
            break

        await asyncio.sleep(0)

        state.files_scanned += 1
        fact = None
        try:
            match = _load_match(path, cache, decoder)
            result = classify_match(match, criteria, self_filter, opponent_filter)
            if isinstance(result, Exclusion):
                logger.debug("Skipping %s: %s", path.name, result.value)
                state.skip(result)
            else:
                # add() either folds the whole match or raises before touching state
                state.add(result, self_action_counts(match, result))
                fact = result
        except Exception as e:
            logger.warning("Error parsing replay %s: %s", path, e)
            state.skip(Exclusion.UNREADABLE)

        if fact is not None:
            try:
                sink.match(_ticker_event(fact))
            except Exception as e:
                logger.warning("Match event handler failed for %s: %s", path.name, e)

        sink.progress(ProgressEvent(processed=i + 1, total=len(files)))

    state.new_replays = cache.new_entries
    cache.flush(",".join(criteria.wanted_self))

    logger.info(
        "Analyzed %d game(s), %d skipped, %d newly cached",
        state.total_games, state.skipped, state.new_replays,
    )
    return build_report(state, criteria, total_files=len(files), cancelled=cancelled)


async def analyze(
    folder: str | Path,
    criteria: FilterCriteria,
    *,
    token: CancelToken | None = None,
    sink: EventSink | None = None,
    decoder: Decoder | None = None,
) -> AnalysisReport | AnalysisFailure:
    """Like run_analysis(), but corpus-level failures come back as an
    AnalysisFailure value instead of raising."""
    try:
        return await run_analysis(folder, criteria, token=token, sink=sink, decoder=decoder)
    except AnalysisError as e:
        logger.error("Analysis of %s failed: %s", folder, e)
        return AnalysisFailure.from_exception(e, folder)


class ReplayAnalyzer:
    """Runs analyses and lets a caller cancel the one in flight.

    cancel() only affects the current run, is idempotent, and does nothing
    when no analysis is running.
    """

    def __init__(self, sink: EventSink | None = None, decoder: Decoder | None = None):
        self.sink = sink
        self.decoder = decoder
        self._token: CancelToken | None = None

    @property
    def running(self) -> bool:
        return self._token is not None

    async def analyze(self, folder: str | Path, criteria: FilterCriteria) -> AnalysisReport | AnalysisFailure:
        token = CancelToken()
        self._token = token
        try:
            return await analyze(folder, criteria, token=token, sink=self.sink, decoder=self.decoder)
        finally:
            if self._token is token:
                self._token = None

    def cancel(self) -> None:
        if self._token is not None:
            self._token.cancel()
