"""Build the immutable AnalysisReport from an AggregateState.

Typical usage:
    report = build_report(state, criteria, total_files=len(files))
    report.summary.win_rate          # "57.14"
    report.table("stages")           # DataFrame, most-played first
    json.dumps(report.to_dict())
"""

import json
from dataclasses import asdict, dataclass, field

import pandas as pd

from melee_stats.aggregate import THROW_DIRECTIONS, AggregateState, Tally, win_rate
from melee_stats.enums import character_name, stage_name
from melee_stats.filters import FilterCriteria

NO_GAMES_MESSAGE = "No games found matching requested parameters."


def seconds_to_hms(seconds: float) -> str:
    """Format seconds as HH:MM:SS (hours are not wrapped at 24)."""
    seconds = int(seconds or 0)
    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


# ---------------------------------------------------------------------------
# Report shapes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BreakdownRow:
    name: str
    games: int
    wins: int
    winrate: str
    playtime: str


@dataclass(frozen=True)
class MatchupRow:
    self_character: str
    opponent_character: str
    games: int
    wins: int
    winrate: str
    playtime: str


@dataclass(frozen=True)
class CharacterPlaytime:
    character: str
    playtime: str


@dataclass(frozen=True)
class MiscStats:
    avg_l_cancel_rate: str
    l_cancel_success_total: int
    l_cancel_fail_total: int
    avg_wavedashes: str
    wavedash_total: int
    avg_rolls: str
    roll_total: int
    avg_ledgegrabs: str
    ledgegrab_total: int
    avg_dash_dances: str
    dash_dance_total: int
    tech_success_rate: str
    tech_success_total: int
    tech_fail_total: int
    total_stocks_taken: int
    total_stocks_lost: int
    throw_counts: tuple[tuple[str, int], ...]
    top_throw_dir: str
    top_throw_count: int
    best_win_streak: int


@dataclass(frozen=True)
class ReportIdentity:
    player_name: str = ""
    player_code: str = ""
    opponent_name: str = ""
    opponent_code: str = ""


@dataclass(frozen=True)
class Summary:
    total_games: int
    total_wins: int
    win_rate: str
    analyzed_time: str
    total_time_all_replays: str
    replays_scanned: int
    total_replays: int
    skipped_replays: int
    skipped_by_reason: tuple[tuple[str, int], ...]
    cancelled: bool = False


@dataclass(frozen=True)
class RunInfo:
    """Per-run bookkeeping that differs between otherwise identical runs."""

    new_replays_cached: int = 0


@dataclass(frozen=True)
class AnalysisReport:
    found_games: bool
    message: str
    filters: FilterCriteria
    identity: ReportIdentity
    summary: Summary
    stages: tuple[BreakdownRow, ...] = ()
    opponents: tuple[BreakdownRow, ...] = ()
    nicknames: tuple[BreakdownRow, ...] = ()
    codes: tuple[BreakdownRow, ...] = ()
    matchups: tuple[MatchupRow, ...] = ()
    character_playtime: tuple[CharacterPlaytime, ...] = ()
    misc: MiscStats | None = None
    run: RunInfo = field(default_factory=RunInfo, compare=False)

    def to_dict(self) -> dict:
        """JSON-compatible view of the report, without per-run bookkeeping."""
        d = asdict(self)
        del d["run"]
        d["filters"] = self.filters.to_dict()
        d["summary"]["skipped_by_reason"] = dict(self.summary.skipped_by_reason)
        if self.misc is not None:
            d["misc"]["throw_counts"] = dict(self.misc.throw_counts)
        return d

    def to_json(self, **kwargs) -> str:
        return json.dumps(self.to_dict(), **kwargs)

    def table(self, name: str) -> pd.DataFrame:
        """One breakdown (stages, opponents, nicknames, codes, matchups,
        character_playtime) as a DataFrame."""
        rows = getattr(self, name)
        return pd.DataFrame([asdict(r) for r in rows])


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def _row(name: str, tally: Tally) -> BreakdownRow:
    return BreakdownRow(
        name=name,
        games=tally.games,
        wins=tally.wins,
        winrate=win_rate(tally.wins, tally.games),
        playtime=seconds_to_hms(tally.seconds),
    )


def _by_games(rows) -> tuple:
    # sorted() is stable, so ties keep first-seen order
    return tuple(sorted(rows, key=lambda r: r.games, reverse=True))


def _per_game(total: int, games: int) -> str:
    return f"{total / games if games else 0:.2f}"


def _percent(part: int, whole: int) -> str:
    return f"{part / whole * 100 if whole else 0:.2f}%"


def _most_common(counter) -> str:
    top = counter.most_common(1)
    return top[0][0] if top else ""


def _build_misc(state: AggregateState) -> MiscStats:
    m = state.misc
    games = state.total_games
    throws = tuple((d, m.throws.get(d, 0)) for d in THROW_DIRECTIONS)
    top_dir, top_count = max(throws, key=lambda t: t[1])
    return MiscStats(
        avg_l_cancel_rate=_percent(m.l_cancel_success, m.l_cancel_success + m.l_cancel_fail),
        l_cancel_success_total=m.l_cancel_success,
        l_cancel_fail_total=m.l_cancel_fail,
        avg_wavedashes=_per_game(m.wavedashes, games),
        wavedash_total=m.wavedashes,
        avg_rolls=_per_game(m.rolls, games),
        roll_total=m.rolls,
        avg_ledgegrabs=_per_game(m.ledgegrabs, games),
        ledgegrab_total=m.ledgegrabs,
        avg_dash_dances=_per_game(m.dash_dances, games),
        dash_dance_total=m.dash_dances,
        tech_success_rate=_percent(m.tech_success, m.tech_success + m.tech_fail),
        tech_success_total=m.tech_success,
        tech_fail_total=m.tech_fail,
        total_stocks_taken=m.stocks_taken,
        total_stocks_lost=m.stocks_lost,
        throw_counts=throws,
        top_throw_dir=top_dir,
        top_throw_count=top_count,
        best_win_streak=state.best_win_streak,
    )


def build_report(
    state: AggregateState,
    criteria: FilterCriteria,
    *,
    total_files: int,
    cancelled: bool = False,
) -> AnalysisReport:
    """Snapshot the aggregate into an AnalysisReport.

    Args:
        state: Aggregate after the file loop (complete or cancelled).
        criteria: Filters, echoed back in the report.
        total_files: Number of replay files discovered.
        cancelled: Whether the loop stopped early.
    """
    run = RunInfo(new_replays_cached=state.new_replays)
    skipped_by_reason = tuple(sorted(state.skipped_by_reason.items()))

    if not state.total_games:
        return AnalysisReport(
            found_games=False,
            message=NO_GAMES_MESSAGE,
            filters=criteria,
            identity=ReportIdentity(),
            summary=Summary(
                total_games=0,
                total_wins=0,
                win_rate=win_rate(0, 0),
                analyzed_time=seconds_to_hms(0),
                total_time_all_replays=seconds_to_hms(state.total_seconds),
                replays_scanned=state.files_scanned,
                total_replays=total_files,
                skipped_replays=state.skipped,
                skipped_by_reason=skipped_by_reason,
                cancelled=cancelled,
            ),
            run=run,
        )

    stages = _by_games(_row(stage_name(sid), t) for sid, t in state.stages.items())
    opponents = _by_games(
        _row(_most_common(state.opponent_labels[key]), t) for key, t in state.opponents.items()
    )
    nicknames = _by_games(_row(name, t) for name, t in state.nicknames.items())
    codes = _by_games(_row(code, t) for code, t in state.codes.items())

    matchups = []
    for self_char, row in state.matchups.items():
        for opp_char, t in row.items():
            matchups.append(MatchupRow(
                self_character=character_name(self_char),
                opponent_character=character_name(opp_char),
                games=t.games,
                wins=t.wins,
                winrate=win_rate(t.wins, t.games),
                playtime=seconds_to_hms(t.seconds),
            ))

    playtime = sorted(state.character_playtime.items(), key=lambda kv: kv[1], reverse=True)

    return AnalysisReport(
        found_games=True,
        message="",
        filters=criteria,
        identity=ReportIdentity(
            player_name=_most_common(state.self_names),
            player_code=_most_common(state.self_codes),
            opponent_name=_most_common(state.opponent_names),
            opponent_code=_most_common(state.opponent_codes),
        ),
        summary=Summary(
            total_games=state.total_games,
            total_wins=state.total_wins,
            win_rate=win_rate(state.total_wins, state.total_games),
            analyzed_time=seconds_to_hms(state.counted_seconds),
            total_time_all_replays=seconds_to_hms(state.total_seconds),
            replays_scanned=state.files_scanned,
            total_replays=total_files,
            skipped_replays=state.skipped,
            skipped_by_reason=skipped_by_reason,
            cancelled=cancelled,
        ),
        stages=stages,
        opponents=opponents,
        nicknames=nicknames,
        codes=codes,
        matchups=_by_games(matchups),
        character_playtime=tuple(
            CharacterPlaytime(character_name(cid), seconds_to_hms(secs)) for cid, secs in playtime
        ),
        misc=_build_misc(state),
        run=run,
    )
