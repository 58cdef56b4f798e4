"""Fold qualifying matches into corpus-wide totals.

Tables are keyed by stable IDs (stage id, character id, opponent key); display
names are resolved when the report is built.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass, field

from melee_stats.outcome import Exclusion, MatchFact

THROW_DIRECTIONS = ("up", "down", "forward", "back")


def win_rate(wins: int, games: int) -> str:
    """wins / games as a percentage with two decimals; "0.00" for no games."""
    if not games:
        return "0.00"
    return f"{wins / games * 100:.2f}"


@dataclass
class Tally:
    games: int = 0
    wins: int = 0
    seconds: int = 0

    def add(self, won: bool, seconds: int) -> None:
        self.games += 1
        self.wins += int(won)
        self.seconds += seconds


def _count(value, name: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Bad {name} in action counts: {value!r}")
    return value


def _section(actions: dict, key: str) -> dict:
    value = actions.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"Bad {key} in action counts: {value!r}")
    return value


@dataclass(frozen=True)
class ActionTotals:
    """One player's action counts for a single match, validated."""

    l_cancel_success: int = 0
    l_cancel_fail: int = 0
    wavedashes: int = 0
    rolls: int = 0
    ledgegrabs: int = 0
    dash_dances: int = 0
    tech_success: int = 0
    tech_fail: int = 0
    throws: tuple[int, ...] = (0, 0, 0, 0)

    @classmethod
    def from_counts(cls, actions: dict | None) -> "ActionTotals":
        """Read a cached ``action_counts`` entry (see actions.compute_action_counts()).

        Missing keys count as zero.

        Raises:
            ValueError: if the entry or any count in it has the wrong type.
        """
        if not actions:
            return cls()
        if not isinstance(actions, dict):
            raise ValueError(f"Bad action counts: {actions!r}")

        lc = _section(actions, "l_cancel_count")
        tech = _section(actions, "ground_tech_count")
        throws = _section(actions, "throw_count")
        return cls(
            l_cancel_success=_count(lc.get("success"), "l_cancel_count.success"),
            l_cancel_fail=_count(lc.get("fail"), "l_cancel_count.fail"),
            wavedashes=_count(actions.get("wavedash_count"), "wavedash_count"),
            rolls=_count(actions.get("roll_count"), "roll_count"),
            ledgegrabs=_count(actions.get("ledgegrab_count"), "ledgegrab_count"),
            dash_dances=_count(actions.get("dash_dance_count"), "dash_dance_count"),
            tech_success=sum(
                _count(tech.get(k), f"ground_tech_count.{k}") for k in ("in", "away", "neutral")
            ),
            tech_fail=_count(tech.get("fail"), "ground_tech_count.fail"),
            throws=tuple(_count(throws.get(d), f"throw_count.{d}") for d in THROW_DIRECTIONS),
        )


@dataclass
class MiscCounters:
    l_cancel_success: int = 0
    l_cancel_fail: int = 0
    wavedashes: int = 0
    rolls: int = 0
    ledgegrabs: int = 0
    dash_dances: int = 0
    tech_success: int = 0
    tech_fail: int = 0
    stocks_taken: int = 0
    stocks_lost: int = 0
    throws: dict = field(default_factory=lambda: dict.fromkeys(THROW_DIRECTIONS, 0))

    def add(self, fact: MatchFact, totals: ActionTotals) -> None:
        self.l_cancel_success += totals.l_cancel_success
        self.l_cancel_fail += totals.l_cancel_fail
        self.wavedashes += totals.wavedashes
        self.rolls += totals.rolls
        self.ledgegrabs += totals.ledgegrabs
        self.dash_dances += totals.dash_dances
        self.tech_success += totals.tech_success
        self.tech_fail += totals.tech_fail

        self.stocks_taken += fact.self_kills
        self.stocks_lost += fact.opponent_kills

        for direction, count in zip(THROW_DIRECTIONS, totals.throws):
            self.throws[direction] += count


@dataclass
class AggregateState:
    total_games: int = 0
    total_wins: int = 0
    total_seconds: float = 0.0
    counted_seconds: int = 0

    stages: dict[int, Tally] = field(default_factory=lambda: defaultdict(Tally))
    # self character id -> opponent character id -> tally
    matchups: dict[int, dict[int, Tally]] = field(
        default_factory=lambda: defaultdict(lambda: defaultdict(Tally))
    )
    character_playtime: dict[int, int] = field(default_factory=lambda: defaultdict(int))
    opponents: dict[str, Tally] = field(default_factory=lambda: defaultdict(Tally))
    nicknames: dict[str, Tally] = field(default_factory=lambda: defaultdict(Tally))
    codes: dict[str, Tally] = field(default_factory=lambda: defaultdict(Tally))

    # Display labels seen for each opponent key, most common wins
    opponent_labels: dict[str, Counter] = field(default_factory=lambda: defaultdict(Counter))
    self_names: Counter = field(default_factory=Counter)
    self_codes: Counter = field(default_factory=Counter)
    opponent_names: Counter = field(default_factory=Counter)
    opponent_codes: Counter = field(default_factory=Counter)

    misc: MiscCounters = field(default_factory=MiscCounters)
    current_streak: int = 0
    best_win_streak: int = 0

    files_scanned: int = 0
    new_replays: int = 0
    skipped: int = 0
    skipped_by_reason: Counter = field(default_factory=Counter)

    def add(self, fact: MatchFact, actions: dict | None = None) -> None:
        """Fold one qualifying match into every table.

        The match is folded completely or not at all.

        Raises:
            ValueError: if ``actions`` is malformed. Nothing is changed.
        """
        totals = ActionTotals.from_counts(actions)
        secs = fact.game_seconds

        self.total_games += 1
        self.total_wins += int(fact.won)
        self.total_seconds += fact.total_seconds
        self.counted_seconds += secs

        self.stages[fact.stage_id].add(fact.won, secs)

        if fact.self_character is not None:
            self.character_playtime[fact.self_character_id] += secs
            if fact.opponent_character is not None:
                self.matchups[fact.self_character_id][fact.opponent_character_id].add(fact.won, secs)

        opp_key = (fact.opponent_code or fact.opponent_name).lower()
        if opp_key:
            self.opponents[opp_key].add(fact.won, secs)
            self.opponent_labels[opp_key][fact.opponent_code or fact.opponent_name] += 1
        if fact.self_name:
            self.nicknames[fact.self_name].add(fact.won, secs)
            self.self_names[fact.self_name] += 1
        if fact.self_code:
            self.codes[fact.self_code].add(fact.won, secs)
            self.self_codes[fact.self_code] += 1
        if fact.opponent_name:
            self.opponent_names[fact.opponent_name] += 1
        if fact.opponent_code:
            self.opponent_codes[fact.opponent_code] += 1

        self.misc.add(fact, totals)

        if fact.won:
            self.current_streak += 1
            self.best_win_streak = max(self.best_win_streak, self.current_streak)
        else:
            self.current_streak = 0

    def skip(self, reason: Exclusion) -> None:
        self.skipped += 1
        self.skipped_by_reason[reason.value] += 1
