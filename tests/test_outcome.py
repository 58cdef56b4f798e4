"""Tests for melee_stats.outcome."""

import pytest

from melee_stats.enums import match_mode
from melee_stats.filters import FilterCriteria, resolve_character_filter
from melee_stats.outcome import Exclusion, MatchFact, classify_match, self_action_counts, self_won

RYAN = FilterCriteria(self_tags=("ryan",))


def test_qualifying_match_fact(make_match):
    fact = classify_match(make_match(), RYAN)
    assert isinstance(fact, MatchFact)
    assert fact.won
    assert fact.game_seconds == 90
    assert fact.self_character == "Sheik"
    assert fact.opponent_character == "Falco"
    assert fact.stage == "Battlefield"
    assert fact.opponent_code == "BIRD#254"


def test_viewpoint_from_p1(make_match):
    fact = classify_match(make_match(), FilterCriteria(self_tags=("bird",)))
    assert fact.player_index == 1
    assert fact.self_character == "Falco"
    assert not fact.won


def test_29_seconds_excluded_30_included(make_match):
    assert classify_match(make_match(seconds=29.9), RYAN) is Exclusion.TOO_SHORT
    fact = classify_match(make_match(seconds=30.0, self_kills=1, opp_kills=0), RYAN)
    assert isinstance(fact, MatchFact)
    assert fact.game_seconds == 30


def test_zero_kills_excluded_regardless_of_duration(make_match):
    match = make_match(seconds=400.0, self_kills=0, opp_kills=0)
    assert classify_match(match, RYAN) is Exclusion.NO_KILLS


def test_ranked_only(make_match):
    ranked_only = FilterCriteria(self_tags=("ryan",), ranked_only=True)
    assert isinstance(classify_match(make_match(), ranked_only), MatchFact)
    assert classify_match(make_match(match_id="mode.unranked-2024"), ranked_only) is Exclusion.NOT_RANKED
    assert classify_match(make_match(match_id=""), ranked_only) is Exclusion.NOT_RANKED
    # Without the flag the mode does not matter
    assert isinstance(classify_match(make_match(match_id="mode.direct-2024"), RYAN), MatchFact)


@pytest.mark.parametrize("match_id, mode", [
    ("mode.ranked-2024-01-01", "ranked"),
    ("mode.unranked-2024-01-01", "unranked"),
    ("mode.direct-2024-01-01", "direct"),
    ("mode.teams-2024", "unknown"),
    ("", "unknown"),
    (None, "unknown"),
])
def test_match_mode(match_id, mode):
    assert match_mode(match_id) == mode


def test_invalid_stage_excluded(make_match):
    assert classify_match(make_match(stage_id=21), RYAN) is Exclusion.INVALID_STAGE
    assert classify_match(make_match(stage_id=99), RYAN) is Exclusion.INVALID_STAGE
    assert classify_match(make_match(stage_id=None), RYAN) is Exclusion.INVALID_STAGE


def test_character_filters(make_match):
    sheik = resolve_character_filter("sheik")
    fox = resolve_character_filter("fox")
    assert isinstance(classify_match(make_match(), RYAN, sheik), MatchFact)
    assert classify_match(make_match(), RYAN, fox) is Exclusion.SELF_CHARACTER
    assert classify_match(make_match(), RYAN, sheik, fox) is Exclusion.OPPONENT_CHARACTER
    invalid = resolve_character_filter("nobody")
    assert classify_match(make_match(), RYAN, invalid) is Exclusion.SELF_CHARACTER


def test_no_viewpoint_and_ignored(make_match):
    assert classify_match(make_match(), FilterCriteria(self_tags=("fox",))) is Exclusion.NO_VIEWPOINT
    ignoring = FilterCriteria(self_tags=("ryan",), ignored_opponents=("bird",))
    assert classify_match(make_match(), ignoring) is Exclusion.IGNORED_OPPONENT


def test_not_two_players(make_match):
    match = make_match()
    match["settings"]["players"].append({"port": 2, "character_id": 2})
    assert classify_match(match, RYAN) is Exclusion.NOT_TWO_PLAYERS


def test_win_on_equal_kills_uses_percent():
    assert self_won(2, 2, 40.0, 80.0)
    assert not self_won(2, 2, 80.0, 40.0)
    assert not self_won(2, 2, 50.0, 50.0)
    assert self_won(3, 1, 150.0, 0.0)
    assert not self_won(1, 3, 0.0, 150.0)


def test_self_action_counts(make_match):
    actions = {"wavedash_count": 7}
    match = make_match(self_actions=actions)
    fact = classify_match(match, RYAN)
    assert self_action_counts(match, fact) == actions


def test_missing_final_percent_loses_ties(make_match):
    match = make_match(self_kills=2, opp_kills=2)
    match["latest_frame_percents"] = [None, 150.0]
    assert not classify_match(match, RYAN).won

    match["latest_frame_percents"] = [150.0]
    assert classify_match(match, RYAN).won
