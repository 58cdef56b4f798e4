"""Tests for melee_stats.actions, on synthetic frame DataFrames."""

import numpy as np
import pandas as pd

from melee_stats.actions import (
    classify_direction,
    compute_action_counts,
    compute_stocks_lost,
    count_dash_dances,
    count_ground_techs,
    count_l_cancels,
    count_throws,
    count_wavedashes,
    empty_action_counts,
    state_entries,
)


def _frames(states, **columns):
    n = len(states)
    data = {
        "frame": np.arange(n),
        "state": states,
        "position_x": columns.get("position_x", [0.0] * n),
        "direction": columns.get("direction", [1.0] * n),
        "percent": columns.get("percent", [0.0] * n),
        "stocks": columns.get("stocks", [4] * n),
        "l_cancel": columns.get("l_cancel", [0] * n),
    }
    return pd.DataFrame(data)


def test_classify_direction():
    assert classify_direction(0.0, 10.0, 1.0, True) == "toward"
    assert classify_direction(0.0, 10.0, 1.0, False) == "away"
    assert classify_direction(0.0, 10.0, -1.0, True) == "away"


def test_state_entries_only_transitions():
    df = _frames([14, 233, 233, 14, 233])
    assert list(state_entries(df, {233})) == [1, 4]


def test_rolls_and_ledgegrabs():
    counts = compute_action_counts(_frames([14, 233, 233, 14, 234, 234, 252, 253, 252]))
    assert counts["roll_count"] == 2
    assert counts["ledgegrab_count"] == 2


def test_wavedash_needs_jumpsquat():
    wavedash = _frames([14, 24, 24, 24, 25, 236, 236, 43, 43, 14])
    assert count_wavedashes(wavedash) == 1

    waveland = _frames([29] * 15 + [236, 236, 43, 14])
    assert count_wavedashes(waveland) == 0


def test_dash_dances():
    df = _frames([14, 20, 20, 18, 18, 20, 20, 18, 20, 21])
    assert count_dash_dances(df) == 2
    assert count_dash_dances(_frames([20, 21, 20])) == 0


def test_l_cancels_ignore_nulls():
    df = _frames([14] * 6, l_cancel=[0, 1, 0, 2, 1, np.nan])
    assert count_l_cancels(df) == {"success": 2, "fail": 1}


def test_throws():
    df = _frames([216, 216, 219, 219, 14, 216, 222, 222, 221])
    assert count_throws(df) == {"forward": 1, "back": 0, "up": 1, "down": 1}


def test_ground_techs_relative_to_opponent():
    me = _frames([14, 200, 200, 14, 201, 14, 199, 14, 183], position_x=[0.0] * 9)
    opp = _frames([14] * 9, position_x=[10.0] * 9)
    assert count_ground_techs(me, opp) == {"in": 1, "away": 1, "neutral": 1, "fail": 1}

    # Opponent behind: forward roll goes away
    behind = _frames([14] * 9, position_x=[-10.0] * 9)
    assert count_ground_techs(me, behind) == {"in": 1, "away": 1, "neutral": 1, "fail": 1}
    roll_forward = _frames([14, 200, 14], position_x=[0.0] * 3)
    assert count_ground_techs(roll_forward, _frames([14] * 3, position_x=[-10.0] * 3))["away"] == 1


def test_stocks_lost():
    assert compute_stocks_lost(_frames([14] * 5, stocks=[4, 4, 3, 3, 2])) == 2
    assert compute_stocks_lost(pd.DataFrame()) == 0


def test_empty_frames_give_zero_counts():
    assert compute_action_counts(pd.DataFrame()) == empty_action_counts()
