"""Per-player action counts computed from frame DataFrames.

These are the mechanical stats the replay cache stores for each participant:
L-cancels, wavedashes, rolls, ledge grabs, dash dances, ground techs and
throws, plus stocks lost (which gives the other side's kill count).

Typical usage:
    from melee_stats.frames import extract_player_frames
    from melee_stats.actions import compute_action_counts, compute_stocks_lost

    my_df = extract_player_frames(game, 0, 0)
    opp_df = extract_player_frames(game, 1, 1)
    counts = compute_action_counts(my_df, opp_df)
"""

import numpy as np
import pandas as pd

# ---------------------------------------------------------------------------
# Action state IDs
# ---------------------------------------------------------------------------

_TURN = 18
_DASH = 20
_JUMPSQUAT = 24
_LANDING_FALL_SPECIAL = 43
_AIRDODGE = 236

_ROLL = {233, 234}
_LEDGE_GRAB = {252}

_TECH_IN_PLACE = 199
_TECH_ROLL_FORWARD = 200
_TECH_ROLL_BACKWARD = 201
_MISSED_TECH = {183, 191}  # DOWN_BOUND_U, DOWN_BOUND_D

_THROWS = {
    "forward": 219,
    "back": 220,
    "up": 221,
    "down": 222,
}

# Jumpsquat must start at most this many frames before the airdodge
_WAVEDASH_WINDOW = 10


def empty_action_counts() -> dict:
    return {
        "l_cancel_count": {"success": 0, "fail": 0},
        "wavedash_count": 0,
        "roll_count": 0,
        "ledgegrab_count": 0,
        "dash_dance_count": 0,
        "ground_tech_count": {"in": 0, "away": 0, "neutral": 0, "fail": 0},
        "throw_count": {"up": 0, "down": 0, "forward": 0, "back": 0},
    }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def classify_direction(
    my_x: float,
    opp_x: float,
    facing: float,
    is_forward: bool,
) -> str:
    """Classify a directional action as 'toward' or 'away' from the opponent.

    Args:
        my_x: Player's x position.
        opp_x: Opponent's x position.
        facing: Player's facing direction (1.0 = right, -1.0 = left).
        is_forward: Whether the action goes in the facing direction.
    """
    opp_in_facing_dir = (facing > 0 and opp_x > my_x) or (facing < 0 and opp_x < my_x)
    if opp_in_facing_dir:
        return "toward" if is_forward else "away"
    return "away" if is_forward else "toward"


def state_entries(df: pd.DataFrame, states: set[int]) -> np.ndarray:
    """Positional indices of frames where the player ENTERS one of ``states``."""
    in_states = df["state"].isin(states)
    entered = in_states & ~in_states.shift(1, fill_value=False)
    return np.flatnonzero(entered.values)


def _state_runs(states: np.ndarray) -> np.ndarray:
    """Collapse consecutive duplicate states into one entry per run."""
    if len(states) == 0:
        return states
    keep = np.concatenate([[True], states[1:] != states[:-1]])
    return states[keep]


# ---------------------------------------------------------------------------
# Counters
# ---------------------------------------------------------------------------

def count_l_cancels(df: pd.DataFrame) -> dict:
    # 1 = success, 2 = failure, 0 = not applicable
    lc = df["l_cancel"].dropna().values.astype(int)
    return {"success": int(np.sum(lc == 1)), "fail": int(np.sum(lc == 2))}


def count_wavedashes(df: pd.DataFrame) -> int:
    """Count jumpsquat -> airdodge -> special landing sequences."""
    states = df["state"].values
    count = 0
    for idx in state_entries(df, {_LANDING_FALL_SPECIAL}):
        if idx == 0 or states[idx - 1] != _AIRDODGE:
            continue
        # Walk back to the first frame of the airdodge
        start = idx - 1
        while start > 0 and states[start - 1] == _AIRDODGE:
            start -= 1
        window = states[max(0, start - _WAVEDASH_WINDOW):start]
        if np.any(window == _JUMPSQUAT):
            count += 1
    return count


def count_dash_dances(df: pd.DataFrame) -> int:
    """Count dash -> turn -> dash patterns in the collapsed state sequence."""
    runs = _state_runs(df["state"].dropna().values.astype(int))
    if len(runs) < 3:
        return 0
    hits = (runs[:-2] == _DASH) & (runs[1:-1] == _TURN) & (runs[2:] == _DASH)
    return int(np.sum(hits))


def count_ground_techs(df: pd.DataFrame, opp_df: pd.DataFrame | None = None) -> dict:
    """Count techs by direction relative to the opponent, plus missed techs.

    Tech rolls are "in" when they travel toward the opponent and "away"
    otherwise. Without opponent frames, forward rolls count as "in".
    """
    counts = {"in": 0, "away": 0, "neutral": 0, "fail": 0}
    counts["neutral"] = len(state_entries(df, {_TECH_IN_PLACE}))
    counts["fail"] = len(state_entries(df, _MISSED_TECH))

    has_opp = opp_df is not None and len(opp_df) == len(df)
    for state, is_forward in ((_TECH_ROLL_FORWARD, True), (_TECH_ROLL_BACKWARD, False)):
        for idx in state_entries(df, {state}):
            if has_opp:
                label = classify_direction(
                    float(df["position_x"].iat[idx]),
                    float(opp_df["position_x"].iat[idx]),
                    float(df["direction"].iat[idx]),
                    is_forward,
                )
            else:
                label = "toward" if is_forward else "away"
            counts["in" if label == "toward" else "away"] += 1
    return counts


def count_throws(df: pd.DataFrame) -> dict:
    return {direction: len(state_entries(df, {state})) for direction, state in _THROWS.items()}


def compute_action_counts(df: pd.DataFrame, opp_df: pd.DataFrame | None = None) -> dict:
    """Compute the action-count summary for one player.

    Args:
        df: Player frame DataFrame from extract_player_frames().
        opp_df: Opponent frame DataFrame, used for tech roll direction.

    Returns dict with keys:
        l_cancel_count, wavedash_count, roll_count, ledgegrab_count,
        dash_dance_count, ground_tech_count, throw_count
    """
    if df.empty:
        return empty_action_counts()
    return {
        "l_cancel_count": count_l_cancels(df),
        "wavedash_count": count_wavedashes(df),
        "roll_count": len(state_entries(df, _ROLL)),
        "ledgegrab_count": len(state_entries(df, _LEDGE_GRAB)),
        "dash_dance_count": count_dash_dances(df),
        "ground_tech_count": count_ground_techs(df, opp_df),
        "throw_count": count_throws(df),
    }


def compute_stocks_lost(df: pd.DataFrame) -> int:
    """Stocks lost = starting stocks - ending stocks."""
    if df.empty:
        return 0
    stocks = df["stocks"].values.astype(float)
    valid_stocks = stocks[~np.isnan(stocks)]
    if len(valid_stocks) == 0:
        return 0
    return int(valid_stocks[0]) - int(valid_stocks[-1])
