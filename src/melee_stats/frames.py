"""Extract the per-frame columns the stats summary needs from a peppi-py game."""

import numpy as np
import pandas as pd
import pyarrow as pa

# Post-frame fields read for every active player
_POST_FIELDS = ["state", "direction", "percent", "stocks", "l_cancel"]

# Final percent recorded when a player has no percent data at all
MISSING_PERCENT = 999


def _arrow_to_numpy(arr: pa.Array | None) -> np.ndarray | None:
    """Convert a PyArrow array to numpy, handling nulls.

    Older Slippi versions leave some fields (l_cancel in particular) as None.
    """
    if arr is None:
        return None
    if arr.null_count == 0:
        return arr.to_numpy(zero_copy_only=False)
    # For arrays with nulls, convert to pandas (which handles nullable dtypes)
    return arr.to_pandas().values


def extract_player_frames(game, player_index: int, port_slot: int) -> pd.DataFrame:
    """Extract one player's post-frame data into a DataFrame.

    Args:
        game: A peppi-py game object from read_slippi().
        player_index: Logical player index (0-based, among active players).
        port_slot: The slot in game.frames.ports.

    Returns:
        DataFrame with one row per frame and columns
        frame, state, position_x, direction, percent, stocks, l_cancel.
        Empty if the port has no frame data.
    """
    port_data = game.frames.ports[port_slot]
    if port_data is None or port_data.leader is None:
        return pd.DataFrame()

    post = port_data.leader.post
    frame_ids = _arrow_to_numpy(game.frames.id)

    data = {"frame": frame_ids}
    data["position_x"] = _arrow_to_numpy(post.position.x)
    for name in _POST_FIELDS:
        values = _arrow_to_numpy(getattr(post, name, None))
        data[name] = values if values is not None else np.full(len(frame_ids), np.nan)

    df = pd.DataFrame(data)
    df["player_index"] = player_index
    return df


def last_valid(values: pd.Series, default=None):
    """Return the last non-null value of a column, or ``default``."""
    valid = values.dropna()
    if valid.empty:
        return default
    return valid.iloc[-1].item() if hasattr(valid.iloc[-1], "item") else valid.iloc[-1]
