"""Decode a .slp replay into the summary stored in the replay cache."""

from importlib import metadata as importlib_metadata
from pathlib import Path

from peppi_py import read_slippi

from melee_stats.actions import compute_action_counts, compute_stocks_lost, empty_action_counts
from melee_stats.frames import MISSING_PERCENT, _arrow_to_numpy, extract_player_frames, last_valid

FRAMES_PER_SECOND = 60


def decoder_version() -> str:
    """Installed peppi-py version, recorded in the cache document."""
    try:
        return importlib_metadata.version("peppi-py")
    except importlib_metadata.PackageNotFoundError:
        return "unknown"


def _port_index(player) -> int:
    return player.port.value if hasattr(player.port, "value") else int(player.port)


def _player_names(player, meta: dict) -> dict:
    """Netplay display name and connect code, falling back to the metadata block."""
    display_name = player.netplay.name if player.netplay and player.netplay.name else ""
    code = player.netplay.code if player.netplay and player.netplay.code else ""
    if not (display_name and code):
        names = (meta.get("players") or {}).get(str(_port_index(player)), {}).get("names") or {}
        display_name = display_name or names.get("netplay") or ""
        code = code or names.get("code") or ""
    return {"display_name": display_name, "code": code}


def decode_replay(filepath: str | Path) -> dict:
    """Parse a single .slp file into a cacheable match summary.

    Returns a JSON-compatible dict:
        settings: stage_id, match_id, players[].{port, character_id}
        metadata: start_time, players[].names.{display_name, code}
        stats: overall[].kill_count, action_counts[] (see compute_action_counts)
        total_seconds: last frame index / 60
        latest_frame_percents: each player's last known percent

    Raises whatever peppi-py raises for unreadable files.
    """
    filepath = Path(filepath)
    game = read_slippi(str(filepath))

    start = game.start
    meta = game.metadata or {}
    match = getattr(start, "match", None)

    active_players = [(i, p) for i, p in enumerate(start.players) if p is not None]

    player_dfs = {}
    if game.frames is not None:
        for idx, (slot, _player) in enumerate(active_players):
            player_dfs[idx] = extract_player_frames(game, idx, slot)

    last_frame = 0
    if game.frames is not None and len(game.frames.id) > 0:
        last_frame = int(_arrow_to_numpy(game.frames.id)[-1])

    settings_players = []
    meta_players = []
    for _, player in active_players:
        settings_players.append({"port": _port_index(player), "character_id": player.character})
        meta_players.append({"names": _player_names(player, meta)})

    stocks_lost = []
    action_counts = []
    percents = []
    for idx in range(len(active_players)):
        df = player_dfs.get(idx)
        if df is None or df.empty:
            stocks_lost.append(0)
            action_counts.append(empty_action_counts())
            percents.append(MISSING_PERCENT)
            continue
        # Tech roll direction only makes sense against a single opponent
        opp_df = player_dfs.get(1 - idx) if len(active_players) == 2 else None
        stocks_lost.append(compute_stocks_lost(df))
        action_counts.append(compute_action_counts(df, opp_df))
        percent = last_valid(df["percent"], default=MISSING_PERCENT)
        percents.append(round(float(percent), 2))

    overall = []
    for idx in range(len(active_players)):
        kills = sum(lost for j, lost in enumerate(stocks_lost) if j != idx)
        overall.append({"kill_count": kills})

    return {
        "settings": {
            "stage_id": start.stage,
            "match_id": match.id if match is not None and match.id else "",
            "players": settings_players,
        },
        "metadata": {
            "start_time": meta.get("startAt"),
            "players": meta_players,
        },
        "stats": {
            "overall": overall,
            "action_counts": action_counts,
        },
        "total_seconds": last_frame / FRAMES_PER_SECOND if last_frame > 0 else 0,
        "latest_frame_percents": percents,
    }
