"""Tests for melee_stats.decode, against a stand-in for a peppi-py game."""

from types import SimpleNamespace as NS

import pyarrow as pa
import pytest

from melee_stats import decode
from melee_stats.outcome import MatchFact, classify_match
from melee_stats.filters import FilterCriteria


def _port(states, percents, stocks):
    n = len(states)
    post = NS(
        state=pa.array(states, type=pa.uint16()),
        direction=pa.array([1.0] * n, type=pa.float32()),
        percent=pa.array(percents, type=pa.float32()),
        stocks=pa.array(stocks, type=pa.uint8()),
        l_cancel=pa.array([0, 1, 0, 2][:n] + [0] * max(0, n - 4), type=pa.uint8()),
        position=NS(x=pa.array([0.0] * n, type=pa.float32())),
    )
    return NS(leader=NS(post=post))


def _fake_game():
    n = 4
    last_frame = 5400  # 90 seconds
    frames = NS(
        id=pa.array(list(range(last_frame - n + 1, last_frame + 1)), type=pa.int32()),
        ports=[
            _port([14, 233, 233, 14], [0.0, 20.0, 35.5, None], [4, 4, 4, 4]),
            _port([14, 14, 252, 14], [50.0, 0.0, 10.0, 12.25], [4, 3, 3, 2]),
        ],
    )
    players = (
        NS(port=NS(value=0), character=19, netplay=NS(name="Ryan", code="RYAN#123")),
        NS(port=NS(value=1), character=20, netplay=None),
    )
    start = NS(stage=31, players=players, match=NS(id="mode.ranked-2024-01-01"))
    metadata = {
        "startAt": "2024-01-01T00:00:00Z",
        "players": {"1": {"names": {"netplay": "Bird", "code": "BIRD#254"}}},
    }
    return NS(start=start, frames=frames, metadata=metadata)


@pytest.fixture
def decoded(monkeypatch, tmp_path):
    monkeypatch.setattr(decode, "read_slippi", lambda path: _fake_game())
    return decode.decode_replay(tmp_path / "game.slp")


def test_settings_and_metadata(decoded):
    assert decoded["settings"] == {
        "stage_id": 31,
        "match_id": "mode.ranked-2024-01-01",
        "players": [{"port": 0, "character_id": 19}, {"port": 1, "character_id": 20}],
    }
    names = [p["names"] for p in decoded["metadata"]["players"]]
    assert names == [
        {"display_name": "Ryan", "code": "RYAN#123"},
        {"display_name": "Bird", "code": "BIRD#254"},
    ]


def test_duration_and_percents(decoded):
    assert decoded["total_seconds"] == 90.0
    # Trailing null percent falls back to the last known value
    assert decoded["latest_frame_percents"] == [35.5, 12.25]


def test_kill_counts_and_actions(decoded):
    assert decoded["stats"]["overall"] == [{"kill_count": 2}, {"kill_count": 0}]
    p0, p1 = decoded["stats"]["action_counts"]
    assert p0["roll_count"] == 1
    assert p0["l_cancel_count"] == {"success": 1, "fail": 1}
    assert p1["ledgegrab_count"] == 1


def test_decoded_match_classifies(decoded):
    fact = classify_match(decoded, FilterCriteria(self_tags=("ryan",)))
    assert isinstance(fact, MatchFact)
    assert fact.won
    assert fact.stage == "Battlefield"


def test_decoder_version_is_a_string():
    assert isinstance(decode.decoder_version(), str)
