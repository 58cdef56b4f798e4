"""Shared pytest fixtures for melee-stats tests.

Replays are stood in for by small files with unique bytes plus a fake
decoder that maps each filename to a synthetic cached-match summary, so no
real .slp fixtures are needed.
"""

import copy

import pytest

from melee_stats.actions import empty_action_counts


def build_match(
    *,
    self_name="Ryan",
    self_code="RYAN#123",
    opp_name="Bird",
    opp_code="BIRD#254",
    self_char=19,  # Sheik
    opp_char=20,  # Falco
    stage_id=31,  # Battlefield
    seconds=90.0,
    self_kills=4,
    opp_kills=2,
    self_percent=30.0,
    opp_percent=80.0,
    match_id="mode.ranked-2024-01-01T00:00:00.00-0",
    self_actions=None,
):
    """A decode_replay()-shaped summary with self as participant 0."""
    return {
        "settings": {
            "stage_id": stage_id,
            "match_id": match_id,
            "players": [
                {"port": 0, "character_id": self_char},
                {"port": 1, "character_id": opp_char},
            ],
        },
        "metadata": {
            "start_time": "2024-01-01T00:00:00Z",
            "players": [
                {"names": {"display_name": self_name, "code": self_code}},
                {"names": {"display_name": opp_name, "code": opp_code}},
            ],
        },
        "stats": {
            "overall": [{"kill_count": self_kills}, {"kill_count": opp_kills}],
            "action_counts": [self_actions or empty_action_counts(), empty_action_counts()],
        },
        "total_seconds": seconds,
        "latest_frame_percents": [self_percent, opp_percent],
    }


class FakeDecoder:
    """Stands in for decode_replay(); records every call."""

    def __init__(self, matches: dict, root):
        self.matches = matches
        self.root = root
        self.calls = []

    def __call__(self, path):
        name = path.relative_to(self.root).as_posix()
        self.calls.append(name)
        match = self.matches[name]
        if isinstance(match, Exception):
            raise match
        return copy.deepcopy(match)


class RecordingSink:
    def __init__(self):
        self.progress_events = []
        self.match_events = []
        self.cancelled_events = []

    def progress(self, event):
        self.progress_events.append(event)

    def match(self, event):
        self.match_events.append(event)

    def cancelled(self, event):
        self.cancelled_events.append(event)


@pytest.fixture
def make_match():
    return build_match


@pytest.fixture
def replay_folder(tmp_path):
    """Factory: write one placeholder file per match and return (folder, decoder)."""

    def _make(matches: dict):
        for name in matches:
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(f"replay:{name}".encode())
        return tmp_path, FakeDecoder(matches, tmp_path)

    return _make


@pytest.fixture
def sink():
    return RecordingSink()
