"""Tests for melee_stats.cache."""

import hashlib
import json

import pytest

from melee_stats.cache import CACHE_FILENAME, ReplayCache, hash_replay_file
from melee_stats.errors import CacheWriteError


def test_hash_replay_file(tmp_path):
    path = tmp_path / "game.slp"
    path.write_bytes(b"abc")
    assert hash_replay_file(path) == hashlib.md5(b"abc").hexdigest()


def test_load_missing_starts_empty(tmp_path):
    cache = ReplayCache.load(tmp_path)
    assert len(cache) == 0
    assert cache.get("nope") is None


@pytest.mark.parametrize("content", ["{not json", "[]", '{"results": []}', '{"stats_version": "x"}'])
def test_load_malformed_starts_empty(tmp_path, content):
    (tmp_path / CACHE_FILENAME).write_text(content)
    assert len(ReplayCache.load(tmp_path)) == 0


def test_flush_and_reload(tmp_path, make_match):
    cache = ReplayCache.load(tmp_path)
    cache.put("h1", make_match())
    cache.put("h1", make_match())
    assert cache.new_entries == 1
    cache.flush("ryan")

    document = json.loads((tmp_path / CACHE_FILENAME).read_text())
    assert set(document) == {"stats_version", "decoder_version", "self_filter_echo", "results"}
    assert document["self_filter_echo"] == "ryan"

    reloaded = ReplayCache.load(tmp_path)
    assert "h1" in reloaded
    assert reloaded.get("h1") == make_match()
    assert reloaded.new_entries == 0


def test_old_decoder_version_entries_are_reused(tmp_path, make_match):
    document = {
        "stats_version": "ancient",
        "decoder_version": "0.0.1",
        "self_filter_echo": "",
        "results": {"h1": make_match()},
    }
    (tmp_path / CACHE_FILENAME).write_text(json.dumps(document))
    assert ReplayCache.load(tmp_path).get("h1") == make_match()


def test_flush_failure_raises(tmp_path):
    (tmp_path / CACHE_FILENAME).mkdir()
    cache = ReplayCache.load(tmp_path)
    with pytest.raises(CacheWriteError):
        cache.flush()
