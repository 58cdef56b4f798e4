"""Content-addressed cache of decoded replay summaries.

One JSON document per analyzed folder, keyed by the MD5 of each replay's raw
bytes, so unchanged files are never decoded twice:

    {
        "stats_version": "...",
        "decoder_version": "...",
        "self_filter_echo": "...",
        "results": {"<md5>": {...decode_replay() output...}}
    }

The recorded decoder version is informational only: entries written by an
older peppi-py are reused as-is.
"""

import hashlib
import json
import logging
from pathlib import Path

from melee_stats.decode import decoder_version
from melee_stats.errors import CacheWriteError

logger = logging.getLogger(__name__)

CACHE_FILENAME = "replay_cache.json"
STATS_VERSION = "melee-stats-1"


def hash_replay_file(filepath: str | Path) -> str:
    """MD5 hex digest of a file's raw bytes."""
    return hashlib.md5(Path(filepath).read_bytes()).hexdigest()


class ReplayCache:
    """In-memory cache table, loaded once and flushed once per run."""

    def __init__(self, path: str | Path, results: dict | None = None):
        self.path = Path(path)
        self.results: dict[str, dict] = results if results is not None else {}
        self.new_entries = 0

    @classmethod
    def load(cls, folder: str | Path) -> "ReplayCache":
        """Load the cache document in ``folder``.

        A missing, unreadable or malformed document yields an empty cache.
        """
        path = Path(folder) / CACHE_FILENAME
        if not path.exists():
            return cls(path)
        try:
            parsed = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable replay cache %s: %s", path, e)
            return cls(path)
        if not isinstance(parsed, dict) or not isinstance(parsed.get("results"), dict):
            logger.warning("Ignoring malformed replay cache %s", path)
            return cls(path)
        logger.debug("Loaded %d cached replay(s) from %s", len(parsed["results"]), path)
        return cls(path, parsed["results"])

    def __len__(self) -> int:
        return len(self.results)

    def __contains__(self, content_hash: str) -> bool:
        return content_hash in self.results

    def get(self, content_hash: str) -> dict | None:
        return self.results.get(content_hash)

    def put(self, content_hash: str, match: dict) -> None:
        if content_hash not in self.results:
            self.new_entries += 1
        self.results[content_hash] = match

    def flush(self, self_filter_echo: str = "") -> None:
        """Overwrite the cache document with the full in-memory table.

        Raises:
            CacheWriteError: if the document cannot be written.
        """
        document = {
            "stats_version": STATS_VERSION,
            "decoder_version": decoder_version(),
            "self_filter_echo": self_filter_echo,
            "results": self.results,
        }
        try:
            self.path.write_text(json.dumps(document), encoding="utf-8")
        except OSError as e:
            raise CacheWriteError(f"Could not write replay cache {self.path}: {e}") from e
        logger.debug("Wrote %d cached replay(s) to %s", len(self.results), self.path)
