"""Win-rate and matchup analysis over folders of Melee replays."""

__version__ = "0.1.0"

from melee_stats.aggregate import AggregateState, win_rate
from melee_stats.analyze import CancelToken, ReplayAnalyzer, analyze, find_replays, run_analysis
from melee_stats.cache import ReplayCache, hash_replay_file
from melee_stats.decode import decode_replay
from melee_stats.enums import (
    CHARACTER_NAMES,
    STAGE_NAMES,
    character_name,
    match_mode,
    stage_name,
)
from melee_stats.errors import AnalysisError, AnalysisFailure, CacheWriteError, FolderNotFoundError
from melee_stats.events import CallbackSink, CancelledEvent, EventSink, MatchEvent, NullSink, ProgressEvent
from melee_stats.filters import (
    CharacterFilter,
    FilterCriteria,
    PlayerIdentity,
    extract_identity,
    is_ignored_opponent,
    matches_any_tag,
    resolve_character_filter,
)
from melee_stats.outcome import Exclusion, MatchFact, classify_match
from melee_stats.players import Viewpoint, resolve_viewpoint
from melee_stats.report import AnalysisReport, build_report, seconds_to_hms
