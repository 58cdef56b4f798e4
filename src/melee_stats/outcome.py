"""Classify a cached match: win/loss and validity under the user's filters."""

import math
from dataclasses import dataclass
from enum import Enum

from melee_stats.enums import character_name, is_valid_stage, match_mode, stage_name
from melee_stats.filters import (
    NO_CHARACTER_FILTER,
    CharacterFilter,
    FilterCriteria,
    extract_identity,
)
from melee_stats.frames import MISSING_PERCENT
from melee_stats.players import opponent_is_ignored, resolve_viewpoint

# Anything shorter is a handwarmer or a quit-out, not a real game
MIN_GAME_SECONDS = 30


class Exclusion(str, Enum):
    """Why a replay contributed nothing to the totals."""

    UNREADABLE = "unreadable"
    NOT_TWO_PLAYERS = "not_two_players"
    NO_VIEWPOINT = "no_viewpoint"
    IGNORED_OPPONENT = "ignored_opponent"
    SELF_CHARACTER = "self_character"
    OPPONENT_CHARACTER = "opponent_character"
    TOO_SHORT = "too_short"
    NO_KILLS = "no_kills"
    NOT_RANKED = "not_ranked"
    INVALID_STAGE = "invalid_stage"


@dataclass(frozen=True)
class MatchFact:
    """Everything a qualifying match contributes, from self's point of view."""

    won: bool
    game_seconds: int
    total_seconds: float
    player_index: int
    opponent_index: int
    self_character_id: int | None
    self_character: str | None
    opponent_character_id: int | None
    opponent_character: str | None
    stage_id: int
    stage: str
    self_name: str
    self_code: str
    opponent_name: str
    opponent_code: str
    self_kills: int
    opponent_kills: int


def _kill_count(stats: dict, index: int) -> int:
    overall = stats.get("overall") or []
    if index >= len(overall) or not overall[index]:
        return 0
    return overall[index].get("kill_count") or 0


def _final_percent(match: dict, index: int) -> float:
    percents = match.get("latest_frame_percents") or []
    if index >= len(percents) or percents[index] is None:
        return MISSING_PERCENT
    return percents[index]


def self_won(self_kills: int, opp_kills: int, self_percent: float, opp_percent: float) -> bool:
    """More kills wins; on equal kills the lower final percent wins."""
    if self_kills != opp_kills:
        return self_kills > opp_kills
    return self_percent < opp_percent


def classify_match(
    match: dict,
    criteria: FilterCriteria,
    self_filter: CharacterFilter = NO_CHARACTER_FILTER,
    opponent_filter: CharacterFilter = NO_CHARACTER_FILTER,
) -> MatchFact | Exclusion:
    """Resolve a cached match into a MatchFact, or the reason it is excluded.

    Args:
        match: Cached match summary (see decode.decode_replay()).
        criteria: Tag filters and ranked-only flag.
        self_filter: Resolved character filter for self.
        opponent_filter: Resolved character filter for the opponent.
    """
    settings = match.get("settings") or {}
    settings_players = settings.get("players") or []
    meta_players = (match.get("metadata") or {}).get("players") or []
    if len(settings_players) != 2 or len(meta_players) != 2:
        return Exclusion.NOT_TWO_PLAYERS

    identities = (extract_identity(meta_players[0]), extract_identity(meta_players[1]))
    view = resolve_viewpoint(identities[0], identities[1], criteria)
    if view is None:
        return Exclusion.NO_VIEWPOINT
    if opponent_is_ignored(view, identities, criteria):
        return Exclusion.IGNORED_OPPONENT

    p, o = view
    self_char = settings_players[p].get("character_id")
    opp_char = settings_players[o].get("character_id")
    if not self_filter.matches(self_char):
        return Exclusion.SELF_CHARACTER
    if not opponent_filter.matches(opp_char):
        return Exclusion.OPPONENT_CHARACTER

    total_seconds = match.get("total_seconds") or 0
    game_seconds = math.floor(total_seconds)
    if game_seconds < MIN_GAME_SECONDS:
        return Exclusion.TOO_SHORT

    stats = match.get("stats") or {}
    self_kills = _kill_count(stats, p)
    opp_kills = _kill_count(stats, o)
    if self_kills == 0 and opp_kills == 0:
        return Exclusion.NO_KILLS

    if criteria.ranked_only and match_mode(settings.get("match_id")) != "ranked":
        return Exclusion.NOT_RANKED

    stage_id = settings.get("stage_id")
    if not is_valid_stage(stage_id):
        return Exclusion.INVALID_STAGE

    me, opp = identities[p], identities[o]
    return MatchFact(
        won=self_won(self_kills, opp_kills, _final_percent(match, p), _final_percent(match, o)),
        game_seconds=game_seconds,
        total_seconds=total_seconds,
        player_index=p,
        opponent_index=o,
        self_character_id=self_char,
        self_character=character_name(self_char),
        opponent_character_id=opp_char,
        opponent_character=character_name(opp_char),
        stage_id=stage_id,
        stage=stage_name(stage_id),
        self_name=me.display_name,
        self_code=me.code,
        opponent_name=opp.display_name,
        opponent_code=opp.code,
        self_kills=self_kills,
        opponent_kills=opp_kills,
    )


def self_action_counts(match: dict, fact: MatchFact) -> dict:
    """Self's action counts from the cached stats, or {} if absent."""
    action_counts = (match.get("stats") or {}).get("action_counts") or []
    if fact.player_index >= len(action_counts):
        return {}
    return action_counts[fact.player_index] or {}
