"""Decide which recorded participant is "self" and which is the opponent."""

from typing import NamedTuple

from melee_stats.filters import FilterCriteria, PlayerIdentity, is_ignored_opponent, matches_any_tag


class Viewpoint(NamedTuple):
    player_index: int
    opponent_index: int


P0_VIEW = Viewpoint(0, 1)
P1_VIEW = Viewpoint(1, 0)


def resolve_viewpoint(
    p0: PlayerIdentity,
    p1: PlayerIdentity,
    criteria: FilterCriteria,
) -> Viewpoint | None:
    """Pick the self/opponent assignment for a two-player match.

    With an opponent filter, the match qualifies only when one ordering
    satisfies both the self filter and the opponent filter (P0 as self is
    tried first). Without one, the participant matching the self filter is
    self; when both match (mirror or empty filter) P0 is self.

    Returns None when no assignment qualifies.
    """
    wanted_self = criteria.wanted_self
    wanted_opp = criteria.wanted_opponent

    p0_is_self = matches_any_tag(p0, wanted_self)
    p1_is_self = matches_any_tag(p1, wanted_self)

    if wanted_opp:
        if p0_is_self and matches_any_tag(p1, wanted_opp):
            return P0_VIEW
        if p1_is_self and matches_any_tag(p0, wanted_opp):
            return P1_VIEW
        return None

    if p0_is_self:
        return P0_VIEW
    if p1_is_self:
        return P1_VIEW
    return None


def opponent_is_ignored(
    view: Viewpoint,
    identities: tuple[PlayerIdentity, PlayerIdentity],
    criteria: FilterCriteria,
) -> bool:
    return is_ignored_opponent(identities[view.opponent_index], criteria.ignored)
