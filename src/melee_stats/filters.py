"""Filter criteria and player identity matching.

Tag filters use substring semantics against a player's lower-cased display
name and connect code: a filter of "ry" matches "ryan#123". An empty filter
list is unconstrained and matches every identity.
"""

from dataclasses import dataclass, field

from melee_stats.enums import CHARACTER_NAMES, character_id


def normalize_tags(values) -> tuple[str, ...]:
    """Lower-case and trim each tag, dropping blanks."""
    if not values:
        return ()
    if isinstance(values, str):
        values = [values]
    return tuple(t for t in (str(v).strip().lower() for v in values) if t)


@dataclass(frozen=True)
class FilterCriteria:
    """User-supplied filters, echoed back verbatim in the report."""

    self_tags: tuple[str, ...] = ()
    opponent_tags: tuple[str, ...] = ()
    ignored_opponents: tuple[str, ...] = ()
    self_character: str | None = None
    opponent_character: str | None = None
    ranked_only: bool = False

    def __post_init__(self):
        # Accept lists from callers but keep the dataclass hashable
        for name in ("self_tags", "opponent_tags", "ignored_opponents"):
            value = getattr(self, name)
            if isinstance(value, str):
                value = (value,)
            object.__setattr__(self, name, tuple(value or ()))

    @property
    def wanted_self(self) -> tuple[str, ...]:
        return normalize_tags(self.self_tags)

    @property
    def wanted_opponent(self) -> tuple[str, ...]:
        return normalize_tags(self.opponent_tags)

    @property
    def ignored(self) -> tuple[str, ...]:
        return normalize_tags(self.ignored_opponents)

    def to_dict(self) -> dict:
        return {
            "self_tags": list(self.self_tags),
            "opponent_tags": list(self.opponent_tags),
            "ignored_opponents": list(self.ignored_opponents),
            "self_character": self.self_character,
            "opponent_character": self.opponent_character,
            "ranked_only": self.ranked_only,
        }


@dataclass(frozen=True)
class PlayerIdentity:
    display_name: str = ""
    code: str = ""
    tags: tuple[str, ...] = field(default=(), compare=False)

    @classmethod
    def from_names(cls, display_name: str | None, code: str | None) -> "PlayerIdentity":
        display_name = display_name or ""
        code = code or ""
        tags = tuple(t.lower() for t in (display_name, code) if t)
        return cls(display_name, code, tags)

    @property
    def key(self) -> str:
        """Stable key for per-opponent tables: code if known, else name."""
        return (self.code or self.display_name).lower()


def extract_identity(meta_player: dict | None) -> PlayerIdentity:
    """Build an identity from a cached ``metadata.players[i]`` entry."""
    if not meta_player or not meta_player.get("names"):
        return PlayerIdentity()
    names = meta_player["names"]
    return PlayerIdentity.from_names(names.get("display_name"), names.get("code"))


def matches_any_tag(identity: PlayerIdentity, wanted: tuple[str, ...]) -> bool:
    if not wanted:
        return True
    return any(req in tag for tag in identity.tags for req in wanted)


def is_ignored_opponent(identity: PlayerIdentity, ignored: tuple[str, ...]) -> bool:
    if not ignored:
        return False
    return any(ign in tag for tag in identity.tags for ign in ignored)


@dataclass(frozen=True)
class CharacterFilter:
    """Resolved character filter.

    ``char_id`` None with ``valid`` True means no filter; ``valid`` False
    means the requested name was not recognized and nothing matches.
    """

    char_id: int | None = None
    name: str | None = None
    valid: bool = True

    @property
    def active(self) -> bool:
        return not self.valid or self.char_id is not None

    def matches(self, char_id) -> bool:
        if not self.valid:
            return False
        return self.char_id is None or self.char_id == char_id


NO_CHARACTER_FILTER = CharacterFilter()


def resolve_character_filter(name: str | None) -> CharacterFilter:
    if not name or not name.strip():
        return NO_CHARACTER_FILTER
    cid = character_id(name)
    if cid is None:
        return CharacterFilter(valid=False, name=name)
    return CharacterFilter(char_id=cid, name=CHARACTER_NAMES[cid])
