"""
Role Mapping

Maps free-form role IDs (e.g. "CB", "RB", "dlp", "CDM") onto the four
coarse role categories used by every scoring formula.

Resolution order:
1. Exact match against the known role-ID table (case-insensitive)
2. Substring tokens, checked in category order GK -> DF -> MF
3. Fallback to FW

The fallback is explicit and observable through ``is_known`` so callers
can flag players whose role ID was never recognised.
"""
import logging
from typing import Dict, Optional, Tuple

from .schemas import PositionRole

logger = logging.getLogger(__name__)

ROLE_MAPPING_VERSION = "1"

# Known role IDs used by the formation editor
KNOWN_ROLE_IDS: Dict[str, PositionRole] = {
    "gk": PositionRole.GK,
    "sk": PositionRole.GK,    # Sweeper keeper
    "cb": PositionRole.DF,
    "bpd": PositionRole.DF,   # Ball-playing defender
    "ncb": PositionRole.DF,   # No-nonsense centre back
    "fb": PositionRole.DF,
    "wb": PositionRole.DF,
    "dm": PositionRole.MF,
    "dlp": PositionRole.MF,   # Deep-lying playmaker
    "cm": PositionRole.MF,
    "b2b": PositionRole.MF,
    "ap": PositionRole.MF,    # Advanced playmaker
    "wm": PositionRole.MF,
    "w": PositionRole.FW,
    "iw": PositionRole.FW,    # Inverted winger
    "p": PositionRole.FW,     # Poacher
    "tf": PositionRole.FW,    # Target forward
    "cf": PositionRole.FW,
}

# Substring rules, case-sensitive, checked in order
ROLE_TOKENS: Tuple[Tuple[PositionRole, Tuple[str, ...]], ...] = (
    (PositionRole.GK, ("GK",)),
    (PositionRole.DF, ("DF", "CB", "LB", "RB")),
    (PositionRole.MF, ("MF", "CM", "CDM", "CAM")),
)

FALLBACK_ROLE = PositionRole.FW


class RoleMapping:
    """
    Versioned role-ID -> coarse category table.

    Instances are immutable after construction; pass a custom table to
    try out an alternative role vocabulary.
    """

    def __init__(
        self,
        known_role_ids: Optional[Dict[str, PositionRole]] = None,
        tokens: Tuple[Tuple[PositionRole, Tuple[str, ...]], ...] = ROLE_TOKENS,
        fallback: PositionRole = FALLBACK_ROLE,
        version: str = ROLE_MAPPING_VERSION
    ):
        table = KNOWN_ROLE_IDS if known_role_ids is None else known_role_ids
        self._known = {key.lower(): PositionRole(value) for key, value in table.items()}
        self._tokens = tokens
        self.fallback = fallback
        self.version = version

    def match(self, role_id: str) -> Optional[PositionRole]:
        """Return the matched category, or None when no rule applies."""
        exact = self._known.get(role_id.strip().lower())
        if exact is not None:
            return exact

        for role, tokens in self._tokens:
            if any(token in role_id for token in tokens):
                return role

        return None

    def is_known(self, role_id: str) -> bool:
        return self.match(role_id) is not None

    def resolve(self, role_id: str) -> PositionRole:
        """Resolve a role ID, falling back to FW for unrecognised IDs."""
        role = self.match(role_id)
        if role is None:
            logger.warning(
                f"Unknown role id '{role_id}', falling back to {self.fallback.value} "
                f"(role mapping v{self.version})"
            )
            return self.fallback
        return role


role_mapping = RoleMapping()
