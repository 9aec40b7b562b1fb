"""
Chemistry Engine

Pairwise compatibility between players, combining:
- Attribute synergy (speed balance, combined passing, shared tackling floor)
- Position synergy between coarse role categories
- Age compatibility
- Nationality synergy

Scores are symmetric and lie in [0, 1].
"""
from typing import Dict, List, Optional

from ..config import Settings, settings as default_settings
from ..models.schemas import Player, PlayerAttributes, PositionRole, CompatibilityScore
from ..utils.geometry import clamp01


# Sub-score weights
ATTRIBUTE_SYNERGY_WEIGHT = 0.4
POSITION_SYNERGY_WEIGHT = 0.3
AGE_COMPATIBILITY_WEIGHT = 0.2
NATIONALITY_SYNERGY_WEIGHT = 0.1

# Symmetric synergy between coarse categories (missing pairs use the unknown default)
POSITION_SYNERGY: Dict[PositionRole, Dict[PositionRole, float]] = {
    PositionRole.GK: {PositionRole.DF: 0.9, PositionRole.MF: 0.6, PositionRole.FW: 0.3},
    PositionRole.DF: {PositionRole.GK: 0.9, PositionRole.DF: 0.8, PositionRole.MF: 0.7, PositionRole.FW: 0.5},
    PositionRole.MF: {PositionRole.GK: 0.6, PositionRole.DF: 0.7, PositionRole.MF: 0.9, PositionRole.FW: 0.8},
    PositionRole.FW: {PositionRole.GK: 0.3, PositionRole.DF: 0.5, PositionRole.MF: 0.8, PositionRole.FW: 0.7},
}


class ChemistryEngine:
    """
    Calculates player compatibility for the chemistry system.

    Stateless apart from thresholds read at construction.
    """

    def __init__(self, config: Optional[Settings] = None):
        config = config or default_settings

        self.speed_delta = config.CHEMISTRY_SPEED_DELTA
        self.balanced_speed = config.CHEMISTRY_BALANCED_SPEED
        self.unbalanced_speed = config.CHEMISTRY_UNBALANCED_SPEED
        self.age_span = config.CHEMISTRY_AGE_SPAN
        self.same_nationality = config.CHEMISTRY_SAME_NATIONALITY
        self.mixed_nationality = config.CHEMISTRY_MIXED_NATIONALITY
        self.unknown_pair = config.CHEMISTRY_UNKNOWN_PAIR

    def calculate_compatibility(self, player1: Player, player2: Player) -> float:
        """
        Calculate compatibility score between two players.

        Args:
            player1: First player
            player2: Second player

        Returns:
            Weighted compatibility in [0, 1]
        """
        attribute_synergy = self._attribute_synergy(player1.attributes, player2.attributes)
        position_synergy = self._position_synergy(player1.role, player2.role)
        age_compatibility = self._age_compatibility(player1.age, player2.age)
        nationality_synergy = self._nationality_synergy(player1.nationality, player2.nationality)

        return clamp01(
            attribute_synergy * ATTRIBUTE_SYNERGY_WEIGHT +
            position_synergy * POSITION_SYNERGY_WEIGHT +
            age_compatibility * AGE_COMPATIBILITY_WEIGHT +
            nationality_synergy * NATIONALITY_SYNERGY_WEIGHT
        )

    def _attribute_synergy(self, attr1: PlayerAttributes, attr2: PlayerAttributes) -> float:
        """How well two attribute profiles complement each other."""
        if abs(attr1.speed - attr2.speed) < self.speed_delta:
            balance_score = self.balanced_speed
        else:
            balance_score = self.unbalanced_speed
        passing_compatibility = (attr1.passing + attr2.passing) / 200
        physical_balance = min(attr1.tackling, attr2.tackling) / 100

        return (balance_score + passing_compatibility + physical_balance) / 3

    def _position_synergy(self, role1: PositionRole, role2: PositionRole) -> float:
        return POSITION_SYNERGY.get(role1, {}).get(role2, self.unknown_pair)

    def _age_compatibility(self, age1: int, age2: int) -> float:
        return max(0.0, 1 - abs(age1 - age2) / self.age_span)

    def _nationality_synergy(self, nat1: str, nat2: str) -> float:
        return self.same_nationality if nat1 == nat2 else self.mixed_nationality

    def compatibility_matrix(self, players: List[Player]) -> Dict[str, Dict[str, float]]:
        """Full symmetric matrix keyed by player id, excluding self-pairs."""
        matrix: Dict[str, Dict[str, float]] = {p.id: {} for p in players}

        for i in range(len(players)):
            for j in range(i + 1, len(players)):
                a, b = players[i], players[j]
                if a.id == b.id:
                    continue
                score = self.calculate_compatibility(a, b)
                matrix[a.id][b.id] = score
                matrix[b.id][a.id] = score

        return matrix

    def pair_scores(self, players: List[Player]) -> List[CompatibilityScore]:
        """Compatibility for every unordered pair, in input order."""
        scores = []
        for i in range(len(players)):
            for j in range(i + 1, len(players)):
                scores.append(CompatibilityScore(
                    player_a=players[i].id,
                    player_b=players[j].id,
                    score=self.calculate_compatibility(players[i], players[j])
                ))
        return scores

    def average_chemistry(self, players: List[Player]) -> float:
        """Mean compatibility over unordered pairs; 1.0 with fewer than two players."""
        if len(players) < 2:
            return 1.0

        pairs = self.pair_scores(players)
        return clamp01(sum(p.score for p in pairs) / len(pairs))
