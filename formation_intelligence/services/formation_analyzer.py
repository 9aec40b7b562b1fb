"""
Formation Analyzer

Scores the structural quality of a formation from the players bound to
its slots:
- Defensive strength (DF/GK tackling + positioning)
- Attacking strength (FW/MF shooting + dribbling)
- Midfield control (MF passing + positioning)
- Team chemistry (mean pairwise compatibility)
- Balance against an ideal 1-4-4-2 role distribution

Strengths, weaknesses and recommendations come from fixed thresholds on
team-average attributes and role counts.
"""
import logging
from typing import Dict, List, Optional

from ..config import Settings, settings as default_settings
from ..models.schemas import (
    Formation, FormationAnalysis, Player, PlayerAttributes, PositionRole
)
from ..utils.geometry import clamp01, mean
from .chemistry import ChemistryEngine

logger = logging.getLogger(__name__)

IDEAL_DISTRIBUTION: Dict[PositionRole, int] = {
    PositionRole.GK: 1,
    PositionRole.DF: 4,
    PositionRole.MF: 4,
    PositionRole.FW: 2,
}

ATTRIBUTE_NAMES = (
    "speed", "passing", "tackling", "shooting",
    "dribbling", "positioning", "stamina"
)


def get_assigned_players(formation: Formation, players: List[Player]) -> List[Player]:
    """Players bound to a slot, in slot order. Unknown and repeated ids are skipped."""
    by_id = {p.id: p for p in players}
    assigned = []
    seen = set()
    for slot in formation.slots:
        if slot.player_id in by_id and slot.player_id not in seen:
            assigned.append(by_id[slot.player_id])
            seen.add(slot.player_id)
    return assigned


def average_attributes(players: List[Player]) -> PlayerAttributes:
    """Team-average attributes; all zeros for an empty group."""
    if not players:
        return PlayerAttributes(**{name: 0 for name in ATTRIBUTE_NAMES})

    return PlayerAttributes(**{
        name: sum(getattr(p.attributes, name) for p in players) / len(players)
        for name in ATTRIBUTE_NAMES
    })


def role_distribution(players: List[Player]) -> Dict[PositionRole, int]:
    distribution = {role: 0 for role in PositionRole}
    for player in players:
        distribution[player.role] += 1
    return distribution


class FormationAnalyzer:
    """
    Analyzes formation strength and provides detailed insights.
    """

    def __init__(
        self,
        chemistry: Optional[ChemistryEngine] = None,
        config: Optional[Settings] = None
    ):
        config = config or default_settings
        self.chemistry = chemistry or ChemistryEngine(config)
        self.config = config

    def analyze(self, formation: Formation, players: List[Player]) -> FormationAnalysis:
        """
        Analyze formation strength.

        Args:
            formation: Formation snapshot with slot bindings
            players: Player snapshots (unbound players are ignored)

        Returns:
            FormationAnalysis with sub-scores in [0, 1]
        """
        assigned = get_assigned_players(formation, players)

        defensive_strength = self._defensive_strength(assigned)
        attacking_strength = self._attacking_strength(assigned)
        midfield_control = self._midfield_control(assigned)
        overall_chemistry = self.chemistry.average_chemistry(assigned)
        balance_score = self._balance(assigned)

        averages = average_attributes(assigned)
        distribution = role_distribution(assigned)

        overall_rating = clamp01(mean([
            defensive_strength, attacking_strength, midfield_control,
            overall_chemistry, balance_score
        ]))

        logger.debug(
            f"Analyzed formation {formation.id}: {len(assigned)} assigned players, "
            f"rating {overall_rating:.3f}"
        )

        return FormationAnalysis(
            defensive_strength=defensive_strength,
            attacking_strength=attacking_strength,
            midfield_control=midfield_control,
            overall_chemistry=overall_chemistry,
            balance_score=balance_score,
            overall_rating=overall_rating,
            weaknesses=self._identify_weaknesses(averages, distribution),
            strengths=self._identify_strengths(averages, overall_chemistry),
            recommendations=self._generate_recommendations(averages, distribution),
            player_compatibility_matrix=self.chemistry.compatibility_matrix(assigned)
        )

    def _pair_strength(self, players: List[Player], roles, first: str, second: str) -> float:
        """(avg first + avg second) / 200 over players in ``roles``; 0 if none."""
        group = [p for p in players if p.role in roles]
        if not group:
            return 0.0

        avg_first = mean([getattr(p.attributes, first) for p in group])
        avg_second = mean([getattr(p.attributes, second) for p in group])
        return clamp01((avg_first + avg_second) / 200)

    def _defensive_strength(self, players: List[Player]) -> float:
        return self._pair_strength(
            players, (PositionRole.DF, PositionRole.GK), "tackling", "positioning"
        )

    def _attacking_strength(self, players: List[Player]) -> float:
        return self._pair_strength(
            players, (PositionRole.FW, PositionRole.MF), "shooting", "dribbling"
        )

    def _midfield_control(self, players: List[Player]) -> float:
        return self._pair_strength(
            players, (PositionRole.MF,), "passing", "positioning"
        )

    def _balance(self, players: List[Player]) -> float:
        """Similarity of the actual role distribution to the ideal 1-4-4-2."""
        distribution = role_distribution(players)

        score = 0.0
        for role, ideal in IDEAL_DISTRIBUTION.items():
            diff = abs(ideal - distribution[role])
            score += max(0.0, 1 - diff / ideal)

        return clamp01(score / len(IDEAL_DISTRIBUTION))

    def _identify_weaknesses(
        self,
        averages: PlayerAttributes,
        distribution: Dict[PositionRole, int]
    ) -> List[str]:
        c = self.config
        weaknesses = []

        if averages.tackling < c.WEAK_TACKLING:
            weaknesses.append("Weak defensive stability")
        if averages.passing < c.WEAK_PASSING:
            weaknesses.append("Poor ball circulation")
        if averages.shooting < c.WEAK_SHOOTING:
            weaknesses.append("Limited attacking threat")
        if averages.speed < c.WEAK_SPEED:
            weaknesses.append("Lacks pace in transitions")
        if averages.stamina < c.WEAK_STAMINA:
            weaknesses.append("May struggle with fitness late in game")

        if distribution[PositionRole.MF] < c.MIN_MIDFIELDERS:
            weaknesses.append("Midfield could be overrun")
        if distribution[PositionRole.DF] < c.MIN_DEFENDERS:
            weaknesses.append("Vulnerable to attacking pressure")

        return weaknesses

    def _identify_strengths(self, averages: PlayerAttributes, chemistry: float) -> List[str]:
        c = self.config
        strengths = []

        if averages.tackling > c.STRONG_TACKLING:
            strengths.append("Solid defensive foundation")
        if averages.passing > c.STRONG_PASSING:
            strengths.append("Excellent ball movement")
        if averages.shooting > c.STRONG_SHOOTING:
            strengths.append("Strong attacking potential")
        if averages.speed > c.STRONG_SPEED:
            strengths.append("Explosive counter-attacking pace")
        if averages.stamina > c.STRONG_STAMINA:
            strengths.append("Superior fitness and endurance")

        if chemistry > c.STRONG_CHEMISTRY:
            strengths.append("Excellent team chemistry")

        return strengths

    def _generate_recommendations(
        self,
        averages: PlayerAttributes,
        distribution: Dict[PositionRole, int]
    ) -> List[str]:
        c = self.config
        recommendations = []

        if averages.tackling < c.RECOMMEND_TACKLING:
            recommendations.append("Consider more defensive-minded players")
        if averages.passing < c.RECOMMEND_PASSING:
            recommendations.append("Focus on improving passing accuracy in training")
        if distribution[PositionRole.MF] < c.MIN_MIDFIELDERS:
            recommendations.append("Add more midfield players for better control")
        if averages.stamina < c.RECOMMEND_STAMINA:
            recommendations.append("Implement intensive fitness training regime")

        return recommendations
