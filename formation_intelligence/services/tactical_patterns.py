"""
Tactical Pattern Engine

Recognises tactical patterns from a formation snapshot and its players:
- Formation shape (DF-MF-FW structure and how well the squad fits it)
- Dominant playing style from team-average attributes
- Vulnerabilities (spacing gaps, attribute weaknesses)
- Opportunities (team strengths worth exploiting)
- Counter-strategies from a static rules table
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..config import Settings, settings as default_settings
from ..models.schemas import (
    CounterStrategy, Formation, Player, PlayerAttributes, PositionRole, Severity,
    TacticalAnalysis, TacticalOpportunity, TacticalPattern, TacticalVulnerability
)
from ..utils.geometry import average_pairwise_distance
from .formation_analyzer import average_attributes

logger = logging.getLogger(__name__)

# Ideal DF:MF:FW share of outfield slots
IDEAL_SHAPE = {"defensive": 0.35, "midfield": 0.40, "attacking": 0.25}

# Opposition style -> (countermeasure, confidence)
COUNTER_STRATEGY_RULES: Tuple[Tuple[str, str, float], ...] = (
    ("High pressing", "Quick long balls to bypass midfield", 0.75),
    ("Defensive block", "Width and crossing from flanks", 0.65),
)

PLAYING_STYLE_IMPLICATIONS: Dict[str, List[str]] = {
    "Counter-attacking": [
        "Effective against possession-heavy teams",
        "May struggle against defensive opponents",
    ],
    "Possession-based": [
        "Controls game tempo effectively",
        "Vulnerable to high-pressing tactics",
    ],
    "Defensive": [
        "Difficult to break down",
        "Limited scoring opportunities",
    ],
    "High-tempo": [
        "Overwhelms slower opponents",
        "Fitness becomes crucial factor",
    ],
}


@dataclass
class FormationShape:
    """Slot counts per outfield line."""
    defensive: int
    midfield: int
    attacking: int

    @property
    def descriptor(self) -> str:
        return f"{self.defensive}-{self.midfield}-{self.attacking}"


@dataclass
class PlayingStyle:
    """Ranked playing-style tendency of a squad."""
    dominant: str
    secondary: str
    consistency: float  # Dominant style score / 100


class TacticalPatternEngine:
    """
    Analyzes tactical patterns and suggests improvements.
    """

    def __init__(self, config: Optional[Settings] = None):
        config = config or default_settings

        # Thresholds
        self.spacing_gap_threshold = config.SPACING_GAP_THRESHOLD
        self.vulnerable_speed = config.VULNERABLE_SPEED
        self.vulnerable_tackling = config.VULNERABLE_TACKLING
        self.opportunity_speed = config.OPPORTUNITY_SPEED
        self.opportunity_passing = config.OPPORTUNITY_PASSING
        self.crowded_defence = config.CROWDED_DEFENCE
        self.crowded_midfield = config.CROWDED_MIDFIELD
        self.crowded_attack = config.CROWDED_ATTACK

        self.counter_strategy_rules = COUNTER_STRATEGY_RULES

    def analyze(
        self,
        formation: Formation,
        players: List[Player],
        opposition_data: Optional[Any] = None
    ) -> TacticalAnalysis:
        """
        Analyze tactical patterns and provide strategic insights.

        Args:
            formation: Formation snapshot
            players: Squad players (team averages use all of them)
            opposition_data: Accepted for interface compatibility; the
                counter-strategy table does not depend on it

        Returns:
            TacticalAnalysis
        """
        averages = average_attributes(players)

        patterns = self._identify_patterns(formation, players, averages)
        vulnerabilities = self._identify_vulnerabilities(formation, averages)
        opportunities = self._identify_opportunities(averages)
        counter_strategies = self._generate_counter_strategies()

        logger.debug(
            f"Tactical analysis for {formation.id}: {len(patterns)} patterns, "
            f"{len(vulnerabilities)} vulnerabilities, {len(opportunities)} opportunities"
        )

        return TacticalAnalysis(
            patterns=patterns,
            vulnerabilities=vulnerabilities,
            opportunities=opportunities,
            counter_strategies=counter_strategies,
            recommendations=self._generate_recommendations(vulnerabilities, opportunities)
        )

    # ============== Patterns ==============

    def _identify_patterns(
        self,
        formation: Formation,
        players: List[Player],
        averages: PlayerAttributes
    ) -> List[TacticalPattern]:
        shape = self.analyze_formation_shape(formation)
        style = self.analyze_playing_style(averages)

        return [
            TacticalPattern(
                type="formation_shape",
                description=f"{shape.descriptor} formation structure",
                strength=self._pattern_strength(shape, players, averages),
                implications=self._shape_implications(shape)
            ),
            TacticalPattern(
                type="playing_style",
                description=style.dominant,
                strength=style.consistency,
                implications=list(PLAYING_STYLE_IMPLICATIONS[style.dominant])
            ),
        ]

    def analyze_formation_shape(self, formation: Formation) -> FormationShape:
        counts = {role: 0 for role in PositionRole}
        for slot in formation.slots:
            counts[slot.role] += 1

        return FormationShape(
            defensive=counts[PositionRole.DF],
            midfield=counts[PositionRole.MF],
            attacking=counts[PositionRole.FW]
        )

    def analyze_playing_style(self, averages: PlayerAttributes) -> PlayingStyle:
        styles = [
            ("Counter-attacking", (averages.speed + averages.shooting) / 2),
            ("Possession-based", (averages.passing + averages.dribbling) / 2),
            ("Defensive", averages.tackling),
            ("High-tempo", averages.speed),
        ]
        # Stable: equal scores keep the listing order above
        styles.sort(key=lambda s: -s[1])

        return PlayingStyle(
            dominant=styles[0][0],
            secondary=styles[1][0],
            consistency=styles[0][1] / 100
        )

    def _pattern_strength(
        self,
        shape: FormationShape,
        players: List[Player],
        averages: PlayerAttributes
    ) -> float:
        """How well the squad fits the formation shape."""
        balance = self._shape_balance(shape)
        player_fit = averages.stamina / 100 if players else 0.0
        return (balance + player_fit) / 2

    def _shape_balance(self, shape: FormationShape) -> float:
        total = shape.defensive + shape.midfield + shape.attacking
        if total == 0:
            return 0.0

        deviation = (
            abs(IDEAL_SHAPE["defensive"] - shape.defensive / total) +
            abs(IDEAL_SHAPE["midfield"] - shape.midfield / total) +
            abs(IDEAL_SHAPE["attacking"] - shape.attacking / total)
        ) / 3

        return max(0.0, 1 - deviation)

    def _shape_implications(self, shape: FormationShape) -> List[str]:
        implications = []

        if shape.defensive > self.crowded_defence:
            implications.append("Strong defensive stability but may lack attacking width")
        if shape.midfield > self.crowded_midfield:
            implications.append("Excellent midfield control and ball retention")
        if shape.attacking > self.crowded_attack:
            implications.append("High attacking threat but potentially vulnerable to counters")

        return implications

    # ============== Vulnerabilities / Opportunities ==============

    def _identify_vulnerabilities(
        self,
        formation: Formation,
        averages: PlayerAttributes
    ) -> List[TacticalVulnerability]:
        vulnerabilities = []

        spacing = average_pairwise_distance([s.default_position for s in formation.slots])
        if spacing > self.spacing_gap_threshold:
            vulnerabilities.append(TacticalVulnerability(
                type="spacing",
                severity=Severity.MEDIUM,
                description="Gaps in formation could be exploited",
                exploit_method="Through balls and quick passing combinations"
            ))

        if averages.speed < self.vulnerable_speed:
            vulnerabilities.append(TacticalVulnerability(
                type="attribute",
                severity=Severity.HIGH,
                description="Team lacks pace across the field",
                exploit_method="Fast counter-attacks and wing play"
            ))

        if averages.tackling < self.vulnerable_tackling:
            vulnerabilities.append(TacticalVulnerability(
                type="attribute",
                severity=Severity.MEDIUM,
                description="Defensive frailty in 1v1 situations",
                exploit_method="Direct running and dribbling"
            ))

        return vulnerabilities

    def _identify_opportunities(self, averages: PlayerAttributes) -> List[TacticalOpportunity]:
        opportunities = []

        if averages.speed > self.opportunity_speed:
            opportunities.append(TacticalOpportunity(
                type="exploit_strength",
                potential=Severity.HIGH,
                description="Exceptional pace throughout the team",
                implementation="Focus on counter-attacking and transition play"
            ))

        if averages.passing > self.opportunity_passing:
            opportunities.append(TacticalOpportunity(
                type="exploit_strength",
                potential=Severity.HIGH,
                description="Superior passing ability",
                implementation="Implement possession-based tactics with short passing"
            ))

        return opportunities

    def _generate_counter_strategies(self) -> List[CounterStrategy]:
        return [
            CounterStrategy(against=against, strategy=strategy, confidence=confidence)
            for against, strategy, confidence in self.counter_strategy_rules
        ]

    def _generate_recommendations(
        self,
        vulnerabilities: List[TacticalVulnerability],
        opportunities: List[TacticalOpportunity]
    ) -> List[str]:
        recommendations = [
            f"Critical: Address {v.description.lower()}"
            for v in vulnerabilities if v.severity == Severity.HIGH
        ]
        recommendations.extend(
            f"Opportunity: {o.implementation}"
            for o in opportunities if o.potential == Severity.HIGH
        )
        return recommendations
