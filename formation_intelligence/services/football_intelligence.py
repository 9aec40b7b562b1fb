"""
Football Intelligence Service

Single entry point for the hosting application:
- analyze_formation
- optimize_player_assignments
- analyze_tactical_patterns
- predict_formation_effectiveness
- calculate_player_compatibility
- slot_report

Engines are built once and only read afterwards, so one instance can be
shared between concurrent callers.
"""
from typing import Any, List, Optional

from ..config import Settings, settings as default_settings
from ..models.schemas import (
    EffectivenessPrediction, Formation, FormationAnalysis, OptimizedAssignment,
    Player, SlotReport, TacticalAnalysis
)
from .auto_assignment import AutoAssignmentEngine
from .chemistry import ChemistryEngine
from .effectiveness import EffectivenessPredictor
from .formation_analyzer import FormationAnalyzer
from .tactical_patterns import TacticalPatternEngine


class FootballIntelligenceService:
    """Facade over the chemistry, analysis, assignment and tactical engines."""

    def __init__(self, config: Optional[Settings] = None):
        config = config or default_settings

        self.chemistry = ChemistryEngine(config)
        self.formation_analyzer = FormationAnalyzer(self.chemistry, config)
        self.auto_assignment = AutoAssignmentEngine(self.formation_analyzer, config)
        self.tactical_patterns = TacticalPatternEngine(config)
        self.effectiveness = EffectivenessPredictor(
            self.formation_analyzer, self.tactical_patterns, config
        )

    def analyze_formation(self, formation: Formation, players: List[Player]) -> FormationAnalysis:
        """Analyze formation and provide comprehensive insights."""
        return self.formation_analyzer.analyze(formation, players)

    def optimize_player_assignments(
        self,
        formation: Formation,
        players: List[Player],
        strategy: Optional[str] = None
    ) -> OptimizedAssignment:
        """Get optimized player assignments for a formation."""
        return self.auto_assignment.optimize(formation, players, strategy)

    def slot_report(self, formation: Formation, players: List[Player]) -> SlotReport:
        """Per-slot fit breakdown of the formation as currently bound."""
        return self.auto_assignment.slot_report(formation, players)

    def analyze_tactical_patterns(
        self,
        formation: Formation,
        players: List[Player],
        opposition_data: Optional[Any] = None
    ) -> TacticalAnalysis:
        """Analyze tactical patterns and provide strategic insights."""
        return self.tactical_patterns.analyze(formation, players, opposition_data)

    def predict_formation_effectiveness(
        self,
        formation: Formation,
        players: List[Player],
        opposition_formation: Optional[Formation] = None,
        opposition_players: Optional[List[Player]] = None
    ) -> EffectivenessPrediction:
        """Predict formation effectiveness against specific opposition."""
        return self.effectiveness.predict(
            formation, players, opposition_formation, opposition_players
        )

    def calculate_player_compatibility(self, player1: Player, player2: Player) -> float:
        """Calculate player compatibility for the chemistry system."""
        return self.chemistry.calculate_compatibility(player1, player2)


# Global instance
football_intelligence = FootballIntelligenceService()
