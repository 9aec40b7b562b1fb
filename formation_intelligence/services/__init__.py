"""Services package."""
from .chemistry import ChemistryEngine
from .formation_analyzer import FormationAnalyzer
from .auto_assignment import (
    AutoAssignmentEngine, AssignmentStrategy, GreedyAssignmentStrategy,
    OptimalAssignmentStrategy, SlotScorer, apply_assignments, sync_player_positions
)
from .tactical_patterns import TacticalPatternEngine, COUNTER_STRATEGY_RULES
from .effectiveness import EffectivenessPredictor
from .football_intelligence import FootballIntelligenceService, football_intelligence
