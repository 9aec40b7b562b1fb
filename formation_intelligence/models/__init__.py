"""Data models package."""
from .schemas import (
    PositionRole, Severity, SwapAction, SlotFitness, ROLE_PRIORITY,
    Position, PlayerAttributes, Player, FormationSlot, Formation,
    CompatibilityScore, FormationAnalysis, SlotAssignment, OptimizedAssignment,
    SwapRecommendation, SwapSuggestion, SlotScore, SlotIssue, SlotReport,
    TacticalPattern, TacticalVulnerability, TacticalOpportunity,
    CounterStrategy, TacticalAnalysis,
    RisksAndOpportunities, EffectivenessPrediction,
)
from .roles import RoleMapping, role_mapping, ROLE_MAPPING_VERSION
