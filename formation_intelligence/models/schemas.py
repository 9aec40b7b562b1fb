"""
Pydantic models for formation, player and analysis records.
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional, Dict, Any
from enum import Enum


# ============== Enums ==============

class PositionRole(str, Enum):
    """Coarse role category of a player or formation slot."""
    GK = "GK"
    DF = "DF"
    MF = "MF"
    FW = "FW"


# Slot ordering used by assignment (most constrained first)
ROLE_PRIORITY: Dict[PositionRole, int] = {
    PositionRole.GK: 0,
    PositionRole.DF: 1,
    PositionRole.MF: 2,
    PositionRole.FW: 3,
}


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SwapAction(str, Enum):
    SWAP = "swap"
    MOVE_TO_BENCH = "move_to_bench"
    REASSIGN = "reassign"


class SlotFitness(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    POOR = "poor"


# ============== Base Models ==============

class Position(BaseModel):
    """2D position on the pitch, normalized to a 0-100 scale."""
    x: float = Field(..., description="X coordinate (0-100)")
    y: float = Field(..., description="Y coordinate (0-100)")


class PlayerAttributes(BaseModel):
    """Numeric player attributes, each 0-100."""
    speed: float = Field(ge=0, le=100)
    passing: float = Field(ge=0, le=100)
    tackling: float = Field(ge=0, le=100)
    shooting: float = Field(ge=0, le=100)
    dribbling: float = Field(ge=0, le=100)
    positioning: float = Field(ge=0, le=100)
    stamina: float = Field(ge=0, le=100)


# ============== Player / Formation Models ==============

class Player(BaseModel):
    """
    Immutable player snapshot supplied by the player store.

    ``role`` is the validated coarse category. When the store does not
    provide it, it is derived once from ``role_id`` using the versioned
    role mapping.
    """
    id: str
    name: Optional[str] = Field(None, description="Display name, defaults to id")
    role_id: str = Field(..., description="Free-form role ID, e.g. 'CB' or 'dlp'")
    role: PositionRole
    age: int = Field(ge=0)
    nationality: str
    position: Position
    attributes: PlayerAttributes

    @model_validator(mode="before")
    @classmethod
    def _derive_role(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if data.get("role") is None and data.get("role_id") is not None:
            from .roles import role_mapping
            data["role"] = role_mapping.resolve(data["role_id"])
        if data.get("name") is None and data.get("id") is not None:
            data["name"] = data["id"]
        return data


class FormationSlot(BaseModel):
    """A position in a formation, optionally bound to a player."""
    id: str
    role: PositionRole
    default_position: Position
    player_id: Optional[str] = None


class Formation(BaseModel):
    """A named, ordered set of slots."""
    id: str
    name: str
    slots: List[FormationSlot] = Field(default_factory=list)

    @field_validator("slots")
    @classmethod
    def _unique_slot_ids(cls, slots: List[FormationSlot]) -> List[FormationSlot]:
        seen = set()
        for slot in slots:
            if slot.id in seen:
                raise ValueError(f"Duplicate slot id '{slot.id}'")
            seen.add(slot.id)
        return slots


# ============== Chemistry Models ==============

class CompatibilityScore(BaseModel):
    """Symmetric compatibility between two players."""
    player_a: str
    player_b: str
    score: float = Field(ge=0, le=1)


# ============== Analysis Models ==============

class FormationAnalysis(BaseModel):
    """Structural quality of a formation with its assigned players."""
    defensive_strength: float = Field(ge=0, le=1)
    attacking_strength: float = Field(ge=0, le=1)
    midfield_control: float = Field(ge=0, le=1)
    overall_chemistry: float = Field(ge=0, le=1)
    balance_score: float = Field(ge=0, le=1)
    overall_rating: float = Field(ge=0, le=1)
    weaknesses: List[str] = Field(default_factory=list)
    strengths: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    player_compatibility_matrix: Dict[str, Dict[str, float]] = Field(default_factory=dict)


class SlotAssignment(BaseModel):
    """A player bound to a slot by the auto-assignment engine."""
    slot_id: str
    player_id: str
    compatibility_score: float = Field(ge=0, le=1)
    confidence_level: float = Field(ge=0, le=1)


class OptimizedAssignment(BaseModel):
    """Result of an auto-assignment run."""
    assignments: List[SlotAssignment]
    analysis: FormationAnalysis
    improvement_score: float
    reasoning: List[str]
    strategy: str


class SwapRecommendation(BaseModel):
    action: SwapAction
    description: str
    target_slot_id: Optional[str] = None
    score: float = 0.0


class SwapSuggestion(BaseModel):
    success: bool
    recommendations: List[SwapRecommendation] = Field(default_factory=list)


class SlotScore(BaseModel):
    """Fit of the player currently bound to a slot."""
    slot_id: str
    role: PositionRole
    player_id: str
    player_name: str
    score: float = Field(ge=0, le=1)
    fitness: SlotFitness


class SlotIssue(BaseModel):
    slot_id: str
    issue: str
    suggestion: str
    priority: Severity
    score: Optional[float] = None


class SlotReport(BaseModel):
    """Per-slot breakdown of a formation as currently bound."""
    total_score: float
    average_score: float = Field(ge=0, le=1)
    slot_scores: List[SlotScore]
    recommendations: List[SlotIssue]
    defensive_strength: float = Field(ge=0, le=1)
    midfield_control: float = Field(ge=0, le=1)
    attacking_threat: float = Field(ge=0, le=1)


# ============== Tactical Models ==============

class TacticalPattern(BaseModel):
    type: str
    description: str
    strength: float
    implications: List[str] = Field(default_factory=list)


class TacticalVulnerability(BaseModel):
    type: str
    severity: Severity
    description: str
    exploit_method: str


class TacticalOpportunity(BaseModel):
    type: str
    potential: Severity
    description: str
    implementation: str


class CounterStrategy(BaseModel):
    against: str
    strategy: str
    confidence: float = Field(ge=0, le=1)


class TacticalAnalysis(BaseModel):
    """Detected patterns, vulnerabilities and opportunities."""
    patterns: List[TacticalPattern]
    vulnerabilities: List[TacticalVulnerability]
    opportunities: List[TacticalOpportunity]
    counter_strategies: List[CounterStrategy]
    recommendations: List[str]


# ============== Prediction Models ==============

class RisksAndOpportunities(BaseModel):
    risks: List[str] = Field(default_factory=list)
    opportunities: List[str] = Field(default_factory=list)


class EffectivenessPrediction(BaseModel):
    """Confidence-scored effectiveness of a formation, optionally vs. opposition."""
    effectiveness_score: float = Field(ge=0, le=1)
    confidence: float
    key_factors: List[str]
    risks_and_opportunities: RisksAndOpportunities
