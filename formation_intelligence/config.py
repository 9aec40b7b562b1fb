"""
Configuration settings for the Formation Intelligence engine.
"""
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Engine settings, overridable by keyword or FORMATION_* environment variables."""

    # Pitch geometry (all positions are normalized 0-100)
    POSITION_FIT_DISTANCE: float = 100.0  # Distance at which position fit reaches 0

    # Chemistry
    CHEMISTRY_SPEED_DELTA: float = 20.0      # Max speed gap for "balanced" pair
    CHEMISTRY_BALANCED_SPEED: float = 0.8
    CHEMISTRY_UNBALANCED_SPEED: float = 0.5
    CHEMISTRY_AGE_SPAN: float = 20.0         # Age gap at which compatibility reaches 0
    CHEMISTRY_SAME_NATIONALITY: float = 1.0
    CHEMISTRY_MIXED_NATIONALITY: float = 0.7
    CHEMISTRY_UNKNOWN_PAIR: float = 0.5

    # Formation analysis thresholds (team-average attributes, 0-100)
    WEAK_TACKLING: float = 60.0
    STRONG_TACKLING: float = 80.0
    WEAK_PASSING: float = 65.0
    STRONG_PASSING: float = 85.0
    WEAK_SHOOTING: float = 55.0
    STRONG_SHOOTING: float = 75.0
    WEAK_SPEED: float = 70.0
    STRONG_SPEED: float = 85.0
    WEAK_STAMINA: float = 75.0
    STRONG_STAMINA: float = 90.0
    MIN_MIDFIELDERS: int = 3
    MIN_DEFENDERS: int = 3
    STRONG_CHEMISTRY: float = 0.8

    # Recommendation thresholds
    RECOMMEND_TACKLING: float = 70.0
    RECOMMEND_PASSING: float = 70.0
    RECOMMEND_STAMINA: float = 80.0

    # Auto-assignment
    MATCHED_ROLE_COMPAT: float = 1.0
    MISMATCHED_ROLE_COMPAT: float = 0.3
    DECISIVE_CONFIDENCE: float = 0.9     # Chosen player strictly beat every alternative
    CONTESTED_CONFIDENCE: float = 0.6
    UNCONTESTED_CONFIDENCE: float = 1.0  # No alternative candidate existed
    EXCELLENT_FIT: float = 0.8
    GOOD_FIT: float = 0.6
    SWAP_MIN_SCORE: float = 0.5
    REASSIGN_MIN_SCORE: float = 0.4

    # Slot report (slot scores in [0, 1])
    SLOT_EXCELLENT: float = 0.9
    SLOT_GOOD: float = 0.7
    SLOT_AVERAGE: float = 0.5
    SLOT_UNSUITED: float = 0.6        # Below this a slot gets a "not well-suited" issue
    SLOT_HIGH_PRIORITY: float = 0.4
    SLOT_MEDIUM_PRIORITY: float = 0.5

    # Tactical patterns
    SPACING_GAP_THRESHOLD: float = 30.0  # Avg pairwise slot distance flagged as gaps
    VULNERABLE_SPEED: float = 60.0
    VULNERABLE_TACKLING: float = 65.0
    OPPORTUNITY_SPEED: float = 80.0
    OPPORTUNITY_PASSING: float = 85.0
    CROWDED_DEFENCE: int = 4
    CROWDED_MIDFIELD: int = 4
    CROWDED_ATTACK: int = 2

    # Effectiveness prediction
    KEY_FACTOR_THRESHOLD: float = 0.8
    KEY_PATTERN_STRENGTH: float = 0.7
    OPPOSITION_WEIGHT: float = 0.5
    MATCHUP_STRONG_ATTACK: float = 0.8
    MATCHUP_WEAK_DEFENCE: float = 0.6
    MATCHUP_STRONG_DEFENCE: float = 0.8
    ATTACK_MATCHUP_BONUS: float = 0.2
    DEFENCE_MATCHUP_BONUS: float = 0.1

    # Lightweight predictor
    PREDICTOR_INPUT_SIZE: int = 8
    PREDICTOR_HIDDEN_SIZE: int = 10
    PREDICTOR_OUTPUT_SIZE: int = 3
    PREDICTOR_LEARNING_RATE: float = 0.5
    PREDICTOR_EPOCHS: int = 100
    PREDICTOR_SEED: int = 42
    PREDICTOR_TRAINING_FILE: Optional[Path] = None

    # Only FORMATION_-prefixed environment variables are read; no .env file,
    # and unrelated host variables are ignored
    model_config = SettingsConfigDict(
        env_prefix="FORMATION_",
        env_file=None,
        extra="ignore"
    )


settings = Settings()
