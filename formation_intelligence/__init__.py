"""
Formation Intelligence

Formation analysis, player chemistry, slot auto-assignment and tactical
pattern detection for football squads.
"""
from .config import Settings, settings
from .exceptions import (
    FormationIntelligenceError, PredictorInputError, TrainingDataError,
    UnknownStrategyError
)
from .services import FootballIntelligenceService, football_intelligence

__version__ = "0.1.0"
