"""
Effectiveness Predictor

Combines formation analysis and tactical patterns into a single
confidence-scored effectiveness prediction, optionally relative to an
opposing formation.
"""
import logging
from typing import List, Optional

from ..config import Settings, settings as default_settings
from ..models.schemas import (
    EffectivenessPrediction, Formation, FormationAnalysis, Player,
    RisksAndOpportunities, TacticalAnalysis
)
from ..utils.geometry import clamp01, mean
from .formation_analyzer import FormationAnalyzer
from .tactical_patterns import TacticalPatternEngine

logger = logging.getLogger(__name__)


class EffectivenessPredictor:
    """Predicts formation effectiveness, optionally against opposition."""

    def __init__(
        self,
        analyzer: Optional[FormationAnalyzer] = None,
        pattern_engine: Optional[TacticalPatternEngine] = None,
        config: Optional[Settings] = None
    ):
        config = config or default_settings
        self.analyzer = analyzer or FormationAnalyzer(config=config)
        self.pattern_engine = pattern_engine or TacticalPatternEngine(config)

        # Thresholds
        self.key_factor_threshold = config.KEY_FACTOR_THRESHOLD
        self.key_pattern_strength = config.KEY_PATTERN_STRENGTH
        self.opposition_weight = config.OPPOSITION_WEIGHT
        self.strong_attack = config.MATCHUP_STRONG_ATTACK
        self.weak_defence = config.MATCHUP_WEAK_DEFENCE
        self.strong_defence = config.MATCHUP_STRONG_DEFENCE
        self.attack_bonus = config.ATTACK_MATCHUP_BONUS
        self.defence_bonus = config.DEFENCE_MATCHUP_BONUS

    def predict(
        self,
        formation: Formation,
        players: List[Player],
        opposition_formation: Optional[Formation] = None,
        opposition_players: Optional[List[Player]] = None
    ) -> EffectivenessPrediction:
        """
        Predict formation effectiveness.

        The opposition only affects the score when both its formation and
        its players are supplied.
        """
        analysis = self.analyzer.analyze(formation, players)
        tactical = self.pattern_engine.analyze(formation, players)

        effectiveness_score = analysis.overall_rating
        if opposition_formation is not None and opposition_players is not None:
            opposition = self.analyzer.analyze(opposition_formation, opposition_players)
            effectiveness_score = self._matchup_effectiveness(analysis, opposition)
            logger.debug(
                f"Matchup {formation.id} vs {opposition_formation.id}: "
                f"{analysis.overall_rating:.3f} vs {opposition.overall_rating:.3f}"
            )

        return EffectivenessPrediction(
            effectiveness_score=clamp01(effectiveness_score),
            confidence=self._prediction_confidence(analysis, tactical),
            key_factors=self._key_factors(analysis, tactical),
            risks_and_opportunities=RisksAndOpportunities(
                risks=[v.description for v in tactical.vulnerabilities],
                opportunities=[o.description for o in tactical.opportunities]
            )
        )

    def _matchup_effectiveness(
        self,
        ours: FormationAnalysis,
        theirs: FormationAnalysis
    ) -> float:
        style_benefit = self._style_matchup_benefit(ours, theirs)
        return clamp01(
            ours.overall_rating - theirs.overall_rating * self.opposition_weight + style_benefit
        )

    def _style_matchup_benefit(
        self,
        ours: FormationAnalysis,
        theirs: FormationAnalysis
    ) -> float:
        # Our attack vs their weak defence
        if ours.attacking_strength > self.strong_attack and theirs.defensive_strength < self.weak_defence:
            return self.attack_bonus

        # Our defence holds against a strong attack
        if ours.defensive_strength > self.strong_defence and theirs.attacking_strength > self.strong_attack:
            return self.defence_bonus

        return 0.0

    def _prediction_confidence(
        self,
        analysis: FormationAnalysis,
        tactical: TacticalAnalysis
    ) -> float:
        pattern_clarity = mean([p.strength for p in tactical.patterns])
        return (analysis.balance_score + analysis.overall_chemistry + pattern_clarity) / 3

    def _key_factors(
        self,
        analysis: FormationAnalysis,
        tactical: TacticalAnalysis
    ) -> List[str]:
        factors = []

        if analysis.overall_chemistry > self.key_factor_threshold:
            factors.append("Excellent team chemistry provides strong foundation")
        if analysis.defensive_strength > self.key_factor_threshold:
            factors.append("Solid defensive structure limits opposition chances")
        if analysis.attacking_strength > self.key_factor_threshold:
            factors.append("Strong attacking potential creates scoring opportunities")

        for pattern in tactical.patterns:
            if pattern.strength > self.key_pattern_strength:
                factors.append(f"{pattern.description} provides tactical advantage")

        return factors
