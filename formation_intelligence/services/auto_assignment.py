"""
Auto-Assignment Engine

Binds players to formation slots using a weighted fit score:
    score = 0.4 * role compatibility + 0.4 * attribute fit + 0.2 * position fit

Two strategies share the same scorer:
- "fast": greedy, slots filled GK -> DF -> MF -> FW, best unused player per
  slot, ties broken by input order. Not globally optimal.
- "optimal": maximum total score via the Hungarian algorithm
  (scipy.optimize.linear_sum_assignment).

The same scorer drives swap suggestions and the per-slot report of a
formation as it is currently bound.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import numpy as np
from scipy.optimize import linear_sum_assignment

from ..config import Settings, settings as default_settings
from ..exceptions import UnknownStrategyError
from ..models.schemas import (
    Formation, FormationSlot, Player, PlayerAttributes, PositionRole,
    OptimizedAssignment, Severity, SlotAssignment, SlotFitness, SlotIssue, SlotReport,
    SlotScore, SwapAction, SwapRecommendation, SwapSuggestion, ROLE_PRIORITY
)
from ..utils.geometry import calculate_distance, clamp01, mean
from .formation_analyzer import FormationAnalyzer

logger = logging.getLogger(__name__)

ROLE_COMPAT_WEIGHT = 0.4
ATTRIBUTE_FIT_WEIGHT = 0.4
POSITION_FIT_WEIGHT = 0.2

# Per-role attribute weights, each summing to 1
ROLE_ATTRIBUTE_WEIGHTS: Dict[PositionRole, Dict[str, float]] = {
    PositionRole.GK: {
        "positioning": 0.4, "speed": 0.2, "tackling": 0.1,
        "passing": 0.1, "shooting": 0.1, "dribbling": 0.1
    },
    PositionRole.DF: {
        "tackling": 0.4, "positioning": 0.3, "speed": 0.2, "passing": 0.1
    },
    PositionRole.MF: {
        "passing": 0.3, "tackling": 0.2, "positioning": 0.2,
        "speed": 0.2, "shooting": 0.1
    },
    PositionRole.FW: {
        "speed": 0.3, "shooting": 0.3, "positioning": 0.2,
        "passing": 0.1, "dribbling": 0.1
    },
}

ISSUE_PRIORITY_ORDER: Dict[Severity, int] = {
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
}


class SlotScorer:
    """Scores how well a player fits a formation slot, in [0, 1]."""

    def __init__(self, config: Optional[Settings] = None):
        config = config or default_settings

        self.matched_role = config.MATCHED_ROLE_COMPAT
        self.mismatched_role = config.MISMATCHED_ROLE_COMPAT
        self.fit_distance = config.POSITION_FIT_DISTANCE

    def score(self, player: Player, slot: FormationSlot) -> float:
        return clamp01(
            self.role_compatibility(player, slot.role) * ROLE_COMPAT_WEIGHT +
            self.attribute_fit(player.attributes, slot.role) * ATTRIBUTE_FIT_WEIGHT +
            self.position_fit(player, slot) * POSITION_FIT_WEIGHT
        )

    def role_compatibility(self, player: Player, slot_role: PositionRole) -> float:
        return self.matched_role if player.role == slot_role else self.mismatched_role

    def attribute_fit(self, attributes: PlayerAttributes, role: PositionRole) -> float:
        weights = ROLE_ATTRIBUTE_WEIGHTS[role]
        return sum(
            (getattr(attributes, name) / 100) * weight
            for name, weight in weights.items()
        )

    def position_fit(self, player: Player, slot: FormationSlot) -> float:
        distance = calculate_distance(player.position, slot.default_position)
        return max(0.0, 1 - distance / self.fit_distance)


def sort_slots(slots: List[FormationSlot]) -> List[FormationSlot]:
    """Stable sort by role priority GK -> DF -> MF -> FW."""
    return sorted(slots, key=lambda slot: ROLE_PRIORITY[slot.role])


class AssignmentStrategy(ABC):
    """Strategy interface for binding players to slots."""

    name: str = ""

    def __init__(self, scorer: SlotScorer, config: Optional[Settings] = None):
        config = config or default_settings
        self.scorer = scorer
        self.decisive_confidence = config.DECISIVE_CONFIDENCE
        self.contested_confidence = config.CONTESTED_CONFIDENCE
        self.uncontested_confidence = config.UNCONTESTED_CONFIDENCE

    @abstractmethod
    def assign(self, formation: Formation, players: List[Player]) -> List[SlotAssignment]:
        """Return assignments in GK -> DF -> MF -> FW slot order."""

    def confidence_level(
        self,
        slot: FormationSlot,
        chosen: Player,
        chosen_score: float,
        players: List[Player]
    ) -> float:
        """
        0.9 if the chosen score strictly beats every other player's score
        for this slot (already used players included), else 0.6.
        """
        other_scores = [
            self.scorer.score(p, slot) for p in players if p.id != chosen.id
        ]
        if not other_scores:
            return self.uncontested_confidence

        if chosen_score > max(other_scores):
            return self.decisive_confidence
        return self.contested_confidence

    def _build(
        self,
        slot: FormationSlot,
        player: Player,
        score: float,
        players: List[Player]
    ) -> SlotAssignment:
        return SlotAssignment(
            slot_id=slot.id,
            player_id=player.id,
            compatibility_score=score,
            confidence_level=self.confidence_level(slot, player, score, players)
        )


class GreedyAssignmentStrategy(AssignmentStrategy):
    """
    Fast first-match heuristic.

    Slots are filled most-constrained first; each slot takes the
    highest-scoring unused player, the first listed player winning ties.
    """

    name = "fast"

    def assign(self, formation: Formation, players: List[Player]) -> List[SlotAssignment]:
        assignments = []
        used_players = set()

        for slot in sort_slots(formation.slots):
            best_player = None
            best_score = -1.0

            for player in players:
                if player.id in used_players:
                    continue
                score = self.scorer.score(player, slot)
                if best_player is None or score > best_score:
                    best_player = player
                    best_score = score

            if best_player is None:
                continue  # Candidates exhausted, slot stays unassigned

            assignments.append(self._build(slot, best_player, best_score, players))
            used_players.add(best_player.id)

        return assignments


class OptimalAssignmentStrategy(AssignmentStrategy):
    """Maximizes the summed slot score with the Hungarian algorithm."""

    name = "optimal"

    def assign(self, formation: Formation, players: List[Player]) -> List[SlotAssignment]:
        slots = sort_slots(formation.slots)

        # Repeated player ids are only eligible once
        unique_players = []
        seen = set()
        for player in players:
            if player.id not in seen:
                unique_players.append(player)
                seen.add(player.id)

        if not slots or not unique_players:
            return []

        scores = np.array([
            [self.scorer.score(player, slot) for player in unique_players]
            for slot in slots
        ])

        row_indices, col_indices = linear_sum_assignment(scores, maximize=True)

        assignments = []
        for i, j in zip(row_indices, col_indices):
            assignments.append(
                self._build(slots[i], unique_players[j], float(scores[i, j]), players)
            )

        return assignments


def apply_assignments(formation: Formation, assignments: List[SlotAssignment]) -> Formation:
    """New formation with every slot cleared, then bound per ``assignments``."""
    bound = {a.slot_id: a.player_id for a in assignments}
    slots = [
        slot.model_copy(update={"player_id": bound.get(slot.id)})
        for slot in formation.slots
    ]
    return formation.model_copy(update={"slots": slots})


def sync_player_positions(players: List[Player], formation: Formation) -> List[Player]:
    """Copies of players moved to the default position of their bound slot."""
    slot_by_player = {
        slot.player_id: slot for slot in formation.slots if slot.player_id
    }

    updated = []
    for player in players:
        slot = slot_by_player.get(player.id)
        if slot is not None:
            player = player.model_copy(
                update={"position": slot.default_position.model_copy()}
            )
        updated.append(player)

    return updated


class AutoAssignmentEngine:
    """
    Smart auto-assignment engine.

    Strategies are registered by name; "fast" is the default.
    """

    DEFAULT_STRATEGY = GreedyAssignmentStrategy.name

    def __init__(
        self,
        analyzer: Optional[FormationAnalyzer] = None,
        config: Optional[Settings] = None
    ):
        config = config or default_settings
        self.analyzer = analyzer or FormationAnalyzer(config=config)
        self.scorer = SlotScorer(config)

        self.strategies: Dict[str, AssignmentStrategy] = {
            GreedyAssignmentStrategy.name: GreedyAssignmentStrategy(self.scorer, config),
            OptimalAssignmentStrategy.name: OptimalAssignmentStrategy(self.scorer, config),
        }

        # Thresholds
        self.excellent_fit = config.EXCELLENT_FIT
        self.good_fit = config.GOOD_FIT
        self.swap_min_score = config.SWAP_MIN_SCORE
        self.reassign_min_score = config.REASSIGN_MIN_SCORE
        self.slot_excellent = config.SLOT_EXCELLENT
        self.slot_good = config.SLOT_GOOD
        self.slot_average = config.SLOT_AVERAGE
        self.slot_unsuited = config.SLOT_UNSUITED
        self.slot_high_priority = config.SLOT_HIGH_PRIORITY
        self.slot_medium_priority = config.SLOT_MEDIUM_PRIORITY

    def get_strategy(self, name: Optional[str] = None) -> AssignmentStrategy:
        name = name or self.DEFAULT_STRATEGY
        if name not in self.strategies:
            raise UnknownStrategyError(name, self.strategies.keys())
        return self.strategies[name]

    def optimize(
        self,
        formation: Formation,
        players: List[Player],
        strategy: Optional[str] = None
    ) -> OptimizedAssignment:
        """
        Automatically assign players to formation slots.

        Args:
            formation: Formation whose slots should be filled (bindings ignored)
            players: Available players
            strategy: "fast" (default) or "optimal"

        Returns:
            OptimizedAssignment with the analysis of the produced line-up
        """
        chosen = self.get_strategy(strategy)
        assignments = chosen.assign(formation, players)

        assigned_formation = apply_assignments(formation, assignments)
        analysis = self.analyzer.analyze(assigned_formation, players)

        improvement_score = mean([a.compatibility_score for a in assignments])

        logger.debug(
            f"{chosen.name} assignment for {formation.id}: "
            f"{len(assignments)}/{len(formation.slots)} slots filled, "
            f"improvement {improvement_score:.3f}"
        )

        return OptimizedAssignment(
            assignments=assignments,
            analysis=analysis,
            improvement_score=improvement_score,
            reasoning=self._generate_reasoning(assignments, players),
            strategy=chosen.name
        )

    def _generate_reasoning(
        self,
        assignments: List[SlotAssignment],
        players: List[Player]
    ) -> List[str]:
        by_id = {p.id: p for p in players}
        reasoning = []

        for assignment in assignments:
            name = by_id[assignment.player_id].name
            if assignment.compatibility_score > self.excellent_fit:
                reasoning.append(f"{name} is an excellent fit for this position")
            elif assignment.compatibility_score > self.good_fit:
                reasoning.append(f"{name} is a good fit with minor adjustments needed")
            else:
                reasoning.append(f"{name} may require tactical adaptation for this role")

        return reasoning

    def suggest_swap(
        self,
        source_player_id: str,
        target_slot_id: str,
        target_player_id: str,
        formation: Formation,
        players: List[Player]
    ) -> SwapSuggestion:
        """
        Suggest how to place ``source`` into a slot held by ``target``.

        Options, best score first:
        - swap: both players exchange slots (source must already hold a slot)
        - move_to_bench: target leaves, source takes the slot
        - reassign: target moves to the best empty slot
        """
        by_id = {p.id: p for p in players}
        source = by_id.get(source_player_id)
        target = by_id.get(target_player_id)
        target_slot = next((s for s in formation.slots if s.id == target_slot_id), None)

        if source is None or target is None or target_slot is None:
            return SwapSuggestion(success=False)

        source_slot = next(
            (s for s in formation.slots if s.player_id == source_player_id), None
        )
        recommendations = []

        # Option 1: direct swap
        if source_slot is not None:
            source_to_target = self.scorer.score(source, target_slot)
            target_to_source = self.scorer.score(target, source_slot)
            combined = source_to_target + target_to_source

            if source_to_target > self.swap_min_score and target_to_source > self.swap_min_score:
                recommendations.append(SwapRecommendation(
                    action=SwapAction.SWAP,
                    description=f"Swap {source.name} and {target.name} (score: {combined:.2f})",
                    target_slot_id=source_slot.id,
                    score=combined
                ))

        # Option 2: bench the target
        source_score = self.scorer.score(source, target_slot)
        recommendations.append(SwapRecommendation(
            action=SwapAction.MOVE_TO_BENCH,
            description=(
                f"Move {target.name} to bench and place {source.name} "
                f"in position (score: {source_score:.2f})"
            ),
            score=source_score
        ))

        # Option 3: move the target to the best empty slot
        empty_slots = [
            s for s in formation.slots if not s.player_id and s.id != target_slot_id
        ]
        if empty_slots:
            best_slot = empty_slots[0]
            best_score = self.scorer.score(target, best_slot)
            for slot in empty_slots[1:]:
                score = self.scorer.score(target, slot)
                if score > best_score:
                    best_slot, best_score = slot, score

            if best_score > self.reassign_min_score:
                recommendations.append(SwapRecommendation(
                    action=SwapAction.REASSIGN,
                    description=(
                        f"Move {target.name} to {best_slot.role.value} position "
                        f"(score: {best_score:.2f})"
                    ),
                    target_slot_id=best_slot.id,
                    score=best_score
                ))

        recommendations.sort(key=lambda r: -r.score)

        return SwapSuggestion(success=True, recommendations=recommendations)

    # ============== Slot report ==============

    def slot_report(self, formation: Formation, players: List[Player]) -> SlotReport:
        """
        Score every bound slot of a formation as it stands.

        Args:
            formation: Formation snapshot with slot bindings
            players: Player snapshots; bindings to unknown ids count as empty

        Returns:
            SlotReport with per-slot fitness, issues sorted high -> low
            priority, and per-line average scores
        """
        by_id = {p.id: p for p in players}
        slot_scores = []
        issues = []
        line_totals = {role: 0.0 for role in PositionRole}
        line_sizes = {role: 0 for role in PositionRole}

        for slot in formation.slots:
            line_sizes[slot.role] += 1
            player = by_id.get(slot.player_id) if slot.player_id else None

            if player is None:
                issues.append(SlotIssue(
                    slot_id=slot.id,
                    issue=f"No player assigned to {slot.role.value} position",
                    suggestion="Assign a suitable player to this position",
                    priority=Severity.HIGH
                ))
                continue

            score = self.scorer.score(player, slot)
            line_totals[slot.role] += score
            slot_scores.append(SlotScore(
                slot_id=slot.id,
                role=slot.role,
                player_id=player.id,
                player_name=player.name,
                score=score,
                fitness=self._slot_fitness(score)
            ))

            if score < self.slot_unsuited:
                issues.append(SlotIssue(
                    slot_id=slot.id,
                    issue=f"{player.name} is not well-suited for {slot.role.value} position",
                    suggestion=(
                        f"Consider moving to a position that matches their {player.role_id} role"
                    ),
                    priority=self._issue_priority(score),
                    score=score
                ))

        # Stable: equal priorities keep slot order
        issues.sort(key=lambda i: -ISSUE_PRIORITY_ORDER[i.priority])

        def line_average(role: PositionRole) -> float:
            return clamp01(line_totals[role] / max(1, line_sizes[role]))

        total_score = sum(s.score for s in slot_scores)

        return SlotReport(
            total_score=total_score,
            average_score=clamp01(mean([s.score for s in slot_scores])),
            slot_scores=slot_scores,
            recommendations=issues,
            defensive_strength=line_average(PositionRole.DF),
            midfield_control=line_average(PositionRole.MF),
            attacking_threat=line_average(PositionRole.FW)
        )

    def _slot_fitness(self, score: float) -> SlotFitness:
        if score >= self.slot_excellent:
            return SlotFitness.EXCELLENT
        if score >= self.slot_good:
            return SlotFitness.GOOD
        if score >= self.slot_average:
            return SlotFitness.AVERAGE
        return SlotFitness.POOR

    def _issue_priority(self, score: float) -> Severity:
        if score < self.slot_high_priority:
            return Severity.HIGH
        if score < self.slot_medium_priority:
            return Severity.MEDIUM
        return Severity.LOW
