import pytest

from formation_intelligence.config import Settings
from formation_intelligence.exceptions import FormationIntelligenceError, UnknownStrategyError
from formation_intelligence.models.schemas import (
    Formation, Position, Severity, SlotAssignment, SlotFitness, SwapAction
)
from formation_intelligence.services.auto_assignment import (
    AutoAssignmentEngine, SlotScorer, apply_assignments, sync_player_positions
)
from conftest import make_player, make_slot


@pytest.fixture
def engine(config):
    return AutoAssignmentEngine(config=config)


def single_slot(role="DF", x=50, y=30):
    return Formation(id="one", name="one", slots=[make_slot("s", role, x, y)])


def test_better_fit_player_wins_decisively(engine):
    x = make_player("x", role_id="CB", x=50, y=30,
                    tackling=90, positioning=85, speed=80, passing=70)
    y = make_player("y", role_id="ST", x=50, y=60)

    result = engine.optimize(single_slot(), [y, x])

    assert len(result.assignments) == 1
    assignment = result.assignments[0]
    assert assignment.player_id == "x"
    # 0.4 * 1.0 + 0.4 * 0.845 + 0.2 * 1.0
    assert assignment.compatibility_score == pytest.approx(0.938)
    assert assignment.confidence_level == pytest.approx(0.9)
    assert result.reasoning == ["x is an excellent fit for this position"]
    assert result.strategy == "fast"


def test_matching_role_beats_identical_attributes(engine):
    slot = Formation(id="one", name="one", slots=[make_slot("s", "DF", 20, 50)])
    x = make_player("X", role_id="DF", tackling=85, x=22, y=48)
    y = make_player("Y", role_id="MF", tackling=85, x=22, y=48)

    result = engine.optimize(slot, [y, x])

    assert [a.player_id for a in result.assignments] == ["X"]
    assert result.assignments[0].confidence_level == pytest.approx(0.9)


def test_slot_scorer_components():
    scorer = SlotScorer()
    slot = make_slot("s", "DF", 50, 30)
    y = make_player("y", role_id="ST", x=50, y=60)

    assert scorer.role_compatibility(y, slot.role) == pytest.approx(0.3)
    assert scorer.attribute_fit(y.attributes, slot.role) == pytest.approx(0.7)
    assert scorer.position_fit(y, slot) == pytest.approx(0.7)
    assert scorer.score(y, slot) == pytest.approx(0.54)


def test_ties_go_to_first_listed_player(engine):
    first = make_player("first", role_id="CB", x=50, y=30)
    second = make_player("second", role_id="CB", x=50, y=30)

    result = engine.optimize(single_slot(), [first, second])

    assert result.assignments[0].player_id == "first"
    assert result.assignments[0].confidence_level == pytest.approx(0.6)


def test_single_candidate_is_uncontested(engine):
    result = engine.optimize(single_slot(), [make_player("solo", role_id="CB")])

    assert result.assignments[0].confidence_level == pytest.approx(1.0)


def test_slots_filled_goalkeeper_first(engine):
    formation = Formation(id="f", name="f", slots=[
        make_slot("fw", "FW", 50, 80),
        make_slot("mf", "MF", 50, 50),
        make_slot("df", "DF", 50, 25),
        make_slot("gk", "GK", 50, 5),
    ])
    players = [
        make_player("st", role_id="ST", x=50, y=80),
        make_player("cm", role_id="CM", x=50, y=50),
        make_player("cb", role_id="CB", x=50, y=25),
        make_player("gk", role_id="GK", x=50, y=5),
    ]

    result = engine.optimize(formation, players)

    assert [a.slot_id for a in result.assignments] == ["gk", "df", "mf", "fw"]
    assert {a.slot_id: a.player_id for a in result.assignments} == {
        "gk": "gk", "df": "cb", "mf": "cm", "fw": "st"
    }


def test_fewer_players_than_slots(engine, empty_442):
    players = [make_player("a", role_id="CB"), make_player("b", role_id="ST")]

    result = engine.optimize(empty_442, players)

    assert len(result.assignments) == 2
    assert len({a.slot_id for a in result.assignments}) == 2
    assert {a.player_id for a in result.assignments} == {"a", "b"}


def test_no_players(engine, empty_442):
    result = engine.optimize(empty_442, [])

    assert result.assignments == []
    assert result.reasoning == []
    assert result.improvement_score == 0.0
    assert result.analysis.overall_chemistry == 1.0


def test_squad_on_its_slots_reproduces_the_layout(engine, empty_442, squad_442):
    result = engine.optimize(empty_442, squad_442)

    assert {a.slot_id: a.player_id for a in result.assignments} == {
        slot.id: f"p{i}" for i, slot in enumerate(empty_442.slots)
    }
    assert all(a.confidence_level == pytest.approx(0.9) for a in result.assignments)
    assert result.analysis.balance_score == pytest.approx(1.0)
    assert result.improvement_score == pytest.approx(
        sum(a.compatibility_score for a in result.assignments) / 11
    )
    assert len(result.reasoning) == 11


def test_assignment_ignores_existing_bindings(engine, formation_442, squad_442):
    result = engine.optimize(formation_442, squad_442[:3])

    assert len(result.assignments) == 3
    assert len({a.player_id for a in result.assignments}) == 3


def test_reasoning_bands(engine):
    good = make_player("good", role_id="CB", x=60, y=80)
    poor = make_player("poor", role_id="ST", x=50, y=60)

    good_result = engine.optimize(single_slot(x=0, y=0), [good])
    poor_result = engine.optimize(single_slot(), [poor])

    # 0.4 + 0.28 + 0.0 with the player 100 units away
    assert good_result.assignments[0].compatibility_score == pytest.approx(0.68)
    assert good_result.reasoning == ["good is a good fit with minor adjustments needed"]
    assert poor_result.reasoning == ["poor may require tactical adaptation for this role"]


@pytest.fixture
def contested_pair():
    formation = Formation(id="pair", name="pair", slots=[
        make_slot("d", "DF", 50, 30),
        make_slot("m", "MF", 50, 50),
    ])
    players = [
        make_player("p1", role_id="CM", passing=100),
        make_player("p2", role_id="CM", passing=0),
    ]
    return formation, players


def test_greedy_is_not_globally_optimal(engine, contested_pair):
    formation, players = contested_pair

    greedy = engine.optimize(formation, players, strategy="fast")
    optimal = engine.optimize(formation, players, strategy="optimal")

    assert {a.slot_id: a.player_id for a in greedy.assignments} == {"d": "p1", "m": "p2"}
    assert {a.slot_id: a.player_id for a in optimal.assignments} == {"d": "p2", "m": "p1"}
    assert greedy.improvement_score == pytest.approx((0.572 + 0.796) / 2)
    assert optimal.improvement_score == pytest.approx((0.532 + 0.916) / 2)
    assert optimal.strategy == "optimal"


def test_optimal_strategy_on_full_squad(engine, empty_442, squad_442):
    greedy = engine.optimize(empty_442, squad_442, strategy="fast")
    optimal = engine.optimize(empty_442, squad_442, strategy="optimal")

    assert [a.slot_id for a in optimal.assignments][0] == "gk"
    assert len({a.player_id for a in optimal.assignments}) == 11
    assert optimal.improvement_score >= greedy.improvement_score - 1e-9


def test_optimal_strategy_counts_repeated_players_once(engine):
    player = make_player("dup", role_id="CB")

    result = engine.optimize(
        Formation(id="f", name="f", slots=[
            make_slot("a", "DF", 50, 50), make_slot("b", "DF", 50, 50)
        ]),
        [player, player],
        strategy="optimal"
    )

    assert [a.player_id for a in result.assignments] == ["dup"]


def test_unknown_strategy(engine, empty_442, squad_442):
    with pytest.raises(UnknownStrategyError) as exc_info:
        engine.optimize(empty_442, squad_442, strategy="genetic")

    assert isinstance(exc_info.value, FormationIntelligenceError)
    assert exc_info.value.available == ["fast", "optimal"]


def test_apply_assignments_clears_previous_bindings(formation_442):
    assignments = [
        SlotAssignment(slot_id="gk", player_id="p1", compatibility_score=0.5, confidence_level=0.6)
    ]

    updated = apply_assignments(formation_442, assignments)

    assert {s.id: s.player_id for s in updated.slots if s.player_id} == {"gk": "p1"}
    # Input snapshot is untouched
    assert formation_442.slots[0].player_id == "p0"


def test_sync_player_positions(formation_442, squad_442):
    moved = [p.model_copy(update={"position": Position(x=0, y=0)}) for p in squad_442]
    bench = make_player("bench", x=1, y=2)

    synced = sync_player_positions(moved + [bench], formation_442)

    assert (synced[0].position.x, synced[0].position.y) == (50, 5)
    assert (synced[10].position.x, synced[10].position.y) == (60, 80)
    assert (synced[-1].position.x, synced[-1].position.y) == (1, 2)
    assert moved[0].position.x == 0


# ============== Swap suggestions ==============

def test_swap_between_two_midfielders(engine, formation_442, squad_442):
    suggestion = engine.suggest_swap("p5", "lcm", "p6", formation_442, squad_442)

    assert suggestion.success
    assert [r.action for r in suggestion.recommendations] == [
        SwapAction.SWAP, SwapAction.MOVE_TO_BENCH
    ]
    swap, bench = suggestion.recommendations
    assert swap.target_slot_id == "lm"
    assert swap.score == pytest.approx(2 * bench.score)
    assert swap.description.startswith("Swap Player 5 and Player 6")
    assert bench.description.startswith("Move Player 6 to bench and place Player 5")


def test_reassign_to_empty_slot(engine, formation_442, squad_442):
    slots = [
        s.model_copy(update={"player_id": None}) if s.id == "rs" else s
        for s in formation_442.slots
    ]
    formation = formation_442.model_copy(update={"slots": slots})

    suggestion = engine.suggest_swap("p5", "lcm", "p6", formation, squad_442)

    reassign = [r for r in suggestion.recommendations if r.action == SwapAction.REASSIGN]
    assert len(reassign) == 1
    assert reassign[0].target_slot_id == "rs"
    assert reassign[0].score == pytest.approx(0.531, abs=1e-3)
    assert reassign[0].description == "Move Player 6 to FW position (score: 0.53)"

    scores = [r.score for r in suggestion.recommendations]
    assert scores == sorted(scores, reverse=True)


def test_bench_player_cannot_swap(engine, formation_442, squad_442):
    sub = make_player("sub", role_id="CM", x=38, y=50)

    suggestion = engine.suggest_swap("sub", "lcm", "p6", formation_442, squad_442 + [sub])

    assert [r.action for r in suggestion.recommendations] == [SwapAction.MOVE_TO_BENCH]


@pytest.mark.parametrize("source, slot, target", [
    ("ghost", "lcm", "p6"),
    ("p5", "nowhere", "p6"),
    ("p5", "lcm", "ghost"),
])
def test_swap_with_unknown_ids(engine, formation_442, squad_442, source, slot, target):
    suggestion = engine.suggest_swap(source, slot, target, formation_442, squad_442)

    assert not suggestion.success
    assert suggestion.recommendations == []


@pytest.mark.parametrize("strategy", ["fast", "optimal"])
def test_optimize_is_deterministic(engine, empty_442, squad_442, strategy):
    first = engine.optimize(empty_442, squad_442, strategy=strategy)
    second = engine.optimize(empty_442, squad_442, strategy=strategy)

    assert first.model_dump_json() == second.model_dump_json()


# ============== Slot report ==============

def test_slot_report_for_bound_442(engine, formation_442, squad_442):
    report = engine.slot_report(formation_442, squad_442)

    assert [s.slot_id for s in report.slot_scores] == [s.id for s in formation_442.slots]
    assert all(s.fitness == SlotFitness.GOOD for s in report.slot_scores)
    assert report.recommendations == []

    gk = report.slot_scores[0]
    assert (gk.player_id, gk.player_name) == ("p0", "Player 0")
    # 0.4 + 0.4 * 0.722 + 0.2
    assert gk.score == pytest.approx(0.8888)
    assert report.defensive_strength == pytest.approx(0.8864)
    assert report.midfield_control == pytest.approx(0.8864)
    assert report.attacking_threat == pytest.approx(0.8852)
    assert report.total_score == pytest.approx(0.8888 + 8 * 0.8864 + 2 * 0.8852)
    assert report.average_score == pytest.approx(report.total_score / 11)


def test_slot_report_flags_empty_slots(engine, formation_442, squad_442):
    slots = [
        s.model_copy(update={"player_id": None}) if s.id == "rs" else s
        for s in formation_442.slots
    ]
    formation = formation_442.model_copy(update={"slots": slots})

    report = engine.slot_report(formation, squad_442)

    assert len(report.slot_scores) == 10
    assert len(report.recommendations) == 1
    issue = report.recommendations[0]
    assert issue.slot_id == "rs"
    assert issue.issue == "No player assigned to FW position"
    assert issue.suggestion == "Assign a suitable player to this position"
    assert issue.priority == Severity.HIGH
    assert issue.score is None
    # Line averages divide by every slot of the line, bound or not
    assert report.attacking_threat == pytest.approx(0.8852 / 2)


def test_slot_report_issue_priorities(engine):
    formation = Formation(id="mixed", name="mixed", slots=[
        make_slot("a", "DF", 50, 30, player_id="st"),
        make_slot("b", "FW", 40, 80, player_id="keeper"),
        make_slot("c", "FW", 50, 100, player_id="weak"),
        make_slot("d", "MF", 50, 50),
        make_slot("e", "DF", 50, 30, player_id="ghost"),
    ])
    players = [
        make_player("st", role_id="ST", x=50, y=60),
        make_player("keeper", role_id="GK", x=50, y=5),
        make_player("weak", role_id="GK", x=50, y=5, speed=10, passing=10, tackling=10,
                    shooting=10, dribbling=10, positioning=10),
    ]

    report = engine.slot_report(formation, players)

    assert [(s.slot_id, s.fitness) for s in report.slot_scores] == [
        ("a", SlotFitness.AVERAGE),
        ("b", SlotFitness.POOR),
        ("c", SlotFitness.POOR),
    ]
    assert [(i.slot_id, i.priority) for i in report.recommendations] == [
        ("c", Severity.HIGH),
        ("d", Severity.HIGH),
        ("e", Severity.HIGH),
        ("b", Severity.MEDIUM),
        ("a", Severity.LOW),
    ]

    unsuited = report.recommendations[0]
    assert unsuited.issue == "weak is not well-suited for FW position"
    assert unsuited.suggestion == "Consider moving to a position that matches their GK role"
    assert unsuited.score == pytest.approx(0.17)


def test_slot_report_excellent_fit(engine):
    formation = Formation(id="f", name="f", slots=[make_slot("s", "DF", 50, 30, player_id="cb")])
    star = make_player("cb", role_id="CB", x=50, y=30, speed=95, passing=95,
                       tackling=95, positioning=95)

    report = engine.slot_report(formation, [star])

    assert report.slot_scores[0].fitness == SlotFitness.EXCELLENT
    assert report.slot_scores[0].score == pytest.approx(0.98)


def test_slot_report_without_slots(engine):
    report = engine.slot_report(Formation(id="none", name="none"), [])

    assert report.slot_scores == []
    assert report.recommendations == []
    assert report.total_score == 0.0
    assert report.average_score == 0.0
    assert report.defensive_strength == 0.0


def test_slot_report_thresholds_follow_settings(formation_442, squad_442):
    strict = AutoAssignmentEngine(config=Settings(SLOT_GOOD=0.95, SLOT_UNSUITED=0.95))

    report = strict.slot_report(formation_442, squad_442)

    assert all(s.fitness == SlotFitness.AVERAGE for s in report.slot_scores)
    assert len(report.recommendations) == 11
    assert all(i.priority == Severity.LOW for i in report.recommendations)
