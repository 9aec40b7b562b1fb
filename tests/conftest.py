"""
Shared fixtures: player and formation factories.
"""
import pytest

from formation_intelligence.config import Settings
from formation_intelligence.models.schemas import Formation, FormationSlot, Player


def make_player(
    player_id: str,
    role_id: str = "CM",
    role: str = None,
    age: int = 25,
    nationality: str = "ENG",
    x: float = 50,
    y: float = 50,
    **attributes
) -> Player:
    base = {
        "speed": 70, "passing": 70, "tackling": 70, "shooting": 70,
        "dribbling": 70, "positioning": 70, "stamina": 80,
    }
    base.update(attributes)
    return Player(
        id=player_id,
        role_id=role_id,
        role=role,
        age=age,
        nationality=nationality,
        position={"x": x, "y": y},
        attributes=base,
    )


def make_slot(slot_id: str, role: str, x: float, y: float, player_id: str = None) -> FormationSlot:
    return FormationSlot(
        id=slot_id, role=role, default_position={"x": x, "y": y}, player_id=player_id
    )


# 4-4-2 slot layout: (slot id, role, x, y, default role id for its player)
LAYOUT_442 = [
    ("gk", "GK", 50, 5, "GK"),
    ("lb", "DF", 15, 25, "LB"),
    ("lcb", "DF", 38, 22, "CB"),
    ("rcb", "DF", 62, 22, "CB"),
    ("rb", "DF", 85, 25, "RB"),
    ("lm", "MF", 15, 55, "LM"),
    ("lcm", "MF", 38, 50, "CM"),
    ("rcm", "MF", 62, 50, "CDM"),
    ("rm", "MF", 85, 55, "RM"),
    ("ls", "FW", 40, 80, "ST"),
    ("rs", "FW", 60, 80, "CF"),
]


@pytest.fixture
def config():
    return Settings()


@pytest.fixture
def squad_442():
    """Eleven players, each standing on their 4-4-2 slot."""
    players = []
    for index, (slot_id, role, x, y, role_id) in enumerate(LAYOUT_442):
        players.append(Player(
            id=f"p{index}",
            name=f"Player {index}",
            role_id=role_id,
            role=role,
            age=24 + index % 5,
            nationality="ENG" if index % 2 else "ESP",
            position={"x": x, "y": y},
            attributes={
                "speed": 75, "passing": 72, "tackling": 68, "shooting": 66,
                "dribbling": 70, "positioning": 74, "stamina": 82,
            },
        ))
    return players


@pytest.fixture
def formation_442(squad_442):
    """4-4-2 with every slot bound to the matching squad player."""
    slots = [
        make_slot(slot_id, role, x, y, player_id=f"p{index}")
        for index, (slot_id, role, x, y, _) in enumerate(LAYOUT_442)
    ]
    return Formation(id="f442", name="4-4-2", slots=slots)


@pytest.fixture
def empty_442():
    """4-4-2 with no slot bindings."""
    slots = [make_slot(slot_id, role, x, y) for slot_id, role, x, y, _ in LAYOUT_442]
    return Formation(id="f442-empty", name="4-4-2", slots=slots)
