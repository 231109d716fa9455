"""Shared pytest fixtures for duel-sim tests."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parents[1] / "src"))

from duel_sim.cards import CardDefinition, load_card_table  # noqa: E402
from duel_sim.config import Settings  # noqa: E402
from duel_sim.engine import Engine  # noqa: E402
from duel_sim.state import LIST_ZONES, CardInstance, Zone  # noqa: E402

# Card ids from the packaged table, named for test clarity
KEPLER = "c004"
GATE = "c005"
GENGHIS = "c007"
COPERNICUS = "c009"
ORTHROS = "c011"
COUNT_SURVEYOR = "c012"
GRYPHON = "c013"
SCALE_SURVEYOR = "c014"
NECRO_SLIME = "c015"
SIEGFRIED = "c020"
TELL = "c021"
WAVE_KING_CAESAR = "c022"
EXECUTIVE_CAESAR = "c023"
SOLOMON = "c025"
ZERO_MACHINEX = "c030"
LANCE_SOLDIER = "c032"
ZERO_KING = "c034"


def plain_definitions():
    """A tiny table of vanilla cards with no registered handlers."""
    cards = [
        CardDefinition("X", "Test Monster", "MONSTER", "EFFECT", attack=1000, defense=1000, level=4),
        CardDefinition("H", "Test High Monster", "MONSTER", "EFFECT", attack=2500, defense=2000, level=7),
        CardDefinition("P", "Test Pendulum", "MONSTER", "PENDULUM/EFFECT", attack=0, defense=0, level=4, scale=2),
        CardDefinition("Q", "Test Pendulum High", "MONSTER", "PENDULUM/EFFECT", level=4, scale=8),
        CardDefinition("Y", "Test Fusion", "MONSTER", "FUSION/EFFECT", attack=2000, defense=2000, level=6),
        CardDefinition("Z", "Test Xyz", "MONSTER", "XYZ/EFFECT", attack=2000, defense=2000, rank=4),
        CardDefinition("L", "Test Link", "MONSTER", "LINK/EFFECT", link_markers=("BOTTOM_LEFT", "BOTTOM_RIGHT")),
        CardDefinition("S", "Test Spell", "SPELL", "NORMAL"),
    ]
    return {card.card_id: card for card in cards}


def place(engine, card_id, zone, index=0, face_up=False):
    """Create a new instance of ``card_id`` directly in ``zone`` without a move."""
    state = engine.state
    serial = len(state.cards)
    while f"inst_{card_id}_{serial}" in state.cards:
        serial += 1
    instance_id = f"inst_{card_id}_{serial}"
    state.cards[instance_id] = CardInstance(instance_id, engine.definitions[card_id], face_up)
    zone = Zone(zone)
    if zone in LIST_ZONES:
        state.zone_list(zone).append(instance_id)
    elif zone == Zone.FIELD_ZONE:
        state.field_zone = instance_id
    else:
        state.slots(zone)[index] = instance_id
    return instance_id


def answer(engine, value):
    """Resolve the open request and fail loudly when it is rejected."""
    assert engine.interaction.open_request is not None, "no open request"
    assert engine.resolve_request(value), f"request rejected {value!r}"


@pytest.fixture(scope="session")
def card_table():
    return load_card_table()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def engine(card_table, settings):
    """An engine over the packaged card table with an empty board."""
    return Engine(definitions=card_table, settings=settings)


@pytest.fixture
def plain_engine(settings):
    return Engine(definitions=plain_definitions(), settings=settings)
