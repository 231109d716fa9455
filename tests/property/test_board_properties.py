"""
Property-based tests for board bookkeeping.

Uses Hypothesis to generate random move sequences over vanilla cards and checks:
1. Exclusivity - every instance sits in exactly one place after any sequence
2. Undo - undoing every recorded step restores the starting board
3. Serialization - a board survives to_dict/from_dict unchanged
"""

import pytest

pytest.importorskip("hypothesis")

from hypothesis import given, settings  # noqa: E402
from hypothesis import strategies as st  # noqa: E402

from conftest import plain_definitions  # noqa: E402
from duel_sim.config import Settings  # noqa: E402
from duel_sim.engine import Engine  # noqa: E402
from duel_sim.state import LIST_ZONES, DuelState, Zone  # noqa: E402

DECK = ["X", "H", "P", "Q", "Y", "Z", "L", "S", "X", "P"]
TARGET_ZONES = [zone for zone in Zone if zone != Zone.MATERIAL]

moves = st.lists(
    st.tuples(
        st.integers(min_value=0, max_value=len(DECK) - 1),
        st.sampled_from(TARGET_ZONES),
        st.integers(min_value=0, max_value=4),
        st.booleans(),
    ),
    max_size=30,
)


def fresh_engine():
    engine = Engine(definitions=plain_definitions(), settings=Settings())
    engine.initialize_game(DECK)
    return engine


def apply_moves(engine, steps):
    applied = 0
    for position, zone, index, special in steps:
        instance_id = f"inst_{DECK[position]}_{position}"
        if zone == Zone.EXTRA_MONSTER_ZONE:
            index %= 2
        if engine.move_card(instance_id, zone, index, is_special_summon=special):
            applied += 1
    return applied


def locations(state):
    seen = []
    for zone in LIST_ZONES:
        seen.extend(state.zone_list(zone))
    for slots in (state.monster_zones, state.spell_trap_zones, state.extra_monster_zones):
        seen.extend(iid for iid in slots if iid)
    if state.field_zone:
        seen.append(state.field_zone)
    for mats in state.materials.values():
        seen.extend(mats)
    return seen


@settings(max_examples=100, deadline=None)
@given(steps=moves)
def test_every_instance_in_exactly_one_place(steps):
    engine = fresh_engine()
    apply_moves(engine, steps)
    assert sorted(locations(engine.state)) == sorted(engine.state.cards)


@settings(max_examples=100, deadline=None)
@given(steps=moves)
def test_undo_everything_restores_start(steps):
    engine = fresh_engine()
    start = engine.state.to_dict()
    applied = apply_moves(engine, steps)
    assert len(engine.history) == applied
    # rejected moves log without a snapshot, so lines before the first commit stay
    kept = engine.state.logs[: engine.history.snapshots[0].log_count] if applied else list(engine.state.logs)

    while len(engine.history):
        assert engine.undo()

    assert engine.state.to_dict() == start
    assert engine.state.logs == kept


@settings(max_examples=50, deadline=None)
@given(steps=moves)
def test_board_serialization_is_stable(steps):
    engine = fresh_engine()
    apply_moves(engine, steps)
    raw = engine.state.to_dict()
    restored = DuelState.from_dict(raw, engine.definitions)
    assert restored.to_dict() == raw
