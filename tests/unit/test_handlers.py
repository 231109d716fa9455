#!/usr/bin/env python3
"""
Tests for card effect handlers against the packaged card table.

Each test builds a small board with ``place`` and drives the handler through
its requests with ``answer``, the way a rendering layer would.
"""

from conftest import (
    COPERNICUS,
    GATE,
    GENGHIS,
    GRYPHON,
    KEPLER,
    LANCE_SOLDIER,
    SCALE_SURVEYOR,
    SIEGFRIED,
    TELL,
    WAVE_KING_CAESAR,
    ZERO_KING,
    answer,
    place,
)

from duel_sim.effects.registry import EFFECT_REGISTRY, modeled_card_ids
from duel_sim.interaction import RequestKind
from duel_sim.locales import format_log
from duel_sim.state import STARTING_LP, Zone

ETERNAL_DARKNESS = "c024"
DEUS_MACHINEX = "c018"
ARC_CRISIS = "c029"


class TestRegistry:
    def test_every_deck_card_but_arc_crisis_has_a_handler(self, card_table):
        unhandled = sorted(cid for cid in card_table if cid not in EFFECT_REGISTRY)
        assert unhandled == [ARC_CRISIS]

    def test_inert_cards_are_not_reported_as_modeled(self):
        modeled = modeled_card_ids()
        assert KEPLER in modeled
        assert ETERNAL_DARKNESS not in modeled
        assert DEUS_MACHINEX not in modeled

    def test_inert_card_announces_itself(self, engine):
        darkness = place(engine, ETERNAL_DARKNESS, Zone.SPELL_TRAP_ZONE, 2, face_up=True)
        engine.activate_effect(darkness)
        name = engine.state.card(darkness).name
        assert engine.state.logs == [format_log("log_no_effect_defined", card=name)]

    def test_silent_inert_card(self, engine):
        machinex = place(engine, DEUS_MACHINEX, Zone.MONSTER_ZONE, 0, face_up=True)
        engine.activate_effect(machinex)
        assert engine.state.logs == []
        assert engine.interaction.open_request is None


class TestDDMonsters:
    def test_kepler_searches_a_contract_on_normal_summon(self, engine):
        kepler = place(engine, KEPLER, Zone.HAND)
        gate = place(engine, GATE, Zone.DECK)

        engine.move_card(kepler, Zone.MONSTER_ZONE, 0)
        request = engine.interaction.open_request
        assert request.kind == RequestKind.EFFECT_SELECTION
        assert [option.value for option in request.options] == ["search"]

        answer(engine, "search")
        assert engine.interaction.open_request.candidates(engine.state) == [gate]
        answer(engine, gate)

        assert engine.state.hand == [gate]
        assert engine.state.usage[KEPLER] == 1
        assert engine.interaction.open_request is None

    def test_kepler_offers_return_with_another_dd_on_field(self, engine):
        place(engine, GRYPHON, Zone.MONSTER_ZONE, 1, face_up=True)
        kepler = place(engine, KEPLER, Zone.HAND)
        engine.move_card(kepler, Zone.MONSTER_ZONE, 0)
        values = [option.value for option in engine.interaction.open_request.options]
        assert values == ["search", "return"]

    def test_copernicus_dumps_from_deck(self, engine):
        copernicus = place(engine, COPERNICUS, Zone.HAND)
        gate = place(engine, GATE, Zone.DECK)

        engine.move_card(copernicus, Zone.MONSTER_ZONE, 0)
        answer(engine, "yes")
        answer(engine, gate)

        state = engine.state
        assert state.graveyard == [gate]
        assert state.usage[COPERNICUS] == 1
        assert state.logs[-1] == format_log("log_copernicus_dump", card=state.card(gate).name)

    def test_scale_surveyor_special_summons_from_hand(self, engine):
        place(engine, KEPLER, Zone.MONSTER_ZONE, 0, face_up=True)
        scale = place(engine, SCALE_SURVEYOR, Zone.HAND)

        engine.activate_effect(scale)
        answer(engine, "yes")
        request = engine.interaction.open_request
        assert request.kind == RequestKind.ZONE_SELECTION
        assert not engine.resolve_request((Zone.MONSTER_ZONE, 0))
        answer(engine, (Zone.MONSTER_ZONE, 2))

        assert engine.state.monster_zones[2] == scale
        assert engine.state.usage["c014_hand_ss"] == 1

    def test_scale_surveyor_level_change_once(self, engine):
        scale = place(engine, SCALE_SURVEYOR, Zone.MONSTER_ZONE, 0, face_up=True)
        engine.activate_effect(scale)
        answer(engine, "yes")
        assert engine.state.effective_level(scale) == 4

        engine.activate_effect(scale)
        assert engine.interaction.open_request is None
        assert engine.state.logs[-1] == format_log("log_error_condition")

    def test_lance_soldier_raises_level_by_contract_count(self, engine):
        lance = place(engine, LANCE_SOLDIER, Zone.MONSTER_ZONE, 0, face_up=True)
        kepler = place(engine, KEPLER, Zone.MONSTER_ZONE, 1, face_up=True)
        place(engine, GATE, Zone.SPELL_TRAP_ZONE, 1, face_up=True)

        engine.activate_effect(lance)
        answer(engine, "yes")
        answer(engine, kepler)

        state = engine.state
        assert state.effective_level(kepler) == 2
        assert state.logs[-1] == format_log("log_level_change_amount", card=state.card(kepler).name, amount=1)


class TestDDDMonsters:
    def test_siegfried_gains_lp_per_contract(self, engine):
        siegfried = place(engine, SIEGFRIED, Zone.MONSTER_ZONE, 0, face_up=True)
        place(engine, GATE, Zone.SPELL_TRAP_ZONE, 1, face_up=True)
        place(engine, ZERO_KING, Zone.SPELL_TRAP_ZONE, 2, face_up=True)

        engine.move_card(siegfried, Zone.GRAVEYARD)

        assert engine.state.lp == STARTING_LP + 2000
        assert engine.state.logs[-1] == format_log("log_recover_lp", amount=2000)

        engine.undo()
        assert engine.state.lp == STARTING_LP
        assert engine.state.graveyard == [siegfried]
        engine.undo()
        assert engine.state.monster_zones[0] == siegfried
        assert engine.state.logs == []

    def test_siegfried_without_contracts_does_nothing(self, engine):
        siegfried = place(engine, SIEGFRIED, Zone.MONSTER_ZONE, 0, face_up=True)
        engine.move_card(siegfried, Zone.GRAVEYARD)
        assert engine.state.lp == STARTING_LP

    def test_tell_sends_from_deck_when_it_leaves_the_field(self, engine):
        tell = place(engine, TELL, Zone.MONSTER_ZONE, 0, face_up=True)
        gate = place(engine, GATE, Zone.DECK)

        engine.move_card(tell, Zone.GRAVEYARD)
        answer(engine, "yes")
        answer(engine, gate)

        state = engine.state
        assert state.graveyard == [tell, gate]
        assert state.logs[-1] == format_log("log_to_gy", card=state.card(gate).name)

    def test_caesar_adds_contract_from_deck(self, engine):
        caesar = place(engine, WAVE_KING_CAESAR, Zone.MONSTER_ZONE, 0, face_up=True)
        gate = place(engine, GATE, Zone.DECK)

        engine.move_card(caesar, Zone.GRAVEYARD)
        answer(engine, "yes")
        answer(engine, gate)

        assert engine.state.hand == [gate]

    def test_genghis_trigger_revives_from_graveyard(self, engine):
        genghis = place(engine, GENGHIS, Zone.MONSTER_ZONE, 0, face_up=True)
        kepler = place(engine, KEPLER, Zone.GRAVEYARD)
        gryphon = place(engine, GRYPHON, Zone.HAND)

        engine.move_card(gryphon, Zone.MONSTER_ZONE, 1, is_special_summon=True)
        assert engine.trigger_candidates == [genghis]

        assert engine.resolve_trigger(genghis)
        assert engine.trigger_candidates == []
        answer(engine, "yes")
        answer(engine, kepler)
        answer(engine, (Zone.MONSTER_ZONE, 2))

        state = engine.state
        assert state.monster_zones[2] == kepler
        assert state.usage[f"{state.card(genghis).name}_opt"] == 1
        # Kepler's own summon effect is offered next
        assert engine.interaction.open_request.kind == RequestKind.EFFECT_SELECTION

    def test_resolve_unknown_trigger(self, engine):
        kepler = place(engine, KEPLER, Zone.MONSTER_ZONE, 0)
        assert not engine.resolve_trigger(kepler)


class TestContracts:
    def test_gate_searches_once_per_turn(self, engine):
        gate = place(engine, GATE, Zone.SPELL_TRAP_ZONE, 2, face_up=True)
        kepler = place(engine, KEPLER, Zone.DECK)

        engine.activate_effect(gate)
        answer(engine, "yes")
        answer(engine, kepler)

        state = engine.state
        assert state.hand == [kepler]
        assert state.usage[GATE] == 1

        engine.activate_effect(gate)
        assert engine.state.logs[-1] == format_log("log_hopt_used", card=state.card(gate).name)

    def test_undoing_gate_restores_the_log(self, engine):
        gate = place(engine, GATE, Zone.SPELL_TRAP_ZONE, 2, face_up=True)
        kepler = place(engine, KEPLER, Zone.DECK)

        engine.activate_effect(gate)
        answer(engine, "yes")
        answer(engine, kepler)
        assert len(engine.history) == 1

        engine.undo()

        state = engine.state
        assert state.deck == [kepler]
        assert GATE not in state.usage
        assert state.logs == []

    def test_gate_from_hand_does_nothing(self, engine):
        gate = place(engine, GATE, Zone.HAND)
        engine.activate_effect(gate)
        assert engine.interaction.open_request is None

    def test_negated_gate(self, engine):
        gate = place(engine, GATE, Zone.SPELL_TRAP_ZONE, 2, face_up=True)
        engine.modify_card_property(gate, "is_negated", True)
        engine.activate_effect(gate)
        assert engine.state.logs[-1] == format_log("log_effect_negated", card=engine.state.card(gate).name)

    def test_zero_king_destroys_and_summons_as_one_step(self, engine):
        zero_king = place(engine, ZERO_KING, Zone.SPELL_TRAP_ZONE, 1, face_up=True)
        kepler = place(engine, KEPLER, Zone.MONSTER_ZONE, 0, face_up=True)
        gryphon = place(engine, GRYPHON, Zone.DECK)

        engine.activate_effect(zero_king)
        answer(engine, "yes")
        answer(engine, kepler)
        answer(engine, gryphon)
        answer(engine, (Zone.MONSTER_ZONE, 0))

        state = engine.state
        assert state.monster_zones[0] == gryphon
        assert kepler in state.extra_deck
        assert state.card(kepler).face_up
        assert state.usage[ZERO_KING] == 1
        assert format_log("log_sp_summon", card=state.card(gryphon).name) in state.logs
        assert len(engine.history) == 1

        engine.undo()
        assert engine.state.monster_zones[0] == kepler
        assert engine.state.deck == [gryphon]
        assert engine.state.logs == []

    def test_zero_king_needs_a_target(self, engine):
        zero_king = place(engine, ZERO_KING, Zone.SPELL_TRAP_ZONE, 1, face_up=True)
        engine.activate_effect(zero_king)
        assert engine.interaction.open_request is None
        assert engine.state.logs[-1] == format_log("log_error_condition")
