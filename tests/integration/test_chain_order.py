#!/usr/bin/env python3
"""
Integration test for simultaneous triggers.

Count Surveyor's hand effect discards Scale Surveyor and summons itself in one
batch, so both of their effects trigger together and the player picks the
resolution order.
"""

from conftest import COPERNICUS, COUNT_SURVEYOR, KEPLER, SCALE_SURVEYOR, answer, place

from duel_sim.interaction import RequestKind
from duel_sim.locales import format_log
from duel_sim.state import Zone


def count_surveyor_board(engine):
    kepler = place(engine, KEPLER, Zone.MONSTER_ZONE, 0, face_up=True)
    count = place(engine, COUNT_SURVEYOR, Zone.HAND)
    scale = place(engine, SCALE_SURVEYOR, Zone.HAND)
    copernicus = place(engine, COPERNICUS, Zone.DECK)
    return kepler, count, scale, copernicus


def discard_and_summon(engine, count, scale):
    engine.activate_effect(count)
    answer(engine, "yes")
    answer(engine, scale)
    answer(engine, (Zone.MONSTER_ZONE, 1))


class TestChainOrder:
    def test_both_triggers_wait_for_an_order(self, engine):
        kepler, count, scale, copernicus = count_surveyor_board(engine)

        discard_and_summon(engine, count, scale)

        state = engine.state
        assert state.monster_zones[1] == count
        assert state.graveyard == [scale]
        request = engine.interaction.open_request
        assert request.kind == RequestKind.EFFECT_SELECTION
        assert request.title == format_log("prompt_chain_order")
        assert len(request.options) == 2
        assert len(engine.interaction.pending_chain) == 2
        # Count Surveyor is offered first, Scale Surveyor last
        assert "Count Surveyor" in request.options[0].label
        assert "Scale Surveyor" in request.options[1].label

    def test_chosen_entry_resolves_and_the_other_stays_queued(self, engine):
        kepler, count, scale, copernicus = count_surveyor_board(engine)
        discard_and_summon(engine, count, scale)
        options = engine.interaction.open_request.options

        answer(engine, options[0].value)

        request = engine.interaction.open_request
        assert request.title == format_log("prompt_count_surveyor_search_0")
        assert len(engine.interaction.pending_chain) == 1

    def test_full_resolution(self, engine):
        kepler, count, scale, copernicus = count_surveyor_board(engine)
        discard_and_summon(engine, count, scale)

        answer(engine, engine.interaction.open_request.options[0].value)
        answer(engine, "yes")
        assert engine.interaction.open_request.candidates(engine.state) == [copernicus]
        answer(engine, copernicus)

        # Scale Surveyor's bounce opens once the search is done
        request = engine.interaction.open_request
        assert request.title == format_log("prompt_scale_surveyor_bounce")
        answer(engine, "yes")
        assert sorted(engine.interaction.open_request.candidates(engine.state)) == sorted([kepler, count])
        answer(engine, kepler)

        state = engine.state
        assert engine.interaction.open_request is None
        assert engine.interaction.pending_chain == []
        assert sorted(state.hand) == sorted([copernicus, kepler])
        assert state.monster_zones[:2] == [None, count]
        assert state.usage["c012_hand_ss"] == 1
        assert state.usage["c012_search"] == 1
        assert state.usage["c014_bounce"] == 1
        assert state.logs[-1] == format_log("log_scale_surveyor_bounced", card=state.card(kepler).name)

    def test_scale_surveyor_first(self, engine):
        kepler, count, scale, copernicus = count_surveyor_board(engine)
        discard_and_summon(engine, count, scale)

        answer(engine, engine.interaction.open_request.options[1].value)
        assert engine.interaction.open_request.title == format_log("prompt_scale_surveyor_bounce")
        answer(engine, "yes")
        answer(engine, count)

        # Count Surveyor left the field, but its queued search still resolves
        assert count in engine.state.hand
        assert engine.interaction.open_request.title == format_log("prompt_count_surveyor_search_0")

    def test_the_batch_is_one_undo_step(self, engine):
        kepler, count, scale, copernicus = count_surveyor_board(engine)
        discard_and_summon(engine, count, scale)
        assert len(engine.history) == 1

        engine.undo()

        state = engine.state
        assert sorted(state.hand) == sorted([count, scale])
        assert state.graveyard == []
        assert engine.interaction.pending_chain == []
        assert engine.interaction.open_request is None
