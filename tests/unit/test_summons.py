"""
Tests for the summon procedures: pendulum, xyz and synchro.
"""

from conftest import COPERNICUS, GENGHIS, GRYPHON, KEPLER, LANCE_SOLDIER, answer, place

from duel_sim.locales import format_log
from duel_sim.state import PENDULUM_SUMMONED, Zone

CLOVIS = "c026"
GILGAMESH = "c017"
SWAMP_KING = "c006"


def set_scales(engine):
    place(engine, "P", Zone.SPELL_TRAP_ZONE, 0, face_up=True)
    place(engine, "Q", Zone.SPELL_TRAP_ZONE, 4, face_up=True)


class TestPendulumSummon:
    def test_needs_both_scales(self, plain_engine):
        place(plain_engine, "P", Zone.SPELL_TRAP_ZONE, 0, face_up=True)
        place(plain_engine, "X", Zone.HAND)
        assert not plain_engine.start_pendulum_summon()
        assert plain_engine.state.logs[-1] == format_log("log_error_condition")

    def test_candidates_come_from_hand_and_face_up_extra_deck(self, plain_engine):
        set_scales(plain_engine)
        low = place(plain_engine, "X", Zone.HAND)
        high = place(plain_engine, "H", Zone.HAND)
        face_up = place(plain_engine, "P", Zone.EXTRA_DECK, face_up=True)
        place(plain_engine, "P", Zone.EXTRA_DECK)
        place(plain_engine, "Y", Zone.EXTRA_DECK, face_up=True)

        assert plain_engine.start_pendulum_summon()
        assert plain_engine.interaction.pendulum_candidates == [low, high, face_up]

    def test_summon_places_and_counts(self, plain_engine):
        set_scales(plain_engine)
        monster = place(plain_engine, "X", Zone.HAND)
        pendulum = place(plain_engine, "P", Zone.EXTRA_DECK, face_up=True)

        plain_engine.start_pendulum_summon()
        assert not plain_engine.resolve_pendulum_selection([monster, "inst_missing"])
        assert plain_engine.resolve_pendulum_selection([monster, pendulum])
        answer(plain_engine, (Zone.MONSTER_ZONE, 2))
        assert not plain_engine.resolve_request((Zone.MONSTER_ZONE, 3))
        answer(plain_engine, (Zone.EXTRA_MONSTER_ZONE, 1))

        state = plain_engine.state
        assert state.monster_zones[2] == monster
        assert state.extra_monster_zones[1] == pendulum
        assert state.pendulum_summon_count == 1
        assert state.has_flag(monster, PENDULUM_SUMMONED)
        assert state.has_flag(pendulum, PENDULUM_SUMMONED)
        assert not state.normal_summon_used
        assert len(plain_engine.history) == 1

    def test_limit_per_turn(self, plain_engine):
        set_scales(plain_engine)
        place(plain_engine, "X", Zone.HAND)
        plain_engine.state.pendulum_summon_count = 1

        assert not plain_engine.start_pendulum_summon()
        assert plain_engine.state.logs[-1] == format_log("log_pendulum_limit_reached")

        plain_engine.increment_pendulum_summon_limit()
        assert plain_engine.start_pendulum_summon()

    def test_cancel(self, plain_engine):
        set_scales(plain_engine)
        place(plain_engine, "X", Zone.HAND)
        plain_engine.start_pendulum_summon()
        plain_engine.cancel_pendulum_summon()
        assert not plain_engine.interaction.pendulum_summoning
        assert not plain_engine.resolve_pendulum_selection([])

    def test_candidates_use_effective_level(self, plain_engine):
        set_scales(plain_engine)
        low = place(plain_engine, "X", Zone.HAND)
        high = place(plain_engine, "H", Zone.HAND)
        plain_engine.state.modifiers[high] = {"level": 9}

        assert plain_engine.start_pendulum_summon()
        assert plain_engine.interaction.pendulum_candidates == [low]


class TestXyzSummon:
    def test_materials_are_attached(self, plain_engine):
        first = place(plain_engine, "X", Zone.MONSTER_ZONE, 0)
        second = place(plain_engine, "X", Zone.MONSTER_ZONE, 1)
        high = place(plain_engine, "H", Zone.MONSTER_ZONE, 2)
        xyz = place(plain_engine, "Z", Zone.EXTRA_DECK)

        plain_engine.start_xyz_summon(xyz)
        answer(plain_engine, first)
        assert not plain_engine.resolve_request(high)
        answer(plain_engine, second)
        answer(plain_engine, (Zone.MONSTER_ZONE, 1))

        state = plain_engine.state
        assert state.monster_zones == [None, xyz, high, None, None]
        assert state.materials[xyz] == [first, second]
        assert state.logs[-1] == format_log("log_xyz_summon_success", card="Test Xyz")
        assert len(plain_engine.history) == 1

    def test_xyz_must_start_in_extra_deck(self, plain_engine):
        xyz = place(plain_engine, "Z", Zone.GRAVEYARD)
        plain_engine.start_xyz_summon(xyz)
        assert plain_engine.interaction.open_request is None
        assert plain_engine.state.logs[-1] == format_log("log_error_condition")


class TestSynchroSummon:
    def test_tuner_plus_matching_level(self, engine):
        lance = place(engine, LANCE_SOLDIER, Zone.MONSTER_ZONE, 0, face_up=True)
        gryphon = place(engine, GRYPHON, Zone.MONSTER_ZONE, 1, face_up=True)
        clovis = place(engine, CLOVIS, Zone.EXTRA_DECK)

        engine.start_synchro_summon(clovis)
        assert not engine.resolve_request(gryphon)
        answer(engine, lance)
        answer(engine, gryphon)
        answer(engine, (Zone.EXTRA_MONSTER_ZONE, 0))

        state = engine.state
        assert state.extra_monster_zones[0] == clovis
        assert state.graveyard == [lance]
        assert gryphon in state.extra_deck
        assert state.card(gryphon).face_up
        # Clovis finds nothing to revive without a contract or banished DD monsters
        assert state.logs[-1] == format_log("log_search_fail")
        assert len(engine.history) == 1


class TestLinkSummon:
    def test_gilgamesh_needs_two_dd_monsters(self, engine):
        place(engine, KEPLER, Zone.MONSTER_ZONE, 0, face_up=True)
        gilgamesh = place(engine, GILGAMESH, Zone.EXTRA_DECK)

        assert not engine.move_card(gilgamesh, Zone.EXTRA_MONSTER_ZONE, 0)
        assert engine.state.extra_monster_zones == [None, None]
        assert engine.state.logs[-1] == format_log("log_gilgamesh_req_fail")

    def test_gilgamesh_link_sends_materials(self, engine):
        kepler = place(engine, KEPLER, Zone.MONSTER_ZONE, 0, face_up=True)
        copernicus = place(engine, COPERNICUS, Zone.MONSTER_ZONE, 1, face_up=True)
        gilgamesh = place(engine, GILGAMESH, Zone.EXTRA_DECK)
        starting_lp = engine.state.lp

        assert not engine.move_card(gilgamesh, Zone.EXTRA_MONSTER_ZONE, 0)
        answer(engine, kepler)
        answer(engine, copernicus)

        state = engine.state
        assert state.extra_monster_zones[0] == gilgamesh
        assert state.monster_zones[:2] == [None, None]
        # pendulum materials leave the field face-up into the extra deck
        assert {kepler, copernicus} <= set(state.extra_deck)
        assert state.card(kepler).face_up
        assert format_log("log_summon_materials", materials="DD Savant Kepler, DD Savant Copernicus") in state.logs

        # both scale slots are free, so Gilgamesh offers its placement
        assert engine.interaction.open_request.title == format_log("prompt_gilgamesh_p_place")
        answer(engine, "no")
        assert engine.interaction.open_request is None
        assert state.lp == starting_lp

    def test_undoing_a_link_summon_restores_the_log(self, engine):
        kepler = place(engine, KEPLER, Zone.MONSTER_ZONE, 0, face_up=True)
        copernicus = place(engine, COPERNICUS, Zone.MONSTER_ZONE, 1, face_up=True)
        gilgamesh = place(engine, GILGAMESH, Zone.EXTRA_DECK)

        engine.move_card(gilgamesh, Zone.EXTRA_MONSTER_ZONE, 0)
        answer(engine, kepler)
        answer(engine, copernicus)
        answer(engine, "no")
        assert len(engine.history) == 1

        engine.undo()

        state = engine.state
        assert state.monster_zones[:2] == [kepler, copernicus]
        assert state.extra_deck == [gilgamesh]
        assert state.logs == []


class TestFusionSummon:
    def test_swamp_king_banishes_graveyard_material(self, engine):
        contract = place(engine, SWAMP_KING, Zone.SPELL_TRAP_ZONE, 1, face_up=True)
        kepler = place(engine, KEPLER, Zone.HAND)
        copernicus = place(engine, COPERNICUS, Zone.GRAVEYARD)
        genghis = place(engine, GENGHIS, Zone.EXTRA_DECK)

        engine.activate_effect(contract)
        answer(engine, "yes")
        answer(engine, genghis)
        answer(engine, kepler)
        answer(engine, copernicus)
        answer(engine, (Zone.MONSTER_ZONE, 2))

        state = engine.state
        assert state.monster_zones[2] == genghis
        assert state.graveyard == [kepler]
        assert state.banished == [copernicus]
        assert state.usage[SWAMP_KING] == 1
        assert state.logs[-1] == format_log("log_summon_materials", materials="DD Savant Kepler, DD Savant Copernicus")
        assert len(engine.history) == 1

    def test_no_fusion_monster_in_extra_deck(self, engine):
        contract = place(engine, SWAMP_KING, Zone.SPELL_TRAP_ZONE, 1, face_up=True)
        engine.activate_effect(contract)
        assert engine.interaction.open_request is None
        assert engine.state.logs[-1] == format_log("log_no_fusion_in_ex")
