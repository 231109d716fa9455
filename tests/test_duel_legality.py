import sys
import unittest
from pathlib import Path

repo_root = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(repo_root / "src"))

from duel_sim import rules  # noqa: E402
from duel_sim.cards import CardDefinition, load_card_table  # noqa: E402
from duel_sim.errors import IllegalPlacementError  # noqa: E402
from duel_sim.state import CardInstance, DuelState, Zone  # noqa: E402

TABLE = load_card_table()
VANILLA = CardDefinition("V", "Vanilla", "MONSTER", "NORMAL", attack=1000, defense=1000, level=4)
LINK = CardDefinition("L", "Arrow", "MONSTER", "LINK/EFFECT", link_markers=("BOTTOM_LEFT", "BOTTOM_RIGHT"))


def make_state(monsters=(), spells=(), emz=()):
    """Create a DuelState from (index, definition) pairs for each slot kind."""
    state = DuelState()

    def add(definition):
        iid = f"inst_{definition.card_id}_{len(state.cards)}"
        state.cards[iid] = CardInstance(iid, definition, face_up=True)
        return iid

    for index, definition in monsters:
        state.monster_zones[index] = add(definition)
    for index, definition in spells:
        state.spell_trap_zones[index] = add(definition)
    for index, definition in emz:
        state.extra_monster_zones[index] = add(definition)
    return state


def add_to_hand(state, definition):
    iid = f"inst_{definition.card_id}_{len(state.cards)}"
    state.cards[iid] = CardInstance(iid, definition)
    state.hand.append(iid)
    return iid


class TestDuelLegality(unittest.TestCase):
    def test_tributes_by_level(self):
        self.assertEqual([rules.tributes_required(level) for level in (1, 4, 5, 6, 7, 12)], [0, 0, 1, 1, 2, 2])

    def test_zone_capacity(self):
        state = make_state(monsters=[(i, VANILLA) for i in range(5)])
        mover = add_to_hand(state, VANILLA)
        with self.assertRaises(IllegalPlacementError) as ctx:
            rules.validate_placement(state, mover, Zone.MONSTER_ZONE, 3)
        self.assertEqual(ctx.exception.log_key, "log_error_zone")

    def test_pendulum_columns(self):
        state = make_state()
        kepler = add_to_hand(state, TABLE["c004"])
        rules.validate_placement(state, kepler, Zone.SPELL_TRAP_ZONE, 0)
        with self.assertRaises(IllegalPlacementError):
            rules.validate_placement(state, kepler, Zone.SPELL_TRAP_ZONE, 1)

    def test_extra_monster_zone_restriction(self):
        state = make_state(emz=[(0, LINK)])
        with self.assertRaises(IllegalPlacementError) as ctx:
            rules.check_emz_restriction(state, 1)
        self.assertEqual(ctx.exception.log_key, "log_emz_restriction")
        rules.check_emz_restriction(make_state(), 1)

    def test_extra_monster_zone_mover_frees_its_own_slot(self):
        state = make_state(emz=[(0, LINK)])
        rules.check_emz_restriction(state, 1, state.extra_monster_zones[0])
        with self.assertRaises(IllegalPlacementError):
            rules.check_emz_restriction(state, 1, "inst_other")

    def test_link_markers_unlock_main_zones(self):
        self.assertEqual(rules.link_unlocked_zones(make_state(emz=[(0, LINK)])), {0, 2})
        self.assertEqual(rules.link_unlocked_zones(make_state(emz=[(1, LINK)])), {2, 4})

    def test_arc_crisis_needs_one_of_each(self):
        state = make_state(
            monsters=[(0, TABLE["c007"]), (1, TABLE["c020"]), (2, TABLE["c022"]), (3, TABLE["c004"])]
        )
        self.assertTrue(rules.check_arc_crisis(state, state.monster_zones[:4]))
        self.assertFalse(rules.check_arc_crisis(state, state.monster_zones[:3]))

    def test_deus_machinex_fills_either_role(self):
        state = make_state(
            monsters=[(0, TABLE["c007"]), (1, TABLE["c020"]), (2, TABLE["c018"]), (3, TABLE["c004"])]
        )
        self.assertTrue(rules.check_arc_crisis(state, state.monster_zones[:4]))

    def test_arc_crisis_rejects_duplicate_roles(self):
        state = make_state(
            monsters=[(0, TABLE["c007"]), (1, TABLE["c027"]), (2, TABLE["c022"]), (3, TABLE["c004"])]
        )
        self.assertFalse(rules.check_arc_crisis(state, state.monster_zones[:4]))

    def test_material_slot_counts_as_free(self):
        state = make_state(monsters=[(0, VANILLA), (1, VANILLA)])
        materials = state.monster_zones[:2]
        self.assertTrue(rules.material_zone_allowed(state, Zone.MONSTER_ZONE, 0, materials))
        self.assertFalse(rules.material_zone_allowed(state, Zone.MONSTER_ZONE, 1, materials[:1]))
        self.assertFalse(rules.material_zone_allowed(state, Zone.SPELL_TRAP_ZONE, 2, materials))

    def test_material_in_other_extra_monster_zone(self):
        state = make_state(emz=[(0, LINK)])
        link = state.extra_monster_zones[0]
        self.assertFalse(rules.material_zone_allowed(state, Zone.EXTRA_MONSTER_ZONE, 1, []))
        self.assertTrue(rules.material_zone_allowed(state, Zone.EXTRA_MONSTER_ZONE, 1, [link]))

    def test_pendulum_zone_options_from_extra_deck(self):
        state = make_state(emz=[(0, LINK)])
        gryphon = "inst_c013_x"
        state.cards[gryphon] = CardInstance(gryphon, TABLE["c013"], face_up=True)
        state.extra_deck.append(gryphon)
        options = rules.pendulum_zone_options(state, gryphon)
        self.assertEqual(options, [(Zone.MONSTER_ZONE, 0), (Zone.MONSTER_ZONE, 2)])
        pending = [(Zone.MONSTER_ZONE, 0)]
        self.assertEqual(rules.pendulum_zone_options(state, gryphon, pending), [(Zone.MONSTER_ZONE, 2)])


if __name__ == "__main__":
    unittest.main()
