from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator, Optional

from .. import rules
from ..cards import is_dark_contract, is_dd, is_ddd, is_extra_deck_type, is_monster, is_pendulum
from ..interaction import Request, choose, confirm, search, select_zone, target, zone_in
from ..state import C030_LOCKED, MONSTER_FIELD_ZONES, PENDULUM_ZONE_INDICES, Zone
from ..summons import commit_fusion, fusion_zone_filter
from .common import (
    CardEffect,
    contracts_on_field,
    destroy,
    drop_trigger_candidate,
    empty_monster_zone_filter,
    empty_spell_trap_filter,
    fusion_materials_ok,
    fusion_options,
    is_dd_monster,
    is_dd_or_contract,
    is_yes,
    on_field,
    on_monster_field,
)
from .types import EffectEvent, Reason

if TYPE_CHECKING:
    from ..engine import Engine

logger = logging.getLogger(__name__)

FLAME_KING_GENGHIS_CID = "c007"
ABYSS_RAGNAROK_CID = "c008"
GILGAMESH_CID = "c017"
HIGH_KING_GENGHIS_CID = "c019"
SIEGFRIED_CID = "c020"
TELL_CID = "c021"
WAVE_KING_CAESAR_CID = "c022"
WAVE_HIGH_KING_CAESAR_CID = "c023"
SOLOMON_CID = "c025"
CLOVIS_CID = "c026"
ALFRED_CID = "c027"
ZEUS_RAGNAROK_CID = "c028"
ZERO_MACHINEX_CID = "c030"
ORTHROS_CID = "c011"

TAKE_DAMAGE = 1000


def _in_graveyard(state, predicate) -> bool:
    return any(is_monster(state.definition(iid)) and predicate(state.definition(iid)) for iid in state.graveyard)


def _left_monster_field(event: EffectEvent) -> bool:
    return event.reason == Reason.MOVE and event.from_zone in MONSTER_FIELD_ZONES


class GenghisEffect(CardEffect):
    """When another DD monster is special summoned: revive a DD monster from the GY."""

    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        if event.reason != Reason.TRIGGER or not on_monster_field(state, self_id):
            return
        usage_key = f"{state.card(self_id).name}_opt"
        if state.usage.get(usage_key, 0) >= 1 or not _in_graveyard(state, is_dd):
            drop_trigger_candidate(state, self_id)
            return
        answer = yield confirm("prompt_genghis_gy_ss", card=state.card(self_id).name)
        drop_trigger_candidate(engine.state, self_id)
        if not is_yes(answer):
            return
        engine.add_turn_effect_usage(usage_key, self_id)
        revived = yield search(
            lambda s, iid: is_dd_monster(s, iid), source=Zone.GRAVEYARD, title_key="prompt_select_dd_ss"
        )
        zones = empty_monster_zone_filter(engine.state)
        if zones is None:
            engine.log("log_no_available_zones")
            return
        ref = yield select_zone(zones)
        engine.move_card(revived, Zone.MONSTER_ZONE, ref.index, Zone.GRAVEYARD, is_special_summon=True)


class AbyssRagnarokEffect(CardEffect):
    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        name = state.card(self_id).name
        if on_monster_field(state, self_id):
            if event.reason not in (Reason.MOVE, Reason.TRIGGER):
                return
            usage_key = f"{name}_summon_opt"
            if state.usage.get(usage_key, 0) >= 1 or not _in_graveyard(state, is_ddd):
                return
            answer = yield confirm("prompt_ragnarok_gy_ss", card=name)
            drop_trigger_candidate(engine.state, self_id)
            if not is_yes(answer):
                return
            revived = yield search(
                lambda s, iid: is_monster(s.definition(iid)) and is_ddd(s.definition(iid)),
                source=Zone.GRAVEYARD,
                title_key="prompt_select_lv8_ddd",
            )
            zones = empty_monster_zone_filter(engine.state)
            if zones is None:
                engine.log("log_no_available_zones")
                return
            ref = yield select_zone(zones)
            with engine.history_unit():
                engine.add_turn_effect_usage(usage_key)
                engine.move_card(revived, Zone.MONSTER_ZONE, ref.index, Zone.GRAVEYARD, is_special_summon=True)
            return

        if self_id not in engine.state.pendulum_scales():
            return
        if event.reason not in (Reason.MANUAL, Reason.TRIGGER):
            return
        usage_key = f"{name}_peffect_opt"
        if state.usage.get(usage_key, 0) >= 1:
            if event.manual:
                engine.log("log_error_condition")
            drop_trigger_candidate(state, self_id)
            return
        if not _in_graveyard(state, is_dd):
            return
        answer = yield confirm("prompt_ragnarok_p_ss")
        drop_trigger_candidate(engine.state, self_id)
        if not is_yes(answer):
            return
        revived = yield search(lambda s, iid: is_dd_monster(s, iid), source=Zone.GRAVEYARD, title_key="prompt_select_dd_ss")
        zones = empty_monster_zone_filter(engine.state)
        if zones is None:
            engine.log("log_no_available_zones")
            return
        ref = yield select_zone(zones)
        with engine.history_unit():
            engine.add_turn_effect_usage(usage_key)
            engine.move_card(revived, Zone.MONSTER_ZONE, ref.index, Zone.GRAVEYARD, is_special_summon=True)
            engine.change_lp(-TAKE_DAMAGE)
            engine.state.tell_buff_active = True
            engine.log("log_take_damage", amount=TAKE_DAMAGE)


def _dd_pendulum_in_deck(state, iid: str) -> bool:
    definition = state.definition(iid)
    return is_dd(definition) and is_pendulum(definition) and is_monster(definition)


class GilgameshEffect(CardEffect):
    """On link summon: place two DD pendulums with different names, then take 1000 damage."""

    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        if event.manual or not on_monster_field(state, self_id):
            return
        if any(state.spell_trap_zones[i] for i in PENDULUM_ZONE_INDICES):
            return
        answer = yield confirm("prompt_gilgamesh_p_place")
        if not is_yes(answer):
            return
        first = yield search(_dd_pendulum_in_deck)
        first_name = engine.state.card(first).name
        second = yield search(lambda s, iid: _dd_pendulum_in_deck(s, iid) and s.card(iid).name != first_name)
        left, right = PENDULUM_ZONE_INDICES
        with engine.history_unit():
            engine.move_card(first, Zone.SPELL_TRAP_ZONE, left, Zone.DECK)
            engine.move_card(second, Zone.SPELL_TRAP_ZONE, right, Zone.DECK)
            state = engine.state
            for machinex_id in state.instances_of(ZERO_MACHINEX_CID):
                engine.set_card_flag(machinex_id, C030_LOCKED)
            engine.change_lp(-TAKE_DAMAGE)
            state.tell_buff_active = True
            engine.log("log_take_damage", amount=TAKE_DAMAGE)
            for iid in state.hand:
                if state.card(iid).card_id == ORTHROS_CID and iid not in state.trigger_candidates:
                    state.trigger_candidates.append(iid)


class SiegfriedEffect(CardEffect):
    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Optional[Iterator[Request]]:
        state = engine.state
        if self_id not in state.graveyard or not _left_monster_field(event):
            return None
        contracts = len(contracts_on_field(state))
        if not contracts:
            return None
        gain = contracts * 1000
        with engine.history_unit():
            engine.push_history()
            engine.log("log_trigger_effect", card=state.card(self_id).name)
            engine.change_lp(gain)
            engine.log("log_recover_lp", amount=gain)
        return None


class TellEffect(CardEffect):
    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        if self_id in state.graveyard and _left_monster_field(event):
            answer = yield confirm("prompt_tell_send_gy")
            if not is_yes(answer):
                return
            picked = yield search(lambda s, iid: is_dd_or_contract(s, iid) and "Tell" not in s.card(iid).name)
            engine.move_card(picked, Zone.GRAVEYARD, suppress_trigger=True)
            engine.log("log_to_gy", card=engine.state.card(picked).name)
            return

        if not event.manual or not on_monster_field(state, self_id) or not state.tell_buff_active:
            return
        materials = list(state.materials.get(self_id, []))
        if not materials:
            return
        answer = yield confirm("prompt_tell_detach")
        if not is_yes(answer):
            return
        material = yield choose("prompt_select_material", [(state.card(m).name, m) for m in materials])
        engine.move_card(material, Zone.GRAVEYARD)


class CaesarEffect(CardEffect):
    """GY trigger for both Caesars; the high king also detaches two materials on the field."""

    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        high_king = state.card(self_id).card_id == WAVE_HIGH_KING_CAESAR_CID
        if self_id in state.graveyard and event.reason == Reason.MOVE and event.from_zone != Zone.MATERIAL:
            if high_king and state.usage.get("c023_gy", 0) >= 1:
                return
            answer = yield confirm("prompt_caesar_add_contract")
            if not is_yes(answer):
                return
            if high_king:
                engine.add_turn_effect_usage("c023_gy")
            picked = yield search(lambda s, iid: is_dark_contract(s.definition(iid)), title_key="prompt_contract_search")
            engine.move_card(picked, Zone.HAND)
            return

        if not high_king or not event.manual or not on_monster_field(state, self_id):
            return
        materials = list(state.materials.get(self_id, []))
        if len(materials) < 2:
            engine.log("log_error_condition")
            return
        name = state.card(self_id).name
        answer = yield confirm("prompt_activate_effect", card=name)
        if not is_yes(answer):
            return
        first = yield choose("prompt_select_material", [(state.card(m).name, m) for m in materials])
        rest = [m for m in materials if m != first]
        second = yield choose("prompt_select_material", [(state.card(m).name, m) for m in rest])
        with engine.history_unit():
            engine.move_card(first, Zone.GRAVEYARD)
            engine.move_card(second, Zone.GRAVEYARD)
            engine.log("log_activate_effect", card=name)


class SolomonEffect(CardEffect):
    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        if not event.manual or not on_monster_field(state, self_id):
            return
        materials = list(state.materials.get(self_id, []))
        if not materials:
            engine.log("log_error_material")
            return
        answer = yield confirm("prompt_solomon_search")
        if not is_yes(answer):
            return
        material = yield choose("prompt_select_material", [(state.card(m).name, m) for m in materials])
        picked = yield search(lambda s, iid: is_dd(s.definition(iid)))
        with engine.history_unit():
            engine.push_history()
            with engine.batch():
                engine.move_card(material, Zone.GRAVEYARD, suppress_trigger=True)
                engine.log(
                    "log_detach_material", card=state.card(self_id).name, material=state.card(material).name
                )
                engine.add_turn_effect_usage(SOLOMON_CID, self_id)
                engine.move_card(picked, Zone.HAND)


class ClovisEffect(CardEffect):
    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        if event.reason != Reason.MOVE or not on_monster_field(state, self_id):
            return
        candidates = [iid for iid in state.banished if is_dd_monster(state, iid)]
        if contracts_on_field(state):
            candidates += [iid for iid in state.graveyard if is_dd_monster(state, iid)]
        if not candidates:
            engine.log("log_search_fail")
            return
        answer = yield confirm("prompt_clovis_ss")
        if not is_yes(answer):
            return
        revived = yield search(lambda s, iid: iid in candidates, source=candidates, title_key="prompt_select_dd_ss")
        zones = empty_monster_zone_filter(engine.state)
        if zones is None:
            engine.log("log_error_condition")
            return
        ref = yield select_zone(zones, "prompt_select_zone_ss")
        source = engine.state.zone_of(revived)
        with engine.history_unit():
            engine.move_card(revived, Zone.MONSTER_ZONE, ref.index, source, is_special_summon=True)
            engine.add_turn_effect_usage(CLOVIS_CID, self_id)


class AlfredEffect(CardEffect):
    """Field: fusion summon using field or banished DD monsters. Banished: place a Dark Contract."""

    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        if not event.manual:
            return
        if on_monster_field(state, self_id):
            yield from self._fusion(engine, self_id)
        elif self_id in state.banished:
            yield from self._recover_contract(engine, self_id)

    def _fusion(self, engine: "Engine", self_id: str) -> Iterator[Request]:
        answer = yield confirm("prompt_alfred_fusion")
        if not is_yes(answer):
            return
        options = fusion_options(engine.state)
        if not options:
            engine.log("log_no_fusion_in_ex")
            return
        fusion_id = yield choose("label_fusion_monster_select", options)
        state = engine.state
        pool = [iid for iid in state.field_monsters() + state.banished if is_dd_monster(state, iid)]
        if len(pool) < 2:
            engine.log("log_error_material")
            return
        first = yield search(lambda s, iid: iid in pool, source=pool, title_key="prompt_select_material")
        rest = [iid for iid in pool if iid != first]
        second = yield search(
            lambda s, iid: iid in rest and fusion_materials_ok(s, fusion_id, [first, iid]),
            source=rest,
            title_key="prompt_select_material",
        )
        materials = [first, second]
        ref = yield select_zone(fusion_zone_filter(engine, materials), "prompt_select_zone_fusion")
        state = engine.state
        placements = [
            (iid, Zone.EXTRA_DECK if is_extra_deck_type(state.definition(iid)) else Zone.DECK) for iid in materials
        ]
        with engine.history_unit():
            engine.push_history()
            engine.log("log_fusion_select", card=state.card(fusion_id).name)
            engine.add_turn_effect_usage(ALFRED_CID, self_id)
            commit_fusion(engine, fusion_id, placements, ref.zone, ref.index, suppress_material_triggers=True)

    def _recover_contract(self, engine: "Engine", self_id: str) -> Iterator[Request]:
        answer = yield confirm("prompt_alfred_recover_contract")
        if not is_yes(answer):
            return
        state = engine.state
        if not any(is_ddd(state.definition(iid)) for iid in state.field_monsters()):
            engine.log("log_error_condition")
            return
        contract = yield target(
            lambda s, iid: (iid in s.graveyard or iid in s.banished) and is_dark_contract(s.definition(iid))
        )
        zones = empty_spell_trap_filter(engine.state)
        if zones is None:
            engine.log("log_error_condition")
            return
        ref = yield select_zone(zones)
        with engine.history_unit():
            engine.move_card(contract, Zone.SPELL_TRAP_ZONE, ref.index)
            engine.add_turn_effect_usage(ALFRED_CID, self_id)


class ZeusRagnarokEffect(CardEffect):
    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        if not event.manual or not on_monster_field(state, self_id):
            return
        answer = yield confirm("prompt_zeus_extra_p")
        if not is_yes(answer):
            return
        destroyed = yield target(
            lambda s, iid: on_field(s, iid) and iid != self_id and is_dd_or_contract(s, iid), "prompt_destroy_card"
        )
        name = engine.state.card(destroyed).name
        with engine.history_unit():
            engine.add_turn_effect_usage(ZEUS_RAGNAROK_CID, self_id)
            destroy(engine, self_id, destroyed)
            engine.increment_pendulum_summon_limit()
            engine.log("log_zeus_extra_p", card=name)


def _is_continuous_contract(state, iid: str) -> bool:
    definition = state.definition(iid)
    return is_dark_contract(definition) and "CONTINUOUS" in definition.sub_type


class ZeroMachinexEffect(CardEffect):
    """Pendulum placement of a contract, and the move back to the pendulum zone when destroyed."""

    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        if self_id in state.spell_trap_zones:
            if state.has_flag(self_id, C030_LOCKED):
                if event.manual:
                    engine.log("log_error_condition")
                return
            if not event.manual:
                return
            if state.usage.get("c030_peffect", 0) >= 1:
                engine.log("log_error_condition")
                return
            answer = yield confirm("prompt_machinex_p_place")
            if not is_yes(answer):
                return
            zones = empty_spell_trap_filter(engine.state)
            if zones is None:
                engine.log("log_error_condition")
                return
            contract = yield search(_is_continuous_contract, title_key="prompt_contract_search")
            ref = yield select_zone(zones)
            with engine.history_unit():
                engine.add_turn_effect_usage("c030_peffect", self_id)
                engine.move_card(contract, Zone.SPELL_TRAP_ZONE, ref.index, Zone.DECK)
            return

        if self_id not in state.graveyard and self_id not in state.extra_deck:
            return
        if not _left_monster_field(event) or event.is_material:
            return
        if engine.context.material_move or engine.context.link_summoning:
            return
        if state.usage.get("c030_destruction", 0) >= 1:
            return
        if rules.first_free_pendulum_zone(state) is None:
            return
        answer = yield confirm("prompt_machinex_destruction_p")
        if not is_yes(answer):
            return
        index = rules.first_free_pendulum_zone(engine.state)
        if index is None:
            engine.log("log_error_zone")
            return
        with engine.history_unit():
            engine.add_turn_effect_usage("c030_destruction", self_id)
            engine.move_card(self_id, Zone.SPELL_TRAP_ZONE, index)
            engine.set_card_flag(self_id, C030_LOCKED)
            engine.log("log_place_card", card=engine.state.card(self_id).name)


def arc_crisis_placement(engine: "Engine", instance_id: str) -> Iterator[Request]:
    """Offer to move a destroyed Arc Crisis into a free pendulum zone."""
    if rules.first_free_pendulum_zone(engine.state) is None:
        return
    answer = yield confirm("prompt_arc_crisis_place")
    if not is_yes(answer):
        return
    index = rules.first_free_pendulum_zone(engine.state)
    if index is None:
        engine.log("log_error_zone")
        return
    engine.move_card(instance_id, Zone.SPELL_TRAP_ZONE, index)
    engine.log("log_place_card", card=engine.state.card(instance_id).name)


def machinex_reaction(engine: "Engine", machinex_id: str) -> Iterator[Request]:
    """Summon a face-up Zero Machinex from the extra deck after a DDD or contract is destroyed."""
    state = engine.state
    if state.usage.get("c030_ss_reaction", 0) >= 1 or machinex_id not in state.extra_deck:
        return
    slots = rules.machinex_reaction_zones(state)
    if not slots:
        logger.debug("No zone for the Zero Machinex reaction of %s", machinex_id)
        return
    answer = yield confirm("prompt_zero_machinex_ss")
    if not is_yes(answer):
        return
    ref = yield select_zone(zone_in(slots), "prompt_select_zone_machinex")
    with engine.history_unit():
        engine.add_turn_effect_usage("c030_ss_reaction", machinex_id)
        engine.move_card(machinex_id, ref.zone, ref.index, Zone.EXTRA_DECK, is_special_summon=True)

    answer = yield confirm("prompt_destroy_card")
    if not is_yes(answer):
        return
    destroyed = yield target(lambda s, iid: on_field(s, iid), "prompt_destroy_card")
    name = engine.state.card(destroyed).name
    with engine.history_unit():
        destroy(engine, machinex_id, destroyed)
        engine.log("log_destroy", card=name)
