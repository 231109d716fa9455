from __future__ import annotations

from typing import TYPE_CHECKING, Iterator

from ..cards import is_dark_contract, is_dd, is_extra_deck_type, is_main_deck_pendulum, is_pendulum
from ..interaction import Request, choose, confirm, search, select_zone, target
from ..locales import format_log
from ..state import BANISH_ON_LEAVE, Zone
from ..summons import commit_fusion, fusion_zone_filter
from .common import (
    CardEffect,
    contract_count,
    contracts_on_field,
    destroy,
    empty_monster_zone_filter,
    fusion_materials_ok,
    fusion_options,
    in_spell_trap_area,
    is_dd_monster,
    is_dd_or_contract,
    is_yes,
    on_field,
    on_monster_field,
)
from .types import EffectEvent, Reason, SummonVariant

if TYPE_CHECKING:
    from ..engine import Engine

KEPLER_CID = "c004"
COPERNICUS_CID = "c009"
THOMAS_CID = "c010"
ORTHROS_CID = "c011"
COUNT_SURVEYOR_CID = "c012"
GRYPHON_CID = "c013"
SCALE_SURVEYOR_CID = "c014"
NECRO_SLIME_CID = "c015"
LANCE_SOLDIER_CID = "c032"
DEFENSE_SOLDIER_CID = "c033"

DEUS_MACHINEX_CID = "c018"
ARC_CRISIS_CID = "c029"


def _hand_effect_allowed(engine: "Engine", event: EffectEvent) -> bool:
    return event.manual and not engine.context.batching and not engine.interaction.pendulum_summoning


class KeplerEffect(CardEffect):
    """On summon: search a Dark Contract, or return another DD monster to the hand."""

    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        if event.manual or not on_monster_field(state, self_id):
            return
        options = [(format_log("label_contract_search_deck"), "search")]
        if any(iid != self_id and is_dd(state.definition(iid)) for iid in state.field_monsters()):
            options.append((format_log("label_dd_return_field"), "return"))
        choice = yield choose("prompt_kepler_select_effect", options)
        if choice == "search":
            picked = yield search(lambda s, iid: is_dark_contract(s.definition(iid)), title_key="prompt_contract_search")
        elif choice == "return":
            picked = yield target(
                lambda s, iid: on_monster_field(s, iid) and iid != self_id and is_dd(s.definition(iid)),
                "prompt_kepler_return",
            )
        else:
            return
        with engine.history_unit():
            engine.move_card(picked, Zone.HAND)
            engine.add_turn_effect_usage(KEPLER_CID, self_id)


class CopernicusEffect(CardEffect):
    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        if event.manual or self_id not in state.monster_zones:
            return
        if state.usage.get(COPERNICUS_CID, 0) >= 1:
            return
        answer = yield confirm("prompt_copernicus_dump")
        if not is_yes(answer):
            return
        engine.add_turn_effect_usage(COPERNICUS_CID, self_id)
        picked = yield search(lambda s, iid: iid != self_id and is_dd_or_contract(s, iid))
        engine.move_card(picked, Zone.GRAVEYARD, suppress_trigger=True)
        engine.log("log_copernicus_dump", card=engine.state.card(picked).name)


class ThomasEffect(CardEffect):
    """P: add a face-up DD pendulum from the extra deck. Monster: destroy a scale, summon a level 8 DDD."""

    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        if not event.manual:
            return
        name = state.card(self_id).name
        if self_id in state.spell_trap_zones:
            if state.usage.get("c010_p", 0) >= 1:
                engine.log("log_hopt_used", card=name)
                return
            answer = yield confirm("prompt_thomas_p_return")
            if not is_yes(answer):
                return
            picked = yield search(
                lambda s, iid: s.card(iid).face_up
                and is_dd(s.definition(iid))
                and is_main_deck_pendulum(s.definition(iid)),
                source=Zone.EXTRA_DECK,
            )
            with engine.history_unit():
                engine.move_card(picked, Zone.HAND)
                engine.add_turn_effect_usage("c010_p", self_id)
            return

        if self_id not in state.monster_zones:
            return
        if state.usage.get("c010_m", 0) >= 1:
            engine.log("log_hopt_used", card=name)
            return
        answer = yield confirm("prompt_thomas_ss_lv8")
        if not is_yes(answer):
            return
        scale = yield target(
            lambda s, iid: iid in s.spell_trap_zones and is_dd(s.definition(iid)), "prompt_destroy_card"
        )
        summoned = yield search(
            lambda s, iid: "DDD" in s.definition(iid).name and s.definition(iid).level == 8,
            title_key="prompt_select_lv8_ddd",
        )
        zones = empty_monster_zone_filter(engine.state)
        if zones is None:
            engine.log("log_no_available_zones")
            return
        ref = yield select_zone(zones)
        with engine.history_unit():
            engine.push_history()
            engine.log("log_destroy", card=engine.state.card(scale).name)
            destroy(engine, self_id, scale)
            engine.add_turn_effect_usage("c010_m", self_id)
            engine.state.modifiers[summoned] = {"is_negated": True, "level": 8}
            engine.move_card(summoned, Zone.MONSTER_ZONE, ref.index, Zone.DECK, is_special_summon=True)


class OrthrosEffect(CardEffect):
    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        if self_id in state.spell_trap_zones:
            if not event.manual:
                return
            answer = yield confirm("prompt_orthros_p_destroy")
            if not is_yes(answer):
                return
            first = yield target(
                lambda s, iid: on_field(s, iid) and iid != self_id and is_dd_or_contract(s, iid), "prompt_destroy_card"
            )
            second = yield target(lambda s, iid: in_spell_trap_area(s, iid) and iid != first, "prompt_destroy_card")
            state = engine.state
            with engine.history_unit():
                engine.push_history()
                engine.log("log_activate_effect", card=state.card(self_id).name)
                engine.add_turn_effect_usage(ORTHROS_CID, self_id)
                engine.log("log_orthros_destroy", card=state.card(first).name, target=state.card(second).name)
                destroy(engine, self_id, first)
                destroy(engine, self_id, second)
            return

        if self_id not in state.hand or event.reason != Reason.TRIGGER:
            return
        if engine.context.batching or engine.interaction.pendulum_summoning:
            return
        answer = yield confirm("prompt_orthros_hand_ss")
        if not is_yes(answer):
            return
        zones = empty_monster_zone_filter(engine.state)
        if zones is None:
            engine.log("log_orthros_no_empty_zone")
            return
        ref = yield select_zone(zones)
        engine.move_card(self_id, Zone.MONSTER_ZONE, ref.index, Zone.HAND, is_special_summon=True)


class CountSurveyorEffect(CardEffect):
    """Hand: discard a DD and special summon itself. On summon: search a DD with 0 ATK or DEF."""

    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        if self_id in state.hand:
            if not _hand_effect_allowed(engine, event) or state.usage.get("c012_hand_ss", 0) >= 1:
                return
            answer = yield confirm("prompt_count_surveyor_hand_ss")
            if not is_yes(answer):
                return
            state = engine.state
            discards = [iid for iid in state.hand if iid != self_id and is_dd(state.definition(iid))]
            if not discards:
                engine.log("log_error_condition")
                return
            discard = yield search(lambda s, iid: iid in discards, source=discards, title_key="prompt_discard_dd_hand")
            zones = empty_monster_zone_filter(engine.state)
            if zones is None:
                engine.log("err_count_surveyor_no_zone")
                return
            ref = yield select_zone(zones)
            # Discard and summon resolve together so their triggers share one chain.
            with engine.history_unit():
                engine.push_history()
                with engine.batch():
                    engine.add_turn_effect_usage("c012_hand_ss", self_id)
                    engine.move_card(discard, Zone.GRAVEYARD)
                    engine.move_card(self_id, Zone.MONSTER_ZONE, ref.index, Zone.HAND, is_special_summon=True)
            return

        if event.manual or not on_monster_field(state, self_id):
            return
        if state.usage.get("c012_search", 0) >= 1:
            engine.log("log_hopt_used", card=state.card(self_id).name)
            return
        answer = yield confirm("prompt_count_surveyor_search_0")
        if not is_yes(answer):
            return
        engine.add_turn_effect_usage("c012_search", self_id)
        picked = yield search(
            lambda s, iid: is_dd(s.definition(iid))
            and (s.definition(iid).attack == 0 or s.definition(iid).defense == 0),
            title_key="prompt_select_0_dd",
        )
        engine.move_card(picked, Zone.HAND)


class GryphonEffect(CardEffect):
    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        if self_id in state.hand:
            if not _hand_effect_allowed(engine, event) or state.usage.get("c013_hand_ss", 0) >= 1:
                return
            if not any(is_dd(state.definition(iid)) for iid in state.field_monsters()):
                return
            answer = yield confirm("prompt_gryphon_hand_ss")
            if not is_yes(answer):
                return
            zones = empty_monster_zone_filter(engine.state)
            if zones is None:
                engine.log("log_no_available_zones")
                return
            ref = yield select_zone(zones)
            with engine.history_unit():
                engine.add_turn_effect_usage("c013_hand_ss", self_id)
                engine.move_card(self_id, Zone.MONSTER_ZONE, ref.index, Zone.HAND, is_special_summon=True)
            return

        if self_id in state.spell_trap_zones:
            if not event.manual:
                return
            if not contract_count(state, include_graveyard=True):
                engine.log("log_error_condition")
                return
            answer = yield confirm("prompt_gryphon_p_atk_up")
            if not is_yes(answer):
                return
            buffed = yield target(lambda s, iid: on_monster_field(s, iid) and is_dd(s.definition(iid)))
            name = engine.state.card(self_id).name
            with engine.history_unit():
                engine.add_turn_effect_usage(GRYPHON_CID, self_id)
                engine.modify_card_property(buffed, "attack", 2000, "add")
                engine.log("log_activate_effect", card=name)
                engine.log("log_destroy", card=name)
                engine.state.last_effect_source_id = self_id
                engine.move_card(self_id, Zone.EXTRA_DECK)
            return

        if self_id not in state.monster_zones or event.manual:
            return
        if event.summon_variant == SummonVariant.PENDULUM and state.usage.get("c013_psummon", 0) < 1:
            answer = yield confirm("prompt_gryphon_draw")
            if not is_yes(answer):
                return
            state = engine.state
            costs = [iid for iid in state.hand if is_dd_or_contract(state, iid)]
            if not costs:
                engine.log("log_error_condition")
                return
            discard = yield search(lambda s, iid: iid in costs, source=costs, title_key="prompt_discard_card")
            with engine.history_unit():
                engine.add_turn_effect_usage("c013_psummon", self_id)
                engine.move_card(discard, Zone.GRAVEYARD)
                engine.draw_card()
        elif event.from_zone == Zone.GRAVEYARD:
            answer = yield confirm("prompt_gryphon_gy_return")
            if not is_yes(answer):
                return
            picked = yield search(lambda s, iid: is_dd(s.definition(iid)), title_key="prompt_select_dd_ss")
            engine.move_card(picked, Zone.HAND)


def _dd_pendulum_on_field(engine: "Engine") -> list[str]:
    state = engine.state
    return [
        iid
        for iid in state.field_cards()
        if is_dd(state.definition(iid)) and is_pendulum(state.definition(iid))
    ]


class ScaleSurveyorEffect(CardEffect):
    """Hand summon, level change to 4, and the bounce when it reaches the GY or extra deck."""

    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        if self_id in state.hand:
            if not _hand_effect_allowed(engine, event):
                return
            if state.usage.get("c014_hand_ss", 0) >= 1:
                engine.log("log_error_condition")
                return
            controlled = state.field_monsters() + state.pendulum_scales()
            if not any(is_dd(state.definition(i)) and is_pendulum(state.definition(i)) for i in controlled):
                engine.log("log_error_condition")
                return
            answer = yield confirm("prompt_scale_surveyor_ss")
            if not is_yes(answer):
                return
            zones = empty_monster_zone_filter(engine.state)
            if zones is None:
                engine.log("log_error_zone")
                return
            ref = yield select_zone(zones)
            with engine.history_unit():
                engine.add_turn_effect_usage("c014_hand_ss", self_id)
                engine.move_card(self_id, Zone.MONSTER_ZONE, ref.index, Zone.HAND, is_special_summon=True)
            return

        if on_monster_field(state, self_id):
            if not event.manual:
                return
            if state.usage.get("c014_level_change", 0) >= 1:
                engine.log("log_error_condition")
                return
            answer = yield confirm("prompt_scale_surveyor_level_change")
            if not is_yes(answer):
                return
            with engine.history_unit():
                engine.add_turn_effect_usage("c014_level_change", self_id)
                engine.modify_card_property(self_id, "level", 4, "set")
            return

        if event.manual or (self_id not in state.graveyard and self_id not in state.extra_deck):
            return
        if state.usage.get("c014_bounce", 0) >= 1 or not _dd_pendulum_on_field(engine):
            return
        answer = yield confirm("prompt_scale_surveyor_bounce")
        if not is_yes(answer) or engine.state.usage.get("c014_bounce", 0) >= 1:
            return
        candidates = _dd_pendulum_on_field(engine)
        if not candidates:
            return
        picked = yield search(lambda s, iid: iid in candidates, source=candidates)
        definition = engine.state.definition(picked)
        with engine.history_unit():
            engine.add_turn_effect_usage("c014_bounce")
            if is_extra_deck_type(definition):
                engine.move_card(picked, Zone.EXTRA_DECK)
                engine.log("log_to_extra", card=definition.name)
            else:
                engine.move_card(picked, Zone.HAND, suppress_trigger=True)
                engine.log("log_scale_surveyor_bounced", card=definition.name)


class NecroSlimeEffect(CardEffect):
    """From the GY: banish itself and another DD, then fusion summon a DDD fusion."""

    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        if not event.manual or self_id not in state.graveyard:
            return
        if state.usage.get("c015_effect", 0) >= 1:
            return
        if not any(iid != self_id and is_dd(state.definition(iid)) for iid in state.graveyard):
            return
        answer = yield confirm("prompt_necro_slime_fusion")
        if not is_yes(answer):
            return
        options = fusion_options(engine.state, dd_only=True)
        if not options:
            engine.log("log_no_fusion_in_ex")
            return
        fusion_id = yield choose("label_fusion_monster_select", options)
        material = yield search(
            lambda s, iid: iid != self_id
            and is_dd(s.definition(iid))
            and fusion_materials_ok(s, fusion_id, [self_id, iid]),
            source=Zone.GRAVEYARD,
            title_key="prompt_select_material",
        )
        materials = [self_id, material]
        zones = fusion_zone_filter(engine, materials)
        state = engine.state
        free = [
            (zone, i)
            for zone in (Zone.MONSTER_ZONE, Zone.EXTRA_MONSTER_ZONE)
            for i in range(len(state.slots(zone)))
            if zones(zone, i)
        ]
        if not free:
            engine.log("log_no_available_zones")
            return
        ref = yield select_zone(zones, "prompt_select_zone_fusion")
        with engine.history_unit():
            engine.push_history()
            engine.log("log_fusion_select", card=state.card(fusion_id).name)
            engine.add_turn_effect_usage("c015_effect", self_id)
            engine.log("log_necro_slime_banish", card1=state.card(self_id).name, card2=state.card(material).name)
            commit_fusion(engine, fusion_id, [(iid, Zone.BANISHED) for iid in materials], ref.zone, ref.index)


class LanceSoldierEffect(CardEffect):
    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        if not event.manual:
            return
        if on_monster_field(state, self_id):
            yield from self._raise_level(engine, self_id)
        elif self_id in state.graveyard:
            yield from self._revive(engine, self_id)

    def _raise_level(self, engine: "Engine", self_id: str) -> Iterator[Request]:
        state = engine.state
        if state.usage.get("c032_level", 0) >= 1:
            engine.log("log_error_condition")
            return
        contracts = contract_count(state, include_graveyard=True)
        if not contracts:
            engine.log("log_error_condition")
            return
        answer = yield confirm("prompt_lance_soldier_level")
        if not is_yes(answer):
            return
        raised = yield target(
            lambda s, iid: on_monster_field(s, iid)
            and is_dd_monster(s, iid)
            and "XYZ" not in s.definition(iid).sub_type
            and "LINK" not in s.definition(iid).sub_type
        )
        amount = 1
        if contracts > 1:
            options = [(format_log("prompt_level_amount", amount=n), str(n)) for n in range(1, contracts + 1)]
            amount = int((yield choose("prompt_lance_soldier_level", options)))
        with engine.history_unit():
            engine.add_turn_effect_usage("c032_level")
            engine.modify_card_property(raised, "level", amount, "add")
            engine.log("log_level_change_amount", card=engine.state.card(raised).name, amount=amount)

    def _revive(self, engine: "Engine", self_id: str) -> Iterator[Request]:
        state = engine.state
        if state.usage.get("c032_gy_ss", 0) >= 1:
            engine.log("log_effect_already_used", card=state.card(self_id).name)
            return
        if not contracts_on_field(state):
            return
        answer = yield confirm("prompt_lance_gy")
        if not is_yes(answer):
            return
        contract = yield target(
            lambda s, iid: in_spell_trap_area(s, iid) and is_dark_contract(s.definition(iid)), "prompt_destroy_card"
        )
        zones = empty_monster_zone_filter(engine.state)
        if zones is None:
            engine.log("log_error_condition")
            return
        ref = yield select_zone(zones, "prompt_select_zone_ss")
        # The summon resolves before any reaction to the contract's destruction.
        with engine.history_unit():
            engine.push_history()
            with engine.batch():
                engine.add_turn_effect_usage("c032_gy_ss")
                destroy(engine, self_id, contract)
                engine.move_card(self_id, Zone.MONSTER_ZONE, ref.index, Zone.GRAVEYARD, is_special_summon=True)
                engine.set_card_flag(self_id, BANISH_ON_LEAVE)
                engine.log("log_lance_soldier_banish_warn")


def _defense_soldier_targets(engine: "Engine") -> list[str]:
    state = engine.state

    def eligible(iid: str) -> bool:
        definition = state.definition(iid)
        return (
            is_dd(definition)
            and is_pendulum(definition)
            and definition.card_id not in (DEUS_MACHINEX_CID, ARC_CRISIS_CID)
        )

    from_extra = [
        iid
        for iid in state.extra_deck
        if state.card(iid).face_up and not is_extra_deck_type(state.definition(iid)) and eligible(iid)
    ]
    from_grave = [iid for iid in state.graveyard if eligible(iid)]
    return list(dict.fromkeys(from_extra + from_grave))


class DefenseSoldierEffect(CardEffect):
    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        state = engine.state
        if not event.manual:
            return
        on_board = on_monster_field(state, self_id)
        in_grave = self_id in state.graveyard
        if not on_board and not in_grave:
            return
        options: list[tuple[str, str]] = []
        if on_board and state.usage.get("c033_p_ss", 0) < 1:
            options.append((format_log("label_ss_pzone"), "ss_p"))
        if in_grave and state.usage.get("c033_gy_search", 0) < 1:
            options.append((format_log("label_gy_add_p"), "gy_search"))
        if not options:
            engine.log("log_effect_already_used", card=state.card(self_id).name)
            return
        options.append((format_log("ui_cancel"), "no"))
        choice = yield choose("prompt_defense_soldier_activate", options)

        if choice == "ss_p":
            scale = yield target(
                lambda s, iid: iid in s.pendulum_scales()
                and is_dd(s.definition(iid))
                and is_pendulum(s.definition(iid)),
                "prompt_defense_soldier_ss",
            )
            zones = empty_monster_zone_filter(engine.state)
            if zones is None:
                engine.log("log_error_condition")
                return
            ref = yield select_zone(zones)
            with engine.history_unit():
                engine.move_card(scale, Zone.MONSTER_ZONE, ref.index, Zone.SPELL_TRAP_ZONE, is_special_summon=True)
                engine.add_turn_effect_usage("c033_p_ss")
        elif choice == "gy_search":
            candidates = _defense_soldier_targets(engine)
            if not candidates:
                engine.log("log_defense_soldier_no_targets")
                return
            picked = yield search(
                lambda s, iid: iid in candidates, source=candidates, title_key="prompt_defense_soldier_search"
            )
            with engine.history_unit():
                engine.move_card(self_id, Zone.BANISHED)
                engine.log("log_banish", card=engine.state.card(self_id).name)
                engine.move_card(picked, Zone.HAND)
                engine.add_turn_effect_usage("c033_gy_search")
