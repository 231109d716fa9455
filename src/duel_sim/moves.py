from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING

from . import rules
from .cards import is_dark_contract, is_dd, is_ddd, is_extra_deck_type, is_main_deck_pendulum, is_monster, is_pendulum
from .effects.types import EffectEvent, Reason, SummonVariant
from .errors import IllegalPlacementError
from .locales import format_log
from .state import (
    BANISH_ON_LEAVE,
    FIELD_ZONES,
    LIST_ZONES,
    PENDULUM_SUMMONED,
    PENDULUM_ZONE_INDICES,
    DuelState,
    Zone,
)

if TYPE_CHECKING:
    from .engine import Engine

logger = logging.getLogger(__name__)

ORTHROS_CID = "c011"
ZERO_MACHINEX_CID = "c030"
ARC_CRISIS_CID = "c029"
ABYSS_RAGNAROK_CID = "c008"
GENGHIS_CIDS = ("c007", "c019")
LINK_INTERCEPT_CIDS = ("c017", "c028")
MATERIAL_HANDLER_CIDS = ("c014", "c021", "c022", "c023")
# These handlers run on every move regardless of their usage counter.
MOVE_DISPATCH_EXEMPT = ("c021", "c012", "c009")

_VARIANT_LOG_PREFIX = {
    SummonVariant.FUSION: "fusion",
    SummonVariant.SYNCHRO: "synchro",
    SummonVariant.XYZ: "xyz",
    SummonVariant.LINK: "link",
}


def infer_source(state: DuelState, instance_id: str) -> Zone:
    location = state.locate(instance_id)
    return location.zone if location else Zone.DECK


def remove_from_board(state: DuelState, instance_id: str) -> None:
    for zone in LIST_ZONES:
        items = state.zone_list(zone)
        if instance_id in items:
            items.remove(instance_id)
    for slots in (state.monster_zones, state.spell_trap_zones, state.extra_monster_zones):
        for index, occupant in enumerate(slots):
            if occupant == instance_id:
                slots[index] = None
    if state.field_zone == instance_id:
        state.field_zone = None
    for host in list(state.materials):
        mats = state.materials[host]
        if instance_id in mats:
            mats.remove(instance_id)
            if not mats:
                del state.materials[host]


def collect_materials(state: DuelState, host_id: str) -> list[str]:
    collected: list[str] = []
    for mat in state.materials.pop(host_id, []):
        collected.append(mat)
        collected.extend(collect_materials(state, mat))
    return collected


def _move_log_key(actual: Zone, normal_summon: bool, is_special_summon: bool, variant: SummonVariant | None) -> str:
    if normal_summon:
        return "log_ns"
    if actual in (Zone.MONSTER_ZONE, Zone.EXTRA_MONSTER_ZONE):
        suffix = "mz" if actual == Zone.MONSTER_ZONE else "emz"
        if is_special_summon:
            prefix = _VARIANT_LOG_PREFIX.get(variant) if variant else None
            if prefix:
                return f"log_{prefix}_summon_to_{suffix}"
            return f"log_sp_summon_to_{suffix}"
        return f"log_move_to_{suffix}"
    return {
        Zone.HAND: "log_move_to_hand",
        Zone.DECK: "log_move_to_deck_top",
        Zone.GRAVEYARD: "log_move_to_gy",
        Zone.BANISHED: "log_move_to_banish",
        Zone.EXTRA_DECK: "log_move_to_ex",
        Zone.SPELL_TRAP_ZONE: "log_move_to_stz",
        Zone.FIELD_ZONE: "log_activate_spell",
    }[actual]


def move_card(
    engine: "Engine",
    instance_id: str,
    to_zone: Zone,
    to_index: int = 0,
    from_location: Zone | None = None,
    suppress_trigger: bool = False,
    is_special_summon: bool = False,
    summon_variant: SummonVariant | None = None,
    *,
    tributes_paid: bool = False,
) -> bool:
    """Relocate one card instance. Returns True when the move committed."""
    state = engine.state
    card = state.card(instance_id)
    definition = card.definition
    ctx = engine.context
    to_zone = Zone(to_zone)
    suppressed = suppress_trigger or ctx.suppress_triggers
    source = Zone(from_location) if from_location else infer_source(state, instance_id)

    if ctx.dragging and {source, to_zone} == {Zone.GRAVEYARD, Zone.BANISHED}:
        engine.log("log_error_condition")
        return False

    try:
        if to_zone == Zone.EXTRA_MONSTER_ZONE and not is_special_summon and not suppressed:
            rules.check_emz_restriction(state, to_index, instance_id)
        rules.validate_placement(state, instance_id, to_zone, to_index)
    except IllegalPlacementError as exc:
        engine.log(exc.log_key, **exc.params)
        return False

    if (
        to_zone == Zone.EXTRA_MONSTER_ZONE
        and not is_special_summon
        and not suppressed
        and card.card_id in LINK_INTERCEPT_CIDS
        and instance_id in state.extra_deck
    ):
        from .summons import start_link_summon

        start_link_summon(engine, instance_id, to_index)
        return False

    warnings: list[str] = []
    normal_summon = to_zone == Zone.MONSTER_ZONE and source == Zone.HAND and not is_special_summon
    consumes_normal_summon = False
    first_normal_summon = False
    if normal_summon:
        if state.normal_summon_used:
            return False
        first_normal_summon = True
        required = rules.tributes_required(definition.level or 0)
        available = sum(1 for occupant in state.monster_zones if occupant)
        if tributes_paid or not required:
            consumes_normal_summon = True
        elif available < required:
            logger.warning("Normal summon of %s without the %d required tributes", definition.name, required)
            warnings.append(format_log("log_warn_tribute", level=definition.level or 0))
        else:
            consumes_normal_summon = True
            warnings.append(format_log("log_warn_manual_tribute"))

    engine.push_history()
    was_batching = ctx.batching
    with engine.operation(batching=True):
        from_field = source in FIELD_ZONES
        if card.card_id == ORTHROS_CID and to_zone == Zone.SPELL_TRAP_ZONE:
            state.usage.pop(ORTHROS_CID, None)
        if from_field and to_zone not in FIELD_ZONES and state.has_flag(instance_id, BANISH_ON_LEAVE):
            to_zone = Zone.BANISHED
        leaving_field = from_field and to_zone not in FIELD_ZONES

        remove_from_board(state, instance_id)
        if instance_id in state.trigger_candidates:
            state.trigger_candidates.remove(instance_id)
        if consumes_normal_summon:
            state.normal_summon_used = True
        if leaving_field:
            state.flags.pop(instance_id, None)
            state.modifiers.pop(instance_id, None)
        if summon_variant == SummonVariant.PENDULUM:
            flags = state.flags.setdefault(instance_id, [])
            if PENDULUM_SUMMONED not in flags:
                flags.append(PENDULUM_SUMMONED)

        actual = to_zone
        if to_zone in (Zone.HAND, Zone.DECK) and is_extra_deck_type(definition):
            actual = Zone.EXTRA_DECK
            card.face_up = False
        elif to_zone == Zone.HAND:
            card.face_up = False
            state.hand.append(instance_id)
        elif to_zone == Zone.DECK:
            card.face_up = False
            state.deck.insert(0, instance_id)
        elif to_zone == Zone.GRAVEYARD:
            if is_pendulum(definition) and from_field and source != Zone.MATERIAL:
                actual = Zone.EXTRA_DECK
                card.face_up = True
            else:
                card.face_up = False
                state.graveyard.append(instance_id)
        elif to_zone == Zone.BANISHED:
            card.face_up = False
            state.banished.append(instance_id)
        elif to_zone == Zone.EXTRA_DECK:
            card.face_up = is_main_deck_pendulum(definition) or (is_pendulum(definition) and from_field)
        elif to_zone == Zone.FIELD_ZONE:
            state.field_zone = instance_id
        else:
            state.slots(to_zone)[to_index] = instance_id
        if actual == Zone.EXTRA_DECK:
            state.extra_deck = rules.sort_extra_deck(state, state.extra_deck + [instance_id])

        detached: list[str] = []
        if leaving_field and instance_id in state.materials:
            detached = collect_materials(state, instance_id)
            for mat in detached:
                state.cards[mat].face_up = False
                state.modifiers.pop(mat, None)
                state.flags.pop(mat, None)
            state.graveyard.extend(detached)
            if not (ctx.material_move or ctx.link_summoning):
                warnings.append(format_log("log_materials_detached"))

        skip_log = (ctx.dragging and from_field and actual in FIELD_ZONES) or ctx.quiet or suppressed
        if not skip_log:
            line = format_log(
                _move_log_key(actual, normal_summon, is_special_summon, summon_variant),
                card=definition.name,
                index=to_index + 1,
            )
            engine.log_line(" ".join([line, *warnings]))

        is_destruction = from_field and (
            to_zone == Zone.GRAVEYARD or (to_zone == Zone.EXTRA_DECK and source != Zone.MATERIAL)
        )
        used_as_material = to_zone in (Zone.GRAVEYARD, Zone.EXTRA_DECK) and (
            ctx.link_summoning or ctx.material_move
        )
        if is_destruction and not used_as_material and not suppressed:
            _queue_destruction_reactions(engine, instance_id)

        for mat in detached:
            if state.cards[mat].card_id in MATERIAL_HANDLER_CIDS:
                engine.dispatch(mat, EffectEvent(Reason.MATERIAL, from_zone=Zone.MATERIAL, is_material=True))

        if not suppressed and is_dd(definition) and (is_special_summon or (normal_summon and first_normal_summon)):
            _raise_trigger_candidates(engine, instance_id, is_special_summon)

        if engine.has_handler(instance_id) and (
            card.card_id in MOVE_DISPATCH_EXEMPT or state.usage.get(card.card_id, 0) < 1
        ):
            event = EffectEvent(
                Reason.MOVE,
                from_zone=source,
                summon_variant=summon_variant,
                is_material=used_as_material,
            )
            if was_batching:
                logger.debug("Deferring %s dispatch for %s", event.reason.value, instance_id)
                engine.interaction.pending_effects.append(partial(engine.dispatch, instance_id, event))
            else:
                engine.dispatch(instance_id, event)

        if not was_batching:
            engine.process_pending_effects()
            engine.process_ui_queue()
    if not was_batching:
        engine.state.last_effect_source_id = None
    return True


def _queue_destruction_reactions(engine: "Engine", instance_id: str) -> None:
    from .effects.ddd_effects import arc_crisis_placement, machinex_reaction

    state = engine.state
    definition = state.definition(instance_id)
    card_id = state.card(instance_id).card_id
    if (
        (is_ddd(definition) or is_dark_contract(definition))
        and card_id != ZERO_MACHINEX_CID
        and state.last_effect_source_id
        and state.usage.get("c030_ss_reaction", 0) < 1
    ):
        for machinex_id in state.extra_deck:
            machinex = state.card(machinex_id)
            if machinex.card_id == ZERO_MACHINEX_CID and machinex.face_up:
                logger.debug("Queueing Zero Machinex reaction for %s", machinex_id)
                engine.interaction.modal_queue.append(
                    partial(engine.start_interaction_for, machinex_reaction, machinex_id)
                )
    if card_id == ARC_CRISIS_CID and rules.first_free_pendulum_zone(state) is not None:
        engine.start_interaction(arc_crisis_placement(engine, instance_id))


def _has_monster_in_graveyard(state: DuelState, predicate) -> bool:
    return any(is_monster(state.definition(iid)) and predicate(state.definition(iid)) for iid in state.graveyard)


def _raise_trigger_candidates(engine: "Engine", moved_id: str, is_special_summon: bool) -> None:
    state = engine.state

    def add(candidate: str) -> None:
        if candidate not in state.trigger_candidates and not state.is_negated(candidate):
            state.trigger_candidates.append(candidate)
            logger.debug("Trigger candidate raised: %s", candidate)

    for iid in state.field_monsters():
        card = state.card(iid)
        name = card.name
        if card.card_id in GENGHIS_CIDS and iid != moved_id:
            if card.card_id == "c007" and not is_special_summon:
                continue
            if state.usage.get(f"{name}_opt", 0) < 1 and _has_monster_in_graveyard(state, is_dd):
                add(iid)
        elif card.card_id == ABYSS_RAGNAROK_CID and iid == moved_id:
            if state.usage.get(f"{name}_summon_opt", 0) < 1 and _has_monster_in_graveyard(state, is_ddd):
                add(iid)

    for index in PENDULUM_ZONE_INDICES:
        iid = state.spell_trap_zones[index]
        if not iid or iid == moved_id or state.card(iid).card_id != ABYSS_RAGNAROK_CID:
            continue
        name = state.card(iid).name
        if state.usage.get(f"{name}_peffect_opt", 0) < 1 and any(
            is_dd(state.definition(g)) for g in state.graveyard
        ):
            add(iid)
