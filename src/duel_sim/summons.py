from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterator, Sequence

from . import rules
from .cards import is_dd, is_ddd, is_monster, is_pendulum, is_tuner
from .effects.types import SummonVariant
from .interaction import Request, choose, confirm, select_zone, target, zone_in
from .locales import format_log
from .moves import collect_materials, remove_from_board
from .state import DuelState, Zone

if TYPE_CHECKING:
    from .engine import Engine

logger = logging.getLogger(__name__)

GILGAMESH_CID = "c017"
ZEUS_RAGNAROK_CID = "c028"
DEUS_MACHINEX_CID = "c018"
TELL_CID = "c021"
ARC_CRISIS_CID = "c029"
COPERNICUS_CID = "c009"
GRYPHON_CID = "c013"
ORTHROS_CID = "c011"

ZEUS_LINK_RATING = 3


def _names(state: DuelState, ids: Sequence[str]) -> str:
    return ", ".join(state.card(iid).name for iid in ids)


def _field_dd_monster(state: DuelState, iid: str) -> bool:
    return iid in state.field_monsters() and is_dd(state.definition(iid))


# --- Link ---------------------------------------------------------------


def start_link_summon(engine: "Engine", link_id: str, emz_index: int) -> None:
    card_id = engine.state.card(link_id).card_id
    if card_id == GILGAMESH_CID:
        engine.start_interaction(_gilgamesh_link(engine, link_id, emz_index))
    elif card_id == ZEUS_RAGNAROK_CID:
        engine.start_interaction(_zeus_link(engine, link_id, emz_index))


def _gilgamesh_link(engine: "Engine", link_id: str, emz_index: int) -> Iterator[Request]:
    state = engine.state
    if sum(1 for iid in state.field_monsters() if is_dd(state.definition(iid))) < 2:
        engine.log("log_gilgamesh_req_fail")
        return
    first = yield target(_field_dd_monster, "prompt_select_link_material", current=0, max=2)
    second = yield target(
        lambda s, iid: _field_dd_monster(s, iid) and iid != first,
        "prompt_select_link_material",
        current=1,
        max=2,
    )
    with engine.history_unit():
        engine.push_history()
        engine.log("log_link_material_select", card=engine.state.card(second).name)
        _commit_link(engine, link_id, emz_index, [first, second])

    state = engine.state
    orthros = next((iid for iid in state.hand if state.card(iid).card_id == ORTHROS_CID), None)
    if orthros and orthros not in state.trigger_candidates:
        state.trigger_candidates.append(orthros)


def _zeus_link(engine: "Engine", link_id: str, emz_index: int) -> Iterator[Request]:
    state = engine.state
    candidates = [iid for iid in state.field_monsters() if is_dd(state.definition(iid))]
    has_gilgamesh = any(state.card(iid).card_id == GILGAMESH_CID for iid in candidates)
    if not has_gilgamesh and len(candidates) < ZEUS_LINK_RATING:
        engine.log("log_ragnarok_req_fail")
        return

    picked: list[str] = []
    rating = 0
    while not (rating == ZEUS_LINK_RATING and len(picked) >= 2):
        if rating >= ZEUS_LINK_RATING:
            engine.log("log_error_condition")
            return
        chosen = yield target(
            lambda s, iid: _field_dd_monster(s, iid) and iid not in picked,
            "prompt_select_link_material",
            current=rating,
            max=ZEUS_LINK_RATING,
        )
        picked.append(chosen)
        if engine.state.card(chosen).card_id != GILGAMESH_CID:
            rating += 1
        elif len(picked) >= 3 or rating == 2:
            rating += 1
        else:
            answer = yield confirm("prompt_gilgamesh_count_as_2")
            rating += 2 if answer == "yes" else 1

    with engine.history_unit():
        engine.push_history()
        engine.log("log_ragnarok_link_start", materials=_names(engine.state, picked))
        _commit_link(engine, link_id, emz_index, picked)


def _commit_link(engine: "Engine", link_id: str, emz_index: int, materials: list[str]) -> None:
    with engine.history_unit():
        engine.push_history()
        with engine.batch(), engine.operation(link_summoning=True):
            with engine.operation(material_move=True):
                for mat in materials:
                    engine.move_card(mat, Zone.GRAVEYARD)
            engine.move_card(
                link_id,
                Zone.EXTRA_MONSTER_ZONE,
                emz_index,
                Zone.EXTRA_DECK,
                is_special_summon=True,
                summon_variant=SummonVariant.LINK,
            )
            engine.log("log_summon_materials", materials=_names(engine.state, materials))
    logger.debug("Link summon of %s with %s", link_id, materials)


# --- Synchro ------------------------------------------------------------


def start_synchro_summon(engine: "Engine", synchro_id: str) -> None:
    if synchro_id not in engine.state.extra_deck:
        engine.log("log_error_condition")
        return
    engine.start_interaction(_synchro(engine, synchro_id))


def _synchro(engine: "Engine", synchro_id: str) -> Iterator[Request]:
    level = engine.state.definition(synchro_id).level or 0
    tuner = yield target(
        lambda s, iid: iid in s.field_monsters() and is_tuner(s.definition(iid)),
        "prompt_select_material",
    )
    tuner_level = engine.state.effective_level(tuner)
    non_tuner = yield target(
        lambda s, iid: iid in s.field_monsters()
        and iid != tuner
        and not is_tuner(s.definition(iid))
        and tuner_level + s.effective_level(iid) == level,
        "prompt_select_material",
    )
    materials = [tuner, non_tuner]
    ref = yield select_zone(
        lambda zone, index: rules.material_zone_allowed(engine.state, zone, index, materials),
        "prompt_select_zone_synchro",
    )
    resolve_synchro_summon(engine, synchro_id, materials, ref.zone, ref.index)


def resolve_synchro_summon(engine: "Engine", synchro_id: str, materials: list[str], zone: Zone, index: int) -> None:
    with engine.history_unit():
        engine.push_history()
        engine.log("log_synchro_start", card=engine.state.card(synchro_id).name)
        with engine.batch():
            with engine.operation(material_move=True):
                for mat in materials:
                    engine.move_card(mat, Zone.GRAVEYARD)
            engine.move_card(
                synchro_id, zone, index, Zone.EXTRA_DECK, is_special_summon=True, summon_variant=SummonVariant.SYNCHRO
            )
            engine.log("log_summon_materials", materials=_names(engine.state, materials))


# --- Xyz and Arc Crisis -------------------------------------------------


def xyz_options(state: DuelState, xyz_id: str) -> list[tuple[str, str]]:
    card = state.card(xyz_id)
    rank = card.definition.rank or card.definition.level or 0
    options: list[tuple[str, str]] = []
    if card.card_id not in (TELL_CID, DEUS_MACHINEX_CID):
        options.append((format_log("ui_xyz_summon_rank", rank=rank), "standard"))
    if card.card_id == DEUS_MACHINEX_CID and any(is_ddd(state.definition(iid)) for iid in state.field_monsters()):
        options.append((format_log("ui_xyz_overlay_ddd"), "machinex_special"))
    if card.card_id == TELL_CID and any(_is_rank4_dd_xyz(state, iid) for iid in state.field_monsters()):
        options.append((format_log("ui_xyz_rank_up"), "tell_rankup"))
    if card.card_id == ARC_CRISIS_CID:
        options.append((format_log("ui_special_summon_4_mats"), "ark_crisis_special"))
    return options


def _is_rank4_dd_xyz(state: DuelState, iid: str) -> bool:
    definition = state.definition(iid)
    return definition.rank == 4 and is_dd(definition) and "XYZ" in definition.sub_type


def start_xyz_summon(engine: "Engine", xyz_id: str) -> None:
    if xyz_id not in engine.state.extra_deck:
        engine.log("log_error_condition")
        return
    options = xyz_options(engine.state, xyz_id)
    if not options:
        engine.log("log_xyz_no_options")
        return
    engine.start_interaction(_xyz(engine, xyz_id, options))


def _xyz(engine: "Engine", xyz_id: str, options: list[tuple[str, str]]) -> Iterator[Request]:
    if len(options) == 1:
        mode = options[0][1]
    else:
        mode = yield choose("prompt_select_xyz_type", options)

    if mode == "ark_crisis_special":
        yield from _arc_crisis(engine, xyz_id)
        return

    if mode == "standard":
        definition = engine.state.definition(xyz_id)
        rank = definition.rank or definition.level or 0
        materials: list[str] = []
        while len(materials) < 2:
            chosen = yield target(
                lambda s, iid: iid in s.field_monsters()
                and iid not in materials
                and (s.definition(iid).level is not None or "level" in s.modifiers.get(iid, {}))
                and s.effective_level(iid) == rank,
                "prompt_select_material",
            )
            materials.append(chosen)
        title = "prompt_select_zone_xyz"
    elif mode == "machinex_special":
        overlay = yield target(
            lambda s, iid: iid in s.field_monsters() and is_ddd(s.definition(iid)), "prompt_select_material"
        )
        materials = [overlay]
        title = "prompt_select_zone_machinex"
    elif mode == "tell_rankup":
        overlay = yield target(
            lambda s, iid: iid in s.field_monsters() and _is_rank4_dd_xyz(s, iid), "prompt_select_material"
        )
        materials = [overlay]
        title = "prompt_select_zone_tell"
    else:
        return

    ref = yield select_zone(
        lambda zone, index: rules.material_zone_allowed(engine.state, zone, index, materials), title
    )
    resolve_xyz_summon(engine, xyz_id, materials, ref.zone, ref.index)


def _arc_crisis(engine: "Engine", arc_id: str) -> Iterator[Request]:
    materials: list[str] = []
    while len(materials) < 4:
        chosen = yield target(
            lambda s, iid: iid in s.field_monsters() and iid not in materials,
            "log_arc_crisis_select_material",
            current=len(materials) + 1,
            requirements=format_log("label_fusion_synchro_xyz_p"),
        )
        materials.append(chosen)
    if not rules.check_arc_crisis(engine.state, materials):
        engine.log("log_arc_crisis_req_fail")
        return
    ref = yield select_zone(
        lambda zone, index: zone == Zone.MONSTER_ZONE and engine.state.monster_zones[index] is None,
        "prompt_select_zone_arc_crisis",
    )
    resolve_xyz_summon(engine, arc_id, materials, ref.zone, ref.index)


def resolve_xyz_summon(engine: "Engine", xyz_id: str, material_ids: list[str], zone: Zone, index: int) -> None:
    """Place the xyz (or Arc Crisis) directly; materials are attached, or sent to the GY for Arc Crisis."""
    state = engine.state
    xyz = state.card(xyz_id)
    attach = "XYZ" in xyz.definition.sub_type and xyz.card_id != ARC_CRISIS_CID

    with engine.history_unit():
        engine.push_history()
        state = engine.state
        collected: list[str] = []
        for mat in material_ids:
            nested = collect_materials(state, mat)
            remove_from_board(state, mat)
            state.modifiers.pop(mat, None)
            state.flags.pop(mat, None)
            if mat in state.trigger_candidates:
                state.trigger_candidates.remove(mat)
            collected.append(mat)
            collected.extend(nested)

        remove_from_board(state, xyz_id)
        state.slots(zone)[index] = xyz_id
        if attach:
            state.materials[xyz_id] = collected
        else:
            for mat in collected:
                state.cards[mat].face_up = False
            state.graveyard.extend(collected)

        engine.log("log_summon_materials", materials=_names(state, material_ids))
        if attach:
            engine.log("log_xyz_summon_success", card=xyz.name)
        else:
            engine.log("log_special_summon_success_gy", card=xyz.name)


# --- Fusion -------------------------------------------------------------


def fusion_material_destination(state: DuelState, material_id: str) -> Zone:
    """Graveyard materials are banished; hand and field materials go to the graveyard."""
    if material_id in state.graveyard:
        return Zone.BANISHED
    return Zone.GRAVEYARD


def commit_fusion(
    engine: "Engine",
    fusion_id: str,
    materials: Sequence[tuple[str, Zone]],
    zone: Zone,
    index: int,
    suppress_material_triggers: bool = False,
) -> None:
    material_ids = [iid for iid, _ in materials]
    with engine.history_unit():
        engine.push_history()
        with engine.batch():
            with engine.operation(material_move=True):
                for iid, destination in materials:
                    engine.move_card(iid, destination, suppress_trigger=suppress_material_triggers)
            engine.move_card(
                fusion_id, zone, index, Zone.EXTRA_DECK, is_special_summon=True, summon_variant=SummonVariant.FUSION
            )
            engine.log("log_summon_materials", materials=_names(engine.state, material_ids))


def fusion_zone_filter(engine: "Engine", material_ids: Sequence[str]):
    return lambda zone, index: rules.material_zone_allowed(engine.state, zone, index, material_ids)


# --- Pendulum -----------------------------------------------------------


def start_pendulum_summon(engine: "Engine") -> bool:
    state = engine.state
    if rules.pendulum_scale_range(state) is None:
        engine.log("log_error_condition")
        return False
    if state.pendulum_summon_count >= state.pendulum_summon_limit:
        engine.log("log_pendulum_limit_reached")
        return False
    candidates = rules.pendulum_candidates(state)
    if not candidates:
        engine.log("log_no_pendulum_monsters")
        return False
    engine.interaction.pendulum_summoning = True
    engine.interaction.pendulum_candidates = candidates
    return True


def cancel_pendulum_summon(engine: "Engine") -> None:
    engine.interaction.pendulum_summoning = False
    engine.interaction.pendulum_candidates = []
    engine.process_ui_queue()


def resolve_pendulum_selection(engine: "Engine", selected_ids: Sequence[str]) -> bool:
    interaction = engine.interaction
    if not interaction.pendulum_summoning:
        return False
    if any(iid not in interaction.pendulum_candidates for iid in selected_ids):
        return False
    interaction.pendulum_summoning = False
    interaction.pendulum_candidates = []
    engine.state.active_effect_card_id = None
    if not selected_ids:
        engine.process_ui_queue()
        return True
    engine.start_interaction(_pendulum_placement(engine, list(dict.fromkeys(selected_ids))))
    return True


def _pendulum_placement(engine: "Engine", selected_ids: list[str]) -> Iterator[Request]:
    placements: list[tuple[str, Zone, int]] = []
    for iid in selected_ids:
        state = engine.state
        if iid not in state.hand and iid not in state.extra_deck:
            continue
        pending = [(zone, index) for _, zone, index in placements]
        options = rules.pendulum_zone_options(state, iid, pending)
        if not options:
            engine.log("log_no_valid_zones_for_card", card=state.card(iid).name)
            continue
        ref = yield select_zone(zone_in(options), "prompt_select_zone_for_card", card=state.card(iid).name)
        placements.append((iid, ref.zone, ref.index))
    if placements:
        commit_pendulum_summon(engine, placements)


def _pendulum_order(engine: "Engine", iid: str) -> int:
    card_id = engine.state.card(iid).card_id
    if card_id == COPERNICUS_CID:
        return 0
    if card_id == GRYPHON_CID:
        return 2
    return 1


def commit_pendulum_summon(engine: "Engine", placements: Sequence[tuple[str, Zone, int]]) -> None:
    ordered = sorted(placements, key=lambda p: _pendulum_order(engine, p[0]))
    with engine.history_unit():
        engine.push_history()
        engine.log("log_pendulum_summoning", count=len(ordered))
        with engine.batch():
            for iid, zone, index in ordered:
                source = Zone.HAND if iid in engine.state.hand else Zone.EXTRA_DECK
                engine.move_card(
                    iid, zone, index, source, is_special_summon=True, summon_variant=SummonVariant.PENDULUM
                )
            engine.state.pendulum_summon_count += 1
    logger.debug("Pendulum summon committed: %s", [p[0] for p in ordered])


# --- Tribute ------------------------------------------------------------


def tribute_summon_available(state: DuelState, iid: str) -> bool:
    definition = state.definition(iid)
    if iid not in state.hand or not is_monster(definition) or state.normal_summon_used:
        return False
    required = rules.tributes_required(definition.level or 0)
    return required > 0 and len(state.field_monsters()) >= required


def tribute_summon(engine: "Engine", iid: str) -> Iterator[Request]:
    name = engine.state.card(iid).name
    required = rules.tributes_required(engine.state.definition(iid).level or 0)
    answer = yield confirm("prompt_tribute_summon", card=name)
    if answer != "yes":
        engine.run_card_effect(iid)
        return

    tributes: list[str] = []
    while len(tributes) < required:
        chosen = yield target(
            lambda s, tid: tid in s.field_monsters() and tid not in tributes,
            "log_select_tribute",
            current=len(tributes) + 1,
            required=required,
        )
        tributes.append(chosen)

    state = engine.state
    free = [
        (Zone.MONSTER_ZONE, index)
        for index, occupant in enumerate(state.monster_zones)
        if occupant is None or occupant in tributes
    ]
    if not free:
        engine.log("log_tribute_error_zone")
        return
    ref = yield select_zone(zone_in(free), "prompt_select_zone_tribute")

    with engine.history_unit():
        engine.push_history()
        with engine.batch():
            for tid in tributes:
                definition = engine.state.definition(tid)
                destination = Zone.EXTRA_DECK if is_pendulum(definition) else Zone.GRAVEYARD
                engine.move_card(tid, destination)
            engine.move_card(iid, Zone.MONSTER_ZONE, ref.index, Zone.HAND, tributes_paid=True)
            engine.log("log_tribute_summon", card=name)
