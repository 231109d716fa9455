from __future__ import annotations

from typing import TYPE_CHECKING, Iterator

from .. import rules
from ..cards import is_dd
from ..interaction import Request, choose, confirm, search, select_zone, target
from ..state import Zone
from ..summons import commit_fusion, fusion_material_destination
from .common import (
    CardEffect,
    destroy,
    fusion_materials_ok,
    fusion_options,
    is_dd_monster,
    is_dd_or_contract,
    is_yes,
    on_field,
)
from .types import EffectEvent

if TYPE_CHECKING:
    from ..engine import Engine

GATE_CID = "c005"
SWAMP_KING_CID = "c006"
WITCH_CID = "c016"
ZERO_KING_CID = "c034"


def _activated_from_spell_trap_zone(engine: "Engine", self_id: str, event: EffectEvent) -> bool:
    return event.manual and self_id in engine.state.spell_trap_zones


class GateEffect(CardEffect):
    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        if not _activated_from_spell_trap_zone(engine, self_id, event):
            return
        answer = yield confirm("prompt_gate_search")
        if not is_yes(answer):
            return
        picked = yield search(is_dd_monster, title_key="prompt_select_dd_ss")
        with engine.history_unit():
            engine.push_history()
            engine.log("log_trigger_effect", card=engine.state.card(self_id).name)
            engine.move_card(picked, Zone.HAND)
            engine.add_turn_effect_usage(GATE_CID)


class SwampKingEffect(CardEffect):
    """Fusion summon from hand and field; DD fusions may also use GY materials, which are banished."""

    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        if not _activated_from_spell_trap_zone(engine, self_id, event):
            return
        options = fusion_options(engine.state)
        if not options:
            engine.log("log_no_fusion_in_ex")
            return
        answer = yield confirm("prompt_swamp_king_fusion")
        if not is_yes(answer):
            return
        fusion_id = yield choose("label_fusion_monster_select", options)
        state = engine.state
        pool = state.hand + state.field_monsters()
        if is_dd(state.definition(fusion_id)):
            pool = pool + state.graveyard
        pool = [iid for iid in pool if is_dd_monster(state, iid)]
        first = yield search(lambda s, iid: iid in pool, source=pool, title_key="prompt_select_material")
        rest = [iid for iid in pool if iid != first]
        second = yield search(
            lambda s, iid: iid in rest and fusion_materials_ok(s, fusion_id, [first, iid]),
            source=rest,
            title_key="prompt_select_material",
        )
        materials = [first, second]
        slots = [
            (Zone.MONSTER_ZONE, index)
            for index in range(len(engine.state.monster_zones))
            if rules.material_zone_allowed(engine.state, Zone.MONSTER_ZONE, index, materials)
        ]
        if not slots:
            engine.log("log_no_available_zones")
            return
        ref = yield select_zone(
            lambda zone, index: (zone, index) in slots,
            "prompt_select_zone_fusion",
        )
        state = engine.state
        placements = [(iid, fusion_material_destination(state, iid)) for iid in materials]
        with engine.history_unit():
            commit_fusion(engine, fusion_id, placements, ref.zone, ref.index)
            engine.add_turn_effect_usage(SWAMP_KING_CID)


class WitchEffect(CardEffect):
    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        if not _activated_from_spell_trap_zone(engine, self_id, event):
            return
        answer = yield confirm("prompt_witch_destroy")
        if not is_yes(answer):
            return
        state = engine.state
        costs = [iid for iid in state.hand if is_dd_or_contract(state, iid)]
        if not costs:
            engine.log("log_error_condition")
            return
        cost = yield search(lambda s, iid: iid in costs, source=costs, title_key="prompt_discard_card")
        destroyed = None
        if any(iid != cost for iid in engine.state.field_cards()):
            destroyed = yield target(lambda s, iid: on_field(s, iid), "prompt_destroy_card")
        with engine.history_unit():
            destroy(engine, self_id, cost)
            engine.add_turn_effect_usage(WITCH_CID)
            if destroyed is not None and engine.state.is_on_field(destroyed):
                name = engine.state.card(destroyed).name
                destroy(engine, self_id, destroyed)
                engine.log("log_destroy", card=name)


class ZeroKingEffect(CardEffect):
    """Destroy another DD card, then special summon a DD monster from the deck."""

    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Iterator[Request]:
        if not _activated_from_spell_trap_zone(engine, self_id, event):
            return
        state = engine.state
        targets = [iid for iid in state.field_cards() if iid != self_id and is_dd(state.definition(iid))]
        if not targets:
            engine.log("log_error_condition")
            return
        answer = yield confirm("prompt_zero_king_destroy")
        if not is_yes(answer):
            return
        destroyed = yield target(lambda s, iid: iid in targets, "prompt_destroy_card")
        summoned = yield search(is_dd_monster, title_key="prompt_select_dd_ss")
        state = engine.state
        freed = destroyed if destroyed in state.monster_zones else None
        slots = [
            (Zone.MONSTER_ZONE, index)
            for index, occupant in enumerate(state.monster_zones)
            if occupant is None or occupant == freed
        ]
        ref = None
        if slots:
            ref = yield select_zone(lambda zone, index: (zone, index) in slots)
        name = engine.state.card(destroyed).name
        with engine.history_unit():
            engine.push_history()
            engine.log("log_destroy", card=name)
            destroy(engine, self_id, destroyed)
            engine.add_turn_effect_usage(ZERO_KING_CID)
            if ref is not None:
                engine.move_card(summoned, Zone.MONSTER_ZONE, ref.index, Zone.DECK, is_special_summon=True)
                engine.log("log_sp_summon", card=engine.state.card(summoned).name)
            else:
                engine.log("log_no_available_zones")
