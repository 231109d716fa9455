from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Sequence

from ..cards import is_dark_contract, is_dd, is_monster
from ..interaction import ZoneFilter, zone_in
from ..state import DuelState, Zone
from .types import EffectImpl

if TYPE_CHECKING:
    from ..engine import Engine

ARC_CRISIS_CID = "c029"
HIGH_KING_GENGHIS_CID = "c019"


class CardEffect(EffectImpl):
    """Base handler: negated cards never resolve."""

    def precondition(self, state: DuelState, self_id: str) -> bool:
        return not state.is_negated(self_id)


def is_yes(answer: Any) -> bool:
    return answer == "yes"


def is_dd_or_contract(state: DuelState, iid: str) -> bool:
    definition = state.definition(iid)
    return is_dd(definition) or is_dark_contract(definition)


def is_dd_monster(state: DuelState, iid: str) -> bool:
    definition = state.definition(iid)
    return is_dd(definition) and is_monster(definition)


def on_monster_field(state: DuelState, iid: str) -> bool:
    return iid in state.field_monsters()


def on_field(state: DuelState, iid: str) -> bool:
    return iid in state.field_cards()


def in_spell_trap_area(state: DuelState, iid: str) -> bool:
    return iid in state.spell_trap_zones or state.field_zone == iid


def contracts_on_field(state: DuelState) -> list[str]:
    return [iid for iid in state.field_cards() if is_dark_contract(state.definition(iid))]


def contract_count(state: DuelState, include_graveyard: bool = False) -> int:
    count = len(contracts_on_field(state))
    if include_graveyard:
        count += sum(1 for iid in state.graveyard if is_dark_contract(state.definition(iid)))
    return count


def empty_monster_zone_filter(state: DuelState, freed: Iterable[str] = ()) -> ZoneFilter | None:
    """Main monster zones that are empty, or held by a card about to leave."""
    leaving = set(freed)
    slots = [
        (Zone.MONSTER_ZONE, index)
        for index, occupant in enumerate(state.monster_zones)
        if occupant is None or occupant in leaving
    ]
    return zone_in(slots) if slots else None


def empty_spell_trap_filter(state: DuelState) -> ZoneFilter | None:
    slots = [(Zone.SPELL_TRAP_ZONE, i) for i, occupant in enumerate(state.spell_trap_zones) if occupant is None]
    return zone_in(slots) if slots else None


def drop_trigger_candidate(state: DuelState, iid: str) -> None:
    if iid in state.trigger_candidates:
        state.trigger_candidates.remove(iid)


def destroy(engine: "Engine", source_id: str, target_id: str) -> bool:
    """Send a field card to the GY as an effect of ``source_id``."""
    engine.state.last_effect_source_id = source_id
    return engine.move_card(target_id, Zone.GRAVEYARD)


def fusion_options(state: DuelState, dd_only: bool = False) -> list[tuple[str, str]]:
    options: list[tuple[str, str]] = []
    for iid in state.extra_deck:
        definition = state.definition(iid)
        if "FUSION" not in definition.sub_type or definition.card_id == ARC_CRISIS_CID:
            continue
        if dd_only and "DDD" not in definition.name:
            continue
        options.append((definition.name, iid))
    return options


def fusion_materials_ok(state: DuelState, fusion_id: str, material_ids: Sequence[str]) -> bool:
    """High King Genghis needs one material of level 5 or higher."""
    if state.card(fusion_id).card_id != HIGH_KING_GENGHIS_CID:
        return True
    return any(state.effective_level(iid) >= 5 for iid in material_ids)
