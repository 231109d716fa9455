from __future__ import annotations

from typing import Iterable, Sequence

from .cards import (
    deck_sort_key,
    extra_deck_sort_key,
    is_monster,
    is_pendulum,
)
from .errors import IllegalPlacementError
from .state import PENDULUM_ZONE_INDICES, DuelState, Zone

ZoneSlot = tuple[Zone, int]

GILGAMESH_CID = "c017"
ZEUS_RAGNAROK_CID = "c028"

ARC_CRISIS_CATEGORIES = ("FUSION", "SYNCHRO", "XYZ", "PENDULUM")

_EMZ_MARKER_TARGETS = {
    0: {"BOTTOM_LEFT": 0, "BOTTOM": 1, "BOTTOM_RIGHT": 2},
    1: {"BOTTOM_LEFT": 2, "BOTTOM": 3, "BOTTOM_RIGHT": 4},
}


def tributes_required(level: int) -> int:
    if level >= 7:
        return 2
    if level >= 5:
        return 1
    return 0


def check_emz_restriction(state: DuelState, to_index: int, instance_id: str | None = None) -> None:
    """Only one Extra Monster Zone may be used, unless the mover is the card freeing the other."""
    other = 1 - to_index
    if 0 <= other < len(state.extra_monster_zones) and state.extra_monster_zones[other] not in (None, instance_id):
        raise IllegalPlacementError("log_emz_restriction")


def validate_placement(state: DuelState, instance_id: str, to_zone: Zone, to_index: int) -> None:
    """Raise IllegalPlacementError when the card cannot go to the slot."""
    definition = state.definition(instance_id)
    if to_zone == Zone.MONSTER_ZONE:
        if state.monster_zones[to_index] is not None:
            raise IllegalPlacementError("log_error_zone")
    elif to_zone == Zone.SPELL_TRAP_ZONE:
        if is_monster(definition):
            if not is_pendulum(definition):
                raise IllegalPlacementError("log_rule_p_zone")
            if to_index not in PENDULUM_ZONE_INDICES:
                raise IllegalPlacementError("log_error_condition")
        if state.spell_trap_zones[to_index] is not None:
            raise IllegalPlacementError("log_error_zone_occupied")
    elif to_zone == Zone.EXTRA_MONSTER_ZONE:
        if state.extra_monster_zones[to_index] is not None:
            raise IllegalPlacementError("log_error_zone")
    elif to_zone == Zone.FIELD_ZONE:
        if state.field_zone is not None and state.field_zone != instance_id:
            raise IllegalPlacementError("log_error_zone")


def sort_extra_deck(state: DuelState, ids: Iterable[str]) -> list[str]:
    return sorted(ids, key=lambda iid: extra_deck_sort_key(state.definition(iid)))


def sort_deck(state: DuelState, ids: Iterable[str]) -> list[str]:
    return sorted(ids, key=lambda iid: deck_sort_key(state.definition(iid)))


def arc_crisis_roles(state: DuelState, instance_id: str) -> set[str]:
    # Deus Machinex (XYZ/PENDULUM) may fill either of its two roles.
    sub_type = state.definition(instance_id).sub_type
    return {category for category in ARC_CRISIS_CATEGORIES if category in sub_type}


def check_arc_crisis(state: DuelState, material_ids: Sequence[str]) -> bool:
    """True when the four materials cover fusion, synchro, xyz and pendulum one each."""
    if len(material_ids) != len(ARC_CRISIS_CATEGORIES):
        return False
    roles = [arc_crisis_roles(state, iid) for iid in material_ids]
    used: set[str] = set()

    def assign(position: int) -> bool:
        if position == len(roles):
            return True
        for category in ARC_CRISIS_CATEGORIES:
            if category in roles[position] and category not in used:
                used.add(category)
                if assign(position + 1):
                    return True
                used.discard(category)
        return False

    return assign(0)


def link_unlocked_zones(state: DuelState) -> set[int]:
    """Main monster zone indices pointed to by link monsters on the field."""
    unlocked: set[int] = set()
    for emz_index, iid in enumerate(state.extra_monster_zones):
        if not iid:
            continue
        for marker in state.definition(iid).link_markers:
            target = _EMZ_MARKER_TARGETS[emz_index].get(marker)
            if target is not None:
                unlocked.add(target)
    for mz_index, iid in enumerate(state.monster_zones):
        if not iid:
            continue
        for marker in state.definition(iid).link_markers:
            if marker == "LEFT" and mz_index > 0:
                unlocked.add(mz_index - 1)
            elif marker == "RIGHT" and mz_index < len(state.monster_zones) - 1:
                unlocked.add(mz_index + 1)
    return unlocked


def pendulum_scale_range(state: DuelState) -> tuple[int, int] | None:
    left = state.spell_trap_zones[PENDULUM_ZONE_INDICES[0]]
    right = state.spell_trap_zones[PENDULUM_ZONE_INDICES[1]]
    if not left or not right:
        return None
    scales = (state.definition(left).scale or 0, state.definition(right).scale or 0)
    return min(scales), max(scales)


def pendulum_candidates(state: DuelState) -> list[str]:
    scale_range = pendulum_scale_range(state)
    if scale_range is None:
        return []
    low, high = scale_range

    def in_range(iid: str) -> bool:
        return low < state.effective_level(iid) < high

    from_hand = [iid for iid in state.hand if is_monster(state.definition(iid)) and in_range(iid)]
    from_extra = [
        iid
        for iid in state.extra_deck
        if is_pendulum(state.definition(iid)) and state.card(iid).face_up and in_range(iid)
    ]
    return from_hand + from_extra


def pendulum_zone_options(
    state: DuelState, instance_id: str, pending: Sequence[ZoneSlot] = ()
) -> list[ZoneSlot]:
    pending_set = set(pending)
    if instance_id in state.extra_deck:
        options: list[ZoneSlot] = []
        emz_in_use = any(
            state.extra_monster_zones[i] is not None or (Zone.EXTRA_MONSTER_ZONE, i) in pending_set
            for i in range(len(state.extra_monster_zones))
        )
        if not emz_in_use:
            options.extend((Zone.EXTRA_MONSTER_ZONE, i) for i in range(len(state.extra_monster_zones)))
        for index in sorted(link_unlocked_zones(state)):
            slot = (Zone.MONSTER_ZONE, index)
            if state.monster_zones[index] is None and slot not in pending_set:
                options.append(slot)
        return options
    return [
        (Zone.MONSTER_ZONE, index)
        for index, occupant in enumerate(state.monster_zones)
        if occupant is None and (Zone.MONSTER_ZONE, index) not in pending_set
    ]


def material_zone_allowed(state: DuelState, zone: Zone, index: int, material_ids: Sequence[str]) -> bool:
    """Zone rule shared by synchro and xyz summons: a slot held by a material counts as free."""
    materials = set(material_ids)
    if zone == Zone.MONSTER_ZONE:
        occupant = state.monster_zones[index]
        return occupant is None or occupant in materials
    if zone == Zone.EXTRA_MONSTER_ZONE:
        occupant = state.extra_monster_zones[index]
        if occupant is not None and occupant not in materials:
            return False
        if any(iid in materials for iid in state.extra_monster_zones if iid):
            return True
        other = state.extra_monster_zones[1 - index]
        return other is None or other in materials
    return False


def machinex_reaction_zones(state: DuelState) -> list[ZoneSlot]:
    """Slots Zero Machinex may be summoned into from the extra deck."""
    options: list[ZoneSlot] = []
    emz0, emz1 = state.extra_monster_zones
    if emz0 is None and emz1 is None:
        options.extend([(Zone.EXTRA_MONSTER_ZONE, 0), (Zone.EXTRA_MONSTER_ZONE, 1)])
    for emz_index, host in ((0, emz0), (1, emz1)):
        if host is None:
            continue
        card_id = state.card(host).card_id
        if card_id not in (GILGAMESH_CID, ZEUS_RAGNAROK_CID):
            continue
        base = 0 if emz_index == 0 else 2
        targets = [base, base + 2]
        if card_id == ZEUS_RAGNAROK_CID:
            targets.append(base + 1)
        for target in sorted(targets):
            if state.monster_zones[target] is None:
                options.append((Zone.MONSTER_ZONE, target))
    return options


def first_free_pendulum_zone(state: DuelState) -> int | None:
    for index in PENDULUM_ZONE_INDICES:
        if state.spell_trap_zones[index] is None:
            return index
    return None

