from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .cards import CardDefinition
from .errors import SimModelError

MONSTER_ZONE_COUNT = 5
SPELL_TRAP_ZONE_COUNT = 5
EXTRA_MONSTER_ZONE_COUNT = 2
PENDULUM_ZONE_INDICES = (0, 4)
STARTING_LP = 8000

BANISH_ON_LEAVE = "BANISH_ON_LEAVE"
PENDULUM_SUMMONED = "PENDULUM_SUMMONED"
C030_LOCKED = "C030_LOCKED"


class Zone(str, Enum):
    DECK = "DECK"
    HAND = "HAND"
    GRAVEYARD = "GRAVEYARD"
    BANISHED = "BANISHED"
    EXTRA_DECK = "EXTRA_DECK"
    MONSTER_ZONE = "MONSTER_ZONE"
    SPELL_TRAP_ZONE = "SPELL_TRAP_ZONE"
    FIELD_ZONE = "FIELD_ZONE"
    EXTRA_MONSTER_ZONE = "EXTRA_MONSTER_ZONE"
    MATERIAL = "MATERIAL"


LIST_ZONES = (Zone.HAND, Zone.DECK, Zone.GRAVEYARD, Zone.BANISHED, Zone.EXTRA_DECK)
FIELD_ZONES = frozenset(
    {Zone.MONSTER_ZONE, Zone.SPELL_TRAP_ZONE, Zone.FIELD_ZONE, Zone.EXTRA_MONSTER_ZONE}
)
MONSTER_FIELD_ZONES = (Zone.MONSTER_ZONE, Zone.EXTRA_MONSTER_ZONE)

_LIST_ATTRS = {
    Zone.HAND: "hand",
    Zone.DECK: "deck",
    Zone.GRAVEYARD: "graveyard",
    Zone.BANISHED: "banished",
    Zone.EXTRA_DECK: "extra_deck",
}
_SLOT_ATTRS = {
    Zone.MONSTER_ZONE: "monster_zones",
    Zone.SPELL_TRAP_ZONE: "spell_trap_zones",
    Zone.EXTRA_MONSTER_ZONE: "extra_monster_zones",
}


@dataclass(frozen=True)
class Location:
    zone: Zone
    index: int | None = None
    host: str | None = None


@dataclass
class CardInstance:
    instance_id: str
    definition: CardDefinition
    face_up: bool = False

    @property
    def card_id(self) -> str:
        return self.definition.card_id

    @property
    def name(self) -> str:
        return self.definition.name


@dataclass
class DuelState:
    deck: list[str] = field(default_factory=list)
    hand: list[str] = field(default_factory=list)
    graveyard: list[str] = field(default_factory=list)
    banished: list[str] = field(default_factory=list)
    extra_deck: list[str] = field(default_factory=list)
    monster_zones: list[str | None] = field(default_factory=lambda: [None] * MONSTER_ZONE_COUNT)
    spell_trap_zones: list[str | None] = field(default_factory=lambda: [None] * SPELL_TRAP_ZONE_COUNT)
    field_zone: str | None = None
    extra_monster_zones: list[str | None] = field(
        default_factory=lambda: [None] * EXTRA_MONSTER_ZONE_COUNT
    )
    materials: dict[str, list[str]] = field(default_factory=dict)
    cards: dict[str, CardInstance] = field(default_factory=dict)
    modifiers: dict[str, dict[str, Any]] = field(default_factory=dict)
    flags: dict[str, list[str]] = field(default_factory=dict)
    usage: dict[str, int] = field(default_factory=dict)
    lp: int = STARTING_LP
    normal_summon_used: bool = False
    pendulum_summon_count: int = 0
    pendulum_summon_limit: int = 1
    trigger_candidates: list[str] = field(default_factory=list)
    active_effect_card_id: str | None = None
    last_effect_source_id: str | None = None
    tell_buff_active: bool = False
    logs: list[str] = field(default_factory=list)

    def clone(self) -> "DuelState":
        return copy.deepcopy(self)

    def snapshot(self) -> "DuelState":
        """Deep copy without the log feed."""
        logs = self.logs
        self.logs = []
        try:
            copied = copy.deepcopy(self)
        finally:
            self.logs = logs
        return copied

    def card(self, instance_id: str) -> CardInstance:
        try:
            return self.cards[instance_id]
        except KeyError:
            raise SimModelError(f"Unknown card instance: {instance_id}") from None

    def definition(self, instance_id: str) -> CardDefinition:
        return self.card(instance_id).definition

    def zone_list(self, zone: Zone) -> list[str]:
        attr = _LIST_ATTRS.get(zone)
        if attr is None:
            raise SimModelError(f"{zone} is not a list zone.")
        return getattr(self, attr)

    def slots(self, zone: Zone) -> list[str | None]:
        attr = _SLOT_ATTRS.get(zone)
        if attr is None:
            raise SimModelError(f"{zone} has no indexed slots.")
        return getattr(self, attr)

    def locate(self, instance_id: str) -> Location | None:
        for zone in LIST_ZONES:
            items = self.zone_list(zone)
            if instance_id in items:
                return Location(zone, items.index(instance_id))
        for zone in (Zone.MONSTER_ZONE, Zone.SPELL_TRAP_ZONE):
            slots = self.slots(zone)
            if instance_id in slots:
                return Location(zone, slots.index(instance_id))
        if self.field_zone == instance_id:
            return Location(Zone.FIELD_ZONE, 0)
        if instance_id in self.extra_monster_zones:
            return Location(Zone.EXTRA_MONSTER_ZONE, self.extra_monster_zones.index(instance_id))
        for host, mats in self.materials.items():
            if instance_id in mats:
                return Location(Zone.MATERIAL, mats.index(instance_id), host)
        return None

    def zone_of(self, instance_id: str) -> Zone | None:
        location = self.locate(instance_id)
        return location.zone if location else None

    def is_on_field(self, instance_id: str) -> bool:
        return self.zone_of(instance_id) in FIELD_ZONES

    def effective_level(self, instance_id: str) -> int:
        definition = self.definition(instance_id)
        modified = self.modifiers.get(instance_id, {}).get("level")
        if modified is not None:
            return max(1, int(modified))
        return definition.level or 0

    def effective_attack(self, instance_id: str) -> int:
        modified = self.modifiers.get(instance_id, {}).get("attack")
        if modified is not None:
            return int(modified)
        return self.definition(instance_id).attack or 0

    def effective_defense(self, instance_id: str) -> int:
        modified = self.modifiers.get(instance_id, {}).get("defense")
        if modified is not None:
            return int(modified)
        return self.definition(instance_id).defense or 0

    def is_negated(self, instance_id: str) -> bool:
        return bool(self.modifiers.get(instance_id, {}).get("is_negated", False))

    def has_flag(self, instance_id: str, flag: str) -> bool:
        return flag in self.flags.get(instance_id, [])

    def field_monsters(self) -> list[str]:
        return [cid for cid in self.monster_zones + self.extra_monster_zones if cid]

    def field_cards(self) -> list[str]:
        cards = [cid for cid in self.monster_zones + self.extra_monster_zones if cid]
        cards.extend(cid for cid in self.spell_trap_zones if cid)
        if self.field_zone:
            cards.append(self.field_zone)
        return cards

    def pendulum_scales(self) -> list[str]:
        return [self.spell_trap_zones[i] for i in PENDULUM_ZONE_INDICES if self.spell_trap_zones[i]]

    def instances_of(self, card_id: str) -> list[str]:
        return [iid for iid, card in self.cards.items() if card.card_id == card_id]

    def to_dict(self) -> dict[str, Any]:
        return {
            "deck": list(self.deck),
            "hand": list(self.hand),
            "graveyard": list(self.graveyard),
            "banished": list(self.banished),
            "extra_deck": list(self.extra_deck),
            "monster_zones": list(self.monster_zones),
            "spell_trap_zones": list(self.spell_trap_zones),
            "field_zone": self.field_zone,
            "extra_monster_zones": list(self.extra_monster_zones),
            "materials": {host: list(mats) for host, mats in self.materials.items()},
            "cards": {
                iid: {"card_id": card.card_id, "face_up": card.face_up}
                for iid, card in self.cards.items()
            },
            "modifiers": copy.deepcopy(self.modifiers),
            "flags": {iid: list(values) for iid, values in self.flags.items()},
            "usage": dict(self.usage),
            "lp": self.lp,
            "normal_summon_used": self.normal_summon_used,
            "pendulum_summon_count": self.pendulum_summon_count,
            "pendulum_summon_limit": self.pendulum_summon_limit,
            "trigger_candidates": list(self.trigger_candidates),
            "active_effect_card_id": self.active_effect_card_id,
            "tell_buff_active": self.tell_buff_active,
        }

    @staticmethod
    def from_dict(raw: dict[str, Any], definitions: dict[str, CardDefinition]) -> "DuelState":
        cards: dict[str, CardInstance] = {}
        for iid, card_raw in (raw.get("cards") or {}).items():
            card_id = str(card_raw.get("card_id", ""))
            if card_id not in definitions:
                raise SimModelError(f"Unknown card id {card_id!r} for instance {iid}.")
            cards[iid] = CardInstance(
                instance_id=iid,
                definition=definitions[card_id],
                face_up=bool(card_raw.get("face_up", False)),
            )

        def _slots(key: str, size: int) -> list[str | None]:
            values = list(raw.get(key) or [])
            values = (values + [None] * size)[:size]
            return [v if v else None for v in values]

        return DuelState(
            deck=list(raw.get("deck") or []),
            hand=list(raw.get("hand") or []),
            graveyard=list(raw.get("graveyard") or []),
            banished=list(raw.get("banished") or []),
            extra_deck=list(raw.get("extra_deck") or []),
            monster_zones=_slots("monster_zones", MONSTER_ZONE_COUNT),
            spell_trap_zones=_slots("spell_trap_zones", SPELL_TRAP_ZONE_COUNT),
            field_zone=raw.get("field_zone") or None,
            extra_monster_zones=_slots("extra_monster_zones", EXTRA_MONSTER_ZONE_COUNT),
            materials={host: list(mats) for host, mats in (raw.get("materials") or {}).items()},
            cards=cards,
            modifiers=copy.deepcopy(raw.get("modifiers") or {}),
            flags={iid: list(values) for iid, values in (raw.get("flags") or {}).items()},
            usage={key: int(value) for key, value in (raw.get("usage") or {}).items()},
            lp=int(raw.get("lp", STARTING_LP)),
            normal_summon_used=bool(raw.get("normal_summon_used", False)),
            pendulum_summon_count=int(raw.get("pendulum_summon_count", 0)),
            pendulum_summon_limit=int(raw.get("pendulum_summon_limit", 1)),
            trigger_candidates=list(raw.get("trigger_candidates") or []),
            active_effect_card_id=raw.get("active_effect_card_id"),
            tell_buff_active=bool(raw.get("tell_buff_active", False)),
        )
