from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any

from .errors import SimModelError

logger = logging.getLogger(__name__)

CARD_TABLE_ENV = "DUEL_SIM_CARD_TABLE"
EXTRA_DECK_SUBTYPES = ("FUSION", "SYNCHRO", "XYZ", "LINK")



@dataclass(frozen=True)
class CardDefinition:
    card_id: str
    name: str
    type: str
    sub_type: str = ""
    attack: int | None = None
    defense: int | None = None
    level: int | None = None
    rank: int | None = None
    scale: int | None = None
    link_markers: tuple[str, ...] = field(default_factory=tuple)
    description: str = ""
    image_url: str = ""

    def __deepcopy__(self, memo: dict) -> "CardDefinition":
        # Definitions are read-only and shared by every snapshot.
        return self

    @staticmethod
    def from_dict(card_id: str, raw: dict[str, Any]) -> "CardDefinition":
        def _int_or_none(key: str) -> int | None:
            value = raw.get(key)
            if value is None:
                return None
            try:
                return int(value)
            except (TypeError, ValueError):
                return None

        name = str(raw.get("name", "")).strip()
        if not name:
            raise SimModelError(f"Card {card_id} has no name.")
        return CardDefinition(
            card_id=card_id,
            name=name,
            type=str(raw.get("type", "")).upper(),
            sub_type=str(raw.get("sub_type", "") or "").upper(),
            attack=_int_or_none("attack"),
            defense=_int_or_none("defense"),
            level=_int_or_none("level"),
            rank=_int_or_none("rank"),
            scale=_int_or_none("scale"),
            link_markers=tuple(str(m) for m in raw.get("link_markers", None) or ()),
            description=str(raw.get("description", "")),
            image_url=str(raw.get("image_url", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "type": self.type, "sub_type": self.sub_type}
        for key in ("attack", "defense", "level", "rank", "scale"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.link_markers:
            data["link_markers"] = list(self.link_markers)
        data["description"] = self.description
        data["image_url"] = self.image_url
        return data


def _resolve_table_path(path: str | Path | None) -> Path | None:
    if path:
        return Path(path)
    env_path = os.environ.get(CARD_TABLE_ENV, "").strip()
    if env_path:
        return Path(env_path)
    return None


def load_card_table(path: str | Path | None = None) -> dict[str, CardDefinition]:
    table_path = _resolve_table_path(path)
    if table_path is not None:
        if not table_path.is_file():
            raise FileNotFoundError(f"Card table not found: {table_path}")
        raw_text = table_path.read_text(encoding="utf-8")
        logger.debug("Loading card table from %s", table_path)
    else:
        raw_text = resources.files("duel_sim").joinpath("data/cards.json").read_text(encoding="utf-8")

    data = json.loads(raw_text)
    if not isinstance(data, dict):
        raise SimModelError("Card table must be a JSON object keyed by card id.")
    return {str(cid): CardDefinition.from_dict(str(cid), raw) for cid, raw in data.items()}


def is_extra_deck_type(definition: CardDefinition) -> bool:
    return any(tag in definition.sub_type for tag in EXTRA_DECK_SUBTYPES)


def is_pendulum(definition: CardDefinition) -> bool:
    return "PENDULUM" in definition.sub_type


def is_main_deck_pendulum(definition: CardDefinition) -> bool:
    return is_pendulum(definition) and not is_extra_deck_type(definition)


def is_tuner(definition: CardDefinition) -> bool:
    return "TUNER" in definition.sub_type


def is_monster(definition: CardDefinition) -> bool:
    return definition.type == "MONSTER"


def is_dd(definition: CardDefinition) -> bool:
    return "DD" in definition.name


def is_ddd(definition: CardDefinition) -> bool:
    return "DDD" in definition.name


def is_dark_contract(definition: CardDefinition) -> bool:
    return "Dark Contract" in definition.name


def deck_sort_key(definition: CardDefinition) -> tuple:
    """Main deck order: pendulum monsters by level, other monsters, spells, traps."""
    if definition.type == "MONSTER":
        group = 1 if is_pendulum(definition) else 2
    elif definition.type == "SPELL":
        group = 3
    elif definition.type == "TRAP":
        group = 4
    else:
        group = 5
    level = (definition.level or 0) if group == 1 else 0
    return (group, level, _DECK_ORDER_OVERRIDES.get(definition.card_id, definition.card_id))


# Defense Soldier sorts ahead of Necro Slime, Zero King ahead of Swamp King.
_DECK_ORDER_OVERRIDES = {
    "c033": "c015",
    "c015": "c015~",
    "c034": "c006",
    "c006": "c006~",
}


def extra_deck_sort_key(definition: CardDefinition) -> tuple:
    sub_type = definition.sub_type
    if "FUSION" in sub_type:
        category = 0
    elif "SYNCHRO" in sub_type:
        category = 1
    elif "XYZ" in sub_type:
        category = 2
    elif "LINK" in sub_type:
        category = 3
    else:
        category = 4
    if category <= 2:
        return (category, definition.level or definition.rank or 0)
    if category == 3:
        return (category, _LINK_ORDER.get(definition.card_id, 99))
    return (category, 0)


_LINK_ORDER = {"c017": 0, "c028": 1}

