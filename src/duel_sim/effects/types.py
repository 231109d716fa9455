from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterator, Optional, Protocol

from ..interaction import Request
from ..state import DuelState, Zone

if TYPE_CHECKING:
    from ..engine import Engine


class Reason(str, Enum):
    MOVE = "MOVE"
    MANUAL = "MANUAL"
    TRIGGER = "TRIGGER"
    MATERIAL = "MATERIAL"


class SummonVariant(str, Enum):
    FUSION = "FUSION"
    SYNCHRO = "SYNCHRO"
    XYZ = "XYZ"
    LINK = "LINK"
    PENDULUM = "PENDULUM"
    SPECIAL = "SPECIAL"


@dataclass(frozen=True)
class EffectEvent:
    reason: Reason
    from_zone: Optional[Zone] = None
    summon_variant: Optional[SummonVariant] = None
    is_material: bool = False

    @property
    def manual(self) -> bool:
        return self.reason == Reason.MANUAL


MANUAL = EffectEvent(Reason.MANUAL)
TRIGGER = EffectEvent(Reason.TRIGGER)


class EffectImpl(Protocol):
    def precondition(self, state: DuelState, self_id: str) -> bool:
        ...

    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> Optional[Iterator[Request]]:
        ...
