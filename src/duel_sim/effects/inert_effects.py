from __future__ import annotations

from typing import TYPE_CHECKING

from .common import CardEffect
from .types import EffectEvent

if TYPE_CHECKING:
    from ..engine import Engine

# Cards in the deck list whose effects are not modeled. The flag says whether a
# manual activation announces that.
INERT_EFFECT_CIDS: dict[str, bool] = {
    "c018": False,
    "c024": True,
    "c031": True,
}


class InertEffect(CardEffect):
    def __init__(self, announce: bool = True) -> None:
        self.announce = announce

    def activate(self, engine: "Engine", self_id: str, event: EffectEvent) -> None:
        if event.manual and self.announce:
            engine.log("log_no_effect_defined", card=engine.state.card(self_id).name)
        return None
