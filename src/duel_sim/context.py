from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class OperationContext:
    """Ambient flags for the operation currently running on an engine.

    Entered through ``Engine.operation(**changes)``; the previous context is always
    restored on exit.
    """

    batching: bool = False
    suppress_log: bool = False
    suppress_triggers: bool = False
    history_unit: bool = False
    material_move: bool = False
    link_summoning: bool = False
    dragging: bool = False

    @property
    def quiet(self) -> bool:
        return self.suppress_log or self.material_move
