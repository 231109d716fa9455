"""Tabular views of a session for spreadsheets and notebooks."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Sequence, Union

import pandas as pd

from .cards import CardDefinition
from .history import Snapshot
from .state import DuelState

if TYPE_CHECKING:
    from .engine import Engine

logger = logging.getLogger(__name__)

HISTORY_COLUMNS = [
    "step",
    "log_count",
    "deck",
    "hand",
    "graveyard",
    "banished",
    "extra_deck",
    "monster_zones",
    "spell_trap_zones",
    "extra_monster_zones",
    "lp",
    "pendulum_summon_count",
    "active_card",
    "last_log",
]


def _row(step: int, state: DuelState, log_count: int, logs: Sequence[str]) -> dict[str, Any]:
    active = state.active_effect_card_id
    return {
        "step": step,
        "log_count": log_count,
        "deck": len(state.deck),
        "hand": len(state.hand),
        "graveyard": len(state.graveyard),
        "banished": len(state.banished),
        "extra_deck": len(state.extra_deck),
        "monster_zones": sum(1 for iid in state.monster_zones if iid),
        "spell_trap_zones": sum(1 for iid in state.spell_trap_zones if iid),
        "extra_monster_zones": sum(1 for iid in state.extra_monster_zones if iid),
        "lp": state.lp,
        "pendulum_summon_count": state.pendulum_summon_count,
        "active_card": state.cards[active].name if active in state.cards else None,
        "last_log": logs[log_count - 1] if 0 < log_count <= len(logs) else None,
    }


def _snapshots(
    source: Union["Engine", dict[str, Any]], definitions: dict[str, CardDefinition] | None
) -> tuple[list[Snapshot], list[str]]:
    if isinstance(source, dict):
        from .archive import snapshots_from_archive

        if definitions is None:
            raise ValueError("definitions are required to read an archive")
        return snapshots_from_archive(source, definitions), [str(line) for line in source.get("logs") or []]
    return list(source.history.snapshots), list(source.state.logs)


def history_frame(
    source: Union["Engine", dict[str, Any]],
    definitions: dict[str, CardDefinition] | None = None,
) -> pd.DataFrame:
    """One row per snapshot, oldest first."""
    snapshots, logs = _snapshots(source, definitions)
    rows = [_row(step, snap.state, snap.log_count, logs) for step, snap in enumerate(snapshots)]
    return pd.DataFrame(rows, columns=HISTORY_COLUMNS)


def log_frame(logs: Iterable[str]) -> pd.DataFrame:
    lines = list(logs)
    return pd.DataFrame({"index": range(1, len(lines) + 1), "line": lines}, columns=["index", "line"])


def export_history_csv(
    source: Union["Engine", dict[str, Any]],
    path: str | Path,
    definitions: dict[str, CardDefinition] | None = None,
) -> Path:
    path = Path(path)
    frame = history_frame(source, definitions)
    frame.to_csv(path, index=False)
    logger.info("Wrote %d history rows to %s", len(frame), path)
    return path
