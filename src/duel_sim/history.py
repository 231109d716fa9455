from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from .state import DuelState

if TYPE_CHECKING:
    from .engine import Engine

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 1000
PENDULUM_CUE_SECONDS = 1.333


@dataclass
class Snapshot:
    state: DuelState
    log_count: int

    def restore(self, logs: list[str]) -> DuelState:
        """A live copy of the snapshot board with the log feed truncated to its length."""
        restored = self.state.clone()
        restored.logs = list(logs[: self.log_count])
        return restored


@dataclass
class JumpFrame:
    state: DuelState
    snapshots: list[Snapshot]


@dataclass(frozen=True)
class ReplayFrame:
    step: int
    state: DuelState
    logs: list[str]
    pendulum_cue: bool = False


@dataclass
class History:
    limit: int = DEFAULT_HISTORY_LIMIT
    snapshots: list[Snapshot] = field(default_factory=list)
    jump_history: list[JumpFrame] = field(default_factory=list)

    def push(self, state: DuelState) -> Snapshot:
        snapshot = Snapshot(state=state.snapshot(), log_count=len(state.logs))
        self.snapshots.append(snapshot)
        if len(self.snapshots) > self.limit:
            del self.snapshots[: len(self.snapshots) - self.limit]
        logger.debug("History push: %d snapshots, log_count=%d", len(self.snapshots), snapshot.log_count)
        return snapshot

    def pop(self) -> Snapshot | None:
        if not self.snapshots:
            return None
        return self.snapshots.pop()

    def clear(self) -> None:
        self.snapshots.clear()
        self.jump_history.clear()

    def __len__(self) -> int:
        return len(self.snapshots)


def undo(engine: "Engine") -> bool:
    snapshot = engine.history.pop()
    if snapshot is None:
        engine.log("log_undo_empty")
        return False
    engine.interaction.clear()
    engine.state = snapshot.restore(engine.state.logs)
    logger.debug("Undo: restored log_count=%d, %d snapshots left", snapshot.log_count, len(engine.history))
    return True


def jump_to_log(engine: "Engine", log_index: int) -> bool:
    target_count = log_index + 1
    snapshots = engine.history.snapshots
    position = next((i for i, snap in enumerate(snapshots) if snap.log_count == target_count), None)
    if position is None:
        if len(engine.state.logs) == target_count:
            engine.log("log_sys_already_at_step")
        else:
            engine.log("log_sys_state_not_found")
        return False

    engine.history.jump_history.append(JumpFrame(state=engine.state.clone(), snapshots=list(snapshots)))
    snapshot = snapshots[position]
    engine.interaction.clear()
    engine.history.snapshots = snapshots[:position]
    engine.state = snapshot.restore(engine.state.logs)
    engine.log("log_replay_jump", index=target_count)
    return True


def return_from_jump(engine: "Engine") -> bool:
    if not engine.history.jump_history:
        return False
    frame = engine.history.jump_history.pop()
    engine.interaction.clear()
    engine.state = frame.state
    engine.history.snapshots = frame.snapshots
    engine.log("log_return_from_jump")
    return True


def replay(
    engine: "Engine",
    speed: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
    on_frame: Callable[[ReplayFrame], None] | None = None,
) -> list[ReplayFrame]:
    """Step through every snapshot oldest to newest, then restore the live state."""
    speed = engine.settings.replay_speed if speed is None else speed
    speed = max(1, min(5, int(speed)))
    delay = 1.0 / speed

    engine.push_history()
    live = engine.state.clone()
    logs = list(live.logs)
    frames: list[ReplayFrame] = []
    engine.replaying = True
    logger.info("Replay started: %d frames at speed %d", len(engine.history), speed)
    try:
        previous_count = engine.history.snapshots[0].state.pendulum_summon_count if len(engine.history) else 0
        for step, snapshot in enumerate(list(engine.history.snapshots)):
            if not engine.replaying:
                logger.info("Replay stopped at step %d", step)
                break
            board = snapshot.state
            cue = board.pendulum_summon_count > previous_count and len(board.pendulum_scales()) == 2
            previous_count = board.pendulum_summon_count
            if cue:
                sleep(PENDULUM_CUE_SECONDS)
            engine.state = snapshot.restore(logs)
            frame = ReplayFrame(step=step, state=engine.state, logs=list(engine.state.logs), pendulum_cue=cue)
            frames.append(frame)
            if on_frame is not None:
                on_frame(frame)
            sleep(delay)
    finally:
        engine.replaying = False
        engine.state = live
    logger.info("Replay finished after %d frames", len(frames))
    return frames
