"""Runtime settings read from the environment (and a local ``.env`` file)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .cards import CARD_TABLE_ENV
from .history import DEFAULT_HISTORY_LIMIT
from .state import STARTING_LP

logger = logging.getLogger(__name__)

REPLAY_SPEED_ENV = "DUEL_SIM_REPLAY_SPEED"
HISTORY_LIMIT_ENV = "DUEL_SIM_HISTORY_LIMIT"
STARTING_LP_ENV = "DUEL_SIM_STARTING_LP"

MIN_REPLAY_SPEED = 1
MAX_REPLAY_SPEED = 5


def clamp_replay_speed(speed: int) -> int:
    return max(MIN_REPLAY_SPEED, min(MAX_REPLAY_SPEED, int(speed)))


@dataclass(frozen=True)
class Settings:
    card_table: str | None = None
    replay_speed: int = MAX_REPLAY_SPEED
    history_limit: int = DEFAULT_HISTORY_LIMIT
    starting_lp: int = STARTING_LP


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", name, raw)
        return default


def load_settings() -> Settings:
    load_dotenv()
    card_table = os.environ.get(CARD_TABLE_ENV, "").strip() or None
    history_limit = _int_env(HISTORY_LIMIT_ENV, DEFAULT_HISTORY_LIMIT)
    if history_limit < 1:
        logger.warning("%s must be positive; using %d", HISTORY_LIMIT_ENV, DEFAULT_HISTORY_LIMIT)
        history_limit = DEFAULT_HISTORY_LIMIT
    return Settings(
        card_table=card_table,
        replay_speed=clamp_replay_speed(_int_env(REPLAY_SPEED_ENV, MAX_REPLAY_SPEED)),
        history_limit=history_limit,
        starting_lp=_int_env(STARTING_LP_ENV, STARTING_LP),
    )
