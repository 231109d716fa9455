"""
DD Duel Sim: a solo-play duel state engine for the "DD" archetype.

The engine tracks every card instance across the zones of one player's board,
enforces the placement rules, runs per-card effect handlers as suspendable
generators and keeps a snapshot history for undo, jump and replay.

Submodules:
    engine      - Engine: the aggregate owner and public operations
    moves       - move_card and its post-move triggers
    rules       - placement rules, pendulum and material checks
    summons     - fusion, synchro, xyz, link, pendulum and tribute summons
    effects     - per-card handlers and the handler registry
    interaction - requests, the modal queue and the pending chain
    history     - snapshots, undo, jump and replay
    archive     - session save and load
    export      - pandas views of a session

Usage:
    from duel_sim import initialize_game
    engine = initialize_game(["c004", "c007"])
    engine.draw_card()
"""

from .cards import CardDefinition, load_card_table
from .config import Settings, load_settings
from .engine import DEFAULT_DECK_LIST, Engine, initialize_game
from .errors import ArchiveFormatError, IllegalPlacementError, SimModelError
from .interaction import Request, RequestKind, ZoneRef
from .state import CardInstance, DuelState, Zone

__version__ = "0.1.0"

__all__ = [
    "CardDefinition",
    "load_card_table",
    "Settings",
    "load_settings",
    "DEFAULT_DECK_LIST",
    "Engine",
    "initialize_game",
    "ArchiveFormatError",
    "IllegalPlacementError",
    "SimModelError",
    "Request",
    "RequestKind",
    "ZoneRef",
    "CardInstance",
    "DuelState",
    "Zone",
]
