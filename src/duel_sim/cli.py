#!/usr/bin/env python3
"""
Command-line interface for the duel simulator.

Usage:
    python -m duel_sim.cli new --seed 7 --draw 5 --output session.json.gz
    python -m duel_sim.cli replay session.json.gz --speed 3
    python -m duel_sim.cli export session.json.gz --output history.csv
    python -m duel_sim.cli cards
"""

import argparse
import logging
import random
import sys
from pathlib import Path

from .archive import load_archive_file, save_archive
from .cards import is_extra_deck_type, load_card_table
from .config import clamp_replay_speed, load_settings
from .effects.registry import modeled_card_ids
from .engine import DEFAULT_DECK_LIST, Engine
from .errors import ArchiveFormatError, SimModelError
from .export import export_history_csv, log_frame
from .history import ReplayFrame
from .sentry_config import add_breadcrumb, capture_exception, capture_message, init_sentry, set_session_context

logger = logging.getLogger(__name__)


def _print_board(frame: ReplayFrame) -> None:
    state = frame.state

    def names(ids):
        return ", ".join(state.cards[iid].name for iid in ids if iid) or "-"

    print(f"[{frame.step}] LP {state.lp}  deck {len(state.deck)}  hand {len(state.hand)}")
    print(f"    MZ:  {names(state.monster_zones)}")
    print(f"    EMZ: {names(state.extra_monster_zones)}")
    print(f"    S/T: {names(state.spell_trap_zones)}")
    if frame.logs:
        print(f"    > {frame.logs[-1]}")


def cmd_new(args, settings) -> int:
    engine = Engine(settings=settings)
    deck_list = [cid.strip() for cid in args.deck.split(",") if cid.strip()] if args.deck else DEFAULT_DECK_LIST
    engine.initialize_game(deck_list)
    engine.shuffle_deck(random.Random(args.seed))
    for _ in range(args.draw):
        engine.draw_card()
    add_breadcrumb("session created", seed=args.seed, draw=args.draw)
    set_session_context(engine)

    print(f"Main deck: {len(engine.state.deck) + len(engine.state.hand)} cards")
    print(f"Extra deck: {len(engine.state.extra_deck)} cards")
    print("Hand:")
    for iid in engine.state.hand:
        print(f"  {iid}: {engine.state.card(iid).name}")

    if args.output:
        path = save_archive(engine, args.output)
        print(f"\nSession saved to: {path}")
    return 0


def cmd_replay(args, settings) -> int:
    engine = Engine(settings=settings)
    engine.load_archive(load_archive_file(args.archive))
    add_breadcrumb("archive loaded", path=str(args.archive))
    set_session_context(engine)
    speed = clamp_replay_speed(args.speed) if args.speed else None
    sleep = (lambda seconds: None) if args.no_delay else None
    frames = engine.replay(speed=speed, sleep=sleep, on_frame=_print_board)
    print(f"\nReplayed {len(frames)} frames")
    return 0


def cmd_export(args, settings) -> int:
    definitions = load_card_table(settings.card_table)
    archive = load_archive_file(args.archive)
    output = Path(args.output) if args.output else Path(args.archive).with_suffix(".csv")
    export_history_csv(archive, output, definitions)
    print(f"History written to: {output}")
    if args.logs:
        log_frame(archive.get("logs") or []).to_csv(args.logs, index=False)
        print(f"Logs written to: {args.logs}")
    return 0


def cmd_cards(args, settings) -> int:
    definitions = load_card_table(settings.card_table)
    modeled = set(modeled_card_ids())
    for cid in sorted(definitions):
        definition = definitions[cid]
        deck = "extra" if is_extra_deck_type(definition) else "main"
        marker = "*" if cid in modeled else " "
        print(f"{marker} {cid}  {deck:<5}  {definition.type:<7} {definition.name}")
    print(f"\n{len(definitions)} cards, {len(modeled & set(definitions))} with modeled effects (*)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Solo-play duel state simulator")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    sub = parser.add_subparsers(dest="command", required=True)

    new = sub.add_parser("new", help="Start a session from a deck list")
    new.add_argument("--deck", type=str, default="", help="Comma-separated card ids (default: sample deck)")
    new.add_argument("--seed", type=int, default=None, help="Shuffle seed")
    new.add_argument("--draw", type=int, default=5, help="Cards to draw after shuffling")
    new.add_argument("--output", "-o", type=str, default="", help="Save the session archive here")
    new.set_defaults(func=cmd_new)

    replay = sub.add_parser("replay", help="Step through a saved session")
    replay.add_argument("archive", type=str)
    replay.add_argument("--speed", type=int, default=0, help="Replay speed 1-5")
    replay.add_argument("--no-delay", action="store_true", help="Do not wait between frames")
    replay.set_defaults(func=cmd_replay)

    export = sub.add_parser("export", help="Write a saved session's history as CSV")
    export.add_argument("archive", type=str)
    export.add_argument("--output", "-o", type=str, default="", help="CSV path")
    export.add_argument("--logs", type=str, default="", help="Also write the log feed to this CSV")
    export.set_defaults(func=cmd_export)

    cards = sub.add_parser("cards", help="List the card table")
    cards.set_defaults(func=cmd_cards)
    return parser


def main(argv=None):
    """Main entry point for the simulator CLI."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_sentry()
    settings = load_settings()

    try:
        return args.func(args, settings)
    except (ArchiveFormatError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        capture_message(f"Archive rejected: {exc}", level="warning")
        return 2
    except SimModelError as exc:
        logger.error("Simulation error: %s", exc)
        capture_exception(exc)
        return 1
    except Exception as exc:
        logger.exception("Unexpected error")
        capture_exception(exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
