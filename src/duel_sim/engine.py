from __future__ import annotations

import dataclasses
import logging
import random
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Sequence

from . import history, moves, summons
from .cards import CardDefinition, is_extra_deck_type, load_card_table
from .config import Settings, load_settings
from .context import OperationContext
from .effects.registry import EFFECT_REGISTRY
from .effects.types import EffectEvent, Reason, SummonVariant
from .errors import SimModelError
from .history import History, ReplayFrame
from .interaction import (
    ChainEntry,
    Handler,
    InteractionQueue,
    Request,
    RequestKind,
    RequestStatus,
    as_zone_ref,
    chain_order_key,
    choose,
)
from .locales import format_log
from .rules import sort_deck, sort_extra_deck
from .state import C030_LOCKED, CardInstance, DuelState, Zone

logger = logging.getLogger(__name__)

MAX_COPIES = 3
# Activation ignores the usage counter for these cards; their handlers gate per slot.
ACTIVATION_EXEMPT = ("c021", "c014", "c030", "c032", "c012", "c010")

DEFAULT_DECK_LIST: list[str] = [
    # Extra deck
    "c007", "c027", "c019", "c029",
    "c026", "c020",
    "c022", "c025", "c021", "c023", "c018",
    "c017", "c017", "c028",
    # Main deck
    "c004", "c014", "c009", "c011", "c013", "c008", "c010", "c012", "c030",
    "c033", "c015", "c032",
    "c005", "c034", "c006",
    "c016", "c024", "c031",
]


class Engine:
    """Owns the duel state, its history and the interaction queue.

    Every public method is an intent from the player (or a rendering layer acting
    for them). Card handlers receive the engine and mutate through ``move_card``.
    """

    def __init__(
        self,
        definitions: dict[str, CardDefinition] | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        if definitions is None:
            definitions = load_card_table(self.settings.card_table)
        self.definitions = definitions
        self.state = DuelState(lp=self.settings.starting_lp)
        self.history = History(limit=self.settings.history_limit)
        self.interaction = InteractionQueue()
        self.context = OperationContext()
        self.replaying = False
        self._unit_pushed = False

    # --- context ---------------------------------------------------------

    @contextmanager
    def operation(self, **changes: bool) -> Iterator[OperationContext]:
        previous = self.context
        self.context = dataclasses.replace(previous, **changes)
        try:
            yield self.context
        finally:
            self.context = previous

    @contextmanager
    def history_unit(self) -> Iterator[None]:
        """Group several mutations under a single undo step."""
        if self.context.history_unit:
            yield
            return
        previous = self._unit_pushed
        self._unit_pushed = False
        try:
            with self.operation(history_unit=True):
                yield
        finally:
            self._unit_pushed = previous

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Defer effect selections into the pending chain until the block completes."""
        if self.context.batching:
            yield
            return
        with self.operation(batching=True):
            yield
            self.process_pending_effects()
            self.process_ui_queue()
        self.state.last_effect_source_id = None

    @contextmanager
    def drag(self) -> Iterator[None]:
        with self.operation(dragging=True):
            yield

    # --- logging and history ----------------------------------------------

    def log(self, key: str, **params: Any) -> None:
        self.log_line(format_log(key, **params))

    def log_line(self, line: str) -> None:
        self.state.logs.append(line)

    def push_history(self) -> None:
        if self.context.history_unit:
            if self._unit_pushed:
                return
            self._unit_pushed = True
        self.history.push(self.state)

    def undo(self) -> bool:
        return history.undo(self)

    def jump_to_log(self, log_index: int) -> bool:
        return history.jump_to_log(self, log_index)

    def return_from_jump(self) -> bool:
        return history.return_from_jump(self)

    def replay(
        self,
        speed: int | None = None,
        sleep: Callable[[float], None] | None = None,
        on_frame: Callable[[ReplayFrame], None] | None = None,
    ) -> list[ReplayFrame]:
        if sleep is None:
            return history.replay(self, speed=speed, on_frame=on_frame)
        return history.replay(self, speed=speed, sleep=sleep, on_frame=on_frame)

    def stop_replay(self) -> None:
        self.replaying = False

    # --- setup -------------------------------------------------------------

    def initialize_game(self, deck_list: Sequence[str] | None = None) -> None:
        deck_list = list(DEFAULT_DECK_LIST if deck_list is None else deck_list)
        cards: dict[str, CardInstance] = {}
        main: list[str] = []
        extra: list[str] = []
        for index, card_id in enumerate(deck_list):
            definition = self.definitions.get(card_id)
            if definition is None:
                raise SimModelError(f"Unknown card id in deck list: {card_id}")
            instance_id = f"inst_{card_id}_{index}"
            cards[instance_id] = CardInstance(instance_id, definition)
            (extra if is_extra_deck_type(definition) else main).append(instance_id)

        self.interaction.clear()
        self.history.clear()
        self.context = OperationContext()
        self.state = DuelState(cards=cards, deck=main, lp=self.settings.starting_lp)
        self.state.extra_deck = sort_extra_deck(self.state, extra)
        logger.info("Game initialised: %d main, %d extra", len(main), len(extra))

    @property
    def trigger_candidates(self) -> list[str]:
        return self.state.trigger_candidates

    # --- moves ---------------------------------------------------------------

    def move_card(
        self,
        instance_id: str,
        to_zone: Zone,
        to_index: int = 0,
        from_location: Zone | None = None,
        suppress_trigger: bool = False,
        is_special_summon: bool = False,
        summon_variant: SummonVariant | None = None,
        **kwargs: Any,
    ) -> bool:
        return moves.move_card(
            self,
            instance_id,
            to_zone,
            to_index,
            from_location,
            suppress_trigger,
            is_special_summon,
            summon_variant,
            **kwargs,
        )

    def draw_card(self) -> bool:
        if not self.state.deck:
            return False
        top = self.state.deck[0]
        with self.operation(suppress_log=True):
            moved = self.move_card(top, Zone.HAND, from_location=Zone.DECK)
        if moved:
            self.log("log_draw")
        return moved

    def shuffle_deck(self, rng: random.Random | None = None) -> None:
        self.push_history()
        (rng or random).shuffle(self.state.deck)
        self.log("log_deck_shuffled")

    def sort_deck(self) -> None:
        self.push_history()
        self.state.deck = sort_deck(self.state, self.state.deck)
        self.log("log_deck_sorted")

    def set_deck(self, instance_ids: Sequence[str]) -> None:
        for iid in instance_ids:
            self.state.card(iid)
        self.push_history()
        self.state.deck = list(instance_ids)

    def _new_instance_id(self, card_id: str) -> str:
        index = len(self.state.cards)
        while f"inst_{card_id}_{index}" in self.state.cards:
            index += 1
        return f"inst_{card_id}_{index}"

    def add_card_copy(self, instance_id: str) -> str | None:
        state = self.state
        template = state.card(instance_id)
        copies = [iid for iid in state.deck if state.card(iid).card_id == template.card_id]
        if len(copies) >= MAX_COPIES:
            self.log("log_max_copies_reached", card=template.name)
            return None
        self.push_history()
        new_id = self._new_instance_id(template.card_id)
        state.cards[new_id] = CardInstance(new_id, template.definition)
        position = state.deck.index(instance_id) + 1 if instance_id in state.deck else len(state.deck)
        state.deck.insert(position, new_id)
        return new_id

    def remove_card_copy(self, instance_id: str) -> bool:
        state = self.state
        card = state.card(instance_id)
        copies = [iid for iid in state.deck if state.card(iid).card_id == card.card_id]
        if len(copies) <= 1 or instance_id not in state.deck:
            self.log("log_min_copies_reached", card=card.name)
            return False
        self.push_history()
        state.deck.remove(instance_id)
        del state.cards[instance_id]
        return True

    def add_extra_deck_copy(self, card_id: str) -> str | None:
        state = self.state
        definition = self.definitions.get(card_id)
        if definition is None:
            raise SimModelError(f"Unknown card id: {card_id}")
        copies = [iid for iid in state.extra_deck if state.card(iid).card_id == card_id]
        if len(copies) >= MAX_COPIES:
            self.log("log_max_copies_reached", card=definition.name)
            return None
        self.push_history()
        new_id = self._new_instance_id(card_id)
        state.cards[new_id] = CardInstance(new_id, definition)
        state.extra_deck = sort_extra_deck(state, state.extra_deck + [new_id])
        return new_id

    def remove_extra_deck_copy(self, card_id: str, instance_id: str | None = None) -> bool:
        state = self.state
        copies = [iid for iid in state.extra_deck if state.card(iid).card_id == card_id]
        name = self.definitions[card_id].name if card_id in self.definitions else card_id
        if len(copies) <= 1:
            self.log("log_min_copies_reached", card=name)
            return False
        target_id = instance_id if instance_id in copies else copies[-1]
        self.push_history()
        state.extra_deck.remove(target_id)
        del state.cards[target_id]
        return True

    def reset_game(self) -> None:
        state = self.state
        main = [iid for iid, card in state.cards.items() if not is_extra_deck_type(card.definition)]
        extra = [iid for iid, card in state.cards.items() if is_extra_deck_type(card.definition)]
        off_deck = [iid for iid in main if iid not in state.deck]
        for card in state.cards.values():
            card.face_up = False
        fresh = DuelState(cards=state.cards, deck=off_deck + list(state.deck), lp=self.settings.starting_lp)
        fresh.extra_deck = sort_extra_deck(fresh, extra)
        self.interaction.clear()
        self.history.clear()
        self.context = OperationContext()
        self.state = fresh
        logger.info("Game reset")

    def end_turn(self) -> None:
        self.push_history()
        state = self.state
        state.usage.clear()
        state.normal_summon_used = False
        state.pendulum_summon_count = 0
        state.pendulum_summon_limit = 1
        state.tell_buff_active = False
        for flags in state.flags.values():
            if C030_LOCKED in flags:
                flags.remove(C030_LOCKED)
        self.log("log_end_turn")

    # --- overlay -----------------------------------------------------------

    def change_lp(self, delta: int) -> None:
        self.push_history()
        self.state.lp += delta

    def set_card_flag(self, instance_id: str, flag: str) -> None:
        self.state.card(instance_id)
        self.push_history()
        flags = self.state.flags.setdefault(instance_id, [])
        if flag not in flags:
            flags.append(flag)

    def modify_card_property(self, instance_id: str, prop: str, value: Any, mode: str = "set") -> None:
        if prop not in ("level", "attack", "defense", "is_negated"):
            raise SimModelError(f"Unknown card property: {prop}")
        if mode not in ("set", "add"):
            raise SimModelError(f"Unknown modification mode: {mode}")
        state = self.state
        state.card(instance_id)
        self.push_history()
        overlay = state.modifiers.setdefault(instance_id, {})
        if mode == "add":
            current = {
                "level": state.effective_level,
                "attack": state.effective_attack,
                "defense": state.effective_defense,
            }[prop](instance_id)
            value = current + int(value)
        if prop == "level":
            value = max(1, int(value))
        overlay[prop] = value

    def increment_pendulum_summon_limit(self) -> None:
        self.push_history()
        self.state.pendulum_summon_limit += 1

    def add_turn_effect_usage(self, key: str, highlight: str | None = None) -> None:
        self.push_history()
        state = self.state
        state.usage[key] = state.usage.get(key, 0) + 1
        if highlight:
            state.active_effect_card_id = highlight
        elif key.startswith("c") and "_" not in key:
            state.active_effect_card_id = key

    # --- effects -----------------------------------------------------------

    def has_handler(self, instance_id: str) -> bool:
        return self.state.card(instance_id).card_id in EFFECT_REGISTRY

    def dispatch(self, instance_id: str, event: EffectEvent) -> None:
        card = self.state.card(instance_id)
        impl = EFFECT_REGISTRY.get(card.card_id)
        if impl is None:
            return
        if not impl.precondition(self.state, instance_id):
            logger.debug("Precondition failed for %s (%s)", instance_id, event.reason.value)
            return
        logger.debug("Dispatching %s for %s", event.reason.value, instance_id)
        self.start_interaction(impl.activate(self, instance_id, event))

    def activate_effect(self, instance_id: str) -> None:
        state = self.state
        state.card(instance_id)
        if summons.tribute_summon_available(state, instance_id):
            self.start_interaction(summons.tribute_summon(self, instance_id))
            return
        self.run_card_effect(instance_id)

    def run_card_effect(self, instance_id: str) -> None:
        state = self.state
        card = state.card(instance_id)
        if state.is_negated(instance_id):
            self.log("log_effect_negated", card=card.name)
            return
        if card.card_id not in EFFECT_REGISTRY:
            self.log("log_no_effect_defined", card=card.name)
            return
        if card.card_id not in ACTIVATION_EXEMPT and state.usage.get(card.card_id, 0) >= 1:
            self.log("log_hopt_used", card=card.name)
            return
        state.active_effect_card_id = instance_id
        self.dispatch(instance_id, EffectEvent(Reason.MANUAL))

    def resolve_trigger(self, instance_id: str) -> bool:
        state = self.state
        if instance_id not in state.trigger_candidates:
            return False
        self.push_history()
        state.trigger_candidates.remove(instance_id)
        self.log("log_trigger_activated", card=state.card(instance_id).name)
        self.dispatch(instance_id, EffectEvent(Reason.TRIGGER, from_zone=state.zone_of(instance_id)))
        return True

    # --- summons -------------------------------------------------------------

    def start_synchro_summon(self, instance_id: str) -> None:
        summons.start_synchro_summon(self, instance_id)

    def start_xyz_summon(self, instance_id: str) -> None:
        summons.start_xyz_summon(self, instance_id)

    def start_pendulum_summon(self) -> bool:
        return summons.start_pendulum_summon(self)

    def resolve_pendulum_selection(self, instance_ids: Sequence[str]) -> bool:
        return summons.resolve_pendulum_selection(self, instance_ids)

    def cancel_pendulum_summon(self) -> None:
        summons.cancel_pendulum_summon(self)

    # --- interaction -------------------------------------------------------

    def start_interaction(self, handler: Handler | None) -> None:
        if handler is None:
            return
        self._advance(handler, None)

    def start_interaction_for(self, factory: Callable[["Engine", str], Handler], instance_id: str) -> None:
        self.start_interaction(factory(self, instance_id))

    def _advance(self, handler: Handler, answer: Any) -> None:
        try:
            request = handler.send(answer)
        except StopIteration:
            return
        self._raise(request, handler)

    def _raise(self, request: Request, handler: Handler) -> None:
        ui = self.interaction
        ui.is_effect_activated = True
        if request.kind == RequestKind.EFFECT_SELECTION and self.context.batching:
            entry = ChainEntry(label=request.title, execute=lambda: self._open(request, handler))
            ui.pending_chain.append(entry)
            logger.debug("Chained %r as %s", request.title, entry.id)
        elif ui.busy:
            ui.modal_queue.append(lambda: self._open(request, handler))
        else:
            self._open(request, handler)

    def _open(self, request: Request, handler: Handler) -> None:
        ui = self.interaction
        if ui.busy:
            ui.modal_queue.append(lambda: self._open(request, handler))
            return
        request.status = RequestStatus.AWAITING
        ui.open_request = request
        ui.continuation = handler

    def resolve_request(self, answer: Any) -> bool:
        ui = self.interaction
        request = ui.open_request
        if request is None or not request.accepts(self.state, answer):
            return False
        handler = ui.continuation
        request.status = RequestStatus.RESOLVED
        ui.open_request = None
        ui.continuation = None
        if request.kind == RequestKind.ZONE_SELECTION:
            answer = as_zone_ref(answer)
        if handler is not None:
            self._advance(handler, answer)
        self.process_ui_queue()
        return True

    def cancel_request(self) -> bool:
        ui = self.interaction
        request = ui.open_request
        if request is None:
            return False
        request.status = RequestStatus.CANCELLED
        handler = ui.continuation
        ui.open_request = None
        ui.continuation = None
        if handler is not None:
            handler.close()
        self.process_ui_queue()
        return True

    def process_pending_effects(self) -> None:
        ui = self.interaction
        while ui.pending_effects:
            effects = list(ui.pending_effects)
            ui.pending_effects.clear()
            for effect in effects:
                effect()

    def process_ui_queue(self) -> None:
        ui = self.interaction
        while True:
            if ui.busy or ui.pendulum_summoning:
                return
            if len(ui.pending_chain) == 1:
                self._run_chain_entry(ui.pending_chain.pop())
                continue
            if len(ui.pending_chain) > 1:
                handler = self._chain_order_prompt()
                self._open(next(handler), handler)
                return
            if ui.modal_queue:
                ui.modal_queue.popleft()()
                continue
            break
        if ui.is_effect_activated:
            ui.is_effect_activated = False
            self.state.active_effect_card_id = None

    def _run_chain_entry(self, entry: ChainEntry) -> None:
        logger.debug("Resolving chain entry %s (%r)", entry.id, entry.label)
        with self.operation(batching=False):
            entry.execute()

    def _chain_order_prompt(self) -> Iterator[Request]:
        entries = sorted(self.interaction.pending_chain, key=chain_order_key)
        answer = yield choose("prompt_chain_order", [(entry.label, entry.id) for entry in entries])
        chosen = next((entry for entry in self.interaction.pending_chain if entry.id == answer), None)
        if chosen is None:
            return
        self.interaction.pending_chain.remove(chosen)
        self._run_chain_entry(chosen)

    # --- persistence -------------------------------------------------------

    def load_archive(self, archive: dict[str, Any]) -> None:
        from .archive import snapshots_from_archive

        snapshots = snapshots_from_archive(archive, self.definitions)
        logs = [str(line) for line in archive.get("logs") or []]
        self.interaction.clear()
        self.context = OperationContext()
        self.history.clear()
        self.history.snapshots = snapshots
        if snapshots:
            latest = snapshots[-1].state.clone()
        else:
            latest = DuelState(lp=self.settings.starting_lp)
        latest.logs = logs
        self.state = latest
        logger.info("Archive loaded: %d snapshots, %d log lines", len(snapshots), len(logs))


def initialize_game(
    deck_list: Sequence[str] | None = None,
    definitions: dict[str, CardDefinition] | None = None,
    settings: Settings | None = None,
) -> Engine:
    engine = Engine(definitions=definitions, settings=settings)
    engine.initialize_game(deck_list)
    return engine

