from __future__ import annotations

import itertools
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Generator, Sequence, Union

from .locales import format_log
from .state import DuelState, Zone

CardFilter = Callable[[DuelState, str], bool]
ZoneFilter = Callable[[Zone, int], bool]
Handler = Generator["Request", Any, None]


class RequestKind(str, Enum):
    SEARCH = "SEARCH"
    EFFECT_SELECTION = "EFFECT_SELECTION"
    TARGETING = "TARGETING"
    ZONE_SELECTION = "ZONE_SELECTION"


class RequestStatus(str, Enum):
    AWAITING = "AWAITING"
    RESOLVED = "RESOLVED"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class Option:
    label: str
    value: str


@dataclass(frozen=True)
class ZoneRef:
    zone: Zone
    index: int


@dataclass
class Request:
    kind: RequestKind
    title: str = ""
    options: list[Option] = field(default_factory=list)
    card_filter: CardFilter | None = None
    source: Union[Sequence[str], Zone, None] = None
    zone_filter: ZoneFilter | None = None
    status: RequestStatus = RequestStatus.AWAITING

    def source_ids(self, state: DuelState) -> list[str]:
        if self.source is None:
            return list(state.deck)
        if isinstance(self.source, Zone):
            return list(state.zone_list(self.source))
        return list(self.source)

    def candidates(self, state: DuelState) -> list[str]:
        """Card ids the request currently accepts (SEARCH and TARGETING only)."""
        if self.kind == RequestKind.SEARCH:
            pool = self.source_ids(state)
        elif self.kind == RequestKind.TARGETING:
            pool = list(state.cards)
        else:
            return []
        if self.card_filter is None:
            return pool
        return [iid for iid in pool if iid in state.cards and self.card_filter(state, iid)]

    def accepts(self, state: DuelState, answer: Any) -> bool:
        if self.kind == RequestKind.EFFECT_SELECTION:
            return any(option.value == answer for option in self.options)
        if self.kind == RequestKind.ZONE_SELECTION:
            ref = as_zone_ref(answer)
            if ref is None:
                return False
            return self.zone_filter is None or bool(self.zone_filter(ref.zone, ref.index))
        return isinstance(answer, str) and answer in self.candidates(state)


def as_zone_ref(answer: Any) -> ZoneRef | None:
    if isinstance(answer, ZoneRef):
        return answer
    if isinstance(answer, (tuple, list)) and len(answer) == 2:
        try:
            return ZoneRef(Zone(answer[0]), int(answer[1]))
        except (TypeError, ValueError):
            return None
    return None


def confirm(title_key: str, **params) -> Request:
    return Request(
        kind=RequestKind.EFFECT_SELECTION,
        title=format_log(title_key, **params),
        options=[Option(format_log("ui_yes"), "yes"), Option(format_log("ui_no"), "no")],
    )


def choose(title_key: str, options: Sequence[tuple[str, str]], **params) -> Request:
    """An effect selection over (label, value) pairs."""
    return Request(
        kind=RequestKind.EFFECT_SELECTION,
        title=format_log(title_key, **params),
        options=[Option(label, value) for label, value in options],
    )


def search(
    card_filter: CardFilter,
    source: Union[Sequence[str], Zone, None] = None,
    title_key: str = "prompt_select_card",
    **params,
) -> Request:
    return Request(
        kind=RequestKind.SEARCH,
        title=format_log(title_key, **params),
        card_filter=card_filter,
        source=source,
    )


def target(card_filter: CardFilter, title_key: str = "prompt_select_card", **params) -> Request:
    return Request(kind=RequestKind.TARGETING, title=format_log(title_key, **params), card_filter=card_filter)


def select_zone(zone_filter: ZoneFilter, title_key: str = "prompt_select_zone", **params) -> Request:
    return Request(kind=RequestKind.ZONE_SELECTION, title=format_log(title_key, **params), zone_filter=zone_filter)


def zone_in(slots: Sequence[tuple[Zone, int]]) -> ZoneFilter:
    allowed = {(Zone(zone), int(index)) for zone, index in slots}
    return lambda zone, index: (zone, index) in allowed


_chain_ids = itertools.count(1)


@dataclass
class ChainEntry:
    label: str
    execute: Callable[[], None]
    id: str = field(default_factory=lambda: f"chain_{next(_chain_ids)}")


@dataclass
class InteractionQueue:
    open_request: Request | None = None
    continuation: Handler | None = None
    modal_queue: deque = field(default_factory=deque)
    pending_chain: list[ChainEntry] = field(default_factory=list)
    pending_effects: list[Callable[[], None]] = field(default_factory=list)
    is_effect_activated: bool = False
    pendulum_candidates: list[str] = field(default_factory=list)
    pendulum_summoning: bool = False

    @property
    def busy(self) -> bool:
        return self.open_request is not None

    def clear(self) -> None:
        if self.continuation is not None:
            self.continuation.close()
        self.open_request = None
        self.continuation = None
        self.modal_queue.clear()
        self.pending_chain.clear()
        self.pending_effects.clear()
        self.is_effect_activated = False
        self.pendulum_candidates = []
        self.pendulum_summoning = False


def chain_order_key(entry: ChainEntry) -> int:
    if "Count Surveyor" in entry.label:
        return 0
    if "Scale Surveyor" in entry.label:
        return 2
    return 1
