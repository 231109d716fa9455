"""Sentry error monitoring for simulator sessions."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import sentry_sdk
from dotenv import load_dotenv
from sentry_sdk.integrations.logging import LoggingIntegration

from . import __version__

if TYPE_CHECKING:
    from .engine import Engine


def init_sentry() -> bool:
    """Initialize Sentry when SENTRY_DSN is set.

    Warnings from the simulator's loggers become breadcrumbs; errors become events.

    Returns:
        True if Sentry was initialized, False if DSN not configured.
    """
    load_dotenv()

    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=os.getenv("ENVIRONMENT", "development"),
        release=f"dd-duel-sim@{__version__}",
        traces_sample_rate=0.0,
        attach_stacktrace=True,
        integrations=[LoggingIntegration(level=logging.WARNING, event_level=logging.ERROR)],
    )
    sentry_sdk.set_tag("component", "duel-sim")
    return True


def set_session_context(engine: "Engine") -> None:
    """Attach the board summary of ``engine`` to subsequent events."""
    state = engine.state
    request = engine.interaction.open_request
    sentry_sdk.set_context(
        "duel_session",
        {
            "cards": len(state.cards),
            "deck": len(state.deck),
            "hand": len(state.hand),
            "log_lines": len(state.logs),
            "history_depth": len(engine.history),
            "open_request": request.title if request else None,
            "pending_chain": len(engine.interaction.pending_chain),
        },
    )


def capture_exception(exception: Exception | None = None) -> None:
    sentry_sdk.capture_exception(exception)


def capture_message(message: str, level: str = "info") -> None:
    sentry_sdk.capture_message(message, level=level)


def add_breadcrumb(message: str, **data) -> None:
    """Record a CLI step so a later exception carries the session trail."""
    sentry_sdk.add_breadcrumb(category="duel_sim", message=message, data=data, level="info")
