"""Colored transition logger — ANSI-colored console logging for editable cells.

Gives every cell state its own color so a burst of optimistic edits can be
followed in the terminal:

    White   — Viewing
    Cyan    — Editing
    Yellow  — Pending (speculative value shown)
    Green   — Committed
    Red     — Reverting
    Gray    — Superseded responses, timing
    Blue    — Table requests from the controller
"""

import asyncio
import logging
import time
from contextlib import contextmanager
from typing import Any


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"


# ── Stage Definitions ────────────────────────────────────────────────

_STATE_COLORS: dict[str, str] = {
    "viewing": _Colors.WHITE,
    "editing": _Colors.CYAN,
    "pending": _Colors.YELLOW,
    "committed": _Colors.GREEN,
    "reverting": _Colors.RED,
    "superseded": _Colors.GRAY,
    "request": _Colors.BLUE,
}


def _details(kwargs: dict[str, Any]) -> str:
    if not kwargs:
        return ""
    joined = " | ".join(f"{k}={v}" for k, v in kwargs.items())
    return f" {_Colors.GRAY}({joined}){_Colors.RESET}"


# ── TransitionLogger ─────────────────────────────────────────────────

class TransitionLogger:
    """Color-coded logger for cell state machines and table requests.

    Usage:
        log = TransitionLogger()
        log.transition("row-3/price", "editing", "pending", candidate="99.99")
        with log.round_trip("row-3/price", "PATCH /api/v1/products/3/price"):
            fragment = await api.update_field(...)
    """

    def __init__(self, component_name: str = "CellTransitions"):
        self._logger = logging.getLogger(component_name)

    def transition(self, key: str, old: str, new: str, **kwargs: Any) -> None:
        """Log a state change, colored by the target state."""
        color = _STATE_COLORS.get(new, _Colors.WHITE)
        formatted = (
            f"{color}{_Colors.BOLD}[{key}]{_Colors.RESET} "
            f"{_Colors.DIM}{old}{_Colors.RESET} → {color}{new}{_Colors.RESET}"
            f"{_details(kwargs)}"
        )
        if new == "reverting":
            self._logger.warning(formatted)
        else:
            self._logger.info(formatted)

    def discarded(self, key: str, reason: str) -> None:
        """Log a response that arrived too late to matter."""
        self._logger.debug(
            f"   {_Colors.GRAY}├─ [{key}] discarded: {reason}{_Colors.RESET}"
        )

    def request(self, message: str, **kwargs: Any) -> None:
        """Log an outbound table request."""
        color = _STATE_COLORS["request"]
        self._logger.info(f"{color}⇢ {message}{_Colors.RESET}{_details(kwargs)}")

    @contextmanager
    def round_trip(self, key: str, message: str):
        """Context manager that logs a request's elapsed time.

        Cancellation is logged in gray and re-raised untouched.
        """
        start = time.perf_counter()
        try:
            yield
        except BaseException as exc:
            elapsed = time.perf_counter() - start
            label = "cancelled" if isinstance(exc, asyncio.CancelledError) else type(exc).__name__
            self._logger.debug(
                f"   {_Colors.GRAY}├─ [{key}] {message} {label} after {elapsed:.3f}s{_Colors.RESET}"
            )
            raise
        else:
            elapsed = time.perf_counter() - start
            self._logger.debug(
                f"   {_Colors.GRAY}├─ [{key}] {message} — {elapsed:.3f}s{_Colors.RESET}"
            )
