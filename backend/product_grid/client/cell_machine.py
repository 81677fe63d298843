"""Editable cell — one optimistic-edit state machine per (row, field).

    VIEWING ──begin_edit──▶ EDITING ──commit (changed)──▶ PENDING
       ▲                      │                              │
       │◀──cancel / unchanged─┘                 success      │ failure
       │                                          ▼          ▼
       └────────────────────────────────── COMMITTED    REVERTING
       ▲                                                     │
       └──────── error_revert_delay + error_clear_delay ─────┘

Every commit bumps the cell's generation. Only the response belonging to
the newest generation may change anything; older ones are discarded. A
superseded success is still held back: if the newest write then fails,
the cell reverts to that server-confirmed row instead of the pre-edit one.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine
from enum import Enum
from typing import Any

from product_grid.client.fragments import RowFragment
from product_grid.client.surface import TableSurface
from product_grid.client.view_model import (
    CellKey,
    EditStatus,
    PendingEdit,
    RowViewModel,
    TableViewModel,
)
from product_grid.domain.exceptions import (
    MalformedResponse,
    RequestSuperseded,
    TableRequestError,
)
from product_grid.infrastructure.logging.colored_logger import TransitionLogger

logger = logging.getLogger(__name__)

Dispatch = Callable[[CellKey, str], Awaitable[RowFragment]]


class CellState(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"
    PENDING = "pending"
    COMMITTED = "committed"
    REVERTING = "reverting"


class EditableCell:
    """State machine for a single editable cell.

    Holds no values of its own: the displayed value always comes from the
    row view-model, either the pending overlay or the authoritative row.
    """

    def __init__(
        self,
        key: CellKey,
        table: TableViewModel,
        *,
        dispatch: Dispatch,
        surface: TableSurface,
        redraw: Callable[[int], None],
        revert_delay: float,
        clear_delay: float,
        transitions: TransitionLogger | None = None,
    ):
        self.key = key
        self._table = table
        self._dispatch = dispatch
        self._surface = surface
        self._redraw = redraw
        self._revert_delay = revert_delay
        self._clear_delay = clear_delay
        self._log = transitions or TransitionLogger()

        self.state = CellState.VIEWING
        self._generation = 0
        self._awaiting = False
        self._applied_generation = 0
        self._failed_generation = 0
        self._confirmed: tuple[int, RowFragment] | None = None
        self._reverting: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def overlay(self) -> PendingEdit | None:
        row = self._row()
        return row.overlays.get(self.key.field) if row is not None else None

    # ── User actions ──

    def begin_edit(self) -> None:
        if self.state is CellState.EDITING:
            return
        self._abort_revert()
        row = self._row()
        if row is None:
            return
        overlay = row.overlays.get(self.key.field)
        if overlay is not None:
            overlay.status = EditStatus.EDITING
        self._transition(CellState.EDITING)
        self._surface.open_editor(self.key, row.edit_text(self.key.field))

    def cancel(self) -> None:
        """Discard the editor's text and go back to the resting state."""
        if self.state is not CellState.EDITING:
            return
        self._finish_editing()
        self.render()
        self._surface.focus_display(self.key)

    def commit(self, raw_value: str) -> asyncio.Task | None:
        """Commit the editor's text; returns the round-trip task when one was sent."""
        if self.state is not CellState.EDITING:
            return None
        row = self._row()
        if row is None:
            return None
        field = self.key.field

        if row.is_unchanged(field, raw_value):
            self._finish_editing()
            self.render()
            return None

        self._generation += 1
        generation = self._generation
        row.overlays[field] = PendingEdit(
            row_id=self.key.row_id,
            field=field,
            original_value=row.authoritative.value_of(field.value),
            candidate_value=raw_value,
            status=EditStatus.PENDING,
        )
        self._awaiting = True
        self._surface.close_editor(self.key)
        self._transition(CellState.PENDING, candidate=raw_value, generation=generation)
        self._redraw(self.key.row_id)
        return self._spawn(self._round_trip(raw_value, generation))

    # ── Rendering ──

    def render(self) -> None:
        """Draw the cell's current value unless an editor or error owns it."""
        if self.state is CellState.EDITING:
            return
        row = self._row()
        if row is None:
            return
        overlay = row.overlays.get(self.key.field)
        if self.state is CellState.REVERTING and overlay is not None:
            return
        self._surface.render_cell(
            self.key,
            row.display_text(self.key.field),
            speculative=overlay is not None,
        )

    async def wait_idle(self) -> None:
        """Wait until no round trip or reversion is running for this cell."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def dispose(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        self._reverting = None

    # ── Round trip ──

    async def _round_trip(self, raw_value: str, generation: int) -> None:
        try:
            with self._log.round_trip(str(self.key), f"write #{generation}"):
                fragment = await self._dispatch(self.key, raw_value)
            if not self._is_current(generation):
                self._remember_confirmed(generation, fragment)
            self._check_current(generation)
            self._apply_success(fragment)
            self._applied_generation = generation
            self._confirmed = None
        except RequestSuperseded as exc:
            self._log.discarded(str(self.key), str(exc))
        except (TableRequestError, MalformedResponse) as exc:
            if not self._is_current(generation):
                self._log.discarded(str(self.key), f"stale failure: {exc}")
                return
            self._awaiting = False
            self._failed_generation = generation
            self._adopt_confirmed()
            message = getattr(exc, "message", None) or str(exc)
            self._reverting = self._spawn(self._revert(message))

    def _check_current(self, generation: int) -> None:
        if not self._is_current(generation):
            raise RequestSuperseded(self.key, generation, self._generation)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _apply_success(self, fragment: RowFragment) -> None:
        if fragment.row.id != self.key.row_id:
            raise MalformedResponse(
                f"row {fragment.row.id} returned for {self.key}"
            )
        self._awaiting = False
        self._table.apply_row(fragment.row)
        row = self._row()
        if row is not None:
            row.overlays.pop(self.key.field, None)
        if fragment.totals is not None:
            self._table.set_totals(fragment.totals)

        if self.state is not CellState.EDITING:
            self._transition(CellState.COMMITTED)
            self._transition(CellState.VIEWING)
        self._redraw(self.key.row_id)

    def _remember_confirmed(self, generation: int, fragment: RowFragment) -> None:
        """Hold on to a superseded success as the fallback for a failing newer write.

        While the newer write is in flight nothing is shown. Once it has
        failed, the held row is adopted straight away.
        """
        if fragment.row.id != self.key.row_id or generation <= self._applied_generation:
            return
        if self._confirmed is not None and self._confirmed[0] > generation:
            return
        self._confirmed = (generation, fragment)
        if self._failed_generation == self._generation:
            self._adopt_confirmed()
            self._redraw(self.key.row_id)

    def _adopt_confirmed(self) -> None:
        if self._confirmed is None:
            return
        generation, fragment = self._confirmed
        self._confirmed = None
        self._applied_generation = generation
        self._table.apply_row(fragment.row)
        if fragment.totals is not None:
            self._table.set_totals(fragment.totals)
        logger.debug("%s adopted superseded write #%d as server state", self.key, generation)

    # ── Reversion ──

    async def _revert(self, message: str) -> None:
        key = self.key
        overlay = self.overlay
        if overlay is not None:
            overlay.status = EditStatus.REVERTING
        try:
            if self.state is CellState.EDITING:
                self._restore_original()
                self._surface.show_error(key, message)
                await asyncio.sleep(self._clear_delay)
                self._surface.clear_error(key)
                return

            self._transition(CellState.REVERTING, error=message)
            self._surface.show_error(key, message)
            await asyncio.sleep(self._revert_delay)
            self._restore_original()
            await asyncio.sleep(self._clear_delay)
            self._surface.clear_error(key)
            self._transition(CellState.VIEWING)
        finally:
            if self._reverting is asyncio.current_task():
                self._reverting = None

    def _restore_original(self) -> None:
        row = self._row()
        if row is not None:
            row.overlays.pop(self.key.field, None)
        self._redraw(self.key.row_id)

    def _abort_revert(self) -> None:
        """Finish a running reversion at once: original back, indicator gone."""
        task = self._reverting
        if task is None or task.done():
            return
        task.cancel()
        self._reverting = None
        self._surface.clear_error(self.key)
        if self.state is CellState.REVERTING:
            self._transition(CellState.VIEWING)
        self._restore_original()

    # ── Helpers ──

    def _row(self) -> RowViewModel | None:
        return self._table.row(self.key.row_id)

    def _finish_editing(self) -> None:
        self._surface.close_editor(self.key)
        overlay = self.overlay
        if self._awaiting and overlay is not None:
            overlay.status = EditStatus.PENDING
            self._transition(CellState.PENDING)
        else:
            self._transition(CellState.VIEWING)

    def _transition(self, new: CellState, **details: Any) -> None:
        old = self.state
        self.state = new
        self._log.transition(str(self.key), old.value, new.value, **details)

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
