"""Search/sort/paginate controller — issues table requests for the client.

Every request carries its own ``RequestContext``: the view parameters it
asks for, whether it is a navigation (and so gets a history entry), and a
one-shot focus token for the text input that triggered it.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass

from product_grid.client.api_client import TableApiClient
from product_grid.client.fragments import parse_table_fragment
from product_grid.client.scheduling import CancellableTask
from product_grid.client.surface import SessionHistory, TableSurface, ViewHistory
from product_grid.client.synchronizer import ClientStateSynchronizer
from product_grid.config import get_settings
from product_grid.domain.entities import ProductField, QueryParams, SortField, SortOrder
from product_grid.domain.exceptions import MalformedResponse, TableRequestError
from product_grid.infrastructure.logging.colored_logger import TransitionLogger
from product_grid.infrastructure.rendering.html_table_renderer import view_url

logger = logging.getLogger(__name__)

_request_ids = itertools.count(1)


@dataclass
class FocusToken:
    field: str
    caret: int


@dataclass
class RequestContext:
    request_id: int
    params: QueryParams
    focus: FocusToken | None = None
    push_history: bool = True
    delete_id: int | None = None


class TableController:
    """Drives table navigation: sort toggles, debounced search and paging."""

    def __init__(
        self,
        api: TableApiClient,
        surface: TableSurface,
        synchronizer: ClientStateSynchronizer | None = None,
        history: ViewHistory | None = None,
        debounce_delay: float | None = None,
        params: QueryParams | None = None,
        transitions: TransitionLogger | None = None,
    ):
        settings = get_settings()
        self._api = api
        self._surface = surface
        self._log = transitions or TransitionLogger()
        self.synchronizer = synchronizer or ClientStateSynchronizer(
            api, surface, transitions=self._log
        )
        self.history = history or SessionHistory()
        self.params = params or QueryParams(page_size=settings.default_page_size)
        delay = settings.debounce_delay if debounce_delay is None else debounce_delay
        self._requests = CancellableTask(self._execute, delay)

    @property
    def busy(self) -> bool:
        return self._requests.pending or self._requests.in_flight

    # ── Actions ──

    def load(self) -> asyncio.Task:
        """Fetch the current view without adding a history entry."""
        return self._requests.run_now(self._context(self.params, push_history=False))

    def refresh(self) -> asyncio.Task:
        return self.load()

    def toggle_sort(self, field: SortField | str, focus: FocusToken | None = None) -> asyncio.Task:
        field = SortField(field)
        if self.params.sort_field is field:
            params = self.params.evolve(sort_dir=self.params.sort_dir.flipped(), page=1)
        else:
            params = self.params.evolve(sort_field=field, sort_dir=SortOrder.ASC, page=1)
        return self._requests.run_now(self._context(params, focus=focus))

    def type_search(self, field: ProductField | str, term: str, caret: int | None = None) -> None:
        """Record a keystroke; the request goes out once typing pauses."""
        field = ProductField(field)
        self.params = self.params.evolve(search_field=field, search_term=term, page=1)
        focus = FocusToken(field.value, len(term) if caret is None else caret)
        self._requests.schedule(self._context(self.params, focus=focus))

    def submit_search(self, caret: int | None = None) -> asyncio.Task:
        """Enter pressed: skip the debounce and search now."""
        params = self.params.evolve(page=1)
        focus = FocusToken(
            params.search_field.value,
            len(params.search_term) if caret is None else caret,
        )
        return self._requests.run_now(self._context(params, focus=focus))

    def go_to_page(self, page: int) -> asyncio.Task:
        return self._requests.run_now(self._context(self.params.evolve(page=max(1, page))))

    def set_page_size(self, limit: int) -> asyncio.Task:
        return self._requests.run_now(
            self._context(self.params.evolve(page_size=max(1, limit), page=1))
        )

    def delete_row(self, row_id: int) -> asyncio.Task:
        ctx = self._context(self.params, push_history=False)
        ctx.delete_id = row_id
        return self._requests.run_now(ctx)

    def abort(self) -> None:
        self._requests.cancel()

    async def wait(self) -> None:
        await self._requests.wait()

    async def aclose(self) -> None:
        self.abort()
        await self.synchronizer.aclose()

    # ── Request handling ──

    def _context(
        self,
        params: QueryParams,
        *,
        focus: FocusToken | None = None,
        push_history: bool = True,
    ) -> RequestContext:
        return RequestContext(next(_request_ids), params, focus, push_history)

    async def _execute(self, ctx: RequestContext) -> None:
        try:
            if ctx.delete_id is not None:
                self._log.request(f"DELETE row {ctx.delete_id}", request=ctx.request_id)
                html = await self._api.delete_row(ctx.delete_id, ctx.params)
            else:
                self._log.request(view_url(ctx.params), request=ctx.request_id)
                html = await self._api.fetch_table(ctx.params)
            fragment = parse_table_fragment(html)
        except (TableRequestError, MalformedResponse) as exc:
            logger.warning("Table request %d failed: %s", ctx.request_id, exc)
            self._surface.show_table_error(getattr(exc, "message", None) or str(exc))
            ctx.focus = None
            return

        try:
            self._surface.replace_table(html)
            self.params = fragment.params
            self.synchronizer.load_table(fragment)
            if ctx.push_history:
                self.history.push(view_url(self.params))
            self._restore_focus(ctx.focus)
        finally:
            ctx.focus = None

    def _restore_focus(self, focus: FocusToken | None) -> None:
        if focus is None:
            return
        value = self._surface.input_value(focus.field)
        if value is None:
            return
        self._surface.focus_input(focus.field, min(focus.caret, len(value)))
