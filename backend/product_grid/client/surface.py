"""Display surface port — what the client engine drives.

The engine never touches a document directly. A host (a browser bridge, a
terminal UI, or a test double) implements these operations against its own
widgets, keyed by the same ids the server puts on the markup.
"""

from abc import ABC, abstractmethod

from product_grid.client.view_model import CellKey


class TableSurface(ABC):
    """Rendering and focus operations for the table view."""

    # ── Whole table ──

    @abstractmethod
    def replace_table(self, html: str) -> None:
        """Swap the ``#table-wrapper`` contents for a freshly fetched fragment."""
        ...

    @abstractmethod
    def show_table_error(self, message: str) -> None:
        """Report a failed table request; the current table stays as it is."""
        ...

    @abstractmethod
    def input_value(self, field: str) -> str | None:
        """Current text of the search input for ``field``, or None if absent."""
        ...

    @abstractmethod
    def focus_input(self, field: str, caret: int) -> None:
        ...

    # ── Cells ──

    @abstractmethod
    def render_cell(self, key: CellKey, text: str, *, speculative: bool) -> None:
        """Show ``text`` in the cell's display surface.

        ``speculative`` marks a value the server has not confirmed yet.
        """
        ...

    @abstractmethod
    def render_subtotal(self, row_id: int, text: str) -> None:
        ...

    @abstractmethod
    def render_totals(self, totals: dict[str, str]) -> None:
        ...

    @abstractmethod
    def open_editor(self, key: CellKey, text: str) -> None:
        """Replace the display surface with an input holding ``text``."""
        ...

    @abstractmethod
    def close_editor(self, key: CellKey) -> None:
        ...

    @abstractmethod
    def show_error(self, key: CellKey, message: str) -> None:
        ...

    @abstractmethod
    def clear_error(self, key: CellKey) -> None:
        ...

    @abstractmethod
    def focus_display(self, key: CellKey) -> None:
        ...


class ViewHistory(ABC):
    """Navigation history that receives one URL per navigation request."""

    @abstractmethod
    def push(self, url: str) -> None:
        ...


class SessionHistory(ViewHistory):
    """In-process history, used when the host provides none."""

    def __init__(self) -> None:
        self.entries: list[str] = []

    def push(self, url: str) -> None:
        self.entries.append(url)

    @property
    def current(self) -> str | None:
        return self.entries[-1] if self.entries else None
