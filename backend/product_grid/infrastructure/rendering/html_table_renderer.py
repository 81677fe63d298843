"""HTML renderer — server-side markup for the product table.

Produces the full page and the swappable fragments (table wrapper, single
row, totals footer). Every authoritative value also rides on a ``data-*``
attribute so a client can rebuild its view-model from a fragment alone.

Element ids are stable and keyed by row id:

    #table-wrapper       swap target for navigation and deletion
    #row-{id}            one product row
    #price-cell-{id}     editable cell (also #quantity-cell-{id})
    #view-price-{id}     display surface inside the cell
    #subtotal-{id}       derived price × quantity
    #table-totals        totals footer, swapped out-of-band on edits
"""

from html import escape as _html_escape
from typing import Any
from urllib.parse import urlencode

from product_grid.application.interfaces import TableRenderer
from product_grid.domain.entities import (
    AggregateTotals,
    PageInfo,
    Product,
    QueryParams,
    SortField,
    SortOrder,
    TableView,
)
from product_grid.domain.numbers import format_currency

API_PREFIX = "/api/v1/products"

# (label, field, searchable)
_COLUMNS: tuple[tuple[str, SortField, bool], ...] = (
    ("Name", SortField.NAME, True),
    ("Category", SortField.CATEGORY, True),
    ("Price", SortField.PRICE, False),
    ("Quantity", SortField.QUANTITY, False),
    ("Subtotal", SortField.SUBTOTAL, False),
)


def escape(text: Any) -> str:
    """HTML-escape user content."""
    return _html_escape(str(text), quote=True)


def view_url(params: QueryParams, path: str = "/") -> str:
    return f"{path}?{urlencode(params.to_query())}"


class HtmlTableRenderer(TableRenderer):
    """f-string renderer for the table page and its fragments."""

    def __init__(self, title: str = "Product Grid"):
        self._title = title

    # ── Full page ────────────────────────────────────────────────────

    def render_page(self, view: TableView, user: dict[str, Any] | None = None) -> str:
        username = (user or {}).get("username") or "Guest"
        role = (user or {}).get("role")
        badge = f' <span class="role">{escape(role)}</span>' if role else ""
        return "\n".join(
            [
                "<!DOCTYPE html>",
                '<html lang="en">',
                "<head>",
                '  <meta charset="utf-8">',
                f"  <title>{escape(self._title)}</title>",
                "</head>",
                "<body>",
                '  <header class="page-header">',
                f"    <h1>{escape(self._title)}</h1>",
                f'    <p class="user">Signed in as {escape(username)}{badge}</p>',
                "  </header>",
                "  <main>",
                self.render_table(view),
                "  </main>",
                "</body>",
                "</html>",
            ]
        )

    # ── Table fragment ───────────────────────────────────────────────

    def render_table(self, view: TableView) -> str:
        params = view.params
        info = view.page_info
        attrs = {
            "id": "table-wrapper",
            "data-page": info.page,
            "data-limit": info.limit,
            "data-total": info.total,
            "data-total-pages": info.total_pages,
            "data-has-next": str(info.has_next).lower(),
            "data-has-prev": str(info.has_prev).lower(),
            "data-sort-by": params.sort_field.value,
            "data-sort-order": params.sort_dir.value,
            "data-search-field": params.search_field.value,
            "data-search-term": params.search_term,
        }
        if view.rows:
            body = "\n".join(self.render_row(p, params) for p in view.rows)
        else:
            body = '<tr class="empty"><td colspan="6">No products found</td></tr>'

        return (
            f"<div {self._attrs(attrs)}>\n"
            '<table class="product-table">\n'
            f"{self._render_header(params)}\n"
            f'<tbody id="table-body">\n{body}\n</tbody>\n'
            f"{self.render_totals(view.totals)}\n"
            "</table>\n"
            f"{self._render_pagination(params, info)}\n"
            "</div>"
        )

    def _render_header(self, params: QueryParams) -> str:
        cells = []
        for label, field, searchable in _COLUMNS:
            active = params.sort_field is field
            if active:
                next_dir = params.sort_dir.flipped()
                arrow = "▲" if params.sort_dir is SortOrder.ASC else "▼"
            else:
                next_dir = SortOrder.ASC
                arrow = ""
            href = view_url(params.evolve(sort_field=field, sort_dir=next_dir, page=1))
            search = ""
            if searchable:
                term = params.search_term if params.search_field.value == field.value else ""
                search = (
                    f'<form class="search" action="/" method="get">'
                    f'<input type="hidden" name="searchField" value="{field.value}">'
                    f'<input type="hidden" name="limit" value="{params.page_size}">'
                    f'<input type="hidden" name="sortBy" value="{params.sort_field.value}">'
                    f'<input type="hidden" name="sortOrder" value="{params.sort_dir.value}">'
                    f'<input type="search" name="searchTerm" data-field="{field.value}" '
                    f'value="{escape(term)}" aria-label="Search by {label.lower()}">'
                    "</form>"
                )
            cells.append(
                f'<th data-field="{field.value}">'
                f'<a class="sort-link" href="{escape(href)}" aria-label="Sort by {label}">'
                f"{label}{f' {arrow}' if arrow else ''}</a>{search}</th>"
            )
        cells.append("<th></th>")
        return f"<thead><tr>{''.join(cells)}</tr></thead>"

    def _render_pagination(self, params: QueryParams, info: PageInfo) -> str:
        links = []
        if info.has_prev:
            href = view_url(params.evolve(page=info.page - 1))
            links.append(f'<a class="prev" rel="prev" href="{escape(href)}">Previous</a>')
        links.append(
            f'<span class="page-status">Page {info.page} of {max(info.total_pages, 1)}'
            f" ({info.total} products)</span>"
        )
        if info.has_next:
            href = view_url(params.evolve(page=info.page + 1))
            links.append(f'<a class="next" rel="next" href="{escape(href)}">Next</a>')
        return f'<nav class="pagination">{"".join(links)}</nav>'

    # ── Row fragment ─────────────────────────────────────────────────

    def render_row(self, product: Product, params: QueryParams) -> str:
        pid = product.id
        attrs = {
            "id": f"row-{pid}",
            "data-row-id": pid,
            "data-name": product.name,
            "data-price": f"{product.price:.2f}",
            "data-quantity": product.quantity,
            "data-category": product.category,
        }
        delete_url = f"{API_PREFIX}/{pid}?{urlencode(params.to_query())}"
        return (
            f"<tr {self._attrs(attrs)}>"
            f'<td class="name">{escape(product.name)}</td>'
            f'<td class="category">{escape(product.category)}</td>'
            f'<td id="price-cell-{pid}" class="editable" data-field="price">'
            f'<span id="view-price-{pid}" class="view" tabindex="0">'
            f"{format_currency(product.price)}</span></td>"
            f'<td id="quantity-cell-{pid}" class="editable" data-field="quantity">'
            f'<span id="view-quantity-{pid}" class="view" tabindex="0">'
            f"{product.quantity}</span></td>"
            f'<td id="subtotal-{pid}" class="subtotal">{format_currency(product.subtotal)}</td>'
            f'<td><button class="delete" data-delete-url="{escape(delete_url)}">Delete</button></td>'
            "</tr>"
        )

    # ── Totals fragment ──────────────────────────────────────────────

    def render_totals(self, totals: AggregateTotals, *, out_of_band: bool = False) -> str:
        attrs: dict[str, Any] = {
            "id": "table-totals",
            "data-total-quantity": totals.total_quantity,
            "data-total-price": f"{totals.total_price:.2f}",
            "data-grand-total": f"{totals.grand_total:.2f}",
            "data-average-price": f"{totals.average_price:.2f}",
            "data-count": totals.count,
        }
        if out_of_band:
            attrs["hx-swap-oob"] = "true"
        return (
            f"<tfoot {self._attrs(attrs)}><tr>"
            f'<td class="count">{totals.count} products</td>'
            f'<td class="average">Avg {format_currency(totals.average_price)}</td>'
            f'<td class="total-price">{format_currency(totals.total_price)}</td>'
            f'<td class="total-quantity">{totals.total_quantity}</td>'
            f'<td class="grand-total">{format_currency(totals.grand_total)}</td>'
            "<td></td></tr></tfoot>"
        )

    def render_error(self, message: str) -> str:
        return f'<div class="error" role="alert">{escape(message)}</div>'

    @staticmethod
    def _attrs(attrs: dict[str, Any]) -> str:
        return " ".join(f'{name}="{escape(value)}"' for name, value in attrs.items())
