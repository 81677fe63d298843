"""Fragment reader — rebuilds client-side values from server markup.

The server answers with HTML fragments only. Authoritative values travel on
``data-*`` attributes of a few well-known elements; everything else in the
markup is presentation and is ignored here.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from html.parser import HTMLParser

from product_grid.domain.entities import (
    AggregateTotals,
    PageInfo,
    Product,
    ProductField,
    QueryParams,
    SortField,
    SortOrder,
)
from product_grid.domain.exceptions import MalformedResponse


@dataclass
class TableFragment:
    """A parsed ``#table-wrapper`` fragment."""

    params: QueryParams
    page_info: PageInfo
    rows: list[Product]
    totals: AggregateTotals
    search_inputs: dict[str, str] = field(default_factory=dict)


@dataclass
class RowFragment:
    """A parsed row response, with the out-of-band totals when present."""

    row: Product
    totals: AggregateTotals | None = None


class _FragmentParser(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.wrapper: dict[str, str] | None = None
        self.rows: list[dict[str, str]] = []
        self.totals: dict[str, str] | None = None
        self.search_inputs: dict[str, str] = {}
        self.text: list[str] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        values = {name: value or "" for name, value in attrs}
        if tag == "div" and values.get("id") == "table-wrapper":
            self.wrapper = values
        elif tag == "tr" and "data-row-id" in values:
            self.rows.append(values)
        elif tag == "tfoot" and values.get("id") == "table-totals":
            self.totals = values
        elif tag == "input" and values.get("name") == "searchTerm" and "data-field" in values:
            self.search_inputs[values["data-field"]] = values.get("value", "")

    def handle_data(self, data: str) -> None:
        self.text.append(data)


def _parse(html: str) -> _FragmentParser:
    parser = _FragmentParser()
    parser.feed(html)
    parser.close()
    return parser


def _require(attrs: dict[str, str], name: str) -> str:
    try:
        return attrs[name]
    except KeyError:
        raise MalformedResponse(f"missing attribute {name}") from None


def _int(attrs: dict[str, str], name: str) -> int:
    raw = _require(attrs, name)
    try:
        return int(raw)
    except ValueError:
        raise MalformedResponse(f"{name}={raw!r} is not an integer") from None


def _decimal(attrs: dict[str, str], name: str) -> Decimal:
    raw = _require(attrs, name)
    try:
        value = Decimal(raw)
    except InvalidOperation:
        raise MalformedResponse(f"{name}={raw!r} is not a number") from None
    if not value.is_finite():
        raise MalformedResponse(f"{name}={raw!r} is not finite")
    return value


def _bool(attrs: dict[str, str], name: str) -> bool:
    raw = _require(attrs, name)
    if raw not in ("true", "false"):
        raise MalformedResponse(f"{name}={raw!r} is not a boolean")
    return raw == "true"


def _row(attrs: dict[str, str]) -> Product:
    return Product(
        id=_int(attrs, "data-row-id"),
        name=_require(attrs, "data-name"),
        price=_decimal(attrs, "data-price"),
        quantity=_int(attrs, "data-quantity"),
        category=_require(attrs, "data-category"),
    )


def _totals(attrs: dict[str, str]) -> AggregateTotals:
    return AggregateTotals(
        total_quantity=_int(attrs, "data-total-quantity"),
        total_price=_decimal(attrs, "data-total-price"),
        grand_total=_decimal(attrs, "data-grand-total"),
        average_price=_decimal(attrs, "data-average-price"),
        count=_int(attrs, "data-count"),
    )


def _params(attrs: dict[str, str]) -> QueryParams:
    try:
        return QueryParams(
            page=_int(attrs, "data-page"),
            page_size=_int(attrs, "data-limit"),
            sort_field=SortField(_require(attrs, "data-sort-by")),
            sort_dir=SortOrder(_require(attrs, "data-sort-order")),
            search_field=ProductField(_require(attrs, "data-search-field")),
            search_term=_require(attrs, "data-search-term"),
        )
    except ValueError as exc:
        raise MalformedResponse(str(exc)) from None


def parse_table_fragment(html: str) -> TableFragment:
    parser = _parse(html)
    if parser.wrapper is None:
        raise MalformedResponse("no #table-wrapper element")
    if parser.totals is None:
        raise MalformedResponse("no #table-totals element")

    wrapper = parser.wrapper
    page_info = PageInfo(
        page=_int(wrapper, "data-page"),
        limit=_int(wrapper, "data-limit"),
        total=_int(wrapper, "data-total"),
        total_pages=_int(wrapper, "data-total-pages"),
        has_next=_bool(wrapper, "data-has-next"),
        has_prev=_bool(wrapper, "data-has-prev"),
    )
    return TableFragment(
        params=_params(wrapper),
        page_info=page_info,
        rows=[_row(attrs) for attrs in parser.rows],
        totals=_totals(parser.totals),
        search_inputs=parser.search_inputs,
    )


def parse_row_fragment(html: str) -> RowFragment:
    parser = _parse(html)
    if len(parser.rows) != 1:
        raise MalformedResponse(f"expected one row, found {len(parser.rows)}")
    totals = _totals(parser.totals) if parser.totals is not None else None
    return RowFragment(row=_row(parser.rows[0]), totals=totals)


def extract_text(html: str) -> str:
    """Visible text of an error body, whitespace-collapsed."""
    return " ".join("".join(_parse(html).text).split())
