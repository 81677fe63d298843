from .product import Product, ProductField, EditableField
from .table import (
    AggregateTotals,
    PageInfo,
    QueryParams,
    QueryResult,
    SortField,
    SortOrder,
    TableView,
    round_money,
)

__all__ = [
    "Product",
    "ProductField",
    "EditableField",
    "AggregateTotals",
    "PageInfo",
    "QueryParams",
    "QueryResult",
    "SortField",
    "SortOrder",
    "TableView",
    "round_money",
]
