"""Query and report package."""

from bookkeeping.queries.aggregation import (
    category_totals,
    format_currency,
    monthly_totals,
    summarize,
)
from bookkeeping.queries.filters import filter_transactions, matches

__all__ = [
    "category_totals",
    "filter_transactions",
    "format_currency",
    "matches",
    "monthly_totals",
    "summarize",
]
