"""
Expense Aggregation

All sums use Decimal, so totals agree with a hand-computed decimal sum
to the cent regardless of how many transactions are added up.
"""

from collections.abc import Iterable
from decimal import Decimal

from bookkeeping.models.report import ExpenseSummary
from bookkeeping.models.transaction import Transaction

ZERO = Decimal("0")
CENT = Decimal("0.01")


def category_totals(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """Sum amounts per category label; only categories that occur appear."""
    totals: dict[str, Decimal] = {}
    for transaction in transactions:
        key = transaction.type.value
        totals[key] = totals.get(key, ZERO) + transaction.amount
    return totals


def monthly_totals(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """Sum amounts per calendar month (keys "YYYY-MM"), sorted by month."""
    totals: dict[str, Decimal] = {}
    for transaction in transactions:
        key = transaction.date.strftime("%Y-%m")
        totals[key] = totals.get(key, ZERO) + transaction.amount
    return dict(sorted(totals.items()))


def summarize(transactions: Iterable[Transaction]) -> ExpenseSummary:
    """
    Compute category totals and the grand total for a set of transactions.

    total is the sum of the by_category values, which is the same as the
    sum of all amounts in the input.
    """
    items = list(transactions)
    by_category = category_totals(items)
    return ExpenseSummary(
        by_category=by_category,
        by_month=monthly_totals(items),
        total=sum(by_category.values(), ZERO),
        count=len(items),
    )


def format_currency(amount: Decimal, symbol: str = "$") -> str:
    """Format an amount like 1234.5 as "$1,234.50"."""
    value = Decimal(amount).quantize(CENT)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"
