"""
Transaction Filtering

DESIGN DECISION: Filtering is a pure function of (snapshot, FilterSpec).
It never touches the ledger, so it can be re-run on every render.

A transaction matches when ALL of these hold:
- search: empty, or a case-insensitive substring of the description
  or of the category label
- start_date: absent, or transaction.date >= start_date
- end_date: absent, or transaction.date <= end_date
- type: absent, or exactly the transaction's category
"""

from collections.abc import Iterable

from bookkeeping.models.report import FilterSpec
from bookkeeping.models.transaction import Transaction


def matches(transaction: Transaction, spec: FilterSpec) -> bool:
    """Check one transaction against a FilterSpec."""
    if spec.search:
        needle = spec.search.lower()
        if (
            needle not in transaction.description.lower()
            and needle not in transaction.type.value.lower()
        ):
            return False

    if spec.start_date and transaction.date < spec.start_date:
        return False
    if spec.end_date and transaction.date > spec.end_date:
        return False

    if spec.type and transaction.type != spec.type:
        return False

    return True


def filter_transactions(
    transactions: Iterable[Transaction],
    spec: FilterSpec,
) -> list[Transaction]:
    """Return the matching transactions, in their original order."""
    return [transaction for transaction in transactions if matches(transaction, spec)]
