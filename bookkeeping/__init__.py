"""
Bookkeeping System - Source Package

A small personal bookkeeping tool: record expense transactions,
optionally pre-fill them from a scanned receipt, and report totals.

DESIGN PRINCIPLES:
1. The ledger is the single writer of the transaction sequence
2. Fail early, fail visibly
3. Scanned data only pre-fills a draft; the user still submits it
4. Reports are recomputed from the ledger, never cached
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Bookkeeping System Team"
