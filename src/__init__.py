"""
bDesh2bKash - Source Package

A personal transaction ledger for transfers from a Bangladeshi bank
account to bKash: credits in, debits out, and the flat channel fee each
debit costs.

DESIGN PRINCIPLES:
1. The backend's answer is the record; memory follows it
2. Fail early, fail visibly
3. No silent corrections
4. Derived values (charges, totals) are computed, never stored
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "bDesh2bKash Team"
