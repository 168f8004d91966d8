"""
Ledgerbook - Source Package

Balance and ledger reconstruction for a small-business bookkeeping app.

DESIGN PRINCIPLES:
1. Every derived figure is recomputed from the record set it was handed
2. Same inputs, same output (no wall clock, no hidden state)
3. A bad reference degrades one record, never the whole report
4. Every posting balances
5. The record store is swappable
"""

__version__ = "1.0.0"
__author__ = "Ledgerbook Team"
