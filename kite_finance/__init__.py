"""
Kite Finance - Budget Ledger Engine

Reconciles budgets, carryover and actual spend into auditable
per-category, per-month ledgers for a personal finance manager.

DESIGN PRINCIPLES:
1. Ledgers are derived, never stored
2. Fail early, fail visibly
3. Missing records are valid states, not errors
4. Every computation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Kite Finance Team"
