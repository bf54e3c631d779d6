"""
Finanças - Source Package

Core of a personal finance tracker for a single household managing
monthly obligations: recurring debts, installment purchases,
subscriptions and payment cards, organised by calendar month.

DESIGN PRINCIPLES:
1. Dates are civil calendar days, never instants
2. Derived state is recomputed, never trusted from storage
3. The flat record collection is the source of truth
4. Failures are visible to the user but never block the app
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finanças Team"
