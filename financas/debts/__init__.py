"""
Debts package.

Recurring debt expansion and the debt/month lifecycle.
"""

from financas.debts.manager import DebtManager
from financas.debts.recurrence import (
    ChainCreation,
    NoTargetMonthsError,
    RecurrenceEngine,
    resolve_target_months,
)

__all__ = [
    "ChainCreation",
    "DebtManager",
    "NoTargetMonthsError",
    "RecurrenceEngine",
    "resolve_target_months",
]
