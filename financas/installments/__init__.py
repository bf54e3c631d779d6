"""
Installments package.

Derived status engine and the installment lifecycle.
"""

from financas.installments.manager import InstallmentManager
from financas.installments.status import (
    InstallmentCancelledError,
    derive_status,
    mark_through_installment,
    next_due_date,
    paid_count_after_click,
    project_installment,
    with_paid_count,
)

__all__ = [
    "InstallmentCancelledError",
    "InstallmentManager",
    "derive_status",
    "mark_through_installment",
    "next_due_date",
    "paid_count_after_click",
    "project_installment",
    "with_paid_count",
]
