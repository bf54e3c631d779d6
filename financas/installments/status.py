"""
Installment Status Engine

Pure functions deriving an installment's next due date and status from
its paid count. Nothing here touches storage or the clock; "today" is
always passed in.

Status rules:
- paid >= total            -> Concluído (terminal)
- next due date before today -> Atrasado
- otherwise                -> Ativo
Cancelado is set by the user only. No function here produces it and
none overwrites it.
"""

from datetime import date

from financas.models import Installment, InstallmentStatus
from financas.utils.calendar import add_months


class InstallmentCancelledError(Exception):
    """A paid-count change was attempted on a cancelled installment."""

    def __init__(self, installment_id: str):
        self.installment_id = installment_id
        super().__init__(f"Installment is cancelled: {installment_id}")


def next_due_date(first_due_date: date, paid_installments: int) -> date:
    """First due date plus one calendar month per paid installment (day clamped)."""
    return add_months(first_due_date, paid_installments)


def derive_status(
    total_installments: int,
    paid_installments: int,
    next_due: date,
    today: date,
) -> InstallmentStatus:
    if paid_installments >= total_installments:
        return InstallmentStatus.COMPLETED
    if next_due < today:
        return InstallmentStatus.OVERDUE
    return InstallmentStatus.ACTIVE


def with_paid_count(installment: Installment, paid_installments: int, today: date) -> Installment:
    """Copy with a new paid count and freshly derived fields."""
    paid = max(0, min(paid_installments, installment.total_installments))
    next_due = next_due_date(installment.first_due_date, paid)
    if installment.is_cancelled:
        status = InstallmentStatus.CANCELLED
    else:
        status = derive_status(installment.total_installments, paid, next_due, today)
    return installment.model_copy(update={
        "paid_installments": paid,
        "next_due_date": next_due,
        "status": status,
    })


def project_installment(installment: Installment, today: date) -> Installment:
    """
    Load-boundary projection.

    Stored next_due_date and status are ignored and recomputed from the
    paid count. A cancelled installment keeps its status.
    """
    return with_paid_count(installment, installment.paid_installments, today)


def paid_count_after_click(paid_installments: int, clicked: int, total_installments: int) -> int:
    """
    Paid count after the user clicks installment marker `clicked` (1-based).

    Clicking a paid marker un-pays it and every marker after it;
    clicking an unpaid one pays everything up to it.
    """
    if clicked <= paid_installments:
        new_paid = clicked - 1
    else:
        new_paid = clicked
    return max(0, min(new_paid, total_installments))


def mark_through_installment(installment: Installment, clicked: int, today: date) -> Installment:
    """
    Apply a marker click.

    Raises:
        InstallmentCancelledError: If the installment is cancelled
    """
    if installment.is_cancelled:
        raise InstallmentCancelledError(installment.id)
    new_paid = paid_count_after_click(
        installment.paid_installments, clicked, installment.total_installments
    )
    return with_paid_count(installment, new_paid, today)
