"""
Debt Snapshot

The flat list of debts plus the known months is the only source of
truth. The MonthKey -> debts grouping the UI renders is derived from it
on demand and never stored on its own.
"""

from typing import Optional

from pydantic import BaseModel, Field

from financas.models import Debt
from financas.utils.calendar import sort_month_keys


class DebtSnapshot(BaseModel):
    """Everything the debt manager knows after a load."""

    months: list[str] = Field(default_factory=list)
    debts: list[Debt] = Field(default_factory=list)

    def by_month(self) -> dict[str, list[Debt]]:
        """
        Group debts under their MonthKey.

        Every known month gets an entry, empty ones included. Keys are in
        chronological order; debts keep their load order within a month.
        """
        grouped: dict[str, list[Debt]] = {key: [] for key in sort_month_keys(self.months)}
        for debt in self.debts:
            grouped.setdefault(debt.month_key, []).append(debt)
        return grouped

    def debts_for(self, month_key: str) -> list[Debt]:
        return [debt for debt in self.debts if debt.month_key == month_key]

    def find(self, debt_id: str) -> Optional[Debt]:
        for debt in self.debts:
            if debt.id == debt_id:
                return debt
        return None

    def month_is_settled(self, month_key: str) -> bool:
        """True when the month has debts and every one of them is paid."""
        debts = self.debts_for(month_key)
        return bool(debts) and all(d.is_paid for d in debts)
