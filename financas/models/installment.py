"""
Installment Models

An installment is one purchase or contract paid in N monthly parts.

CRITICAL: `next_due_date` and `status` are DERIVED. They are functions of
(first_due_date, paid_installments, total_installments, today) and are
recomputed every time installments are loaded and after every change of
the paid count. Whatever the store holds for them is never trusted.
The only exception is CANCELLED, which is set by the user and never
overwritten.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


CENTS = Decimal("0.01")


class InstallmentStatus(str, Enum):
    """Installment status. Only CANCELLED is ever set by hand."""
    ACTIVE = "Ativo"
    COMPLETED = "Concluído"
    OVERDUE = "Atrasado"
    CANCELLED = "Cancelado"


class InstallmentCategory(str, Enum):
    PURCHASES = "Compras"
    SERVICES = "Serviços"
    CONTRACTS = "Contratos"
    EDUCATION = "Educação"
    HEALTH = "Saúde"
    VEHICLE = "Veículo"
    OTHER = "Outros"


class InstallmentPaymentMethod(str, Enum):
    CREDIT_CARD = "Cartão de Crédito"
    BANK_SLIP = "Boleto"
    AUTO_DEBIT = "Débito Automático"
    PIX = "Pix"
    OTHER = "Outro"


def split_amount(total_amount: Decimal, total_installments: int) -> Decimal:
    """Per-installment value rounded to cents (half up)."""
    return (Decimal(total_amount) / Decimal(total_installments)).quantize(
        CENTS, rounding=ROUND_HALF_UP
    )


class InstallmentDraft(BaseModel):
    """User input for creating or editing an installment."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200)
    total_amount: Decimal = Field(..., gt=0, decimal_places=2)
    total_installments: int = Field(..., gt=0)
    first_due_date: date
    category: InstallmentCategory = InstallmentCategory.OTHER
    payment_method: InstallmentPaymentMethod = InstallmentPaymentMethod.OTHER
    description: Optional[str] = Field(default=None, max_length=1000)
    card_id: Optional[str] = None

    @property
    def installment_amount(self) -> Decimal:
        return split_amount(self.total_amount, self.total_installments)


class Installment(BaseModel):
    """One persisted installment purchase."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str
    name: str
    total_amount: Decimal = Field(..., gt=0, decimal_places=2)
    installment_amount: Decimal = Field(..., ge=0, decimal_places=2)
    total_installments: int = Field(..., gt=0)
    paid_installments: int = Field(default=0, ge=0)
    first_due_date: date
    next_due_date: Optional[date] = None
    category: InstallmentCategory = InstallmentCategory.OTHER
    payment_method: InstallmentPaymentMethod = InstallmentPaymentMethod.OTHER
    status: InstallmentStatus = InstallmentStatus.ACTIVE
    description: Optional[str] = None
    card_id: Optional[str] = None

    @model_validator(mode='after')
    def validate_paid_count(self) -> 'Installment':
        """Paid count can never exceed the number of installments."""
        if self.paid_installments > self.total_installments:
            raise ValueError("Paid installments cannot exceed total installments")
        return self

    @property
    def remaining_installments(self) -> int:
        return self.total_installments - self.paid_installments

    @property
    def remaining_amount(self) -> Decimal:
        return self.remaining_installments * self.installment_amount

    @property
    def is_cancelled(self) -> bool:
        return self.status == InstallmentStatus.CANCELLED
