"""
Flat Record Models

Subscriptions, payment cards and month records carry no derived-state
engine. They feed the filter pipelines, the summaries and the analytics.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# SUBSCRIPTIONS
# =============================================================================

class SubscriptionCategory(str, Enum):
    STREAMING = "Streaming"
    SOFTWARE = "Software"
    GYM = "Academia"
    EDUCATION = "Educação"
    NEWS = "Notícias"
    OTHER = "Outros"


class BillingCycle(str, Enum):
    """Billing cycle, with how many months each charge covers."""
    MONTHLY = "Mensal"
    QUARTERLY = "Trimestral"
    SEMIANNUAL = "Semestral"
    ANNUAL = "Anual"

    @property
    def months(self) -> int:
        return {
            BillingCycle.MONTHLY: 1,
            BillingCycle.QUARTERLY: 3,
            BillingCycle.SEMIANNUAL: 6,
            BillingCycle.ANNUAL: 12,
        }[self]


class SubscriptionPaymentMethod(str, Enum):
    CREDIT_CARD = "Cartão de Crédito"
    AUTO_DEBIT = "Débito Automático"
    BANK_SLIP = "Boleto"


class SubscriptionStatus(str, Enum):
    ACTIVE = "Ativa"
    PAUSED = "Pausada"
    CANCELLED = "Cancelada"


class Subscription(BaseModel):
    """A recurring service charge."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=200)
    plan: Optional[str] = None
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    category: SubscriptionCategory = SubscriptionCategory.OTHER
    billing_cycle: BillingCycle = BillingCycle.MONTHLY
    payment_method: SubscriptionPaymentMethod = SubscriptionPaymentMethod.CREDIT_CARD
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    next_billing_date: date
    start_date: date

    @property
    def monthly_cost(self) -> Decimal:
        """Charge spread over the months it covers."""
        return self.amount / self.billing_cycle.months

    @property
    def annual_cost(self) -> Decimal:
        return self.amount * (12 // self.billing_cycle.months)


# =============================================================================
# CARDS
# =============================================================================

class CardType(str, Enum):
    CREDIT = "Crédito"
    DEBIT = "Débito"
    MEAL = "Alimentação"
    OTHER = "Outro"


class CardFlag(str, Enum):
    VISA = "Visa"
    MASTERCARD = "Mastercard"
    ELO = "Elo"
    AMEX = "American Express"
    HIPERCARD = "Hipercard"
    OTHER = "Outra"


class CardStatus(str, Enum):
    ACTIVE = "Ativo"
    BLOCKED = "Bloqueado"
    EXPIRED = "Expirado"
    CANCELLED = "Cancelado"


class Card(BaseModel):
    """A payment card. `due_day`/`closing_day` are days of month."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=100, description="Card nickname")
    last_four_digits: str = Field(default="", max_length=4)
    flag: CardFlag = CardFlag.OTHER
    type: CardType = CardType.CREDIT
    issuer: str = ""
    limit: Optional[Decimal] = Field(default=None, ge=0)
    balance: Optional[Decimal] = None
    used_amount: Optional[Decimal] = Field(default=None, ge=0)
    closing_day: Optional[int] = Field(default=None, ge=1, le=31)
    due_day: Optional[int] = Field(default=None, ge=1, le=31)
    status: CardStatus = CardStatus.ACTIVE

    @property
    def is_active_credit(self) -> bool:
        return self.type == CardType.CREDIT and self.status == CardStatus.ACTIVE


# =============================================================================
# MONTHS
# =============================================================================

class Month(BaseModel):
    """A month the user created. Debts can only live in known months."""

    id: Optional[str] = None
    month_key: str
