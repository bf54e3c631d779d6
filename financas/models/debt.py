"""
Debt Models

A Debt is one obligation instance scoped to exactly one MonthKey.
Recurring debts are stored as a CHAIN of rows, one per month, all
pointing at the first row written (the anchor) through `original_id`.
The anchor points at itself once the chain has been written.

DESIGN DECISION: `original_id` is kept as the stored field because that
is what the record store holds, but code should ask `Debt.link` for the
chain role. It returns one of three explicit variants instead of making
callers interpret "missing" vs. "points at self" vs. "points elsewhere".
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================

class DebtStatus(str, Enum):
    """Payment status of a single month's debt row."""
    PENDING = "Pendente"
    PAID = "Pago"

    @property
    def toggled(self) -> "DebtStatus":
        return DebtStatus.PENDING if self is DebtStatus.PAID else DebtStatus.PAID


class DebtCategory(str, Enum):
    """Debt categories offered by the debt form."""
    HOUSING = "Moradia"
    CREDIT_CARD = "Cartão de Crédito"
    LOANS = "Empréstimos"
    BILLS = "Boletos"
    OTHER = "Outros"


class RecurrenceType(str, Enum):
    """
    How a debt template expands over months.

    NONE:   only the month being viewed
    FIXED:  every month known at submission time
    RANGED: an inclusive range of known months
    """
    NONE = "none"
    FIXED = "fixed"
    RANGED = "ranged"


class Recurrence(BaseModel):
    """Recurrence descriptor, shared by every row of a chain."""

    type: RecurrenceType = RecurrenceType.NONE
    start_month: Optional[str] = None
    end_month: Optional[str] = None

    @property
    def is_recurring(self) -> bool:
        return self.type in (RecurrenceType.FIXED, RecurrenceType.RANGED)


# =============================================================================
# CHAIN LINK (tagged union)
# =============================================================================

class Standalone(BaseModel):
    """A debt that is not part of any chain."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["standalone"] = "standalone"


class ChainAnchor(BaseModel):
    """The first row of a chain. Every member references its id."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["anchor"] = "anchor"
    anchor_id: str


class ChainMember(BaseModel):
    """A non-first row of a chain."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["member"] = "member"
    anchor_id: str


ChainLink = Annotated[
    Union[Standalone, ChainAnchor, ChainMember],
    Field(discriminator="kind"),
]


# =============================================================================
# DEBT
# =============================================================================

class DebtTemplate(BaseModel):
    """
    What the user submits when creating a debt.

    The recurrence engine expands this into one row per target month.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    category: Optional[DebtCategory] = None
    card_id: Optional[str] = None
    due_day: int = Field(..., ge=1, le=31, description="Day of month the debt is due")
    recurrence: Recurrence = Field(default_factory=Recurrence)


class DebtUpdate(BaseModel):
    """
    Edit of one existing row.

    Edits never restructure a chain; they touch only the row whose id
    matches.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str
    month_key: str
    name: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    status: DebtStatus = DebtStatus.PENDING
    due_day: int = Field(..., ge=1, le=31)
    category: Optional[DebtCategory] = None
    card_id: Optional[str] = None


class Debt(BaseModel):
    """One persisted debt row."""
    model_config = ConfigDict(str_strip_whitespace=True)

    # Identity
    id: str
    original_id: Optional[str] = Field(
        default=None,
        description="Anchor id of the chain this row belongs to"
    )

    # Partition key
    month_key: str

    name: str
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    status: DebtStatus = DebtStatus.PENDING
    category: Optional[DebtCategory] = None
    due_date: Optional[date] = None
    paid_date: Optional[date] = None
    is_recurrent: bool = False
    card_id: Optional[str] = None
    recurrence: Recurrence = Field(default_factory=Recurrence)

    @property
    def link(self) -> ChainLink:
        """Role of this row in its chain."""
        if not self.original_id:
            return Standalone()
        if self.original_id == self.id:
            return ChainAnchor(anchor_id=self.id)
        return ChainMember(anchor_id=self.original_id)

    @property
    def anchor_id(self) -> str:
        """Id every row of this debt's chain is linked to."""
        return self.original_id or self.id

    @property
    def offers_chain_delete(self) -> bool:
        """Should the user be asked 'this month or all months?' on delete."""
        return self.is_recurrent and bool(self.original_id)

    @property
    def is_paid(self) -> bool:
        return self.status == DebtStatus.PAID
