"""
Data Models Package

This package contains all Pydantic models used in the Finanças core.
All data flowing through the system must conform to these schemas.
"""

from financas.models.debt import (
    ChainAnchor,
    ChainLink,
    ChainMember,
    Debt,
    DebtCategory,
    DebtStatus,
    DebtTemplate,
    DebtUpdate,
    Recurrence,
    RecurrenceType,
    Standalone,
)
from financas.models.installment import (
    Installment,
    InstallmentCategory,
    InstallmentDraft,
    InstallmentPaymentMethod,
    InstallmentStatus,
    split_amount,
)
from financas.models.records import (
    BillingCycle,
    Card,
    CardFlag,
    CardStatus,
    CardType,
    Month,
    Subscription,
    SubscriptionCategory,
    SubscriptionPaymentMethod,
    SubscriptionStatus,
)
from financas.models.notice import (
    Notice,
    NoticeBuilder,
    NoticeSeverity,
    NoticeType,
)

__all__ = [
    # Debt models
    "ChainAnchor",
    "ChainLink",
    "ChainMember",
    "Debt",
    "DebtCategory",
    "DebtStatus",
    "DebtTemplate",
    "DebtUpdate",
    "Recurrence",
    "RecurrenceType",
    "Standalone",
    # Installment models
    "Installment",
    "InstallmentCategory",
    "InstallmentDraft",
    "InstallmentPaymentMethod",
    "InstallmentStatus",
    "split_amount",
    # Flat records
    "BillingCycle",
    "Card",
    "CardFlag",
    "CardStatus",
    "CardType",
    "Month",
    "Subscription",
    "SubscriptionCategory",
    "SubscriptionPaymentMethod",
    "SubscriptionStatus",
    # Notices
    "Notice",
    "NoticeBuilder",
    "NoticeSeverity",
    "NoticeType",
]
