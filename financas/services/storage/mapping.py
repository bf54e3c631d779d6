"""
Record <-> Model Mapping

Stored records use snake_case field names and flat values (strings,
numbers, booleans). Models use typed fields. Every field of every model
survives a round trip; nothing is dropped on the way in or out.

Two fields do not map one-to-one:
- Debt.recurrence is stored flattened as recurrence_type /
  recurrence_start_month / recurrence_end_month.
- Card.due_day is stored as `due_date` (it holds a day of month).
"""

from decimal import Decimal
from typing import Any, Callable, Iterable, Optional, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from financas.models import (
    Card,
    Debt,
    DebtTemplate,
    DebtUpdate,
    Installment,
    InstallmentDraft,
    Month,
    Recurrence,
    RecurrenceType,
    Subscription,
)
from financas.services.storage.interface import Record
from financas.utils.calendar import db_date_string


logger = structlog.get_logger(__name__)

T = TypeVar("T", bound=BaseModel)

RECURRENCE_FIELDS = (
    "recurrence_type",
    "recurrence_start_month",
    "recurrence_end_month",
)


def _clean(record: Record) -> Record:
    """Empty strings (blank spreadsheet cells) read as missing values."""
    return {key: (None if value == "" else value) for key, value in record.items()}


def _decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    # str() first so floats coming back from JSON keep their printed value
    return Decimal(str(value))


def _bool(value: Any) -> bool:
    # Spreadsheet cells come back as "TRUE" / "False" text
    if isinstance(value, str):
        return value.strip().lower() in ("true", "t", "1", "yes")
    return bool(value)


def _dump(model: BaseModel, exclude: Optional[set[str]] = None) -> Record:
    return model.model_dump(mode="json", exclude=exclude)


def map_records(
    records: Iterable[Record],
    mapper: Callable[[Record], T],
    entity_type: str,
) -> list[T]:
    """
    Map stored records to models, skipping malformed rows.

    A skipped row is logged with its id so it can be fixed at the source.
    """
    models = []
    for record in records:
        try:
            models.append(mapper(record))
        except (ValidationError, ValueError, TypeError) as e:
            logger.warning(
                "record_skipped",
                entity_type=entity_type,
                record_id=record.get("id"),
                error=str(e),
            )
    return models


# =============================================================================
# DEBTS
# =============================================================================

def recurrence_to_fields(recurrence: Recurrence) -> Record:
    return {
        "recurrence_type": recurrence.type.value,
        "recurrence_start_month": recurrence.start_month,
        "recurrence_end_month": recurrence.end_month,
    }


def fields_to_recurrence(record: Record) -> Recurrence:
    return Recurrence(
        type=record.get("recurrence_type") or RecurrenceType.NONE,
        start_month=record.get("recurrence_start_month"),
        end_month=record.get("recurrence_end_month"),
    )


def template_to_record(
    template: DebtTemplate,
    month_key: str,
    original_id: Optional[str] = None,
) -> Record:
    """The row a template produces for one target month."""
    record = {
        "name": template.name,
        "amount": str(template.amount),
        "status": "Pendente",
        "category": template.category.value if template.category else None,
        "card_id": template.card_id,
        "month_key": month_key,
        "due_date": db_date_string(month_key, template.due_day),
        "paid_date": None,
        "is_recurrent": template.recurrence.is_recurring,
        "original_id": original_id,
    }
    record.update(recurrence_to_fields(template.recurrence))
    return record


def debt_update_to_changes(update: DebtUpdate) -> Record:
    """Partial update for a single-row edit."""
    return {
        "name": update.name,
        "amount": str(update.amount),
        "status": update.status.value,
        "due_date": db_date_string(update.month_key, update.due_day),
        "category": update.category.value if update.category else None,
        "card_id": update.card_id,
    }


def record_to_debt(record: Record) -> Debt:
    data = _clean(record)
    return Debt(
        id=str(data["id"]),
        original_id=str(data["original_id"]) if data.get("original_id") else None,
        month_key=data["month_key"],
        name=data["name"],
        amount=_decimal(data.get("amount")),
        status=data.get("status") or "Pendente",
        category=data.get("category"),
        due_date=data.get("due_date"),
        paid_date=data.get("paid_date"),
        is_recurrent=_bool(data.get("is_recurrent")),
        card_id=data.get("card_id"),
        recurrence=fields_to_recurrence(data),
    )


# =============================================================================
# INSTALLMENTS
# =============================================================================

def draft_to_record(draft: InstallmentDraft) -> Record:
    """User-authored installment fields. Derived fields are added by the caller."""
    return _dump(draft)


def record_to_installment(record: Record) -> Installment:
    data = _clean(record)
    return Installment(
        id=str(data["id"]),
        name=data["name"],
        total_amount=_decimal(data.get("total_amount")),
        installment_amount=_decimal(data.get("installment_amount")),
        total_installments=data["total_installments"],
        paid_installments=data.get("paid_installments") or 0,
        first_due_date=data["first_due_date"],
        next_due_date=data.get("next_due_date"),
        category=data.get("category") or "Outros",
        payment_method=data.get("payment_method") or "Outro",
        status=data.get("status") or "Ativo",
        description=data.get("description"),
        card_id=data.get("card_id"),
    )


# =============================================================================
# SUBSCRIPTIONS, CARDS, MONTHS
# =============================================================================

def subscription_to_record(subscription: Subscription) -> Record:
    return _dump(subscription, exclude={"id"})


def record_to_subscription(record: Record) -> Subscription:
    data = _clean(record)
    return Subscription(
        id=str(data["id"]) if data.get("id") else None,
        name=data["name"],
        plan=data.get("plan"),
        amount=_decimal(data.get("amount")),
        category=data.get("category") or "Outros",
        billing_cycle=data.get("billing_cycle") or "Mensal",
        payment_method=data.get("payment_method") or "Cartão de Crédito",
        status=data.get("status") or "Ativa",
        next_billing_date=data["next_billing_date"],
        start_date=data["start_date"],
    )


def card_to_record(card: Card) -> Record:
    record = _dump(card, exclude={"id", "due_day"})
    record["due_date"] = card.due_day
    return record


def record_to_card(record: Record) -> Card:
    data = _clean(record)
    return Card(
        id=str(data["id"]) if data.get("id") else None,
        name=data["name"],
        last_four_digits=data.get("last_four_digits") or "",
        flag=data.get("flag") or "Outra",
        type=data.get("type") or "Crédito",
        issuer=data.get("issuer") or "",
        limit=_decimal(data.get("limit")),
        balance=_decimal(data.get("balance")),
        used_amount=_decimal(data.get("used_amount")),
        closing_day=data.get("closing_day"),
        due_day=data.get("due_date"),
        status=data.get("status") or "Ativo",
    )


def month_to_record(month_key: str) -> Record:
    return {"month_key": month_key}


def record_to_month(record: Record) -> Month:
    data = _clean(record)
    return Month(
        id=str(data["id"]) if data.get("id") else None,
        month_key=data["month_key"],
    )
