"""
Notice Models

Notices are the advisory, toast-style messages the UI shows after an
operation: "Dívida adicionada", "Não foi possível salvar", ...

They are logged and handed to the UI, never persisted and never
blocking. A failed operation produces an ERROR notice; the rest of the
application keeps working.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NoticeType(str, Enum):
    """Kinds of notices the core publishes."""
    # Debts
    DEBT_CREATED = "debt_created"
    DEBT_CHAIN_CREATED = "debt_chain_created"
    DEBT_CHAIN_INCOMPLETE = "debt_chain_incomplete"
    DEBT_UPDATED = "debt_updated"
    DEBT_DELETED = "debt_deleted"
    DEBT_CHAIN_DELETED = "debt_chain_deleted"
    DEBT_STATUS_TOGGLED = "debt_status_toggled"
    DEBT_STATUS_REVERTED = "debt_status_reverted"
    NO_TARGET_MONTHS = "no_target_months"

    # Months
    MONTHS_ADDED = "months_added"
    NO_NEW_MONTHS = "no_new_months"
    MONTH_DELETED = "month_deleted"

    # Installments
    INSTALLMENT_SAVED = "installment_saved"
    INSTALLMENT_DELETED = "installment_deleted"
    INSTALLMENT_PAYMENT_MARKED = "installment_payment_marked"
    INSTALLMENT_CANCELLED = "installment_cancelled"

    # Subscriptions / cards
    RECORD_SAVED = "record_saved"
    RECORD_DELETED = "record_deleted"

    # General
    DATA_CLEARED = "data_cleared"
    VALIDATION_FAILED = "validation_failed"
    PERSISTENCE_FAILED = "persistence_failed"
    LOAD_FAILED = "load_failed"


class NoticeSeverity(str, Enum):
    """Severity, mapped onto the UI's toast variants."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notice(BaseModel):
    """A single advisory notice."""

    notice_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=_utcnow)

    notice_type: NoticeType
    severity: NoticeSeverity = NoticeSeverity.INFO

    # What entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'debt', 'month', 'installment')"
    )
    entity_id: Optional[str] = None

    title: str = Field(..., max_length=120)
    description: str = Field(default="", max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "notice_id": str(self.notice_id),
            "timestamp": self.timestamp.isoformat(),
            "notice_type": self.notice_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "title": self.title,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class NoticeBuilder:
    """
    Helper class to build notices with common patterns.

    Usage:
        notice = NoticeBuilder.debt_created(debt_id, name, month_count=3)
        notice = NoticeBuilder.persistence_failed("debt", "update", error)
    """

    @staticmethod
    def debt_created(debt_id: str, name: str, month_count: int) -> Notice:
        if month_count > 1:
            return Notice(
                notice_type=NoticeType.DEBT_CHAIN_CREATED,
                severity=NoticeSeverity.SUCCESS,
                entity_type="debt",
                entity_id=debt_id,
                title="Dívida recorrente adicionada",
                description=f"'{name}' adicionada em {month_count} meses.",
                details={"month_count": month_count},
            )
        return Notice(
            notice_type=NoticeType.DEBT_CREATED,
            severity=NoticeSeverity.SUCCESS,
            entity_type="debt",
            entity_id=debt_id,
            title="Dívida adicionada",
            description=f"'{name}' adicionada.",
        )

    @staticmethod
    def debt_chain_incomplete(
        anchor_id: str,
        name: str,
        written: int,
        expected: int,
        error_message: str,
        rolled_back: bool,
    ) -> Notice:
        description = (
            f"'{name}' foi salva em {written} de {expected} meses."
            if not rolled_back
            else f"'{name}' não foi salva; os meses já gravados foram removidos."
        )
        return Notice(
            notice_type=NoticeType.DEBT_CHAIN_INCOMPLETE,
            severity=NoticeSeverity.WARNING,
            entity_type="debt",
            entity_id=anchor_id,
            title="Dívida recorrente incompleta",
            description=description,
            details={
                "written": written,
                "expected": expected,
                "rolled_back": rolled_back,
            },
            error_message=error_message,
        )

    @staticmethod
    def no_target_months(name: str) -> Notice:
        return Notice(
            notice_type=NoticeType.NO_TARGET_MONTHS,
            severity=NoticeSeverity.WARNING,
            entity_type="debt",
            title="Nenhum mês selecionado",
            description=f"'{name}' não foi salva: nenhum mês corresponde ao período escolhido.",
        )

    @staticmethod
    def debt_updated(debt_id: str, name: str) -> Notice:
        return Notice(
            notice_type=NoticeType.DEBT_UPDATED,
            severity=NoticeSeverity.SUCCESS,
            entity_type="debt",
            entity_id=debt_id,
            title="Dívida atualizada",
            description=f"'{name}' atualizada.",
        )

    @staticmethod
    def debt_deleted(debt_id: str, name: str, whole_chain: bool) -> Notice:
        if whole_chain:
            return Notice(
                notice_type=NoticeType.DEBT_CHAIN_DELETED,
                severity=NoticeSeverity.SUCCESS,
                entity_type="debt",
                entity_id=debt_id,
                title="Dívida removida",
                description=f"'{name}' removida de todos os meses.",
            )
        return Notice(
            notice_type=NoticeType.DEBT_DELETED,
            severity=NoticeSeverity.SUCCESS,
            entity_type="debt",
            entity_id=debt_id,
            title="Dívida removida",
            description=f"'{name}' removida deste mês.",
        )

    @staticmethod
    def debt_status_toggled(debt_id: str, name: str, status: str) -> Notice:
        return Notice(
            notice_type=NoticeType.DEBT_STATUS_TOGGLED,
            severity=NoticeSeverity.INFO,
            entity_type="debt",
            entity_id=debt_id,
            title="Status atualizado",
            description=f"'{name}' marcada como {status}.",
            details={"status": status},
        )

    @staticmethod
    def debt_status_reverted(debt_id: str, error_message: str) -> Notice:
        return Notice(
            notice_type=NoticeType.DEBT_STATUS_REVERTED,
            severity=NoticeSeverity.ERROR,
            entity_type="debt",
            entity_id=debt_id,
            title="Não foi possível atualizar o status",
            description="A alteração foi desfeita.",
            error_message=error_message,
        )

    @staticmethod
    def months_added(month_keys: list[str]) -> Notice:
        return Notice(
            notice_type=NoticeType.MONTHS_ADDED,
            severity=NoticeSeverity.SUCCESS,
            entity_type="month",
            title="Sucesso!",
            description=f"{len(month_keys)} mês(es) adicionado(s).",
            details={"month_keys": month_keys},
        )

    @staticmethod
    def no_new_months() -> Notice:
        return Notice(
            notice_type=NoticeType.NO_NEW_MONTHS,
            severity=NoticeSeverity.INFO,
            entity_type="month",
            title="Nenhum mês novo",
            description="Todos os meses selecionados já existem.",
        )

    @staticmethod
    def month_deleted(month_key: str) -> Notice:
        return Notice(
            notice_type=NoticeType.MONTH_DELETED,
            severity=NoticeSeverity.SUCCESS,
            entity_type="month",
            entity_id=month_key,
            title="Mês removido",
            description=f"'{month_key}' e suas dívidas foram removidos.",
        )

    @staticmethod
    def installment_saved(installment_id: Optional[str], name: str, created: bool) -> Notice:
        return Notice(
            notice_type=NoticeType.INSTALLMENT_SAVED,
            severity=NoticeSeverity.SUCCESS,
            entity_type="installment",
            entity_id=installment_id,
            title="Parcelamento adicionado" if created else "Parcelamento atualizado",
            description=f"'{name}' salvo.",
        )

    @staticmethod
    def installment_payment_marked(
        installment_id: str,
        paid_installments: int,
        total_installments: int,
        status: str,
    ) -> Notice:
        return Notice(
            notice_type=NoticeType.INSTALLMENT_PAYMENT_MARKED,
            severity=NoticeSeverity.INFO,
            entity_type="installment",
            entity_id=installment_id,
            title="Parcelas atualizadas",
            description=f"{paid_installments} de {total_installments} parcelas pagas.",
            details={
                "paid_installments": paid_installments,
                "total_installments": total_installments,
                "status": status,
            },
        )

    @staticmethod
    def installment_cancelled(installment_id: str, name: str) -> Notice:
        return Notice(
            notice_type=NoticeType.INSTALLMENT_CANCELLED,
            severity=NoticeSeverity.INFO,
            entity_type="installment",
            entity_id=installment_id,
            title="Parcelamento cancelado",
            description=f"'{name}' cancelado.",
        )

    @staticmethod
    def record_saved(entity_type: str, entity_id: Optional[str], name: str) -> Notice:
        return Notice(
            notice_type=NoticeType.RECORD_SAVED,
            severity=NoticeSeverity.SUCCESS,
            entity_type=entity_type,
            entity_id=entity_id,
            title="Salvo",
            description=f"'{name}' salvo.",
        )

    @staticmethod
    def record_deleted(entity_type: str, entity_id: str) -> Notice:
        return Notice(
            notice_type=NoticeType.RECORD_DELETED,
            severity=NoticeSeverity.SUCCESS,
            entity_type=entity_type,
            entity_id=entity_id,
            title="Removido",
        )

    @staticmethod
    def data_cleared(entity_type: str) -> Notice:
        return Notice(
            notice_type=NoticeType.DATA_CLEARED,
            severity=NoticeSeverity.SUCCESS,
            entity_type=entity_type,
            title="Dados apagados",
        )

    @staticmethod
    def validation_failed(form: str, messages: list[str]) -> Notice:
        return Notice(
            notice_type=NoticeType.VALIDATION_FAILED,
            severity=NoticeSeverity.ERROR,
            entity_type=form,
            title="Formulário Inválido",
            description="Por favor, corrija os erros antes de salvar.",
            details={"errors": messages},
        )

    @staticmethod
    def persistence_failed(
        entity_type: str,
        operation: str,
        error_message: str,
        entity_id: Optional[str] = None,
    ) -> Notice:
        return Notice(
            notice_type=NoticeType.PERSISTENCE_FAILED,
            severity=NoticeSeverity.ERROR,
            entity_type=entity_type,
            entity_id=entity_id,
            title="Erro ao salvar",
            description=f"Não foi possível concluir: {operation}.",
            details={"operation": operation},
            error_message=error_message,
        )

    @staticmethod
    def load_failed(entity_type: str, error_message: str) -> Notice:
        return Notice(
            notice_type=NoticeType.LOAD_FAILED,
            severity=NoticeSeverity.ERROR,
            entity_type=entity_type,
            title="Erro ao carregar",
            description=f"Não foi possível carregar: {entity_type}.",
            error_message=error_message,
        )
