"""
Main Orchestrator for Finanças

This module ties together all the components and defines the
end-to-end flows for:
1. Form submission (form → validate → manager → store → notice)
2. Loading (months, debts, installments, subscriptions, cards)
3. Dashboard and analytics views over the loaded state

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches storage before its form validates
- Every failure becomes a notice and is then re-raised
- Every "today" comes from the fixed civil zone

This is the "glue" the UI talks to. Managers stay usable on their own.
"""

from datetime import date, datetime
from typing import Optional, Union

import structlog
from pydantic import BaseModel

from financas.catalog import CardManager, SubscriptionManager
from financas.config import AppSettings, get_settings, validate_all_settings
from financas.debts import ChainCreation, DebtManager
from financas.installments import InstallmentManager
from financas.models import Card, Debt, Installment, NoticeBuilder, Subscription
from financas.notices import NoticeLogger, configure_logging
from financas.queries import (
    CardLimitUsage,
    CategoryBreakdown,
    InstallmentSummary,
    MonthlySpend,
    MonthTotals,
    NamedAmount,
    SubscriptionSummary,
    annual_spend,
    available_years,
    card_usage,
    category_breakdown,
    credit_limit_usage,
    installment_summary,
    month_totals,
    subscription_cost_by_category,
    subscription_summary,
    upcoming_debts,
    upcoming_installments,
    upcoming_subscriptions,
)
from financas.services.storage import (
    GoogleSheetsRecordStore,
    InMemoryRecordStore,
    RecordStore,
    SupabaseRecordStore,
)
from financas.utils.calendar import current_month_key, today_in_fixed_zone
from financas.validation import (
    CardForm,
    DebtForm,
    FormValidationError,
    FormValidator,
    InstallmentForm,
    MonthForm,
    SubscriptionForm,
    ValidationResult,
)


logger = structlog.get_logger(__name__)


class DashboardView(BaseModel):
    """Everything the overview screen shows."""
    today: date
    current_month: str
    month_totals: MonthTotals
    month_settled: bool
    upcoming_debts: list[Debt]
    installments: InstallmentSummary
    upcoming_installments: list[Installment]
    subscriptions: SubscriptionSummary
    upcoming_subscriptions: list[Subscription]


class AnalyticsView(BaseModel):
    """Everything the analytics screen shows for one year."""
    year: int
    available_years: list[int]
    annual_spend: list[MonthlySpend]
    categories: CategoryBreakdown
    card_usage: list[NamedAmount]
    credit_limits: list[CardLimitUsage]
    subscription_costs: list[NamedAmount]


class FinanceTracker:
    """
    Facade over the managers.

    Usage:
        tracker = FinanceTracker(store)
        await tracker.load_all()
        await tracker.submit_month_form(MonthForm(month_name="Janeiro", year="2026"))
        view = tracker.dashboard()
    """

    def __init__(
        self,
        store: RecordStore,
        notices: Optional[NoticeLogger] = None,
        validator: Optional[FormValidator] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._settings = settings or get_settings().app
        self.notices = notices or NoticeLogger()
        self._validator = validator or FormValidator()

        self.debts = DebtManager(
            store,
            self.notices,
            rollback_partial_chains=self._settings.rollback_partial_chains,
        )
        self.installments = InstallmentManager(store, self.notices)
        self.subscriptions = SubscriptionManager(store, self.notices)
        self.cards = CardManager(store, self.notices)

    def _reject(self, result: ValidationResult) -> None:
        logger.warning(
            "form_rejected",
            form=result.form,
            error_count=result.error_count,
            fields=[issue.field for issue in result.issues],
        )
        self.notices.publish(NoticeBuilder.validation_failed(result.form, result.messages))
        raise FormValidationError(result)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def load_all(self, now: Optional[datetime] = None) -> None:
        """Load every collection. The first failing collection stops the load."""
        await self.debts.load()
        await self.installments.load(today_in_fixed_zone(now))
        await self.subscriptions.load()
        await self.cards.load()
        logger.info(
            "tracker_loaded",
            months=len(self.debts.known_months),
            debts=len(self.debts.snapshot.debts),
            installments=len(self.installments.installments),
            subscriptions=len(self.subscriptions.items),
            cards=len(self.cards.items),
        )

    # -------------------------------------------------------------------------
    # Forms
    # -------------------------------------------------------------------------

    async def submit_debt_form(self, form: DebtForm) -> Optional[ChainCreation]:
        """
        Create a debt from the form, or edit the row it names.

        Returns:
            The chain outcome for a new debt, None for an edit

        Raises:
            FormValidationError: If the form has errors (nothing is written)
            NoTargetMonthsError: If the recurrence selects no month
            StorageError: If the store rejects the write
        """
        result = self._validator.check_debt_form(form, self.debts.known_months)
        if result.has_errors:
            self._reject(result)

        debt_input = self._validator.debt_input(form, self.debts.known_months)
        if form.id is not None:
            await self.debts.update(debt_input)
            return None
        return await self.debts.create(debt_input, current_month=form.month_key)

    async def submit_month_form(self, form: MonthForm) -> list[str]:
        """Create the month (or the twelve months) the form names."""
        result = self._validator.check_month_form(form)
        if result.has_errors:
            self._reject(result)
        return await self.debts.add_months(self._validator.month_keys(form))

    async def submit_card_form(self, form: CardForm) -> Card:
        result = self._validator.check_card_form(form)
        if result.has_errors:
            self._reject(result)
        return await self.cards.save(self._validator.card_input(form))

    async def submit_installment_form(
        self,
        form: InstallmentForm,
        now: Optional[datetime] = None,
    ) -> None:
        result = self._validator.check_installment_form(form)
        if result.has_errors:
            self._reject(result)
        await self.installments.save(
            self._validator.installment_input(form),
            installment_id=form.id,
            today=today_in_fixed_zone(now),
        )

    async def submit_subscription_form(self, form: SubscriptionForm) -> Subscription:
        result = self._validator.check_subscription_form(form)
        if result.has_errors:
            self._reject(result)
        return await self.subscriptions.save(self._validator.subscription_input(form))

    # -------------------------------------------------------------------------
    # Bulk
    # -------------------------------------------------------------------------

    async def clear_all_data(self) -> None:
        """Delete every record of every collection."""
        await self.debts.clear_all()
        await self.installments.clear_all()
        await self.subscriptions.clear_all()
        await self.cards.clear_all()
        logger.info("all_data_cleared")

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def dashboard(self, now: Optional[datetime] = None) -> DashboardView:
        today = today_in_fixed_zone(now)
        month_key = current_month_key(now)
        window = self._settings.upcoming_window_days
        limit = self._settings.upcoming_limit

        month_debts = self.debts.snapshot.debts_for(month_key)
        installments = self.installments.installments
        subscriptions = self.subscriptions.subscriptions

        return DashboardView(
            today=today,
            current_month=month_key,
            month_totals=month_totals(month_debts),
            month_settled=self.debts.month_is_settled(month_key),
            upcoming_debts=upcoming_debts(self.debts.snapshot.debts, today, window, limit),
            installments=installment_summary(installments, today),
            upcoming_installments=upcoming_installments(installments, today, window, limit),
            subscriptions=subscription_summary(
                subscriptions, today, self._settings.subscription_due_soon_days
            ),
            upcoming_subscriptions=upcoming_subscriptions(subscriptions, today, window, limit),
        )

    def analytics(self, year: Optional[Union[int, str]] = None, now: Optional[datetime] = None) -> AnalyticsView:
        """Analytics for `year`, defaulting to the current civil year."""
        year = int(year) if year is not None else today_in_fixed_zone(now).year
        debts = self.debts.snapshot.debts
        cards = self.cards.cards

        return AnalyticsView(
            year=year,
            available_years=available_years(self.debts.known_months),
            annual_spend=annual_spend(debts, year),
            categories=category_breakdown(debts, year),
            card_usage=card_usage(debts, cards, year),
            credit_limits=credit_limit_usage(cards),
            subscription_costs=subscription_cost_by_category(self.subscriptions.subscriptions),
        )


def create_store(backend: Optional[str] = None) -> RecordStore:
    """Record store for `backend`, or for the configured storage backend."""
    backend = backend or get_settings().app.storage_backend
    if backend == "memory":
        return InMemoryRecordStore()
    if backend == "google_sheets":
        return GoogleSheetsRecordStore()
    if backend == "supabase":
        return SupabaseRecordStore()
    raise ValueError(f"Unknown storage backend: {backend}")


def create_app_components(
    backend: Optional[str] = None,
    notices: Optional[NoticeLogger] = None,
) -> tuple[FinanceTracker, RecordStore]:
    """
    Factory function to create all application components.

    Args:
        backend: "supabase", "google_sheets" or "memory".
                 Defaults to the configured storage backend.
        notices: Notice logger to share with the UI.

    Returns:
        (tracker, store)
    """
    app_settings = get_settings().app
    configure_logging(debug=app_settings.debug_mode)

    backend = backend or app_settings.storage_backend
    status = validate_all_settings()
    if status.get(backend) is False:
        logger.warning("backend_settings_invalid", backend=backend, error=status.get(f"{backend}_error"))

    store = create_store(backend)
    tracker = FinanceTracker(store, notices=notices, settings=app_settings)
    logger.info("app_components_created", backend=backend)
    return tracker, store
