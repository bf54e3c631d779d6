"""
Form Validation

DESIGN DECISION: Validation is advisory and happens before anything
reaches storage. Each form is checked as the user typed it (amounts in
Brazilian format, days and years as text) and every problem is reported
at once, one issue per field.

Only a form without error-level issues is converted into the typed
input the managers accept. Conversion of an invalid form raises
FormValidationError carrying the full result.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the form can show them next to each field.
"""

import re
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Sequence, Union

from pydantic import BaseModel, Field

from financas.models import (
    BillingCycle,
    Card,
    CardFlag,
    CardStatus,
    CardType,
    DebtCategory,
    DebtStatus,
    DebtTemplate,
    DebtUpdate,
    InstallmentCategory,
    InstallmentDraft,
    InstallmentPaymentMethod,
    Recurrence,
    RecurrenceType,
    Subscription,
    SubscriptionCategory,
    SubscriptionPaymentMethod,
    SubscriptionStatus,
)
from financas.models.installment import CENTS
from financas.utils.calendar import MONTH_NAMES, expand_month_span, parse_civil_date


LAST_FOUR_PATTERN = re.compile(r"^\d{4}$")
YEAR_PATTERN = re.compile(r"^\d{4}$")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_currency_input(value: Union[str, int, float, Decimal, None]) -> Optional[Decimal]:
    """
    Parse an amount typed in Brazilian format.

    "1.234,56" -> Decimal("1234.56"); "R$ 50" -> Decimal("50.00").
    Dots are thousands separators, the comma is the decimal mark.
    Returns None when the text is not a number.
    """
    if value is None:
        return None
    if isinstance(value, (int, Decimal)):
        return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)
    if isinstance(value, float):
        return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)

    text = value.replace("R$", "").strip().replace(".", "").replace(",", ".")
    if not text:
        return None
    try:
        return Decimal(text).quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None


def _parse_int(value: Union[str, int, None]) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = value.strip()
    if not re.fullmatch(r"-?\d+", text):
        return None
    return int(text)


def _parse_date(value: Union[str, date, None]) -> Optional[date]:
    try:
        return parse_civil_date(value)
    except (TypeError, ValueError):
        return None


# =============================================================================
# RESULT MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Form field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Message shown next to the field"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Outcome of validating one form."""

    form: str
    validated_at: datetime = Field(default_factory=_utcnow)
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def messages(self) -> list[str]:
        return [issue.message for issue in self.issues]

    def for_field(self, field: str) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.field == field]


class FormValidationError(Exception):
    """A form with error-level issues was submitted."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__(f"Invalid {result.form} form: {'; '.join(result.messages)}")


# =============================================================================
# FORMS (as typed by the user)
# =============================================================================

class DebtForm(BaseModel):
    id: Optional[str] = None
    month_key: str = Field(..., description="Month being viewed when the form was opened")
    name: str = ""
    amount: str = ""
    due_day: str = ""
    category: Optional[DebtCategory] = None
    card_id: Optional[str] = None
    status: DebtStatus = DebtStatus.PENDING
    recurrence_type: RecurrenceType = RecurrenceType.NONE
    start_month: Optional[str] = None
    end_month: Optional[str] = None


class MonthForm(BaseModel):
    month_name: str
    year: str
    whole_year: bool = False


class CardForm(BaseModel):
    id: Optional[str] = None
    name: str = ""
    last_four_digits: str = ""
    flag: CardFlag = CardFlag.OTHER
    type: CardType = CardType.CREDIT
    issuer: str = ""
    limit: str = ""
    balance: str = ""
    used_amount: str = ""
    closing_day: str = ""
    due_day: str = ""
    status: CardStatus = CardStatus.ACTIVE


class InstallmentForm(BaseModel):
    id: Optional[str] = None
    name: str = ""
    total_amount: str = ""
    total_installments: str = ""
    first_due_date: str = ""
    category: InstallmentCategory = InstallmentCategory.OTHER
    payment_method: InstallmentPaymentMethod = InstallmentPaymentMethod.OTHER
    description: Optional[str] = None
    card_id: Optional[str] = None


class SubscriptionForm(BaseModel):
    id: Optional[str] = None
    name: str = ""
    plan: Optional[str] = None
    amount: str = ""
    category: SubscriptionCategory = SubscriptionCategory.OTHER
    billing_cycle: BillingCycle = BillingCycle.MONTHLY
    payment_method: SubscriptionPaymentMethod = SubscriptionPaymentMethod.CREDIT_CARD
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    next_billing_date: str = ""
    start_date: str = ""


# =============================================================================
# VALIDATOR
# =============================================================================

class FormValidator:
    """
    Validates forms and converts valid ones into manager inputs.

    Usage:
        result = validator.check_debt_form(form, known_months)
        template = validator.debt_input(form, known_months)  # raises if invalid
    """

    @staticmethod
    def _missing(field: str, message: str) -> ValidationIssue:
        return ValidationIssue(field=field, issue_type="missing", message=message)

    @staticmethod
    def _invalid(field: str, message: str, issue_type: str = "invalid_value") -> ValidationIssue:
        return ValidationIssue(field=field, issue_type=issue_type, message=message)

    def _day_issue(self, field: str, value: str, required: bool) -> Optional[ValidationIssue]:
        if not value.strip():
            return self._missing(field, "O dia do vencimento é obrigatório.") if required else None
        day = _parse_int(value)
        if day is None or day < 1 or day > 31:
            return self._invalid(field, "O dia deve ser entre 1 e 31.", "out_of_range")
        return None

    # -------------------------------------------------------------------------
    # Debts
    # -------------------------------------------------------------------------

    def check_debt_form(self, form: DebtForm, known_months: Sequence[str]) -> ValidationResult:
        issues = []

        if not form.name.strip():
            issues.append(self._missing("name", "O nome da dívida é obrigatório."))

        amount = parse_currency_input(form.amount)
        if amount is None or amount <= 0:
            issues.append(self._invalid("amount", "O valor deve ser maior que zero."))

        day_issue = self._day_issue("due_day", form.due_day, required=True)
        if day_issue:
            issues.append(day_issue)

        if form.id is None and form.recurrence_type == RecurrenceType.RANGED:
            if not form.start_month or not form.end_month:
                issues.append(self._missing("recurrence", "Selecione o mês inicial e final."))
            elif (
                form.start_month in known_months
                and form.end_month in known_months
                and list(known_months).index(form.start_month) > list(known_months).index(form.end_month)
            ):
                issues.append(self._invalid(
                    "recurrence",
                    "O mês final não pode ser anterior ao mês inicial.",
                    "invalid_range",
                ))

        return ValidationResult(form="debt", issues=issues)

    def debt_input(
        self,
        form: DebtForm,
        known_months: Sequence[str],
    ) -> Union[DebtTemplate, DebtUpdate]:
        """A DebtUpdate when editing (form has an id), otherwise a DebtTemplate."""
        result = self.check_debt_form(form, known_months)
        if result.has_errors:
            raise FormValidationError(result)

        amount = parse_currency_input(form.amount)
        due_day = _parse_int(form.due_day)

        if form.id is not None:
            return DebtUpdate(
                id=form.id,
                month_key=form.month_key,
                name=form.name,
                amount=amount,
                status=form.status,
                due_day=due_day,
                category=form.category,
                card_id=form.card_id,
            )

        ranged = form.recurrence_type == RecurrenceType.RANGED
        return DebtTemplate(
            name=form.name,
            amount=amount,
            category=form.category,
            card_id=form.card_id,
            due_day=due_day,
            recurrence=Recurrence(
                type=form.recurrence_type,
                start_month=form.start_month if ranged else None,
                end_month=form.end_month if ranged else None,
            ),
        )

    # -------------------------------------------------------------------------
    # Months
    # -------------------------------------------------------------------------

    def check_month_form(self, form: MonthForm) -> ValidationResult:
        issues = []
        if form.month_name not in MONTH_NAMES:
            issues.append(self._invalid("month_name", "Selecione um mês válido."))
        if not YEAR_PATTERN.match(form.year.strip()):
            issues.append(self._invalid("year", "Por favor, insira um ano válido.", "invalid_format"))
        return ValidationResult(form="month", issues=issues)

    def month_keys(self, form: MonthForm) -> list[str]:
        """The MonthKeys the form asks for: one month, or twelve from it."""
        result = self.check_month_form(form)
        if result.has_errors:
            raise FormValidationError(result)
        return expand_month_span(
            form.month_name,
            int(form.year.strip()),
            12 if form.whole_year else 1,
        )

    # -------------------------------------------------------------------------
    # Cards
    # -------------------------------------------------------------------------

    def check_card_form(self, form: CardForm) -> ValidationResult:
        issues = []

        if not form.name.strip():
            issues.append(self._missing("name", "O apelido é obrigatório."))
        if not LAST_FOUR_PATTERN.match(form.last_four_digits):
            issues.append(self._invalid("last_four_digits", "Deve conter 4 dígitos.", "invalid_format"))
        if not form.issuer.strip():
            issues.append(self._missing("issuer", "O emissor é obrigatório."))

        if form.type == CardType.CREDIT:
            limit = parse_currency_input(form.limit)
            if limit is None or limit <= 0:
                issues.append(self._invalid("limit", "Limite deve ser positivo."))
        if form.type in (CardType.DEBIT, CardType.MEAL):
            if parse_currency_input(form.balance) is None:
                issues.append(self._missing("balance", "Saldo é obrigatório."))

        for field in ("closing_day", "due_day"):
            value = getattr(form, field)
            if value.strip():
                day = _parse_int(value)
                if day is None or day < 1 or day > 31:
                    issues.append(self._invalid(field, "Dia inválido.", "out_of_range"))

        if form.used_amount.strip():
            used = parse_currency_input(form.used_amount)
            if used is None or used < 0:
                issues.append(self._invalid("used_amount", "Valor utilizado inválido."))

        return ValidationResult(form="card", issues=issues)

    def card_input(self, form: CardForm) -> Card:
        result = self.check_card_form(form)
        if result.has_errors:
            raise FormValidationError(result)

        return Card(
            id=form.id,
            name=form.name,
            last_four_digits=form.last_four_digits,
            flag=form.flag,
            type=form.type,
            issuer=form.issuer,
            limit=parse_currency_input(form.limit) if form.limit.strip() else None,
            balance=parse_currency_input(form.balance) if form.balance.strip() else None,
            used_amount=parse_currency_input(form.used_amount) if form.used_amount.strip() else None,
            closing_day=_parse_int(form.closing_day) if form.closing_day.strip() else None,
            due_day=_parse_int(form.due_day) if form.due_day.strip() else None,
            status=form.status,
        )

    # -------------------------------------------------------------------------
    # Installments
    # -------------------------------------------------------------------------

    def check_installment_form(self, form: InstallmentForm) -> ValidationResult:
        issues = []

        if not form.name.strip():
            issues.append(self._missing("name", "O nome é obrigatório."))

        total = parse_currency_input(form.total_amount)
        if total is None or total <= 0:
            issues.append(self._invalid("total_amount", "O valor total deve ser maior que zero."))

        count = _parse_int(form.total_installments)
        if count is None or count <= 0:
            issues.append(self._invalid(
                "total_installments",
                "O número de parcelas deve ser maior que zero.",
            ))

        if not form.first_due_date.strip():
            issues.append(self._missing(
                "first_due_date", "A data da primeira parcela é obrigatória."
            ))
        elif _parse_date(form.first_due_date) is None:
            issues.append(self._invalid("first_due_date", "Data inválida.", "invalid_format"))

        return ValidationResult(form="installment", issues=issues)

    def installment_input(self, form: InstallmentForm) -> InstallmentDraft:
        result = self.check_installment_form(form)
        if result.has_errors:
            raise FormValidationError(result)

        return InstallmentDraft(
            name=form.name,
            total_amount=parse_currency_input(form.total_amount),
            total_installments=_parse_int(form.total_installments),
            first_due_date=_parse_date(form.first_due_date),
            category=form.category,
            payment_method=form.payment_method,
            description=form.description or None,
            card_id=form.card_id,
        )

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def check_subscription_form(self, form: SubscriptionForm) -> ValidationResult:
        issues = []

        if not form.name.strip():
            issues.append(self._missing("name", "O nome é obrigatório."))

        amount = parse_currency_input(form.amount)
        if amount is None or amount <= 0:
            issues.append(self._invalid("amount", "O valor deve ser maior que zero."))

        for field, message in (
            ("next_billing_date", "A próxima data de cobrança é obrigatória."),
            ("start_date", "A data de início é obrigatória."),
        ):
            value = getattr(form, field)
            if not value.strip():
                issues.append(self._missing(field, message))
            elif _parse_date(value) is None:
                issues.append(self._invalid(field, "Data inválida.", "invalid_format"))

        return ValidationResult(form="subscription", issues=issues)

    def subscription_input(self, form: SubscriptionForm) -> Subscription:
        result = self.check_subscription_form(form)
        if result.has_errors:
            raise FormValidationError(result)

        return Subscription(
            id=form.id,
            name=form.name,
            plan=form.plan or None,
            amount=parse_currency_input(form.amount),
            category=form.category,
            billing_cycle=form.billing_cycle,
            payment_method=form.payment_method,
            status=form.status,
            next_billing_date=_parse_date(form.next_billing_date),
            start_date=_parse_date(form.start_date),
        )
