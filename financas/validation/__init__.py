"""Form validation package."""

from financas.validation.validator import (
    CardForm,
    DebtForm,
    FormValidationError,
    FormValidator,
    InstallmentForm,
    MonthForm,
    SubscriptionForm,
    ValidationIssue,
    ValidationResult,
    parse_currency_input,
)

__all__ = [
    "CardForm",
    "DebtForm",
    "FormValidationError",
    "FormValidator",
    "InstallmentForm",
    "MonthForm",
    "SubscriptionForm",
    "ValidationIssue",
    "ValidationResult",
    "parse_currency_input",
]
