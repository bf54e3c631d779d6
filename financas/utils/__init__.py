"""Shared utilities."""

from financas.utils.calendar import (
    MONTH_NAMES,
    InvalidMonthKeyError,
    add_months,
    current_month_key,
    db_date_string,
    expand_month_span,
    fixed_zone,
    format_display_date,
    format_month_key,
    month_key_for,
    month_sort_key,
    now_in_fixed_zone,
    parse_civil_date,
    parse_month_key,
    sort_month_keys,
    today_in_fixed_zone,
)

__all__ = [
    "MONTH_NAMES",
    "InvalidMonthKeyError",
    "add_months",
    "current_month_key",
    "db_date_string",
    "expand_month_span",
    "fixed_zone",
    "format_display_date",
    "format_month_key",
    "month_key_for",
    "month_sort_key",
    "now_in_fixed_zone",
    "parse_civil_date",
    "parse_month_key",
    "sort_month_keys",
    "today_in_fixed_zone",
]
