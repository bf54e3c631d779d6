"""Tests for MonthKey and civil date helpers."""

import pytest
from datetime import date, datetime, timezone

from financas.utils.calendar import (
    InvalidMonthKeyError,
    add_months,
    current_month_key,
    db_date_string,
    expand_month_span,
    format_display_date,
    format_month_key,
    month_key_for,
    month_sort_key,
    parse_civil_date,
    parse_month_key,
    sort_month_keys,
    today_in_fixed_zone,
)


class TestMonthKeys:
    """Parsing, formatting and ordering of MonthKeys."""

    def test_parse_valid_key(self):
        assert parse_month_key("Março de 2026") == (2, 2026)
        assert parse_month_key("Dezembro de 1999") == (11, 1999)

    @pytest.mark.parametrize("bad", [
        "Marco de 2026",
        "Março 2026",
        "Março de 20x6",
        "",
        "de 2026",
    ])
    def test_parse_invalid_key(self, bad):
        assert parse_month_key(bad) is None

    def test_format_round_trip(self):
        assert format_month_key(0, 2026) == "Janeiro de 2026"
        assert month_key_for(date(2026, 2, 28)) == "Fevereiro de 2026"

    def test_sort_is_chronological_not_lexicographic(self):
        keys = ["Abril de 2026", "Dezembro de 2025", "Janeiro de 2026", "Fevereiro de 2026"]
        assert sort_month_keys(keys) == [
            "Dezembro de 2025",
            "Janeiro de 2026",
            "Fevereiro de 2026",
            "Abril de 2026",
        ]

    def test_sort_key_rejects_malformed(self):
        with pytest.raises(InvalidMonthKeyError):
            month_sort_key("Foo de 2026")

    def test_expand_span_crosses_year(self):
        assert expand_month_span("Novembro", 2025, 3) == [
            "Novembro de 2025",
            "Dezembro de 2025",
            "Janeiro de 2026",
        ]

    def test_expand_whole_year_from_january(self):
        keys = expand_month_span("Janeiro", 2026)
        assert len(keys) == 12
        assert keys[0] == "Janeiro de 2026"
        assert keys[-1] == "Dezembro de 2026"

    def test_expand_rejects_unknown_month(self):
        with pytest.raises(InvalidMonthKeyError):
            expand_month_span("Smarch", 2026)


class TestCivilDates:
    """Due dates are calendar days and never shift."""

    def test_db_date_string(self):
        assert db_date_string("Março de 2026", 10) == "2026-03-10"
        assert db_date_string("Janeiro de 2026", "5") == "2026-01-05"

    def test_db_date_string_keeps_day_exact(self):
        """Day 1 stays day 1 whatever the local zone."""
        assert db_date_string("Agosto de 2026", 1) == "2026-08-01"

    def test_db_date_string_rolls_over_month_end(self):
        assert db_date_string("Fevereiro de 2026", 31) == "2026-03-03"

    @pytest.mark.parametrize("day", [0, 32, "", "abc", None, True])
    def test_db_date_string_invalid_day(self, day):
        assert db_date_string("Março de 2026", day) is None

    def test_db_date_string_invalid_key(self):
        assert db_date_string("Março 2026", 10) is None

    def test_parse_civil_date(self):
        assert parse_civil_date("2026-03-10") == date(2026, 3, 10)
        assert parse_civil_date("2026-03-10T00:00:00+00:00") == date(2026, 3, 10)
        assert parse_civil_date(None) is None
        assert parse_civil_date("") is None

    def test_format_display_date(self):
        assert format_display_date("2026-03-01") == "01/03/2026"
        assert format_display_date("not a date") == "not a date"

    def test_add_months_clamps_day(self):
        assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
        assert add_months(date(2026, 1, 15), 12) == date(2027, 1, 15)


class TestFixedZone:
    """'Today' is taken in America/Sao_Paulo (UTC-3)."""

    def test_today_lags_utc_late_at_night(self):
        # 01:30 UTC on the 1st is still the previous evening in São Paulo
        instant = datetime(2026, 4, 1, 1, 30, tzinfo=timezone.utc)
        assert today_in_fixed_zone(instant) == date(2026, 3, 31)
        assert current_month_key(instant) == "Março de 2026"

    def test_naive_instant_taken_as_utc(self):
        assert today_in_fixed_zone(datetime(2026, 4, 1, 12, 0)) == date(2026, 4, 1)
