import math

import pytest

from factura_extractor.postprocessor import (
    AmountNormalizer,
    DateNormalizer,
    TextNormalizer,
    parse_locale_number,
)


class TestParseLocaleNumber:

    @pytest.mark.parametrize("raw, expected", [
        ("1.234,56", 1234.56),
        ("15.420,00", 15420.00),
        ("32.644,98", 32644.98),
        ("1234,56", 1234.56),
        ("1.234.567", 1234567.0),
        ("1,234.56", 1234.56),
        ("$ 15.420,50", 15420.50),
        ("1.234,5", 1234.5),
    ])
    def test_locale_forms(self, raw, expected):
        assert parse_locale_number(raw) == expected

    def test_numbers_pass_through(self):
        assert parse_locale_number(32644.98) == 32644.98
        assert parse_locale_number(1500) == 1500.0

    @pytest.mark.parametrize("raw", [None, "", "abc", "$ ,"])
    def test_unreadable_is_nan(self, raw):
        assert math.isnan(parse_locale_number(raw))


class TestTextNormalizer:

    def test_search_view_and_lines(self):
        view = TextNormalizer().normalize("TOTAL A PAGAR\r\n$ 1.234,56")
        assert view.text == "total a pagar $ 1.234.56"
        assert view.lines == ("TOTAL A PAGAR", "$ 1.234,56")
        assert view.original == "TOTAL A PAGAR\r\n$ 1.234,56"

    def test_tabs_and_blank_lines(self):
        view = TextNormalizer().normalize("Total\t\tfinal\n\n   \nFin")
        assert view.text == "total final fin"
        assert view.lines == ("Total  final", "Fin")

    @pytest.mark.parametrize("raw", [None, "", 123, ["text"]])
    def test_bad_input_is_empty(self, raw):
        view = TextNormalizer().normalize(raw)
        assert view.is_empty
        assert view.lines == ()

    def test_idempotent(self):
        normalizer = TextNormalizer()
        text = "Vencimiento:\t25/01/2025\r\nTotal $ 1.234,56"
        assert normalizer.normalize(text) == normalizer.normalize(text)


class TestAmountNormalizer:

    def test_to_float_rounds(self):
        assert AmountNormalizer().to_float("15.420,50") == 15420.5

    def test_to_float_unreadable(self):
        assert AmountNormalizer().to_float("n/a") is None

    def test_range(self):
        normalizer = AmountNormalizer()
        assert normalizer.in_range(10)
        assert normalizer.in_range(1_000_000)
        assert not normalizer.in_range(9.99)
        assert not normalizer.in_range(1_000_000.01)


class TestDateNormalizer:

    def test_two_digit_year(self):
        assert DateNormalizer().to_iso(25, 1, 25) == "2025-01-25"

    def test_impossible_date(self):
        assert DateNormalizer().to_iso(31, 2, 2025) is None

    @pytest.mark.parametrize("raw, expected", [
        ("25/01/2025", "2025-01-25"),
        ("2025-01-25", "2025-01-25"),
        ("07-02-26", "2026-02-07"),
        ("5 de febrero de 2025", "2025-02-05"),
        ("12 de Setiembre del 2025", "2025-09-12"),
    ])
    def test_normalize(self, raw, expected):
        assert DateNormalizer().normalize(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", 20250125])
    def test_normalize_rejects(self, raw):
        assert DateNormalizer().normalize(raw) is None

    def test_month_names_ignore_accents_and_case(self):
        normalizer = DateNormalizer()
        assert normalizer.month_number("MARZO") == 3
        assert normalizer.month_number("setiembre") == 9
        assert normalizer.month_number("brumario") is None
