from datetime import date
from decimal import Decimal

import pytest

from logistik.services.formatting import (
    format_number_id, format_rupiah, format_date_id, terbilang, optional_text
)


@pytest.mark.parametrize("value,expected", [
    (0, "0"),
    (1500000, "1.500.000"),
    (Decimal("1234567.50"), "1.234.567,5"),
    ("2500.125", "2.500,125"),
    (-4200, "-4.200"),
    (None, "0"),
    ("bukan angka", "0"),
])
def test_format_number_id(value, expected):
    assert format_number_id(value) == expected


def test_format_rupiah_rounds_to_whole_rupiah():
    assert format_rupiah(1500000) == "Rp 1.500.000"
    assert format_rupiah(Decimal("999.5")) == "Rp 1.000"
    assert format_rupiah(-2500) == "-Rp 2.500"


def test_format_date_id():
    assert format_date_id(date(2026, 10, 5)) == "05 Oktober 2026"
    assert format_date_id("2026-01-31T10:00:00") == "31 Januari 2026"
    assert format_date_id(None) == "-"
    assert format_date_id("kemarin") == "-"


@pytest.mark.parametrize("value,expected", [
    (0, "Nol Rupiah"),
    (11, "Sebelas Rupiah"),
    (15, "Lima Belas Rupiah"),
    (100, "Seratus Rupiah"),
    (1500, "Seribu Lima Ratus Rupiah"),
    (21000, "Dua Puluh Satu Ribu Rupiah"),
    (2500000, "Dua Juta Lima Ratus Ribu Rupiah"),
    (1000000000, "Satu Milyar Rupiah"),
])
def test_terbilang(value, expected):
    assert terbilang(value) == expected


def test_optional_text():
    assert optional_text("") == "-"
    assert optional_text("BL-01") == "BL-01"
