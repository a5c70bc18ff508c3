"""
Indonesian number, currency and date formatting
"""
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Optional, Union

Number = Union[int, float, Decimal, str, None]

MONTHS_ID = [
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
]

_SATUAN = ["", "Satu", "Dua", "Tiga", "Empat", "Lima", "Enam", "Tujuh",
           "Delapan", "Sembilan", "Sepuluh", "Sebelas"]


def _decimal(value: Number) -> Decimal:
    try:
        return Decimal(str(value)) if value not in (None, "") else Decimal("0")
    except InvalidOperation:
        return Decimal("0")


def format_number_id(value: Number, max_fraction_digits: int = 3) -> str:
    """1234567.5 -> '1.234.567,5' (id-ID grouping, trailing zeros dropped)"""
    amount = _decimal(value)
    quantum = Decimal(1).scaleb(-max_fraction_digits)
    amount = amount.quantize(quantum, rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    integer_part, _, fraction = f"{abs(amount):f}".partition(".")
    grouped = f"{int(integer_part):,}".replace(",", ".")
    fraction = fraction.rstrip("0")
    return f"{sign}{grouped},{fraction}" if fraction else f"{sign}{grouped}"


def format_rupiah(value: Number) -> str:
    """IDR without decimals: 'Rp 1.500.000'"""
    amount = _decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    text = f"Rp {format_number_id(abs(amount), 0)}"
    return f"-{text}" if amount < 0 else text


def format_date_id(value: Union[str, date, datetime, None], default: str = "-") -> str:
    """'2026-10-05' -> '05 Oktober 2026'"""
    if not value:
        return default
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return default
    return f"{value.day:02d} {MONTHS_ID[value.month - 1]} {value.year}"


def _terbilang(n: int) -> str:
    if n < 12:
        return _SATUAN[n]
    if n < 20:
        return f"{_SATUAN[n - 10]} Belas"
    if n < 100:
        return f"{_SATUAN[n // 10]} Puluh {_SATUAN[n % 10]}"
    if n < 200:
        return f"Seratus {_terbilang(n - 100)}"
    if n < 1000:
        return f"{_SATUAN[n // 100]} Ratus {_terbilang(n % 100)}"
    if n < 2000:
        return f"Seribu {_terbilang(n - 1000)}"
    if n < 10 ** 6:
        return f"{_terbilang(n // 1000)} Ribu {_terbilang(n % 1000)}"
    if n < 10 ** 9:
        return f"{_terbilang(n // 10 ** 6)} Juta {_terbilang(n % 10 ** 6)}"
    if n < 10 ** 12:
        return f"{_terbilang(n // 10 ** 9)} Milyar {_terbilang(n % 10 ** 9)}"
    if n < 10 ** 15:
        return f"{_terbilang(n // 10 ** 12)} Triliun {_terbilang(n % 10 ** 12)}"
    return ""


def terbilang(value: Number) -> str:
    """Amount in Indonesian words: 1500 -> 'Seribu Lima Ratus Rupiah'"""
    amount = int(_decimal(value))
    if amount == 0:
        return "Nol Rupiah"
    words = " ".join(_terbilang(abs(amount)).split())
    return f"{words} Rupiah"


def optional_text(value: Optional[str], default: str = "-") -> str:
    return value if value else default
