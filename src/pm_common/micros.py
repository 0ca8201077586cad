"""Integer arithmetic utilities for micro-unit (6 decimal) amounts.

All prices, stakes, shares and reserves use int micro-units: 1_000_000 == $1.
No float in calculations; floats appear only in display formatting.
"""

SCALE = 1_000_000
BPS_DENOMINATOR = 10_000


def mul_div(a: int, b: int, denominator: int) -> int:
    """a * b // denominator, truncating toward zero for non-negative operands."""
    return a * b // denominator


def calculate_fee(value: int, fee_rate_bps: int) -> int:
    """Fee truncated toward zero: value * bps // 10000."""
    if value <= 0 or fee_rate_bps == 0:
        return 0
    return mul_div(value, fee_rate_bps, BPS_DENOMINATOR)


def micros_to_display(micros: int) -> str:
    """Convert micros to display string: 1_234_560000 -> '$1,234.56', -1_500000 -> '-$1.50'.

    Fractional cents are truncated.
    """
    if micros < 0:
        return "-" + micros_to_display(-micros)
    cents = micros // (SCALE // 100)
    return f"${cents // 100:,}.{cents % 100:02d}"


def price_to_display(price: int) -> str:
    """Convert a micro-unit price to 4 decimals: 366666 -> '$0.3666'."""
    whole, frac = divmod(price, SCALE)
    return f"${whole}.{frac // 100:04d}"


def parse_amount(text: str) -> int:
    """Parse a human decimal string into micros, truncating extra decimals.

    '12.5' -> 12_500000, '0.4' -> 400000, '0.0000019' -> 1.
    """
    raw = text.strip()
    if not raw:
        raise ValueError("Empty amount")
    negative = raw.startswith("-")
    if negative or raw.startswith("+"):
        raw = raw[1:]
    whole, _, frac = raw.partition(".")
    if not (whole or frac) or (whole and not whole.isdigit()) or (frac and not frac.isdigit()):
        raise ValueError(f"Invalid amount: {text!r}")
    micros = int(whole or "0") * SCALE + int((frac + "000000")[:6])
    return -micros if negative else micros
