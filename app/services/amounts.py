"""Conversion between human token amounts and integer base units."""

from decimal import ROUND_FLOOR, Decimal, InvalidOperation, Overflow

from app.errors import InvalidAmount

NATIVE_DECIMALS = 9  # SOL / lamports
DEFAULT_TOKEN_DECIMALS = 6  # used only when token metadata is unavailable
LAMPORTS_PER_SOL = 10**NATIVE_DECIMALS
MAX_BASE_UNITS = 2**64 - 1  # u64


def parse_amount(amount, allow_zero: bool = False) -> Decimal:
    """Parse a string or number into a finite Decimal, rejecting non-positive values."""
    if amount is None or isinstance(amount, bool):
        raise InvalidAmount("Amount is required")
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmount(f"Amount must be a number, got {amount!r}")
    if not value.is_finite():
        raise InvalidAmount(f"Amount must be a finite number, got {amount!r}")
    if value < 0 or (value == 0 and not allow_zero):
        raise InvalidAmount("Amount must be a positive number")
    return value


def _check_decimals(decimals: int) -> int:
    if isinstance(decimals, bool) or not isinstance(decimals, int) or not 0 <= decimals <= 255:
        raise InvalidAmount(f"Invalid decimal count: {decimals!r}")
    return decimals


def scale(amount, decimals: int, allow_zero: bool = False) -> int:
    """Human amount to base units, truncating so we never ask for more than requested."""
    value = parse_amount(amount, allow_zero=allow_zero)
    decimals = _check_decimals(decimals)
    try:
        scaled = (value * (Decimal(10) ** decimals)).to_integral_value(rounding=ROUND_FLOOR)
    except (InvalidOperation, Overflow):
        raise InvalidAmount(f"Amount {amount} is too large")
    if scaled > MAX_BASE_UNITS:
        raise InvalidAmount(f"Amount {amount} exceeds the largest on-chain amount ({MAX_BASE_UNITS} base units)")
    base_units = int(scaled)
    if base_units == 0 and not allow_zero:
        raise InvalidAmount(f"Amount {amount} is smaller than the token's smallest unit (10^-{decimals})")
    return base_units


def unscale(base_units: int, decimals: int) -> float:
    """Base units to a human amount, rounded to the nearest representable float."""
    decimals = _check_decimals(decimals)
    return float(Decimal(int(base_units)).scaleb(-decimals))
