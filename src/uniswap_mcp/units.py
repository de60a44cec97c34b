"""Conversion between decimal strings and on-chain integer amounts."""

from decimal import Decimal, InvalidOperation, localcontext

from uniswap_mcp.errors import ChainError, ErrorKind


def parse_units(amount: str, decimals: int) -> int:
    """Convert a decimal string like "1.5" into minimal units.

    Exact: the amount must be positive and carry no more fractional
    digits than ``decimals``.
    """
    text = (amount or "").strip()
    try:
        value = Decimal(text)
    except InvalidOperation:
        raise ChainError(ErrorKind.INPUT, f"Invalid amount: {amount!r}")

    if not value.is_finite():
        raise ChainError(ErrorKind.INPUT, f"Invalid amount: {amount!r}")
    if value <= 0:
        raise ChainError(ErrorKind.INPUT, f"Amount must be positive: {amount!r}")

    with localcontext() as ctx:
        ctx.prec = 80  # uint256 needs 78 digits
        scaled = value.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ChainError(
            ErrorKind.INPUT,
            f"Amount {amount!r} has more than {decimals} decimal places",
        )
    return int(scaled)


def format_units(value: int, decimals: int) -> str:
    """Render minimal units as a plain decimal string without trailing zeros.

    format_units(10**18, 18) == "1", format_units(250123456, 6) == "250.123456"
    """
    negative = value < 0
    whole, frac = divmod(abs(int(value)), 10 ** decimals)
    text = str(whole)
    if decimals and frac:
        text += "." + str(frac).rjust(decimals, "0").rstrip("0")
    return f"-{text}" if negative else text
