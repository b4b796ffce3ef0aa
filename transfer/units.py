import re

ETHER_DECIMALS = 18

_AMOUNT_PATTERN = re.compile(r"^(?P<whole>[0-9]*)(?:\.(?P<fraction>[0-9]*))?$")


def parse_units(amount: str, decimals: int = ETHER_DECIMALS) -> int:
    """
    Convert a whole-unit decimal string into the smallest unit.

    Parameters
    ----------
    amount : str
        Non-negative decimal string, e.g. "1.5"
    decimals : int
        Number of decimals of the unit

    Returns
    -------
    int
        Amount in the smallest unit (Wei for ether)

    Raises
    ------
    ValueError
        If the string is not a non-negative decimal or has too many decimals
    """
    match = _AMOUNT_PATTERN.match(amount.strip())
    if match is None:
        raise ValueError(f"invalid decimal value: {amount}")

    whole = match.group("whole") or ""
    fraction = match.group("fraction") or ""
    if not whole and not fraction:
        raise ValueError(f"invalid decimal value: {amount}")

    fraction = fraction.rstrip("0")
    if len(fraction) > decimals:
        raise ValueError(f"too many decimals for format: {amount}")

    return int(whole or "0") * 10 ** decimals + int(fraction.ljust(decimals, "0") or "0")


def format_units(value: int, decimals: int = ETHER_DECIMALS) -> str:
    """
    Convert an amount in the smallest unit into a whole-unit decimal string.

    Parameters
    ----------
    value : int
        Amount in the smallest unit
    decimals : int
        Number of decimals of the unit

    Returns
    -------
    str
        Decimal string that always carries a fractional part, e.g. "2.0"
    """
    sign = "-" if value < 0 else ""
    whole, fraction = divmod(abs(value), 10 ** decimals)
    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0") or "0"
    return f"{sign}{whole}.{fraction_str}"
