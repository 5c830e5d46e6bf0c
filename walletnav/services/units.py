"""Conversions between wei and human-readable native amounts."""

from __future__ import annotations

from decimal import Decimal
from typing import Union

from eth_utils import from_wei, to_wei


def format_ether(wei: int) -> str:
    """Render a wei amount as an ether decimal string.

    Always keeps at least one fractional digit and strips trailing zeros,
    so ``10**18`` becomes ``"1.0"`` and ``5 * 10**17`` becomes ``"0.5"``.
    """

    if wei < 0:
        raise ValueError("Balance cannot be negative")
    text = format(Decimal(from_wei(wei, "ether")), "f")
    if "." not in text:
        return f"{text}.0"
    whole, fraction = text.split(".", 1)
    fraction = fraction.rstrip("0") or "0"
    return f"{whole}.{fraction}"


def parse_ether(amount: Union[str, int, Decimal]) -> int:
    """Convert an ether amount to wei."""

    return int(to_wei(Decimal(str(amount)), "ether"))


__all__ = ["format_ether", "parse_ether"]
