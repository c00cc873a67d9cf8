"""Token amount to currency cents conversion.

STABLE_1TO1 treats one whole token as one currency unit, so
``cents = round(base_units * 100 / 10**decimals)`` with halves rounded up.
Everything is integer arithmetic: base-unit amounts routinely exceed what a
float can hold exactly.
"""

from __future__ import annotations

import re

from payrail.core.exceptions import ConversionError, OracleNotConfiguredError
from payrail.models.payout import ConversionMode, TokenAmount

MAX_DECIMALS = 36

_DIGITS = re.compile(r"^[0-9]+$")


def convert_to_cents(amount: TokenAmount, mode: ConversionMode) -> int:
    """Convert a token amount to whole cents.

    Raises:
        ConversionError: malformed base units or decimals out of range.
        OracleNotConfiguredError: ORACLE mode, which has no price feed.
    """
    if mode == ConversionMode.ORACLE:
        raise OracleNotConfiguredError("ORACLE conversion requires a price feed and is not implemented")
    if mode != ConversionMode.STABLE_1TO1:
        raise ConversionError(f"Unknown conversion mode {mode!r}")

    raw = amount.amount_base_units.strip()
    if not _DIGITS.match(raw):
        raise ConversionError(f"amount_base_units must be a non-negative integer, got {amount.amount_base_units!r}")
    if not 0 <= amount.decimals <= MAX_DECIMALS:
        raise ConversionError(f"decimals must be within [0, {MAX_DECIMALS}], got {amount.decimals}")

    return _round_half_up(int(raw) * 100, 10 ** amount.decimals)


def _round_half_up(numerator: int, denominator: int) -> int:
    quotient, remainder = divmod(numerator, denominator)
    if remainder * 2 >= denominator:
        quotient += 1
    return quotient
