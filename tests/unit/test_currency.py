"""Tests for token amount to cents conversion."""

from __future__ import annotations

import pytest

from payrail.conversion.currency import convert_to_cents
from payrail.core.exceptions import ConfigurationError, ConversionError
from payrail.models.payout import ConversionMode, TokenAmount


def cents(base_units: str, decimals: int = 6) -> int:
    return convert_to_cents(TokenAmount(amount_base_units=base_units, decimals=decimals), ConversionMode.STABLE_1TO1)


class TestStableOneToOne:
    def test_one_token_is_one_hundred_cents(self):
        assert cents("1000000") == 100

    def test_one_and_a_half_tokens(self):
        assert cents("1500000") == 150

    def test_half_cent_rounds_up(self):
        assert cents("5000") == 1
        assert cents("15000") == 2

    def test_below_half_cent_rounds_down(self):
        assert cents("4999") == 0

    def test_zero(self):
        assert cents("0") == 0

    def test_zero_decimals(self):
        assert cents("7", decimals=0) == 700

    def test_large_amounts_are_exact(self):
        # 123456789012.345678901234567890 tokens
        assert cents("123456789012345678901234567890", decimals=18) == 12345678901235

    def test_eighteen_decimal_token(self):
        assert cents(str(25 * 10**17), decimals=18) == 250


class TestInvalidInput:
    @pytest.mark.parametrize("raw", ["-5", "1.5", "", "abc", "1e6"])
    def test_non_integer_base_units(self, raw):
        with pytest.raises(ConversionError):
            cents(raw)

    def test_decimals_out_of_range(self):
        with pytest.raises(ConversionError):
            cents("1", decimals=37)
        with pytest.raises(ConversionError):
            cents("1", decimals=-1)

    def test_conversion_error_is_value_error(self):
        with pytest.raises(ValueError):
            cents("x")


class TestOracle:
    def test_oracle_fails_fast(self):
        amount = TokenAmount(amount_base_units="1000000", decimals=6)
        with pytest.raises(NotImplementedError):
            convert_to_cents(amount, ConversionMode.ORACLE)

    def test_oracle_is_a_configuration_error(self):
        amount = TokenAmount(amount_base_units="1000000", decimals=6)
        with pytest.raises(ConfigurationError):
            convert_to_cents(amount, ConversionMode.ORACLE)
