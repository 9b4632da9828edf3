"""Tests for price-based size scaling."""

from fractions import Fraction

import pytest

from sialeaderboard.ledger.pricing import (
    BYTES_PER_TB,
    SIACOIN_PRECISION,
    PricingConfig,
    scale_size,
)


def _price(size: int, sc_per_tb: int) -> int:
    """Total hastings paid for `size` bytes at `sc_per_tb`."""
    return SIACOIN_PRECISION * sc_per_tb * size // BYTES_PER_TB


@pytest.fixture
def pricing():
    return PricingConfig()


class TestScaleSize:

    @pytest.mark.parametrize(
        "size,sc_per_tb,expected",
        [
            (0, 0, 0),
            (0, 500, 0),
            (100, 0, 0),
            (100, 1, 0),
            (100, 5, 2),
            (100, 50, 20),
            (100, 125, 50),
            (100, 250, 100),
            (100, 500, 100),
        ],
    )
    def test_reference_table(self, pricing, size, sc_per_tb, expected):
        assert scale_size(size, _price(size, sc_per_tb), pricing) == expected

    def test_zero_size_ignores_price(self, pricing):
        assert scale_size(0, 10**40, pricing) == 0

    def test_full_size_at_or_above_minimum(self, pricing):
        size = 4 * BYTES_PER_TB
        assert scale_size(size, _price(size, 250), pricing) == size
        assert scale_size(size, _price(size, 10_000), pricing) == size

    def test_monotonic_in_price(self, pricing):
        size = 1000
        results = [scale_size(size, _price(size, p), pricing) for p in range(0, 600, 7)]
        assert results == sorted(results)
        assert results[-1] == size

    def test_single_truncation(self):
        # 10 * 2 / 3 = 6.67 -> 6; truncating 2/3 first would give 0
        pricing = PricingConfig(min_price_numerator=3, min_price_denominator=1)
        assert scale_size(10, 20, pricing) == 6

    def test_rational_minimum(self):
        # min price 5/2 per byte: 7 * 2 / 2.5 = 5.6 -> 5
        pricing = PricingConfig(min_price_numerator=5, min_price_denominator=2)
        assert scale_size(7, 14, pricing) == 5

    def test_per_byte_truncates_toward_zero(self):
        # 29 // 10 = 2 per byte, below 3 -> 10 * 2 / 3 = 6
        pricing = PricingConfig(min_price_numerator=3, min_price_denominator=1)
        assert scale_size(10, 29, pricing) == 6


class TestPricingConfig:

    def test_default_is_250_sc_per_tb(self):
        assert PricingConfig().min_price == Fraction(250 * SIACOIN_PRECISION, BYTES_PER_TB)

    def test_from_sc_per_tb_matches_default(self):
        assert PricingConfig.from_sc_per_tb(250).min_price == PricingConfig().min_price

    def test_from_fractional_price(self):
        cfg = PricingConfig.from_sc_per_tb(Fraction(1, 3))
        assert cfg.min_price == Fraction(SIACOIN_PRECISION, 3 * BYTES_PER_TB)

    def test_rejects_zero_denominator(self):
        with pytest.raises(ValueError):
            PricingConfig(min_price_numerator=1, min_price_denominator=0)
