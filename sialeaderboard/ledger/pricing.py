"""Price-based size scaling.

Contracts that pay less than the minimum price per byte only count for a
proportional share of their size:

    effective = floor(size * per_byte / min_price)   if per_byte < min_price
    effective = size                                  otherwise

All arithmetic is exact. Prices are integer hastings and the minimum price is
a rational number of hastings per byte, so results never depend on floating
point rounding.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction

# Hastings per siacoin.
SIACOIN_PRECISION = 10**24

BYTES_PER_TB = 10**12

DEFAULT_MIN_PRICE_SC_PER_TB = 250


@dataclass(frozen=True)
class PricingConfig:
    """Minimum accepted storage price, in hastings per byte.

    Held as numerator/denominator so the value stays exact.
    """

    min_price_numerator: int = DEFAULT_MIN_PRICE_SC_PER_TB * SIACOIN_PRECISION
    min_price_denominator: int = BYTES_PER_TB

    def __post_init__(self) -> None:
        if self.min_price_denominator <= 0:
            raise ValueError("min_price_denominator must be positive")
        if self.min_price_numerator < 0:
            raise ValueError("min_price_numerator must not be negative")

    @classmethod
    def from_sc_per_tb(cls, sc_per_tb: int | Fraction) -> PricingConfig:
        """Build a config from a price quoted in siacoins per terabyte."""
        price = Fraction(sc_per_tb) * SIACOIN_PRECISION / BYTES_PER_TB
        return cls(
            min_price_numerator=price.numerator,
            min_price_denominator=price.denominator,
        )

    @property
    def min_price(self) -> Fraction:
        return Fraction(self.min_price_numerator, self.min_price_denominator)


def scale_size(raw_size: int, total_price: int, pricing: PricingConfig) -> int:
    """Return the number of bytes a contract is credited for.

    Args:
        raw_size: File size declared by the contract revision, in bytes.
        total_price: Total payment to the host, in hastings.
        pricing: Minimum price configuration.
    """
    if raw_size == 0:
        return 0

    per_byte = total_price // raw_size
    min_price = pricing.min_price
    if per_byte < min_price:
        # size * per_byte / (num / den), truncated once
        return (raw_size * per_byte * min_price.denominator) // min_price.numerator
    return raw_size


__all__ = [
    "BYTES_PER_TB",
    "DEFAULT_MIN_PRICE_SC_PER_TB",
    "PricingConfig",
    "SIACOIN_PRECISION",
    "scale_size",
]
