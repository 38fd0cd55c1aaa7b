"""Money and quantities.

Prices, fees and totals are whole units of the store currency (rupiah has
no minor unit in practice), so ``Money`` refuses fractions and maps onto
integer columns without rounding.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from functools import total_ordering
from typing import Iterable

from grocer.domain.exceptions import ValidationError

DEFAULT_CURRENCY = "IDR"


@total_ordering
@dataclass(frozen=True)
class Money:
    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < 0:
            raise ValidationError(f"Money amount cannot be negative, got {self.amount}")
        if self.amount != self.amount.to_integral_value():
            raise ValidationError(
                f"Money amount must be a whole number of {self.currency} units, got {self.amount}"
            )

    @classmethod
    def of(cls, amount: int | str | Decimal, currency: str = DEFAULT_CURRENCY) -> Money:
        """Build from user or database input; floats go through ``str``."""
        try:
            return cls(Decimal(str(amount)), currency)
        except (InvalidOperation, ValueError) as exc:
            raise ValidationError(f"Invalid money amount: {amount!r}") from exc

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> Money:
        return cls(Decimal(0), currency)

    @classmethod
    def sum_of(cls, amounts: Iterable[Money]) -> Money:
        total = cls.zero()
        for amount in amounts:
            total = total + amount
        return total

    @property
    def minor_units(self) -> int:
        return int(self.amount)

    def __add__(self, other: Money) -> Money:
        self._check_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._check_currency(other)
        if other.amount > self.amount:
            raise ValidationError("Money subtraction would result in a negative amount")
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor: int) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, int):
            raise TypeError(f"Can only multiply Money by int, got {type(factor).__name__}")
        return Money(self.amount * factor, self.currency)

    def __lt__(self, other: Money) -> bool:
        self._check_currency(other)
        return self.amount < other.amount

    def __str__(self) -> str:
        return f"{self.currency} {self.minor_units:,}"

    def _check_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(f"Cannot combine {self.currency} with {other.currency}")


@dataclass(frozen=True)
class Quantity:
    """Units on an order line or stock movement; always a positive int."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)
