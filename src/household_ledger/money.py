"""Fixed-point money type.

Amounts are held as integers in the currency's minor unit (cents for EUR/USD)
and are never converted to floating point. Every binary operation checks that
both operands share a currency.
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal
from fractions import Fraction

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from .exceptions import CurrencyMismatch

CURRENCY_PATTERN = r"^[A-Z]{3}$"


def round_half_away_from_zero(value: Fraction) -> int:
    """
    Round an exact fraction to the nearest integer, ties away from zero.

    Args:
        value: Exact rational value

    Returns:
        Nearest integer (2.5 -> 3, -2.5 -> -3)
    """
    quotient, remainder = divmod(abs(value.numerator), value.denominator)
    if 2 * remainder >= value.denominator:
        quotient += 1
    return quotient if value >= 0 else -quotient


def to_minor_units(amount: Decimal, exponent: int = 2) -> int:
    """
    Convert a Decimal major-unit amount to integer minor units.
    Uses ROUND_HALF_UP (half away from zero) for consistency.

    Args:
        amount: Amount in major units, e.g. Decimal("12.34")
        exponent: Number of minor-unit digits for the currency

    Returns:
        Amount in minor units (integer)
    """
    if not isinstance(amount, Decimal):
        raise TypeError(
            f"Expected Decimal, got {type(amount).__name__}; "
            f"floats are not accepted for money"
        )
    scaled = amount.scaleb(exponent)
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class Money(BaseModel):
    """An integer amount of minor units in a single currency."""

    model_config = ConfigDict(frozen=True)

    amount: StrictInt
    currency: str = Field(pattern=CURRENCY_PATTERN)

    @classmethod
    def zero(cls, currency: str) -> "Money":
        return cls(amount=0, currency=currency)

    def _check_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise CurrencyMismatch(self.currency, other.currency)

    def _with_amount(self, amount: int) -> "Money":
        return Money(amount=amount, currency=self.currency)

    def is_zero(self) -> bool:
        return self.amount == 0

    def is_positive(self) -> bool:
        return self.amount > 0

    def is_negative(self) -> bool:
        return self.amount < 0

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self._with_amount(self.amount + other.amount)

    def __sub__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self._with_amount(self.amount - other.amount)

    def __neg__(self) -> "Money":
        return self._with_amount(-self.amount)

    def __abs__(self) -> "Money":
        return self._with_amount(abs(self.amount))

    def __mul__(self, factor: int) -> "Money":
        if isinstance(factor, bool) or not isinstance(factor, int):
            return NotImplemented
        return self._with_amount(self.amount * factor)

    __rmul__ = __mul__

    def __truediv__(self, divisor: int) -> "Money":
        """Divide by an integer, rounding half away from zero."""
        if isinstance(divisor, bool) or not isinstance(divisor, int):
            return NotImplemented
        if divisor == 0:
            raise ZeroDivisionError("Money division by zero")
        return self._with_amount(
            round_half_away_from_zero(Fraction(self.amount, divisor))
        )

    def __lt__(self, other: "Money") -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self.amount < other.amount

    def __le__(self, other: "Money") -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: "Money") -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: "Money") -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return self.amount >= other.amount


def sum_money(values: Iterable[Money], currency: str) -> Money:
    """Sum Money values starting from zero in the given currency."""
    total = Money.zero(currency)
    for value in values:
        total = total + value
    return total
