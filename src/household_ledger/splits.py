"""Split resolution: turn an expense's raw splits into exact owed shares.

Every policy produces shares that sum exactly to the expense total. Rounding
residue is handed out one minor unit at a time, so money is never lost or
created by rounding.
"""

from decimal import Decimal
from fractions import Fraction

from .exceptions import (
    InvalidPercentageSum,
    InvalidSplit,
    InvalidWeights,
    SplitSumMismatch,
)
from .models import Expense, ResolvedSplit, SplitPolicy
from .money import Money, round_half_away_from_zero, sum_money

DEFAULT_PERCENTAGE_EPSILON = Decimal("0.01")  # one basis point

HUNDRED = Decimal("100")


def distribute_equal(total: int, count: int) -> list[int]:
    """
    Divide an amount evenly, giving leftover units to the first participants.

    Args:
        total: Amount in minor units (non-negative)
        count: Number of participants

    Returns:
        Per-participant amounts in input order, e.g. (100, 3) -> [34, 33, 33]
    """
    if count <= 0:
        return []
    base, remainder = divmod(total, count)
    return [base + (1 if index < remainder else 0) for index in range(count)]


def apportion(total: int, raw_shares: list[Fraction]) -> list[int]:
    """
    Round exact shares to integers using largest-remainder apportionment.

    Each share is first rounded half away from zero. The difference between
    the rounded sum and ``total`` is then corrected one unit at a time: a
    positive remainder goes to the shares that were rounded down the most,
    a negative remainder is taken from the shares rounded up the most. On a
    tie the earlier entry keeps the larger share. Zero-weight entries never
    receive a unit and no share drops below zero.

    Args:
        total: Target sum in minor units
        raw_shares: Exact (unrounded) shares, in input order

    Returns:
        Integer shares summing exactly to ``total``
    """
    shares = [round_half_away_from_zero(raw) for raw in raw_shares]
    remainder = total - sum(shares)
    if remainder == 0:
        return shares

    residues = [raw - share for raw, share in zip(raw_shares, shares, strict=True)]
    indices = range(len(shares))
    if remainder > 0:
        step = 1
        order = sorted(indices, key=lambda i: (-residues[i], i))
    else:
        step = -1
        order = sorted(indices, key=lambda i: (residues[i], -i))

    while remainder != 0:
        progressed = False
        for i in order:
            if remainder == 0:
                break
            if step > 0 and raw_shares[i] <= 0:
                continue
            if step < 0 and shares[i] <= 0:
                continue
            shares[i] += step
            remainder -= step
            progressed = True
        if not progressed:
            raise InvalidSplit(
                f"Cannot apportion {total} minor units across "
                f"{len(shares)} participants"
            )

    return shares


def _check_structure(expense: Expense) -> None:
    if not expense.splits:
        raise InvalidSplit("At least one participant must be included")

    member_ids = expense.participant_ids
    if len(set(member_ids)) != len(member_ids):
        raise InvalidSplit("Duplicate members are not allowed in a split")

    if expense.is_settlement:
        if len(expense.splits) != 1:
            raise InvalidSplit("Settlement must have exactly one recipient")
        if expense.splits[0].member_id == expense.payer_id:
            raise InvalidSplit("Settlement recipient must differ from the payer")


def _resolve_exact(expense: Expense) -> list[int]:
    amounts: list[Money] = []
    for split in expense.splits:
        if split.amount is None:
            raise InvalidSplit(f"Exact split for member {split.member_id} has no amount")
        if split.amount.is_negative():
            raise InvalidSplit(
                f"Split amount for member {split.member_id} cannot be negative"
            )
        amounts.append(split.amount)

    # sum_money raises CurrencyMismatch for a split in another currency
    delta = expense.total - sum_money(amounts, expense.currency)
    if not delta.is_zero():
        raise SplitSumMismatch(delta)
    return [amount.amount for amount in amounts]


def _resolve_percentage(expense: Expense, epsilon: Decimal) -> list[int]:
    percentages: list[Decimal] = []
    for split in expense.splits:
        if split.percentage is None:
            raise InvalidSplit(
                f"Percentage split for member {split.member_id} has no percentage"
            )
        if split.percentage < 0 or split.percentage > HUNDRED:
            raise InvalidPercentageSum(
                split.percentage,
                f"Percentage for member {split.member_id} must be between "
                f"0 and 100 (got {split.percentage})",
            )
        percentages.append(split.percentage)

    total_pct = sum(percentages, Decimal("0"))
    if abs(total_pct - HUNDRED) > epsilon:
        raise InvalidPercentageSum(total_pct)

    total = expense.total.amount
    raw = [Fraction(total) * Fraction(pct) / 100 for pct in percentages]
    return apportion(total, raw)


def _resolve_shares(expense: Expense) -> list[int]:
    weights: list[int] = []
    for split in expense.splits:
        if split.weight is None or split.weight <= 0:
            raise InvalidWeights(
                f"Weight for member {split.member_id} must be a positive integer "
                f"(got {split.weight})"
            )
        weights.append(split.weight)

    weight_sum = sum(weights)
    if weight_sum == 0:
        raise InvalidWeights("Weights must not sum to zero")

    total = expense.total.amount
    raw = [Fraction(total * weight, weight_sum) for weight in weights]
    return apportion(total, raw)


def resolve_splits(
    expense: Expense,
    percentage_epsilon: Decimal = DEFAULT_PERCENTAGE_EPSILON,
) -> list[ResolvedSplit]:
    """
    Compute each participant's owed share of an expense.

    Args:
        expense: The expense to resolve
        percentage_epsilon: Allowed deviation of percentage sums from 100

    Returns:
        One ResolvedSplit per split, in input order, summing exactly to
        ``expense.total``

    Raises:
        InvalidSplit: If the split list is empty, has duplicates, or is
            missing policy data
        SplitSumMismatch: If exact amounts don't add up to the total
        InvalidPercentageSum: If percentages are out of range or don't sum to 100
        InvalidWeights: If share weights are not positive
        CurrencyMismatch: If an exact amount is in another currency
    """
    _check_structure(expense)

    if expense.policy == SplitPolicy.EQUAL:
        amounts = distribute_equal(expense.total.amount, len(expense.splits))
    elif expense.policy == SplitPolicy.EXACT:
        amounts = _resolve_exact(expense)
    elif expense.policy == SplitPolicy.PERCENTAGE:
        amounts = _resolve_percentage(expense, percentage_epsilon)
    elif expense.policy == SplitPolicy.SHARES:
        amounts = _resolve_shares(expense)
    else:
        raise InvalidSplit(f"Unsupported split policy: {expense.policy}")

    resolved = [
        ResolvedSplit(
            member_id=split.member_id,
            amount=Money(amount=amount, currency=expense.currency),
        )
        for split, amount in zip(expense.splits, amounts, strict=True)
    ]

    # Final verification
    assert sum(amounts) == expense.total.amount, "Split resolution lost money"

    return resolved
