"""Greedy min-cash-flow debt simplification.

Given net balances for one currency, produce point-to-point payments that
settle everyone. The largest debtor is always matched against the largest
creditor. This is not guaranteed to reach the true minimum number of
transactions (that is NP-hard in general), but it never needs more than
n - 1 payments for n non-zero balances and is optimal for two parties.
"""

import heapq
from collections.abc import Mapping

from .exceptions import UnbalancedLedger, UnknownMember
from .models import Debt
from .money import Money, sum_money


def simplify_debts(balances: Mapping[int, Money]) -> list[Debt]:
    """
    Compute suggested payments that bring every balance to zero.

    Args:
        balances: member_id -> signed balance, all in one currency
            (positive = is owed money, negative = owes money)

    Returns:
        Ordered list of debts. Same input always yields the same list:
        equal amounts are broken by ascending member id.

    Raises:
        CurrencyMismatch: If balances mix currencies
        UnbalancedLedger: If balances don't sum to zero
    """
    if not balances:
        return []

    currency = next(iter(balances.values())).currency
    net = sum_money(balances.values(), currency)
    if not net.is_zero():
        raise UnbalancedLedger(
            f"{currency} balances sum to {net.amount} instead of zero"
        )

    # Max-heaps via negated amounts: (-abs_amount, member_id)
    debtors: list[tuple[int, int]] = []
    creditors: list[tuple[int, int]] = []
    for member_id, balance in balances.items():
        if balance.is_negative():
            debtors.append((balance.amount, member_id))
        elif balance.is_positive():
            creditors.append((-balance.amount, member_id))
    heapq.heapify(debtors)
    heapq.heapify(creditors)

    debts: list[Debt] = []
    while debtors and creditors:
        debt_neg, debtor = heapq.heappop(debtors)
        credit_neg, creditor = heapq.heappop(creditors)

        debt = -debt_neg
        credit = -credit_neg
        transfer = min(debt, credit)

        debts.append(
            Debt(
                from_member_id=debtor,
                to_member_id=creditor,
                amount=Money(amount=transfer, currency=currency),
            )
        )

        if debt > transfer:
            heapq.heappush(debtors, (-(debt - transfer), debtor))
        if credit > transfer:
            heapq.heappush(creditors, (-(credit - transfer), creditor))

    return debts


def apply_debts(balances: Mapping[int, Money], debts: list[Debt]) -> dict[int, Money]:
    """
    Return the balances that remain once the given payments are made.

    A payment raises the payer's balance and lowers the recipient's.

    Raises:
        UnknownMember: If a debt references a member without a balance
        CurrencyMismatch: If a debt is in another currency
    """
    remaining = dict(balances)
    for debt in debts:
        for member_id in (debt.from_member_id, debt.to_member_id):
            if member_id not in remaining:
                raise UnknownMember(member_id)
        remaining[debt.from_member_id] = remaining[debt.from_member_id] + debt.amount
        remaining[debt.to_member_id] = remaining[debt.to_member_id] - debt.amount
    return remaining
