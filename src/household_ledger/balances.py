"""Fold a group's expenses into per-member, per-currency net balances."""

from collections.abc import Iterable
from decimal import Decimal

from .exceptions import ForeignExpense, LedgerError, UnbalancedLedger, UnknownMember
from .models import Expense
from .money import Money
from .splits import DEFAULT_PERCENTAGE_EPSILON, resolve_splits

Balances = dict[int, Money]  # member_id -> signed balance, one currency


def aggregate_balances(
    group_id: int,
    expenses: Iterable[Expense],
    member_ids: Iterable[int],
    percentage_epsilon: Decimal = DEFAULT_PERCENTAGE_EPSILON,
) -> dict[str, Balances]:
    """
    Compute every member's net balance in every observed currency.

    The payer of an expense is credited the full total; each participant is
    debited their resolved share. A positive balance means the group owes the
    member, a negative one means the member owes the group. The result is a
    fresh mapping built from the snapshot alone, so the outcome does not
    depend on expense order.

    Args:
        group_id: Group being summarized
        expenses: The group's expenses (already filtered to the group)
        member_ids: Members known to the group
        percentage_epsilon: Tolerance passed to split resolution

    Returns:
        currency -> member_id -> balance. Currencies and members are sorted;
        every known member appears under every observed currency.

    Raises:
        ForeignExpense: If an expense belongs to another group
        UnknownMember: If an expense references a member outside the group
        SplitError: If an expense's splits cannot be resolved (tagged with
            the expense id)
    """
    known = set(member_ids)
    totals: dict[str, dict[int, int]] = {}

    for expense in expenses:
        if expense.group_id != group_id:
            raise ForeignExpense(
                f"Expense belongs to group {expense.group_id}, not {group_id}"
            ).tag(expense_id=expense.id)
        if expense.payer_id not in known:
            raise UnknownMember(expense.payer_id).tag(expense_id=expense.id)

        try:
            resolved = resolve_splits(expense, percentage_epsilon)
        except LedgerError as e:
            e.tag(expense_id=expense.id)
            raise

        for share in resolved:
            if share.member_id not in known:
                raise UnknownMember(share.member_id).tag(expense_id=expense.id)

        per_member = totals.setdefault(expense.currency, {})
        per_member[expense.payer_id] = (
            per_member.get(expense.payer_id, 0) + expense.total.amount
        )
        for share in resolved:
            per_member[share.member_id] = (
                per_member.get(share.member_id, 0) - share.amount.amount
            )

    balances: dict[str, Balances] = {}
    for currency in sorted(totals):
        per_member = totals[currency]
        net = sum(per_member.values())
        if net != 0:
            raise UnbalancedLedger(
                f"{currency} balances sum to {net} instead of zero"
            ).tag(group_id=group_id)
        balances[currency] = {
            member_id: Money(amount=per_member.get(member_id, 0), currency=currency)
            for member_id in sorted(known)
        }

    return balances
