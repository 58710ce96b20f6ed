"""Service layer that composes balance aggregation and debt simplification.

This module provides the read model consumed by the request layer: a group's
balances and suggested settle-up payments, one entry per currency.
"""

import logging
from collections.abc import Iterable
from decimal import Decimal

from .balances import aggregate_balances
from .config import Settings
from .exceptions import LedgerError, UnknownMember
from .models import CurrencySummary, Expense, GroupDebtSummary, MemberDebtSummary
from .simplifier import simplify_debts
from .sources import SnapshotSource
from .splits import DEFAULT_PERCENTAGE_EPSILON

logger = logging.getLogger(__name__)


def summarize_group(
    group_id: int,
    expenses: Iterable[Expense],
    member_ids: Iterable[int],
    percentage_epsilon: Decimal = DEFAULT_PERCENTAGE_EPSILON,
) -> GroupDebtSummary:
    """
    Build the full debt summary for one group snapshot.

    Either the whole summary is returned or an error is raised; a partial
    ledger is never produced.

    Args:
        group_id: Group being summarized
        expenses: The group's expenses
        member_ids: Members known to the group
        percentage_epsilon: Tolerance for percentage splits

    Returns:
        Per-currency balances and suggested payments

    Raises:
        LedgerError: Any aggregation or simplification failure, tagged with
            the group id
    """
    try:
        balances = aggregate_balances(
            group_id, expenses, member_ids, percentage_epsilon=percentage_epsilon
        )
        currencies = {
            currency: CurrencySummary(
                currency=currency,
                debts=simplify_debts(member_balances),
                balances=member_balances,
            )
            for currency, member_balances in balances.items()
        }
    except LedgerError as e:
        e.tag(group_id=group_id)
        raise

    logger.debug(
        f"Summarized group {group_id}: "
        + ", ".join(
            f"{currency}: {len(summary.debts)} payments"
            for currency, summary in currencies.items()
        )
    )

    return GroupDebtSummary(group_id=group_id, currencies=currencies)


def member_summary(summary: GroupDebtSummary, member_id: int) -> MemberDebtSummary:
    """
    Extract one member's "you owe / you are owed" view from a group summary.

    Args:
        summary: A computed group summary
        member_id: Member to report on

    Returns:
        The member's balance per currency and the payments they are part of

    Raises:
        UnknownMember: If the member has no balance in the summary
    """
    balances = summary.member_balances.get(member_id)
    if balances is None:
        if summary.currencies:
            raise UnknownMember(member_id).tag(group_id=summary.group_id)
        # No expenses yet: nobody owes anything
        balances = {}

    owes = []
    owed = []
    for currency_summary in summary.currencies.values():
        for debt in currency_summary.debts:
            if debt.from_member_id == member_id:
                owes.append(debt)
            elif debt.to_member_id == member_id:
                owed.append(debt)

    return MemberDebtSummary(member_id=member_id, balances=balances, owes=owes, owed=owed)


class DebtSummaryService:
    """Loads group snapshots and turns them into debt summaries."""

    def __init__(self, settings: Settings, source: SnapshotSource):
        """Initialize the debt summary service."""
        self.settings = settings
        self.source = source

    def get_group_summary(self, group_id: int) -> GroupDebtSummary:
        """
        Load a group's snapshot and summarize it.

        Args:
            group_id: Group to summarize

        Returns:
            The group's debt summary
        """
        try:
            snapshot = self.source.load_snapshot(group_id)
        except LedgerError as e:
            e.tag(group_id=group_id)
            raise

        return summarize_group(
            group_id,
            snapshot.expenses,
            snapshot.member_ids,
            percentage_epsilon=self.settings.percentage_epsilon,
        )

    def get_member_summary(self, group_id: int, member_id: int) -> MemberDebtSummary:
        """Summarize a group and return one member's view of it."""
        return member_summary(self.get_group_summary(group_id), member_id)
