"""Tests for balance aggregation."""

import random

import pytest

from household_ledger.balances import aggregate_balances
from household_ledger.exceptions import ForeignExpense, SplitSumMismatch, UnknownMember
from household_ledger.models import Expense, Split, SplitPolicy
from household_ledger.money import Money

GROUP_ID = 10
ALICE, BOB, CAROL = 1, 2, 3
MEMBERS = {ALICE, BOB, CAROL}


def make_expense(
    id: int,
    payer_id: int,
    total: int,
    participants: list[int],
    currency: str = "USD",
    group_id: int = GROUP_ID,
    is_settlement: bool = False,
) -> Expense:
    """Create an equally split expense for testing."""
    return Expense(
        id=id,
        group_id=group_id,
        payer_id=payer_id,
        total=Money(amount=total, currency=currency),
        splits=[Split(member_id=m) for m in participants],
        is_settlement=is_settlement,
    )


def as_ints(balances: dict) -> dict:
    return {
        currency: {member: money.amount for member, money in per_member.items()}
        for currency, per_member in balances.items()
    }


class TestAggregation:
    """Test how expenses fold into balances."""

    def test_two_party_equal_split(self):
        """A pays 1000 split equally with B."""
        expenses = [make_expense(1, ALICE, 1000, [ALICE, BOB])]

        balances = aggregate_balances(GROUP_ID, expenses, {ALICE, BOB})

        assert as_ints(balances) == {"USD": {ALICE: 500, BOB: -500}}

    def test_payer_need_not_participate(self):
        expenses = [make_expense(1, ALICE, 900, [BOB, CAROL])]

        balances = aggregate_balances(GROUP_ID, expenses, MEMBERS)

        assert as_ints(balances) == {"USD": {ALICE: 900, BOB: -450, CAROL: -450}}

    def test_members_without_expenses_get_zero(self):
        expenses = [make_expense(1, ALICE, 1000, [ALICE, BOB])]

        balances = aggregate_balances(GROUP_ID, expenses, MEMBERS)

        assert balances["USD"][CAROL] == Money.zero("USD")

    def test_no_expenses(self):
        assert aggregate_balances(GROUP_ID, [], MEMBERS) == {}

    def test_currencies_kept_separate(self):
        expenses = [
            make_expense(1, ALICE, 1000, [ALICE, BOB]),
            make_expense(2, BOB, 3000, [ALICE, BOB, CAROL], currency="EUR"),
        ]

        balances = aggregate_balances(GROUP_ID, expenses, MEMBERS)

        assert list(balances) == ["EUR", "USD"]
        assert as_ints(balances) == {
            "EUR": {ALICE: -1000, BOB: 2000, CAROL: -1000},
            "USD": {ALICE: 500, BOB: -500, CAROL: 0},
        }

    def test_settlement_payment_clears_debt(self):
        """A recorded settle-up from B to A brings both back to zero."""
        expenses = [
            make_expense(1, ALICE, 1000, [ALICE, BOB]),
            make_expense(2, BOB, 500, [ALICE], is_settlement=True),
        ]

        balances = aggregate_balances(GROUP_ID, expenses, {ALICE, BOB})

        assert as_ints(balances) == {"USD": {ALICE: 0, BOB: 0}}

    def test_order_independent(self):
        expenses = [
            make_expense(1, ALICE, 1000, [ALICE, BOB, CAROL]),
            make_expense(2, BOB, 777, [ALICE, CAROL]),
            make_expense(3, CAROL, 101, [BOB]),
        ]

        forward = aggregate_balances(GROUP_ID, expenses, MEMBERS)
        backward = aggregate_balances(GROUP_ID, list(reversed(expenses)), MEMBERS)

        assert forward == backward


class TestAggregationErrors:
    """Test error reporting."""

    def test_unknown_payer(self):
        expenses = [make_expense(7, 99, 1000, [ALICE, BOB])]

        with pytest.raises(UnknownMember) as exc_info:
            aggregate_balances(GROUP_ID, expenses, MEMBERS)

        assert exc_info.value.member_id == 99
        assert exc_info.value.expense_id == 7

    def test_unknown_participant(self):
        expenses = [make_expense(8, ALICE, 1000, [ALICE, 42])]

        with pytest.raises(UnknownMember) as exc_info:
            aggregate_balances(GROUP_ID, expenses, MEMBERS)

        assert exc_info.value.member_id == 42
        assert exc_info.value.expense_id == 8

    def test_split_error_tagged_with_expense_id(self):
        bad = Expense(
            id=5,
            group_id=GROUP_ID,
            payer_id=ALICE,
            total=Money(amount=1100, currency="USD"),
            policy=SplitPolicy.EXACT,
            splits=[
                Split(member_id=ALICE, amount=Money(amount=500, currency="USD")),
                Split(member_id=BOB, amount=Money(amount=500, currency="USD")),
            ],
        )
        expenses = [make_expense(1, ALICE, 1000, [ALICE, BOB]), bad]

        with pytest.raises(SplitSumMismatch) as exc_info:
            aggregate_balances(GROUP_ID, expenses, MEMBERS)

        assert exc_info.value.expense_id == 5
        assert exc_info.value.delta.amount == 100
        assert "expense 5" in str(exc_info.value)

    def test_expense_from_other_group(self):
        expenses = [make_expense(3, ALICE, 1000, [ALICE, BOB], group_id=11)]

        with pytest.raises(ForeignExpense) as exc_info:
            aggregate_balances(GROUP_ID, expenses, MEMBERS)

        assert exc_info.value.expense_id == 3


class TestZeroSumInvariant:
    """Randomized check of the closed-ledger invariant."""

    def test_balances_sum_to_zero(self):
        rng = random.Random("zero-sum")
        members = list(range(1, 9))
        for _ in range(100):
            expenses = []
            for expense_id in range(rng.randint(1, 25)):
                participants = rng.sample(members, rng.randint(1, len(members)))
                expenses.append(
                    make_expense(
                        expense_id,
                        rng.choice(members),
                        rng.randint(1, 1_000_000),
                        participants,
                        currency=rng.choice(["USD", "EUR", "GBP"]),
                    )
                )

            balances = aggregate_balances(GROUP_ID, expenses, members)

            for per_member in balances.values():
                assert sum(m.amount for m in per_member.values()) == 0
                assert set(per_member) == set(members)
