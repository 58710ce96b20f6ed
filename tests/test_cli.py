"""Tests for the household-ledger CLI."""

import json

import pytest
from typer.testing import CliRunner

from household_ledger.cli import app
from household_ledger.sources import JsonSnapshotSource

runner = CliRunner()


def flat(output: str) -> str:
    """Collapse whitespace so wrapped console lines can be matched."""
    return " ".join(output.split())


def write_snapshot(path, expenses):
    """Write a two-member group 1 snapshot with the given expenses."""
    data = {
        "group_id": 1,
        "members": [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}],
        "expenses": expenses,
    }
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


MISMATCHED_EXACT = {
    "id": 5,
    "group_id": 1,
    "payer_id": 1,
    "total": {"amount": 1100, "currency": "USD"},
    "policy": "exact",
    "splits": [
        {"member_id": 1, "amount": {"amount": 500, "currency": "USD"}},
        {"member_id": 2, "amount": {"amount": 500, "currency": "USD"}},
    ],
}


@pytest.fixture
def snapshot_file(tmp_path):
    """Write a small two-currency group snapshot to disk."""
    data = {
        "group_id": 7,
        "members": [
            {"id": 1, "name": "Alice"},
            {"id": 2, "name": "Bob"},
        ],
        "expenses": [
            {
                "id": 1,
                "group_id": 7,
                "payer_id": 1,
                "total": {"amount": 1000, "currency": "USD"},
                "description": "Dinner",
                "splits": [{"member_id": 1}, {"member_id": 2}],
            },
            {
                "id": 2,
                "group_id": 7,
                "payer_id": 2,
                "total": {"amount": 300, "currency": "EUR"},
                "description": "Taxi",
                "policy": "percentage",
                "splits": [
                    {"member_id": 1, "percentage": "50"},
                    {"member_id": 2, "percentage": "50"},
                ],
            },
        ],
    }
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestSummaryCommand:
    """Test the summary command."""

    def test_group_summary(self, snapshot_file):
        result = runner.invoke(app, ["summary", str(snapshot_file)])

        assert result.exit_code == 0
        assert "Group 7" in flat(result.output)
        assert "Suggested Payments (USD)" in flat(result.output)
        assert "Suggested Payments (EUR)" in flat(result.output)
        assert "5.00 USD" in flat(result.output)
        assert "1.50 EUR" in flat(result.output)

    def test_member_view(self, snapshot_file):
        result = runner.invoke(app, ["summary", str(snapshot_file), "--member", "2"])

        assert result.exit_code == 0
        assert "You owe Alice" in flat(result.output)
        assert "Alice owes you" in flat(result.output)

    def test_missing_snapshot(self, tmp_path):
        result = runner.invoke(app, ["summary", str(tmp_path / "missing.json")])

        assert result.exit_code == 1
        assert "Error" in flat(result.output)

    def test_invalid_split_reports_error(self, tmp_path):
        path = write_snapshot(tmp_path / "bad.json", [MISMATCHED_EXACT])

        result = runner.invoke(app, ["summary", str(path)])

        assert result.exit_code == 1
        assert "expense 5" in flat(result.output)

    def test_reads_snapshot_once(self, snapshot_file, monkeypatch):
        """Names and balances come from the same parsed snapshot."""
        calls = []
        original_read = JsonSnapshotSource.read

        def counting_read(self):
            calls.append(self.path)
            return original_read(self)

        monkeypatch.setattr(JsonSnapshotSource, "read", counting_read)

        result = runner.invoke(app, ["summary", str(snapshot_file)])

        assert result.exit_code == 0
        assert len(calls) == 1


class TestSplitsCommand:
    """Test the splits command."""

    def test_lists_resolved_shares(self, snapshot_file):
        result = runner.invoke(app, ["splits", str(snapshot_file)])

        assert result.exit_code == 0
        assert "Resolved Splits" in flat(result.output)
        assert "Dinner" in flat(result.output)
        assert "percentage" in flat(result.output)

    def test_invalid_split_names_expense(self, tmp_path):
        path = write_snapshot(tmp_path / "bad.json", [MISMATCHED_EXACT])

        result = runner.invoke(app, ["splits", str(path)])

        assert result.exit_code == 1
        assert "group 1, expense 5" in flat(result.output)
