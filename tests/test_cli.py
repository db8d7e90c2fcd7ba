"""Tests for the operator CLI."""

from typer.testing import CliRunner

from spinrewards.cli import app

runner = CliRunner()


class TestAccountCommand:
    def test_shows_account(self, make_account):
        make_account(username="quinn", points=120)

        result = runner.invoke(app, ["account", "quinn@example.com"])

        assert result.exit_code == 0
        assert "quinn" in result.stdout
        assert "120" in result.stdout

    def test_unknown_email(self):
        result = runner.invoke(app, ["account", "ghost@example.com"])
        assert result.exit_code == 1


class TestWithdrawalsCommand:
    def test_empty(self):
        result = runner.invoke(app, ["withdrawals"])

        assert result.exit_code == 0
        assert "No withdrawal requests found" in result.stdout

    def test_lists_pending_requests(self, withdrawals, make_account):
        account = make_account(points=2000)
        withdrawals.request_withdrawal(account.id, 1000, "uid-12345")

        result = runner.invoke(app, ["withdrawals", "--status", "pending"])

        assert result.exit_code == 0
        assert "Withdrawal requests" in result.stdout

    def test_status_filter_excludes_other_dispositions(self, withdrawals, make_account):
        account = make_account(points=2000)
        withdrawals.request_withdrawal(account.id, 1000, "uid-12345")

        result = runner.invoke(app, ["withdrawals", "-s", "completed"])

        assert "No withdrawal requests found" in result.stdout


def test_init_creates_tables():
    result = runner.invoke(app, ["init"])

    assert result.exit_code == 0
    assert "Database initialized" in result.stdout
