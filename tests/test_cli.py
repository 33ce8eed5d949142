"""Tests for the PachiNavi CLI commands."""

import pytest
from click.testing import CliRunner

from pachinavi.cli.main import cli
from pachinavi.config import CONFIG_ENV_VAR, load_config


@pytest.fixture
def runner(temp_dir, monkeypatch):
    """CLI runner isolated from the user's config."""
    monkeypatch.setenv(CONFIG_ENV_VAR, str(temp_dir / "config.toml"))
    return CliRunner()


@pytest.fixture
def db_args(temp_dir):
    return ["--db", str(temp_dir / "cli.db")]


def invoke(runner, db_args, *args):
    return runner.invoke(cli, [*db_args, *args])


class TestCliBasics:
    """Command discovery and config."""

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        for name in ("approve", "pay", "complete", "cancel", "list", "statement"):
            assert name in result.output

    def test_init_writes_config(self, runner, temp_dir):
        result = runner.invoke(cli, ["init"])
        assert result.exit_code == 0

        settings = load_config(temp_dir / "config.toml")
        assert settings.default_payment_method == "bank transfer"
        assert settings.companies["user-a"].company_name == "Pachitech Co., Ltd."

    def test_invalid_config(self, runner, temp_dir, db_args):
        (temp_dir / "config.toml").write_text("this is not toml\n")
        result = invoke(runner, db_args, "list", "-u", "user-a")
        assert result.exit_code == 1


class TestCliWorkflow:
    """Seeded trades driven through the CLI."""

    def test_seed_is_idempotent(self, runner, db_args):
        first = invoke(runner, db_args, "seed")
        assert first.exit_code == 0
        assert "Seeded 2 trade(s)" in first.output

        second = invoke(runner, db_args, "seed")
        assert second.exit_code == 0
        assert "Seeded 0 trade(s)" in second.output

    def test_list_and_statement(self, runner, db_args):
        invoke(runner, db_args, "seed")

        listing = invoke(runner, db_args, "list", "-u", "user-a")
        assert listing.exit_code == 0
        assert "Trades of user-a" in listing.output
        # user-a buys one seeded trade and sells the other; only the other side is shown.
        assert "Pachitech" not in listing.output

        statement = invoke(runner, db_args, "statement", "T-REQ-5001", "-u", "user-a")
        assert statement.exit_code == 0
        assert "Subtotal" in statement.output

    def test_empty_list(self, runner, db_args):
        result = invoke(runner, db_args, "list", "-u", "nobody")
        assert result.exit_code == 0
        assert "No trades found" in result.output

    def test_approve_pay_complete(self, runner, db_args):
        invoke(runner, db_args, "seed")

        assert invoke(runner, db_args, "approve", "T-REQ-5001", "-u", "user-a").exit_code == 0
        assert invoke(runner, db_args, "pay", "T-REQ-5001", "-u", "user-a").exit_code == 0
        result = invoke(runner, db_args, "complete", "T-REQ-5001", "-u", "user-b")
        assert result.exit_code == 0
        assert "COMPLETED" in result.output

    def test_approve_missing_shipping_fails(self, runner, db_args):
        invoke(runner, db_args, "seed")

        result = invoke(runner, db_args, "approve", "T-REQ-5002", "-u", "user-b")
        assert result.exit_code == 1
        assert "person_name" in result.output

        fixed = invoke(
            runner, db_args, "approve", "T-REQ-5002", "-u", "user-b", "--person", "Hanako Sato"
        )
        assert fixed.exit_code == 0

    def test_seller_cannot_pay(self, runner, db_args):
        invoke(runner, db_args, "seed")
        invoke(runner, db_args, "approve", "T-REQ-5001", "-u", "user-a")

        result = invoke(runner, db_args, "pay", "T-REQ-5001", "-u", "user-b")
        assert result.exit_code == 1

    def test_cancel(self, runner, db_args):
        invoke(runner, db_args, "seed")
        result = invoke(runner, db_args, "cancel", "T-REQ-5002", "-u", "user-a", "--confirm")
        assert result.exit_code == 0
        assert "CANCELED" in result.output

    def test_shipping_contact_and_messages(self, runner, db_args):
        invoke(runner, db_args, "seed")

        shipping = invoke(
            runner, db_args, "shipping", "T-REQ-5002", "-u", "user-b", "--person", "Ken"
        )
        assert shipping.exit_code == 0

        contact = invoke(runner, db_args, "contact", "T-REQ-5002", "Jiro", "-u", "user-b")
        assert contact.exit_code == 0
        assert "Jiro" in contact.output

        posted = invoke(
            runner, db_args, "messages", "T-REQ-5002", "-u", "user-b", "--post", "Ready"
        )
        assert posted.exit_code == 0
        assert "Ready" in posted.output
