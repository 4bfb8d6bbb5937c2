"""Tests for the `flask commissions` CLI group and app wiring."""

from decimal import Decimal

from commission.rate_table import SettingsHelper


def test_healthz(app):
    response = app.test_client().get("/healthz")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_rates_lists_default_table(app):
    result = app.test_cli_runner().invoke(args=["commissions", "rates"])

    assert result.exit_code == 0
    assert "Direct: 165" in result.output
    assert "Total: 1170" in result.output
    assert "WARNING" not in result.output


def test_rates_warns_on_empty_table(app):
    settings = SettingsHelper.get_settings()
    settings.commission_structure = {}
    from extensions import db
    db.session.commit()

    result = app.test_cli_runner().invoke(args=["commissions", "rates"])

    assert "WARNING:" in result.output


def test_settle_with_nothing_pending(app, make_user):
    user = make_user()
    result = app.test_cli_runner().invoke(args=["commissions", "settle", str(user.id)])

    assert result.exit_code == 0
    assert f"Settled 0 for user {user.id}" in result.output


def test_backfill_types(app):
    result = app.test_cli_runner().invoke(args=["commissions", "backfill-types"])

    assert result.exit_code == 0
    assert "Successfully migrated: 0" in result.output


def test_summary(app, make_user, session):
    user = make_user()
    user.wallet_balance = Decimal("235.00")
    session.commit()

    result = app.test_cli_runner().invoke(args=["commissions", "summary", str(user.id)])

    assert result.exit_code == 0
    assert "Balance: 235.00" in result.output


def test_summary_unknown_user(app):
    result = app.test_cli_runner().invoke(args=["commissions", "summary", "999"])

    assert result.exit_code != 0
    assert "User not found: 999" in result.output
