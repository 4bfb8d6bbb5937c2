"""Tests for the 30-day activity rule and maintenance fees."""

from datetime import timedelta
from decimal import Decimal

import pytest

from commission.activity import (
    check_activity,
    days_until_inactive,
    is_user_active,
    process_maintenance_fee,
)
from commission.exceptions import InvalidAmountError, NotFoundError
from models import Transaction, TransactionType


class TestIsUserActive:

    def test_never_purchased_is_inactive(self, make_user):
        user = make_user(days_since_purchase=None)
        assert is_user_active(user) is False
        assert days_until_inactive(user) is None

    def test_recent_purchase_is_active(self, make_user):
        user = make_user(days_since_purchase=10)
        assert is_user_active(user) is True

    def test_thirty_one_days_is_inactive(self, make_user):
        user = make_user(days_since_purchase=31)
        assert is_user_active(user) is False
        assert days_until_inactive(user) == 0

    def test_exactly_thirty_days_is_still_active(self, make_user):
        user = make_user(days_since_purchase=None)
        user.last_purchase_date = user.created_at
        as_of = user.created_at + timedelta(days=30)
        assert is_user_active(user, as_of=as_of) is True
        assert is_user_active(user, as_of=as_of + timedelta(seconds=1)) is False

    def test_days_until_inactive_counts_down(self, make_user, now):
        user = make_user(days_since_purchase=None)
        user.last_purchase_date = now - timedelta(days=10)
        assert days_until_inactive(user, as_of=now) == 20

    def test_partial_day_rounds_up(self, make_user, now):
        user = make_user(days_since_purchase=None)
        user.last_purchase_date = now - timedelta(days=10, hours=12)
        assert days_until_inactive(user, as_of=now) == 20

    def test_activity_period_is_configurable(self, app, make_user):
        app.config["ACTIVITY_PERIOD_DAYS"] = 7
        user = make_user(days_since_purchase=10)
        assert is_user_active(user) is False


class TestCheckActivity:

    def test_reports_without_mutating(self, make_user, session):
        user = make_user(days_since_purchase=45)
        result = check_activity(user.id)

        assert result == {"is_active": False, "days_until_inactive": 0}
        session.refresh(user)
        assert user.is_activated is True

    def test_missing_user(self, app):
        with pytest.raises(NotFoundError):
            check_activity(9999)


class TestMaintenanceFee:

    def test_fee_restores_eligibility(self, make_user, session):
        user = make_user(days_since_purchase=45)
        assert is_user_active(user) is False

        transaction = process_maintenance_fee(user.id, "250.00")

        session.refresh(user)
        assert is_user_active(user) is True
        assert transaction.type == TransactionType.MAINTENANCE.value
        assert transaction.status == "completed"
        assert Decimal(transaction.amount) == Decimal("250.00")
        assert Transaction.query.filter_by(user_id=user.id).count() == 1

    @pytest.mark.parametrize("amount", [0, -5, "abc"])
    def test_rejects_non_positive_amount(self, make_user, amount):
        user = make_user()
        with pytest.raises(InvalidAmountError):
            process_maintenance_fee(user.id, amount)

    def test_missing_user(self, app):
        with pytest.raises(NotFoundError):
            process_maintenance_fee(9999, 100)
