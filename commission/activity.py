# commission/activity.py
import math
import logging
from decimal import Decimal, InvalidOperation
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from flask import current_app, has_app_context
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import User, Transaction, TransactionType, TransactionStatus
from commission.exceptions import NotFoundError, InvalidAmountError

logger = logging.getLogger(__name__)

ACTIVITY_PERIOD_DAYS = 30
SECONDS_PER_DAY = 86400


def _activity_period_days() -> int:
    if has_app_context():
        return int(current_app.config.get("ACTIVITY_PERIOD_DAYS", ACTIVITY_PERIOD_DAYS))
    return ACTIVITY_PERIOD_DAYS


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they were written as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def days_since_last_purchase(user: User, as_of: Optional[datetime] = None) -> Optional[float]:
    if not user.last_purchase_date:
        return None
    as_of = _as_utc(as_of or datetime.now(timezone.utc))
    elapsed = as_of - _as_utc(user.last_purchase_date)
    return elapsed.total_seconds() / SECONDS_PER_DAY


def is_user_active(user: User, as_of: Optional[datetime] = None) -> bool:
    """Active means purchased (or paid maintenance) within the activity period."""
    days = days_since_last_purchase(user, as_of)
    if days is None:
        return False
    return days <= _activity_period_days()


def days_until_inactive(user: User, as_of: Optional[datetime] = None) -> Optional[int]:
    """None when the user never purchased, otherwise whole days left (never negative)."""
    days = days_since_last_purchase(user, as_of)
    if days is None:
        return None
    return max(0, math.ceil(_activity_period_days() - days))


def check_activity(user_id: int, as_of: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Report activity without changing anything. Users are never deactivated
    here; distribution checks activity itself so a maintenance fee can
    still restore eligibility.
    """
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User", user_id)

    return {
        'is_active': is_user_active(user, as_of),
        'days_until_inactive': days_until_inactive(user, as_of),
    }


def process_maintenance_fee(user_id: int, amount) -> Transaction:
    """Record a maintenance payment and refresh last_purchase_date to now."""
    try:
        amount = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmountError(f"Invalid maintenance fee amount: {amount!r}")
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountError(f"Invalid maintenance fee amount: {amount}")

    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User", user_id)

    try:
        transaction = Transaction(
            user_id=user.id,
            amount=amount,
            type=TransactionType.MAINTENANCE.value,
            status=TransactionStatus.COMPLETED.value,
        )
        db.session.add(transaction)
        user.last_purchase_date = datetime.now(timezone.utc)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception(f"Maintenance fee failed for user {user_id}")
        raise

    logger.info(f"Maintenance fee {amount} processed for user {user_id}")
    return transaction
