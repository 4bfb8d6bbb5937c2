# commission/engine.py
from decimal import Decimal
from datetime import datetime, timezone
from typing import Dict, Any, List, NamedTuple, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from logger import commission_logger
from models import Commission, CommissionStatus, CommissionType, Product, User
from commission.activity import is_user_active
from commission.directory import UserDirectory
from commission.exceptions import NotFoundError, DuplicateDistributionError
from commission.genealogy import GenealogyHelper, MAX_GENEALOGY_DEPTH
from commission.rate_table import CommissionRateTable, MAX_LEVEL


class Purchase(NamedTuple):
    buyer_id: int
    product_id: int
    transaction_id: int
    selling_price: Optional[Decimal] = None


class CommissionEngine:
    """
    Pays fixed per-level commissions up the buyer's sponsor chain and keeps
    the ledger. Wallets are credited straight to balance; the pending stage
    only survives for rows written under the older settle-later scheme.
    """

    @staticmethod
    def distribute(purchase: Purchase, rate_table: Optional[CommissionRateTable] = None,
                   as_of: Optional[datetime] = None) -> List[Commission]:
        """
        Create one paid Commission per eligible ancestor and credit their wallets.

        chain[i] receives the level (i - 1) amount. An ineligible ancestor is
        skipped without renumbering the ancestors above it. The buyer never
        earns from their own purchase. Calling twice for the same transaction
        pays twice unless COMMISSION_REJECT_DUPLICATES is set; guarding against
        that is the caller's job.
        """
        product = db.session.get(Product, purchase.product_id)
        if not product:
            raise NotFoundError("Product", purchase.product_id)

        if current_app.config.get("COMMISSION_REJECT_DUPLICATES", False):
            already = Commission.query.filter_by(transaction_id=purchase.transaction_id).first()
            if already:
                raise DuplicateDistributionError(purchase.transaction_id)

        # Read per call so operator edits apply to the next purchase
        if rate_table is None:
            rate_table = CommissionRateTable.current()

        max_levels = current_app.config.get("COMMISSION_MAX_LEVEL", MAX_GENEALOGY_DEPTH)
        chain = GenealogyHelper.ancestor_chain(purchase.buyer_id, max_levels)
        now = as_of or datetime.now(timezone.utc)

        commissions: List[Commission] = []
        paid_recipients = {purchase.buyer_id}
        total = Decimal('0')

        try:
            for entry in chain[1:]:
                recipient = entry.user
                level = entry.level - 1

                if level > MAX_LEVEL:
                    break

                skip_reason = CommissionEngine._skip_reason(recipient, paid_recipients, now)
                if not skip_reason:
                    amount = rate_table.rate_for(level)
                    if amount == 0:
                        skip_reason = 'zero_rate'

                if skip_reason:
                    current_app.logger.debug(
                        f"Skipping commission for user {recipient.id} at level {level}: {skip_reason}"
                    )
                    continue

                commission = Commission(
                    from_user_id=purchase.buyer_id,
                    to_user_id=recipient.id,
                    product_id=product.id,
                    transaction_id=purchase.transaction_id,
                    level=level,
                    type=CommissionType.for_level(level).value,
                    amount=amount,
                    status=CommissionStatus.PAID.value,
                    paid_at=now,
                )
                db.session.add(commission)

                UserDirectory.increment_wallet(recipient.id, balance=amount, total_earned=amount)

                paid_recipients.add(recipient.id)
                commissions.append(commission)
                total += amount

                commission_logger.info(
                    f"txn={purchase.transaction_id} buyer={purchase.buyer_id} to={recipient.id} "
                    f"level={level} type={commission.type} amount={amount}"
                )

            db.session.commit()

        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception(
                f"Commission distribution failed for transaction {purchase.transaction_id}"
            )
            raise

        current_app.logger.info(
            f"Distributed {len(commissions)} commissions for transaction {purchase.transaction_id} "
            f"(buyer {purchase.buyer_id}, chain {len(chain)}), total: {total}"
        )
        return commissions

    @staticmethod
    def _skip_reason(recipient: User, paid_recipients: set, now: datetime) -> Optional[str]:
        if recipient.id in paid_recipients:
            return 'duplicate_recipient'
        if not recipient.is_activated:
            return 'not_activated'
        if not is_user_active(recipient, now):
            return 'inactive'
        return None

    @staticmethod
    def process_pending_commissions(user_id: int) -> Decimal:
        """
        Settle ledger rows left in 'pending' by the older scheme: mark them paid
        and move their total from wallet.pending to wallet.balance.
        Safe to call repeatedly; returns the amount settled.
        """
        try:
            pending = Commission.query.filter_by(
                to_user_id=user_id,
                status=CommissionStatus.PENDING.value,
            ).with_for_update().all()

            if not pending:
                return Decimal('0')

            now = datetime.now(timezone.utc)
            total_pending = Decimal('0')
            for commission in pending:
                total_pending += Decimal(commission.amount)
                commission.status = CommissionStatus.PAID.value
                commission.paid_at = now

            if total_pending > 0:
                UserDirectory.increment_wallet(user_id, balance=total_pending, pending=-total_pending)

            db.session.commit()

        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception(f"Settling pending commissions failed for user {user_id}")
            raise

        current_app.logger.info(f"Settled {len(pending)} pending commissions for user {user_id}: {total_pending}")
        return total_pending

    @staticmethod
    def get_commission_summary(user_id: int) -> Dict[str, Any]:
        """
        Wallet figures come from the user row, the breakdown from the ledger.
        """
        user = UserDirectory.find_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)

        by_level: Dict[int, Dict[str, Any]] = {}
        direct = {'amount': Decimal('0'), 'count': 0}
        indirect = {'amount': Decimal('0'), 'count': 0}

        for commission in Commission.query.filter_by(to_user_id=user_id).all():
            amount = Decimal(commission.amount)
            commission_type = commission.resolved_type

            bucket = by_level.setdefault(
                commission.level, {'amount': Decimal('0'), 'count': 0, 'type': commission_type}
            )
            bucket['amount'] += amount
            bucket['count'] += 1

            totals = direct if commission_type == CommissionType.DIRECT.value else indirect
            totals['amount'] += amount
            totals['count'] += 1

        wallet = user.wallet
        return {
            'total_earned': wallet['total_earned'],
            'pending': wallet['pending'],
            'balance': wallet['balance'],
            'direct': direct,
            'indirect': indirect,
            'by_level': [
                {'level': level, **data}
                for level, data in sorted(by_level.items())
            ],
        }

    @staticmethod
    def list_commissions(user_id: int, limit: int = 100) -> List[Commission]:
        return (
            Commission.query.filter_by(to_user_id=user_id)
            .order_by(Commission.created_at.desc(), Commission.id.desc())
            .limit(limit)
            .all()
        )
