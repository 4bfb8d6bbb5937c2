# commission/purchase.py
import math
from decimal import Decimal
from datetime import datetime, timezone
from typing import Dict, Any

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import Product, RewardPoint, Transaction, TransactionStatus, TransactionType
from commission.directory import UserDirectory
from commission.engine import CommissionEngine, Purchase
from commission.exceptions import NotFoundError


class PurchaseWorkflow:
    """
    Completes a product purchase and then hands it to the commission engine.
    Activation and last_purchase_date are committed before distribution, so
    a first purchase already counts the buyer as activated.
    """

    @staticmethod
    def reward_points_for(selling_price: Decimal) -> int:
        rate = Decimal(str(current_app.config.get("REWARD_POINTS_RATE", "0.01")))
        return math.floor(Decimal(selling_price) * rate)

    @staticmethod
    def complete_purchase(user_id: int, product_id: int) -> Dict[str, Any]:
        user = UserDirectory.find_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)

        product = db.session.get(Product, product_id)
        if not product or not product.is_active:
            raise NotFoundError("Product", product_id)

        now = datetime.now(timezone.utc)
        was_activated = user.is_activated

        try:
            transaction = Transaction(
                user_id=user.id,
                product_id=product.id,
                amount=product.selling_price,
                type=TransactionType.PURCHASE.value,
                status=TransactionStatus.COMPLETED.value,
            )
            db.session.add(transaction)
            db.session.flush()

            if not user.is_activated:
                user.is_activated = True
                user.activation_date = now
            user.last_purchase_date = now

            points = PurchaseWorkflow.reward_points_for(product.selling_price)
            if points > 0:
                user.reward_points_balance = (user.reward_points_balance or 0) + points
                user.reward_points_total_earned = (user.reward_points_total_earned or 0) + points
                db.session.add(RewardPoint(
                    user_id=user.id,
                    points=points,
                    type='earned',
                    source='purchase',
                    description=f"Earned {points} points from purchase: {product.name}",
                    related_transaction_id=transaction.id,
                    related_product_id=product.id,
                ))

            db.session.commit()

        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception(f"Purchase failed for user {user_id}, product {product_id}")
            raise

        current_app.logger.info(
            f"Purchase {transaction.id} completed: user {user.id}, product {product.id}, "
            f"amount {product.selling_price}, points {points}"
        )

        commissions = CommissionEngine.distribute(Purchase(
            buyer_id=user.id,
            product_id=product.id,
            transaction_id=transaction.id,
            selling_price=Decimal(product.selling_price),
        ))

        return {
            'transaction': transaction,
            'activated': not was_activated and user.is_activated,
            'reward_points': points,
            'commissions': commissions,
        }
