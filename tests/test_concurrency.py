"""Concurrent purchases that share an ancestor."""

import threading
from decimal import Decimal

from commission.engine import CommissionEngine, Purchase
from commission.rate_table import SettingsHelper
from extensions import db
from models import Commission, Product, Transaction, TransactionStatus, TransactionType, User

BUYERS = 8


def seed_network(now):
    SettingsHelper.update_commission_structure({0: 165})

    sponsor = User(email="sponsor@example.com", first_name="Shared", last_name="Sponsor",
                   is_activated=True, activation_date=now, last_purchase_date=now)
    product = Product(name="Herbal Pack", cost=Decimal("200.00"), selling_price=Decimal("1500.00"))
    db.session.add_all([sponsor, product])
    db.session.flush()

    purchases = []
    for n in range(BUYERS):
        buyer = User(email=f"buyer{n}@example.com", first_name=f"Buyer{n}", last_name="Test",
                     sponsor_id=sponsor.id, level=1, is_activated=True,
                     activation_date=now, last_purchase_date=now)
        db.session.add(buyer)
        db.session.flush()
        transaction = Transaction(user_id=buyer.id, product_id=product.id, amount=product.selling_price,
                                  type=TransactionType.PURCHASE.value,
                                  status=TransactionStatus.COMPLETED.value)
        db.session.add(transaction)
        db.session.flush()
        purchases.append(Purchase(buyer.id, product.id, transaction.id))

    db.session.commit()
    return sponsor.id, purchases


def test_parallel_distributions_never_lose_a_credit(file_app, now):
    app = file_app("concurrent.db")
    with app.app_context():
        db.create_all()
        sponsor_id, purchases = seed_network(now)

    errors = []
    start = threading.Barrier(len(purchases))

    def run(purchase):
        with app.app_context():
            start.wait()
            try:
                CommissionEngine.distribute(purchase)
            except Exception as exc:
                errors.append(exc)

    threads = [threading.Thread(target=run, args=(purchase,)) for purchase in purchases]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert errors == []
    with app.app_context():
        sponsor = db.session.get(User, sponsor_id)
        assert sponsor.wallet_balance == Decimal("165") * BUYERS
        assert sponsor.wallet_total_earned == Decimal("165") * BUYERS
        assert Commission.query.filter_by(to_user_id=sponsor_id).count() == BUYERS
