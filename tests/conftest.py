"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

# Environment must be in place before config.py / logger.py are imported
os.environ.setdefault("SECRET_KEY", "test_secret_key_for_testing_only")
os.environ.setdefault("FLASK_ENV", "testing")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="nmsystem-logs-"))

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from app import create_app
from config import TestingConfig
from extensions import db
from models import Product, Transaction, TransactionStatus, TransactionType, User


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def session(app):
    return db.session


@pytest.fixture
def now():
    return datetime.now(timezone.utc)


@pytest.fixture
def make_user(session, now):
    counter = {"n": 0}

    def _make_user(sponsor=None, activated=True, days_since_purchase=1, **kwargs):
        counter["n"] += 1
        n = counter["n"]
        last_purchase = None
        if days_since_purchase is not None:
            last_purchase = now - timedelta(days=days_since_purchase)

        user = User(
            email=kwargs.pop("email", f"member{n}@example.com"),
            first_name=kwargs.pop("first_name", f"Member{n}"),
            last_name=kwargs.pop("last_name", "Test"),
            sponsor_id=sponsor.id if sponsor else None,
            level=(sponsor.level + 1) if sponsor else 0,
            is_activated=activated,
            activation_date=now - timedelta(days=60) if activated else None,
            last_purchase_date=last_purchase,
            **kwargs,
        )
        session.add(user)
        session.commit()
        return user

    return _make_user


@pytest.fixture
def make_chain(make_user):
    """Build a straight sponsor line; returns [buyer, sponsor, sponsor's sponsor, ...]."""

    def _make_chain(length, **kwargs):
        top_down = []
        sponsor = None
        for _ in range(length):
            sponsor = make_user(sponsor=sponsor, **kwargs)
            top_down.append(sponsor)
        return list(reversed(top_down))

    return _make_chain


@pytest.fixture
def make_product(session):
    def _make_product(selling_price="1500.00", is_active=True, name="Herbal Pack"):
        product = Product(
            name=name,
            description="Test product",
            cost=Decimal("200.00"),
            selling_price=Decimal(selling_price),
            is_active=is_active,
        )
        session.add(product)
        session.commit()
        return product

    return _make_product


@pytest.fixture
def make_purchase_transaction(session):
    def _make_transaction(user, product):
        transaction = Transaction(
            user_id=user.id,
            product_id=product.id,
            amount=product.selling_price,
            type=TransactionType.PURCHASE.value,
            status=TransactionStatus.COMPLETED.value,
        )
        session.add(transaction)
        session.commit()
        return transaction

    return _make_transaction


@pytest.fixture
def two_level_rates(app):
    from commission.rate_table import SettingsHelper

    return SettingsHelper.update_commission_structure({0: 165, 1: 70})


@pytest.fixture
def file_app(tmp_path):
    """App bound to an on-disk SQLite file; the schema is left to the test."""
    apps = []

    def _file_app(db_name="nmsystem.db"):
        class FileConfig(TestingConfig):
            SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / db_name}"
            SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"timeout": 30}}

        app = create_app(FileConfig)
        apps.append(app)
        return app

    yield _file_app

    for app in apps:
        with app.app_context():
            db.session.remove()
            db.engine.dispose()
