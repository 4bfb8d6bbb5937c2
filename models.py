# models.py - Canonical Flask-SQLAlchemy models
from datetime import datetime, timezone
from decimal import Decimal
import enum
from sqlalchemy import Index, text
from extensions import db


# ===========================================================
# ENUM DEFINITIONS
# ===========================================================

class TransactionType(enum.Enum):
    PURCHASE = "purchase"
    WITHDRAWAL = "withdrawal"
    MAINTENANCE = "maintenance"


class TransactionStatus(enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class CommissionStatus(enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class CommissionType(enum.Enum):
    DIRECT = "direct"
    INDIRECT = "indirect"

    @classmethod
    def for_level(cls, level: int) -> "CommissionType":
        return cls.DIRECT if level == 0 else cls.INDIRECT


# ===========================================================
# BASE MIXIN FOR COMMON FIELDS
# ===========================================================

class BaseMixin:
    """Provides created_at and updated_at timestamps to inheriting models."""
    created_at = db.Column(db.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(db.DateTime(timezone=True),
                           default=lambda: datetime.now(timezone.utc),
                           onupdate=lambda: datetime.now(timezone.utc))


# ===========================================================
# USER MODEL
# ===========================================================

class User(db.Model, BaseMixin):
    """Member of the genealogy tree: sponsor pointer, activation state, wallet and reward points."""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    first_name = db.Column(db.String(80), nullable=False)
    last_name = db.Column(db.String(80), nullable=False)
    phone = db.Column(db.String(20), nullable=True)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)

    # Genealogy: each node only stores its parent
    sponsor_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    level = db.Column(db.Integer, default=0, nullable=False)  # cached depth, never trusted by tree walks

    is_activated = db.Column(db.Boolean, default=False, nullable=False)
    activation_date = db.Column(db.DateTime(timezone=True), nullable=True)
    last_purchase_date = db.Column(db.DateTime(timezone=True), nullable=True)

    # Wallet
    wallet_balance = db.Column(db.Numeric(18, 2), default=Decimal("0.00"), server_default=text("0.00"), nullable=False)
    wallet_pending = db.Column(db.Numeric(18, 2), default=Decimal("0.00"), server_default=text("0.00"), nullable=False)
    wallet_total_earned = db.Column(db.Numeric(18, 2), default=Decimal("0.00"), server_default=text("0.00"), nullable=False)

    # Reward points
    reward_points_balance = db.Column(db.Integer, default=0, nullable=False)
    reward_points_total_earned = db.Column(db.Integer, default=0, nullable=False)
    reward_points_total_redeemed = db.Column(db.Integer, default=0, nullable=False)

    sponsor = db.relationship('User', remote_side=[id], backref=db.backref('direct_referrals', lazy='dynamic'))

    __table_args__ = (
        Index('idx_user_sponsor', 'sponsor_id'),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def wallet(self) -> dict:
        return {
            "balance": Decimal(self.wallet_balance or 0),
            "pending": Decimal(self.wallet_pending or 0),
            "total_earned": Decimal(self.wallet_total_earned or 0),
        }

    def to_dict(self):
        """Plain data for genealogy callers; no display formatting."""
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "sponsor_id": self.sponsor_id,
            "level": self.level,
            "is_activated": self.is_activated,
            "activation_date": self.activation_date.isoformat() if self.activation_date else None,
            "last_purchase_date": self.last_purchase_date.isoformat() if self.last_purchase_date else None,
        }

    def __repr__(self):
        return f'<User {self.id} {self.email}>'


# ===========================================================
# CATALOG & TRANSACTIONS
# ===========================================================

class Product(db.Model, BaseMixin):
    __tablename__ = 'products'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text)
    cost = db.Column(db.Numeric(18, 2), nullable=False)
    selling_price = db.Column(db.Numeric(18, 2), nullable=False)
    admin_fee = db.Column(db.Numeric(18, 2), default=Decimal("0.00"))
    company_profit = db.Column(db.Numeric(18, 2), default=Decimal("0.00"))
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    __table_args__ = (
        db.CheckConstraint('cost >= 0', name='chk_product_cost'),
        db.CheckConstraint('selling_price >= 0', name='chk_product_selling_price'),
    )


class Transaction(db.Model, BaseMixin):
    __tablename__ = 'transactions'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('products.id', ondelete='SET NULL'), nullable=True)
    amount = db.Column(db.Numeric(18, 2), nullable=False)
    type = db.Column(db.String(20), nullable=False)  # purchase, withdrawal, maintenance
    status = db.Column(db.String(20), default=TransactionStatus.PENDING.value, nullable=False)

    user = db.relationship('User', backref=db.backref('transactions', lazy='dynamic'))
    product = db.relationship('Product')

    __table_args__ = (
        Index('idx_transaction_user_type', 'user_id', 'type'),
    )


class RewardPoint(db.Model, BaseMixin):
    __tablename__ = 'reward_points'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    points = db.Column(db.Integer, nullable=False)  # negative for redemptions
    type = db.Column(db.String(20), nullable=False)  # earned, redeemed
    source = db.Column(db.String(20), nullable=False)  # purchase, redemption, bonus, adjustment
    description = db.Column(db.String(255), nullable=False)
    related_transaction_id = db.Column(db.Integer, db.ForeignKey('transactions.id', ondelete='SET NULL'), nullable=True)
    related_product_id = db.Column(db.Integer, db.ForeignKey('products.id', ondelete='SET NULL'), nullable=True)


# ===========================================================
# COMMISSION LEDGER
# ===========================================================

class Commission(db.Model, BaseMixin):
    """Append-only record of one payout to one ancestor for one purchase."""
    __tablename__ = 'commissions'

    id = db.Column(db.Integer, primary_key=True)
    from_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)  # buyer
    to_user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)  # recipient
    product_id = db.Column(db.Integer, db.ForeignKey('products.id'), nullable=False)
    transaction_id = db.Column(db.Integer, db.ForeignKey('transactions.id'), nullable=False, index=True)
    level = db.Column(db.Integer, nullable=False)  # 0 = direct sponsor, 1-20 indirect
    type = db.Column(db.String(20), nullable=True)  # NULL on rows written before types existed
    amount = db.Column(db.Numeric(18, 2), nullable=False)
    status = db.Column(db.String(20), default=CommissionStatus.PENDING.value, nullable=False)
    paid_at = db.Column(db.DateTime(timezone=True), nullable=True)

    from_user = db.relationship('User', foreign_keys=[from_user_id])
    to_user = db.relationship('User', foreign_keys=[to_user_id])
    product = db.relationship('Product')

    __table_args__ = (
        db.CheckConstraint('level >= 0 AND level <= 20', name='chk_commission_level_range'),
        db.CheckConstraint('amount >= 0', name='chk_commission_amount'),
        Index('idx_commission_recipient_status', 'to_user_id', 'status'),
        Index('idx_commission_transaction_recipient', 'transaction_id', 'to_user_id'),
    )

    @property
    def resolved_type(self) -> str:
        return self.type or CommissionType.for_level(self.level).value

    def to_dict(self):
        return {
            'id': self.id,
            'from_user_id': self.from_user_id,
            'to_user_id': self.to_user_id,
            'product_id': self.product_id,
            'transaction_id': self.transaction_id,
            'level': self.level,
            'type': self.resolved_type,
            'amount': Decimal(self.amount),
            'status': self.status,
            'paid_at': self.paid_at.isoformat() if self.paid_at else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Commission {self.id} L{self.level} {self.amount} -> {self.to_user_id}>'


# ===========================================================
# OPERATOR SETTINGS
# ===========================================================

class Settings(db.Model, BaseMixin):
    """Single-row operator settings, including the level -> amount commission structure."""
    __tablename__ = 'settings'

    id = db.Column(db.Integer, primary_key=True)
    site_name = db.Column(db.String(120), default='NMSystem', nullable=False)
    currency = db.Column(db.String(8), default='PHP', nullable=False)
    min_redemption_points = db.Column(db.Integer, default=100, nullable=False)
    min_withdraw = db.Column(db.Numeric(18, 2), default=Decimal("100"), nullable=False)
    max_withdraw = db.Column(db.Numeric(18, 2), default=Decimal("50000"), nullable=False)
    commission_structure = db.Column(db.JSON, nullable=True)  # {"0": "165", "1": "70", ...}
