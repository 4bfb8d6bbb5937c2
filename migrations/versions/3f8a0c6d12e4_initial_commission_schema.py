"""Initial commission schema"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f8a0c6d12e4'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=False),
        sa.Column('first_name', sa.String(length=80), nullable=False),
        sa.Column('last_name', sa.String(length=80), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.Column('sponsor_id', sa.Integer(), nullable=True),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('is_activated', sa.Boolean(), nullable=False),
        sa.Column('activation_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_purchase_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('wallet_balance', sa.Numeric(precision=18, scale=2), server_default=sa.text('0.00'), nullable=False),
        sa.Column('wallet_pending', sa.Numeric(precision=18, scale=2), server_default=sa.text('0.00'), nullable=False),
        sa.Column('wallet_total_earned', sa.Numeric(precision=18, scale=2), server_default=sa.text('0.00'), nullable=False),
        sa.Column('reward_points_balance', sa.Integer(), nullable=False),
        sa.Column('reward_points_total_earned', sa.Integer(), nullable=False),
        sa.Column('reward_points_total_redeemed', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['sponsor_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('idx_user_sponsor', 'users', ['sponsor_id'], unique=False)

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('cost', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('selling_price', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('admin_fee', sa.Numeric(precision=18, scale=2), nullable=True),
        sa.Column('company_profit', sa.Numeric(precision=18, scale=2), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('cost >= 0', name='chk_product_cost'),
        sa.CheckConstraint('selling_price >= 0', name='chk_product_selling_price'),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=True),
        sa.Column('amount', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_transactions_user_id'), 'transactions', ['user_id'], unique=False)
    op.create_index('idx_transaction_user_type', 'transactions', ['user_id', 'type'], unique=False)

    op.create_table(
        'reward_points',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('source', sa.String(length=20), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('related_transaction_id', sa.Integer(), nullable=True),
        sa.Column('related_product_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['related_transaction_id'], ['transactions.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['related_product_id'], ['products.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_reward_points_user_id'), 'reward_points', ['user_id'], unique=False)

    # type arrives in the next revision
    op.create_table(
        'commissions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('from_user_id', sa.Integer(), nullable=False),
        sa.Column('to_user_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('transaction_id', sa.Integer(), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('level >= 0 AND level <= 20', name='chk_commission_level_range'),
        sa.CheckConstraint('amount >= 0', name='chk_commission_amount'),
        sa.ForeignKeyConstraint(['from_user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['to_user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.ForeignKeyConstraint(['transaction_id'], ['transactions.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_commissions_from_user_id'), 'commissions', ['from_user_id'], unique=False)
    op.create_index(op.f('ix_commissions_to_user_id'), 'commissions', ['to_user_id'], unique=False)
    op.create_index(op.f('ix_commissions_transaction_id'), 'commissions', ['transaction_id'], unique=False)
    op.create_index('idx_commission_recipient_status', 'commissions', ['to_user_id', 'status'], unique=False)
    op.create_index('idx_commission_transaction_recipient', 'commissions', ['transaction_id', 'to_user_id'], unique=False)

    op.create_table(
        'settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('site_name', sa.String(length=120), nullable=False),
        sa.Column('currency', sa.String(length=8), nullable=False),
        sa.Column('min_redemption_points', sa.Integer(), nullable=False),
        sa.Column('min_withdraw', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('max_withdraw', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('commission_structure', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade():
    op.drop_table('settings')
    op.drop_index('idx_commission_transaction_recipient', table_name='commissions')
    op.drop_index('idx_commission_recipient_status', table_name='commissions')
    op.drop_index(op.f('ix_commissions_transaction_id'), table_name='commissions')
    op.drop_index(op.f('ix_commissions_to_user_id'), table_name='commissions')
    op.drop_index(op.f('ix_commissions_from_user_id'), table_name='commissions')
    op.drop_table('commissions')
    op.drop_index(op.f('ix_reward_points_user_id'), table_name='reward_points')
    op.drop_table('reward_points')
    op.drop_index('idx_transaction_user_type', table_name='transactions')
    op.drop_index(op.f('ix_transactions_user_id'), table_name='transactions')
    op.drop_table('transactions')
    op.drop_table('products')
    op.drop_index('idx_user_sponsor', table_name='users')
    op.drop_table('users')
