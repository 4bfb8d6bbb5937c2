"""Add type column to commissions"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '7c2e91d4a5b0'
down_revision = '3f8a0c6d12e4'
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table('commissions', schema=None) as batch_op:
        batch_op.add_column(sa.Column('type', sa.String(length=20), nullable=True))
    # Rows paid before the column existed; `flask commissions backfill-types` repeats this in batches
    op.execute("UPDATE commissions SET type = 'direct' WHERE type IS NULL AND level = 0;")
    op.execute("UPDATE commissions SET type = 'indirect' WHERE type IS NULL AND level > 0;")


def downgrade():
    with op.batch_alter_table('commissions', schema=None) as batch_op:
        batch_op.drop_column('type')
