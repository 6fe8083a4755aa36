"""Create payment, consultation and subscription tables.

Revision ID: create_payment_tables
Revises:
Create Date: 2026-10-01
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'create_payment_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('phone', sa.String(20), nullable=False, unique=True, index=True),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'payments',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='RESTRICT'),
                  nullable=False, index=True),
        sa.Column('amount_paise', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='INR'),
        sa.Column('purpose', sa.String(30), nullable=False),
        sa.Column('status', sa.String(20), nullable=False,
                  server_default='PENDING', index=True),
        sa.Column('razorpay_order_id', sa.String(255), nullable=False),
        sa.Column('razorpay_payment_id', sa.String(255), nullable=True),
        sa.Column('razorpay_signature', sa.String(255), nullable=True),
        sa.Column('method', sa.String(30), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=False, server_default='{}'),
        sa.Column('failure_reason', sa.String(500), nullable=True),
        sa.Column('requires_reconciliation', sa.Boolean(), nullable=False,
                  server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('amount_paise >= 100', name='ck_payments_min_amount'),
    )
    op.create_index(
        'ux_payments_razorpay_order_id',
        'payments',
        ['razorpay_order_id'],
        unique=True,
    )
    # Reconciliation queue for finance
    op.create_index(
        'ix_payments_requires_reconciliation',
        'payments',
        ['created_at'],
        postgresql_where=sa.text('requires_reconciliation'),
    )

    op.create_table(
        'consultations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('patient_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='CASCADE'),
                  nullable=False, index=True),
        sa.Column('vertical', sa.String(50), nullable=False),
        sa.Column('intake_response_id', sa.String(255), nullable=True),
        sa.Column('payment_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('payments.id', ondelete='RESTRICT'),
                  nullable=False, unique=True),
        sa.Column('status', sa.String(30), nullable=False,
                  server_default='PENDING_ASSESSMENT'),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'subscription_plans',
        sa.Column('id', sa.String(100), primary_key=True),
        sa.Column('vertical', sa.String(50), nullable=False, index=True),
        sa.Column('plan_type', sa.String(30), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('price_in_paise', sa.Integer(), nullable=False),
        sa.Column('duration_months', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        'subscriptions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('users.id', ondelete='CASCADE'),
                  nullable=False, index=True),
        sa.Column('plan_id', sa.String(100),
                  sa.ForeignKey('subscription_plans.id', ondelete='RESTRICT'),
                  nullable=False),
        sa.Column('payment_id', postgresql.UUID(as_uuid=True),
                  sa.ForeignKey('payments.id', ondelete='RESTRICT'),
                  nullable=False, unique=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='ACTIVE'),
        sa.Column('current_period_start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('current_period_end', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True),
                  server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table('subscriptions')
    op.drop_table('subscription_plans')
    op.drop_table('consultations')
    op.drop_index('ix_payments_requires_reconciliation', table_name='payments')
    op.drop_index('ux_payments_razorpay_order_id', table_name='payments')
    op.drop_table('payments')
    op.drop_table('users')
