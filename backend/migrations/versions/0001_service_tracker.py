"""service tracker tables

Revision ID: 0001_service_tracker
Revises: 
Create Date: 2026-10-17
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_service_tracker'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table('users',
        sa.Column('id', sa.String(length=64), primary_key=True),
        sa.Column('username', sa.String(length=128), nullable=False, unique=True),
        sa.Column('role', sa.String(length=16), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('customer_order_id', sa.String(length=32), nullable=True)
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table('orders',
        sa.Column('service_id', sa.String(length=32), primary_key=True),
        sa.Column('customer_name', sa.String(length=128), nullable=False),
        sa.Column('equipment', sa.String(length=128), nullable=False),
        sa.Column('request_date', sa.String(length=40), nullable=False),
        sa.Column('repair_type', sa.String(length=32), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('assigned_engineer', sa.String(length=128), nullable=False),
        sa.Column('progress', sa.Integer(), nullable=False),
        sa.Column('qc_result', sa.String(length=8), nullable=True),
        sa.Column('repair_logs', sa.JSON(), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1')
    )
    op.create_index('ix_orders_customer_name', 'orders', ['customer_name'])
    op.create_index('ix_orders_request_date', 'orders', ['request_date'])
    op.create_index('ix_orders_status', 'orders', ['status'])

    op.create_table('spareparts',
        sa.Column('part_id', sa.String(length=32), primary_key=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('location', sa.String(length=64), nullable=False, server_default='')
    )
    op.create_index('ix_spareparts_name', 'spareparts', ['name'])
    op.create_index('ix_spareparts_status', 'spareparts', ['status'])

    op.create_table('part_requests',
        sa.Column('request_id', sa.String(length=32), primary_key=True),
        sa.Column('service_id', sa.String(length=32), nullable=False),
        sa.Column('part_id', sa.String(length=32), nullable=False),
        sa.Column('part_name', sa.String(length=128), nullable=False),
        sa.Column('quantity_requested', sa.Integer(), nullable=False),
        sa.Column('requestor_name', sa.String(length=128), nullable=False),
        sa.Column('requestor_id', sa.String(length=64), nullable=True),
        sa.Column('request_date', sa.String(length=40), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('customer_name', sa.String(length=128), nullable=False),
        sa.Column('job_type', sa.String(length=32), nullable=False)
    )
    op.create_index('ix_part_requests_service_id', 'part_requests', ['service_id'])
    op.create_index('ix_part_requests_request_date', 'part_requests', ['request_date'])
    op.create_index('ix_part_requests_status', 'part_requests', ['status'])

    op.create_table('purchase_orders',
        sa.Column('purchase_order_id', sa.String(length=32), primary_key=True),
        sa.Column('part_id', sa.String(length=32), nullable=False),
        sa.Column('part_name', sa.String(length=128), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('justification', sa.Text(), nullable=False),
        sa.Column('requestor', sa.String(length=128), nullable=False),
        sa.Column('requestor_id', sa.String(length=64), nullable=True),
        sa.Column('request_date', sa.String(length=40), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False)
    )
    op.create_index('ix_purchase_orders_part_id', 'purchase_orders', ['part_id'])
    op.create_index('ix_purchase_orders_request_date', 'purchase_orders', ['request_date'])
    op.create_index('ix_purchase_orders_status', 'purchase_orders', ['status'])

    op.create_table('qc_reports',
        sa.Column('qc_id', sa.String(length=32), primary_key=True),
        sa.Column('service_id', sa.String(length=32), nullable=False),
        sa.Column('test_result', sa.String(length=8), nullable=False),
        sa.Column('certificate_file_url', sa.String(length=255), nullable=True),
        sa.Column('inspection_date', sa.String(length=40), nullable=False),
        sa.Column('inspector', sa.String(length=128), nullable=False),
        sa.Column('notes', sa.Text(), nullable=False, server_default='')
    )
    op.create_index('ix_qc_reports_service_id', 'qc_reports', ['service_id'])

    op.create_table('invoices',
        sa.Column('invoice_id', sa.String(length=32), primary_key=True),
        sa.Column('service_id', sa.String(length=32), nullable=False),
        sa.Column('customer_name', sa.String(length=128), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('due_date', sa.String(length=40), nullable=False),
        sa.Column('issue_date', sa.String(length=40), nullable=False)
    )
    op.create_index('ix_invoices_service_id', 'invoices', ['service_id'])
    op.create_index('ix_invoices_status', 'invoices', ['status'])


def downgrade():
    for table in ('invoices', 'qc_reports', 'purchase_orders', 'part_requests', 'spareparts', 'orders', 'users'):
        op.drop_table(table)
