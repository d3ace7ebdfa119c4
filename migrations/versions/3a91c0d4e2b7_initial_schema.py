"""Initial schema

Revision ID: 3a91c0d4e2b7
Revises:
Create Date: 2026-10-19 10:12:31.204118
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3a91c0d4e2b7'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

pk_type = sa.BigInteger().with_variant(sa.Integer(), 'sqlite')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    ]


def _owner():
    return sa.Column(
        'therapist_id', sa.BigInteger(),
        sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False,
    )


def _client():
    return sa.Column(
        'client_id', sa.BigInteger(),
        sa.ForeignKey('clients.id', ondelete='SET NULL'), nullable=True,
    )


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', pk_type, primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password', sa.Text(), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('role', sa.String(32), server_default='therapist', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.CheckConstraint(
            "role in ('therapist','psychologist','counselor','social_worker')",
            name='ck_users_role',
        ),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'clients',
        sa.Column('id', pk_type, primary_key=True),
        _owner(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(64), nullable=True),
        sa.Column('dob', sa.Date(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('insurance', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', sa.String(32), server_default='active', nullable=False),
        *_timestamps(),
    )
    op.create_index('idx_clients_therapist_created', 'clients', ['therapist_id', 'created_at'])

    op.create_table(
        'appointments',
        sa.Column('id', pk_type, primary_key=True),
        _owner(),
        _client(),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('type', sa.String(64), nullable=True),
        sa.Column('status', sa.String(32), server_default='scheduled', nullable=False),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_appointments_therapist_start', 'appointments', ['therapist_id', 'start_time'])

    op.create_table(
        'invoices',
        sa.Column('id', pk_type, primary_key=True),
        _owner(),
        _client(),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', sa.String(32), server_default='pending', nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('service_date', sa.Date(), nullable=True),
        sa.Column('service_type', sa.String(128), nullable=True),
        sa.Column('payment_method', sa.String(64), nullable=True),
        sa.Column('paid_date', sa.Date(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status in ('pending','paid','overdue','cancelled')",
            name='ck_invoices_status',
        ),
    )
    op.create_index('idx_invoices_therapist_created', 'invoices', ['therapist_id', 'created_at'])
    op.create_index('idx_invoices_therapist_status', 'invoices', ['therapist_id', 'status'])

    op.create_table(
        'notes',
        sa.Column('id', pk_type, primary_key=True),
        _owner(),
        _client(),
        sa.Column(
            'appointment_id', sa.BigInteger(),
            sa.ForeignKey('appointments.id', ondelete='SET NULL'), nullable=True,
        ),
        sa.Column('type', sa.String(64), server_default='session', nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('session_date', sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_notes_therapist_client', 'notes', ['therapist_id', 'client_id'])

    op.create_table(
        'documents',
        sa.Column('id', pk_type, primary_key=True),
        _owner(),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('category', sa.String(128), nullable=True),
        sa.Column('file_url', sa.Text(), nullable=True),
        sa.Column('file_type', sa.String(64), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_documents_therapist_created', 'documents', ['therapist_id', 'created_at'])


def downgrade() -> None:
    # 참조 역순으로 삭제
    op.drop_index('idx_documents_therapist_created', table_name='documents')
    op.drop_table('documents')
    op.drop_index('idx_notes_therapist_client', table_name='notes')
    op.drop_table('notes')
    op.drop_index('idx_invoices_therapist_status', table_name='invoices')
    op.drop_index('idx_invoices_therapist_created', table_name='invoices')
    op.drop_table('invoices')
    op.drop_index('idx_appointments_therapist_start', table_name='appointments')
    op.drop_table('appointments')
    op.drop_index('idx_clients_therapist_created', table_name='clients')
    op.drop_table('clients')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
