"""create hr portal tables

Revision ID: create_hr_portal
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'create_hr_portal'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

AUDIT_ACTIONS = (
    'LOGIN', 'LOGOUT', 'LOGIN_FAILED',
    'PASSWORD_RESET_REQUEST', 'PASSWORD_RESET_COMPLETE',
    'TWO_FACTOR_ENABLED', 'TWO_FACTOR_DISABLED', 'PROFILE_UPDATE',
    'EMPLOYEE_CREATE', 'EMPLOYEE_UPDATE', 'EMPLOYEE_DELETE',
    'PTO_REQUEST_CREATE', 'PTO_REQUEST_APPROVE', 'PTO_REQUEST_DENY', 'PTO_REQUEST_CANCEL',
    'PAYSTUB_UPLOAD', 'PAYSTUB_VIEW', 'DOCUMENT_UPLOAD', 'DOCUMENT_VIEW', 'SETTINGS_UPDATE',
)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('user_id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('role', sa.Enum('ADMIN', 'EMPLOYEE', name='user_role'), nullable=False),
        sa.Column('totp_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('totp_secret', sa.Text(), nullable=True),
        sa.Column('backup_codes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'password_reset_tokens',
        sa.Column('token_id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False, unique=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('used_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_password_reset_tokens_user_id', 'password_reset_tokens', ['user_id'])

    op.create_table(
        'employee_profiles',
        sa.Column('employee_id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.user_id', ondelete='CASCADE'), nullable=False),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('address', sa.String(), nullable=True),
        sa.Column('emergency_contact_name', sa.String(), nullable=True),
        sa.Column('emergency_contact_relationship', sa.String(), nullable=True),
        sa.Column('emergency_contact_phone', sa.String(), nullable=True),
        sa.Column('role_title', sa.String(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('employment_type', sa.Enum('HOURLY', 'SALARY', name='employment_type'), nullable=True),
        sa.Column('wage', sa.Numeric(10, 2), nullable=True),
        sa.Column(
            'onboarding_status',
            sa.Enum('NOT_STARTED', 'IN_PROGRESS', 'COMPLETED', name='onboarding_status'),
            nullable=False,
        ),
        sa.Column('onboarding_completed_at', sa.DateTime(), nullable=True),
        sa.Column('onboarding_pdf_url', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_employee_profiles_user_id', 'employee_profiles', ['user_id'], unique=True)

    op.create_table(
        'pto_balances',
        sa.Column('balance_id', sa.Uuid(), primary_key=True),
        sa.Column(
            'employee_id', sa.Uuid(),
            sa.ForeignKey('employee_profiles.employee_id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('vacation_days', sa.Numeric(6, 2), nullable=False),
        sa.Column('sick_days', sa.Numeric(6, 2), nullable=False),
        sa.Column('personal_days', sa.Numeric(6, 2), nullable=False),
        sa.Column('vacation_used', sa.Numeric(6, 2), nullable=False, server_default='0'),
        sa.Column('sick_used', sa.Numeric(6, 2), nullable=False, server_default='0'),
        sa.Column('personal_used', sa.Numeric(6, 2), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_pto_balances_employee_id', 'pto_balances', ['employee_id'], unique=True)

    op.create_table(
        'pto_requests',
        sa.Column('request_id', sa.Uuid(), primary_key=True),
        sa.Column(
            'employee_id', sa.Uuid(),
            sa.ForeignKey('employee_profiles.employee_id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('type', sa.Enum('VACATION', 'SICK', 'PERSONAL', name='pto_type'), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('total_days', sa.Numeric(6, 2), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('PENDING', 'APPROVED', 'DENIED', 'CANCELLED', name='pto_status'),
            nullable=False,
        ),
        sa.Column('was_revoked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reviewed_by_id', sa.Uuid(), sa.ForeignKey('users.user_id', ondelete='SET NULL'), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('review_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('end_date >= start_date', name='ck_pto_requests_date_order'),
    )
    op.create_index('ix_pto_requests_employee_id', 'pto_requests', ['employee_id'])
    op.create_index('ix_pto_requests_status', 'pto_requests', ['status'])

    op.create_table(
        'audit_logs',
        sa.Column('log_id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.user_id', ondelete='SET NULL'), nullable=True),
        sa.Column('action', sa.Enum(*AUDIT_ACTIONS, name='audit_action'), nullable=False),
        sa.Column('entity_type', sa.String(), nullable=False),
        sa.Column('entity_id', sa.String(), nullable=True),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(), nullable=True),
        sa.Column('user_agent', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_audit_logs_user_id', 'audit_logs', ['user_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('ix_audit_logs_created_at', 'audit_logs', ['created_at'])

    op.create_table(
        'pay_stubs',
        sa.Column('paystub_id', sa.Uuid(), primary_key=True),
        sa.Column(
            'employee_id', sa.Uuid(),
            sa.ForeignKey('employee_profiles.employee_id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('pay_period_start', sa.Date(), nullable=False),
        sa.Column('pay_period_end', sa.Date(), nullable=False),
        sa.Column('pay_date', sa.Date(), nullable=False),
        sa.Column('gross_pay', sa.Numeric(12, 2), nullable=False),
        sa.Column('net_pay', sa.Numeric(12, 2), nullable=False),
        sa.Column('deductions', sa.Text(), nullable=True),
        sa.Column('hours_worked', sa.Numeric(8, 2), nullable=True),
        sa.Column('hourly_rate', sa.Numeric(10, 2), nullable=True),
        sa.Column('file_name', sa.String(), nullable=False),
        sa.Column('file_url', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_pay_stubs_employee_id', 'pay_stubs', ['employee_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('pay_stubs')
    op.drop_table('audit_logs')
    op.drop_table('pto_requests')
    op.drop_table('pto_balances')
    op.drop_table('employee_profiles')
    op.drop_table('password_reset_tokens')
    op.drop_table('users')
    for enum_name in ('audit_action', 'pto_status', 'pto_type', 'onboarding_status', 'employment_type', 'user_role'):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
