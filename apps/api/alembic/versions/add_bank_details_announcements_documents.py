"""add bank details, announcements and employee documents

Revision ID: add_portal_extras
Revises: create_hr_portal
Create Date: 2026-10-19 14:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'add_portal_extras'
down_revision: Union[str, Sequence[str], None] = 'create_hr_portal'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'bank_details',
        sa.Column('bank_details_id', sa.Uuid(), primary_key=True),
        sa.Column(
            'employee_id', sa.Uuid(),
            sa.ForeignKey('employee_profiles.employee_id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('bank_name', sa.String(), nullable=False),
        sa.Column('account_type', sa.Enum('CHECKING', 'SAVINGS', name='bank_account_type'), nullable=False),
        sa.Column('routing_number', sa.Text(), nullable=False),
        sa.Column('account_number', sa.Text(), nullable=False),
        sa.Column('last4_account', sa.String(length=4), nullable=False),
        sa.Column('confirmed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_bank_details_employee_id', 'bank_details', ['employee_id'], unique=True)

    op.create_table(
        'announcements',
        sa.Column('announcement_id', sa.Uuid(), primary_key=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            'created_by_admin_id', sa.Uuid(),
            sa.ForeignKey('users.user_id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_announcements_created_at', 'announcements', ['created_at'])

    op.create_table(
        'employee_documents',
        sa.Column('document_id', sa.Uuid(), primary_key=True),
        sa.Column(
            'employee_id', sa.Uuid(),
            sa.ForeignKey('employee_profiles.employee_id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column(
            'document_type',
            sa.Enum('ID', 'DRIVERS_LICENSE', 'PASSPORT', 'OTHER', name='document_type'),
            nullable=False,
        ),
        sa.Column('file_name', sa.String(), nullable=False),
        sa.Column('file_url', sa.String(), nullable=False),
        sa.Column('mime_type', sa.String(), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('uploaded_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_employee_documents_employee_id', 'employee_documents', ['employee_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('employee_documents')
    op.drop_table('announcements')
    op.drop_table('bank_details')
    for enum_name in ('document_type', 'bank_account_type'):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
