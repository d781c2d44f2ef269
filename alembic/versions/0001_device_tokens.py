"""create devices and pubkey_devices tables

Revision ID: 0001_device_tokens
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_device_tokens'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'devices',
        sa.Column('token', sa.String(), primary_key=True),
        sa.Column('nostr_pubkey', sa.String(), nullable=False),
        sa.Column('platform', sa.String(), nullable=True),
        sa.Column('app_version', sa.String(), nullable=True),
        sa.Column('registered_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('last_active', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_devices_nostr_pubkey', 'devices', ['nostr_pubkey'])
    op.create_index('ix_devices_last_active', 'devices', ['last_active'])

    op.create_table(
        'pubkey_devices',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('nostr_pubkey', sa.String(), nullable=False),
        sa.Column('token', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('nostr_pubkey', 'token', name='uq_pubkey_devices_pubkey_token'),
    )
    op.create_index('ix_pubkey_devices_nostr_pubkey', 'pubkey_devices', ['nostr_pubkey'])
    op.create_index('ix_pubkey_devices_token', 'pubkey_devices', ['token'])

def downgrade():
    op.drop_table('pubkey_devices')
    op.drop_table('devices')
