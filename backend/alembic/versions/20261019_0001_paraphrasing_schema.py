"""Paraphrasing sessions and uploaded files

Revision ID: 0001
Revises: 
Create Date: 2026-10-19

This migration creates the initial database schema:
- paraphrasing_sessions: One rewrite transaction each, with expiry
- uploaded_files: Upload metadata and extracted text, with expiry
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ----- Paraphrasing Sessions Table -----
    op.create_table(
        'paraphrasing_sessions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('session_id', sa.String(36), nullable=False),
        sa.Column('original_text', sa.Text(), nullable=False),
        sa.Column('mode', sa.String(20), nullable=False),
        sa.Column('language', sa.String(64), nullable=False),
        sa.Column('citation_format', sa.String(16), nullable=False),
        sa.Column('paraphrased_text', sa.Text(), nullable=True),
        sa.Column('highlights', sa.JSON(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_paraphrasing_sessions'),
    )
    op.create_index(
        'ix_paraphrasing_sessions_session_id', 'paraphrasing_sessions', ['session_id'], unique=True
    )
    op.create_index('ix_paraphrasing_sessions_expires_at', 'paraphrasing_sessions', ['expires_at'])
    op.create_index('ix_paraphrasing_sessions_created_at', 'paraphrasing_sessions', ['created_at'])
    
    # ----- Uploaded Files Table -----
    op.create_table(
        'uploaded_files',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('session_id', sa.String(36), nullable=False),
        sa.Column('file_name', sa.String(255), nullable=False),
        sa.Column('file_path', sa.Text(), nullable=False),
        sa.Column('file_type', sa.String(128), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('extracted_text', sa.Text(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_uploaded_files'),
    )
    op.create_index('ix_uploaded_files_session_id', 'uploaded_files', ['session_id'])
    op.create_index('ix_uploaded_files_expires_at', 'uploaded_files', ['expires_at'])
    op.create_index('ix_uploaded_files_created_at', 'uploaded_files', ['created_at'])


def downgrade() -> None:
    op.drop_index('ix_uploaded_files_created_at', table_name='uploaded_files')
    op.drop_index('ix_uploaded_files_expires_at', table_name='uploaded_files')
    op.drop_index('ix_uploaded_files_session_id', table_name='uploaded_files')
    op.drop_table('uploaded_files')
    
    op.drop_index('ix_paraphrasing_sessions_created_at', table_name='paraphrasing_sessions')
    op.drop_index('ix_paraphrasing_sessions_expires_at', table_name='paraphrasing_sessions')
    op.drop_index('ix_paraphrasing_sessions_session_id', table_name='paraphrasing_sessions')
    op.drop_table('paraphrasing_sessions')
