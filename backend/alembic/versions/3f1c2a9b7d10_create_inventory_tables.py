"""Create inventory tables

Revision ID: 3f1c2a9b7d10
Revises:
Create Date: 2025-10-20 09:12:31.402117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# Revision identifiers used by Alembic
revision: str = '3f1c2a9b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Dictionaries
    op.create_table(
        'Categories',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_Categories_name'), 'Categories', ['name'], unique=False)
    op.create_table(
        'UnitOfMeasure',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_UnitOfMeasure_name'), 'UnitOfMeasure', ['name'], unique=False)

    # Products, dictionary references are plain ids without foreign keys
    op.create_table(
        'Products',
        sa.Column('product_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('category', sa.String(length=36), nullable=False),
        sa.Column('packaging', sa.String(length=36), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('low_stock_level', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.CheckConstraint('quantity >= 0'),
        sa.CheckConstraint('price >= 0'),
        sa.CheckConstraint('low_stock_level >= 0'),
        sa.PrimaryKeyConstraint('product_id'),
    )
    op.create_index(op.f('ix_Products_name'), 'Products', ['name'], unique=False)
    op.create_index(op.f('ix_Products_category'), 'Products', ['category'], unique=False)

    # Append-only movement ledger
    op.create_table(
        'InventoryMovementLine',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('product_id', sa.String(length=36), nullable=False),
        sa.Column('product_name', sa.String(), nullable=True),
        sa.Column('product_category', sa.String(), nullable=True),
        sa.Column('product_packaging', sa.String(), nullable=True),
        sa.Column('product_unit_price', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('type', sa.String(length=16), nullable=False),
        sa.Column('reason', sa.String(length=32), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('is_display', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.CheckConstraint('quantity > 0'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_InventoryMovementLine_product_id'), 'InventoryMovementLine', ['product_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f('ix_InventoryMovementLine_product_id'), table_name='InventoryMovementLine')
    op.drop_table('InventoryMovementLine')
    op.drop_index(op.f('ix_Products_category'), table_name='Products')
    op.drop_index(op.f('ix_Products_name'), table_name='Products')
    op.drop_table('Products')
    op.drop_index(op.f('ix_UnitOfMeasure_name'), table_name='UnitOfMeasure')
    op.drop_table('UnitOfMeasure')
    op.drop_index(op.f('ix_Categories_name'), table_name='Categories')
    op.drop_table('Categories')
