"""create_carousel_tables

Revision ID: 5b1c0e7a9d42
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5b1c0e7a9d42'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# Kind -> the one reference column it populates, frozen at this revision
_REFERENCE_COLUMNS = ('youtube_id', 'album_id', 'ref_id', 'link_url')
_KIND_COLUMN = {
    'video': 'youtube_id',
    'album': 'album_id',
    'recipe': 'ref_id',
    'product': 'ref_id',
    'playlist': 'ref_id',
    'tiktok': 'link_url',
    'external': 'link_url',
}


def _single_reference_sql() -> str:
    clauses = []
    for kind, column in _KIND_COLUMN.items():
        others = ' AND '.join(f'{other} IS NULL' for other in _REFERENCE_COLUMNS if other != column)
        clauses.append(f"(kind = '{kind}' AND {column} IS NOT NULL AND {others})")
    return ' OR '.join(clauses)


def upgrade() -> None:
    """
    Create the carousel content model.

    Creates the following tables:
    1. carousels - named content slots, unique per (page, slug)
    2. carousel_items - ordered members, exactly one reference each

    Enums are stored as VARCHAR with CHECK constraints (non-native), so
    adding a kind later is a constraint change, not a type migration.
    """

    # ================================
    # Create carousels table
    # ================================
    op.create_table(
        'carousels',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False, comment='Auto-incrementing primary key'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp when record was created (UTC)'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp when record was last updated (UTC)'),
        sa.Column(
            'page',
            sa.Enum('home', 'vlogs', 'recipes', 'healing', 'storefront', name='page_type', native_enum=False, length=20, create_constraint=True),
            nullable=False,
            comment='Site section this carousel belongs to',
        ),
        sa.Column('slug', sa.String(length=100), nullable=False, comment='Carousel name, unique within its page'),
        sa.Column('title', sa.String(length=255), nullable=True, comment='Optional section heading'),
        sa.Column('description', sa.Text(), nullable=True, comment='Optional section subtitle/description'),
        sa.Column('is_active', sa.Boolean(), nullable=False, comment='Inactive carousels are hidden from page renderers'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_carousels')),
        sa.UniqueConstraint('page', 'slug', name='uq_carousel_page_slug'),
    )
    op.create_index(op.f('ix_carousels_page'), 'carousels', ['page'], unique=False)

    # ================================
    # Create carousel_items table
    # ================================
    op.create_table(
        'carousel_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False, comment='Auto-incrementing primary key'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp when record was created (UTC)'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, comment='Timestamp when record was last updated (UTC)'),
        sa.Column('carousel_id', sa.Integer(), nullable=False, comment='Owning carousel'),
        sa.Column(
            'kind',
            sa.Enum('video', 'album', 'recipe', 'product', 'playlist', 'tiktok', 'external', name='carousel_item_kind', native_enum=False, length=20, create_constraint=True),
            nullable=False,
            comment='What this item points at',
        ),
        sa.Column('youtube_id', sa.String(length=100), nullable=True, comment='External video id (kind=video)'),
        sa.Column('album_id', sa.String(length=100), nullable=True, comment='Album identifier (kind=album)'),
        sa.Column('ref_id', sa.String(length=100), nullable=True, comment='Recipe/product/playlist id (kind=recipe|product|playlist)'),
        sa.Column('link_url', sa.String(length=500), nullable=True, comment='Direct link (kind=tiktok|external)'),
        sa.Column('order_index', sa.Integer(), nullable=False, comment='Position within the carousel (0-based, ascending)'),
        sa.Column('is_active', sa.Boolean(), nullable=False, comment='Soft-hide without deleting'),
        sa.Column('is_featured', sa.Boolean(), nullable=True, comment='Featured sub-flag for kinds that use one'),
        sa.Column('caption', sa.String(length=255), nullable=True),
        sa.Column('image_path', sa.String(length=500), nullable=True),
        sa.Column('badge', sa.String(length=50), nullable=True),
        sa.CheckConstraint(_single_reference_sql(), name=op.f('ck_carousel_items_single_reference')),
        sa.ForeignKeyConstraint(
            ['carousel_id'], ['carousels.id'],
            name=op.f('fk_carousel_items_carousel_id_carousels'),
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_carousel_items')),
    )
    op.create_index(op.f('ix_carousel_items_carousel_id'), 'carousel_items', ['carousel_id'], unique=False)
    op.create_index(op.f('ix_carousel_items_ref_id'), 'carousel_items', ['ref_id'], unique=False)
    op.create_index('ix_carousel_items_carousel_order', 'carousel_items', ['carousel_id', 'order_index'], unique=False)


def downgrade() -> None:
    """Drop the carousel tables (items first, they reference carousels)."""
    op.drop_index('ix_carousel_items_carousel_order', table_name='carousel_items')
    op.drop_index(op.f('ix_carousel_items_ref_id'), table_name='carousel_items')
    op.drop_index(op.f('ix_carousel_items_carousel_id'), table_name='carousel_items')
    op.drop_table('carousel_items')

    op.drop_index(op.f('ix_carousels_page'), table_name='carousels')
    op.drop_table('carousels')
