"""initial schema: grants, identities, catalog, navigation

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # No unique constraint: overlapping grants are allowed
    op.create_table('permissions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('resource_type', sa.String(length=64), nullable=False),
        sa.Column('resource_id', sa.String(length=64), nullable=False),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('subject_type', sa.String(length=32), nullable=False),
        sa.Column('subject_id', sa.String(length=64), nullable=False)
    )
    op.create_index('ix_permissions_resource_type', 'permissions', ['resource_type'])
    op.create_index('ix_permissions_subject_id', 'permissions', ['subject_id'])

    op.create_table('claims',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('resource_type', sa.String(length=64), nullable=False),
        sa.Column('resource_id', sa.String(length=64), nullable=False),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('display_name', sa.String(length=128), nullable=False)
    )

    op.create_table('roles',
        sa.Column('id', sa.String(length=64), primary_key=True),
        sa.Column('name', sa.String(length=64), nullable=False, unique=True)
    )

    op.create_table('users',
        sa.Column('id', sa.String(length=64), primary_key=True),
        sa.Column('email', sa.String(length=128), nullable=False),
        sa.Column('user_name', sa.String(length=128))
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table('user_roles',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(length=64), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role_id', sa.String(length=64), sa.ForeignKey('roles.id', ondelete='CASCADE'), nullable=False),
        sa.UniqueConstraint('user_id', 'role_id', name='uq_user_role')
    )

    op.create_table('user_claims',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(length=64), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('claim_id', sa.Integer(), sa.ForeignKey('claims.id', ondelete='CASCADE'), nullable=False),
        sa.UniqueConstraint('user_id', 'claim_id', name='uq_user_claim')
    )
    op.create_index('ix_user_claims_user_id', 'user_claims', ['user_id'])

    op.create_table('categories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('description', sa.String(length=200)),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True))
    )
    op.create_index('ix_categories_name', 'categories', ['name'])

    op.create_table('products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=500)),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('category_id', sa.Integer(), sa.ForeignKey('categories.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True))
    )
    op.create_index('ix_products_name', 'products', ['name'])
    op.create_index('ix_products_category_id', 'products', ['category_id'])

    op.create_table('navigations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('display', sa.String(length=128), nullable=False),
        sa.Column('link', sa.String(length=256), nullable=False),
        sa.Column('icon', sa.String(length=64), nullable=False),
        sa.Column('type', sa.String(length=32), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('order_path', sa.String(length=256), nullable=False),
        sa.Column('parent_id', sa.Integer(), sa.ForeignKey('navigations.id'), nullable=True),
        sa.Column('claim_id', sa.Integer(), sa.ForeignKey('claims.id'), nullable=True),
        sa.Column('additional_rules', sa.String(length=1024))
    )
    op.create_index('ix_navigations_claim_id', 'navigations', ['claim_id'])


def downgrade():
    for tbl in ['navigations', 'products', 'categories', 'user_claims', 'user_roles', 'users', 'roles', 'claims', 'permissions']:
        op.drop_table(tbl)
