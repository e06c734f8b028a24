"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

lineage_node_type = postgresql.ENUM('source', 'transformation', 'target', name='lineagenodetype', create_type=False)
metric_type = postgresql.ENUM(
    'completeness', 'accuracy', 'timeliness', 'consistency', name='metrictype', create_type=False
)
reaction_type = postgresql.ENUM('like', 'helpful', 'insightful', name='reactiontype', create_type=False)
badge_type = postgresql.ENUM('quality', 'trending', 'influential', name='badgetype', create_type=False)

ENUM_TYPES = (lineage_node_type, metric_type, reaction_type, badge_type)


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in ENUM_TYPES:
        enum_type.create(bind, checkfirst=True)

    # Create data_products table
    op.create_table(
        'data_products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('owner', sa.String(length=255), nullable=False),
        sa.Column('domain', sa.String(length=100), nullable=True),
        sa.Column('schema', sa.JSON(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('sla', sa.String(length=255), nullable=True),
        sa.Column('update_frequency', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_data_products_id'), 'data_products', ['id'], unique=False)
    op.create_index(op.f('ix_data_products_name'), 'data_products', ['name'], unique=False)
    op.create_index(op.f('ix_data_products_owner'), 'data_products', ['owner'], unique=False)
    op.create_index(op.f('ix_data_products_domain'), 'data_products', ['domain'], unique=False)

    # Create lineage tables
    op.create_table(
        'lineage_nodes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('data_product_id', sa.Integer(), nullable=False),
        sa.Column('type', lineage_node_type, nullable=False),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(['data_product_id'], ['data_products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_lineage_nodes_id'), 'lineage_nodes', ['id'], unique=False)
    op.create_index(op.f('ix_lineage_nodes_data_product_id'), 'lineage_nodes', ['data_product_id'], unique=False)

    op.create_table(
        'lineage_edges',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('source_id', sa.Integer(), nullable=False),
        sa.Column('target_id', sa.Integer(), nullable=False),
        sa.Column('transformation_logic', sa.Text(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(['source_id'], ['lineage_nodes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['target_id'], ['lineage_nodes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_lineage_edges_id'), 'lineage_edges', ['id'], unique=False)
    op.create_index(op.f('ix_lineage_edges_source_id'), 'lineage_edges', ['source_id'], unique=False)
    op.create_index(op.f('ix_lineage_edges_target_id'), 'lineage_edges', ['target_id'], unique=False)

    op.create_table(
        'lineage_versions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('data_product_id', sa.Integer(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('snapshot', sa.JSON(), nullable=False),
        sa.Column('change_message', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['data_product_id'], ['data_products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('data_product_id', 'version', name='uq_lineage_versions_product_version')
    )
    op.create_index(op.f('ix_lineage_versions_id'), 'lineage_versions', ['id'], unique=False)
    op.create_index(op.f('ix_lineage_versions_data_product_id'), 'lineage_versions', ['data_product_id'], unique=False)

    # Create quality metric tables
    op.create_table(
        'metric_templates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', metric_type, nullable=False),
        sa.Column('default_formula', sa.Text(), nullable=True),
        sa.Column('parameters', sa.JSON(), nullable=True),
        sa.Column('example', sa.Text(), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_index(op.f('ix_metric_templates_id'), 'metric_templates', ['id'], unique=False)

    op.create_table(
        'metric_definitions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('data_product_id', sa.Integer(), nullable=True),
        sa.Column('template_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', metric_type, nullable=False),
        sa.Column('query', sa.Text(), nullable=False),
        sa.Column('parameters', sa.JSON(), nullable=True),
        sa.Column('threshold', sa.Float(), nullable=True),
        sa.Column('enabled', sa.Boolean(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['data_product_id'], ['data_products.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['template_id'], ['metric_templates.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_metric_definitions_id'), 'metric_definitions', ['id'], unique=False)
    op.create_index(
        op.f('ix_metric_definitions_data_product_id'), 'metric_definitions', ['data_product_id'], unique=False
    )

    op.create_table(
        'metric_definition_versions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('metric_definition_id', sa.Integer(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', metric_type, nullable=False),
        sa.Column('query', sa.Text(), nullable=False),
        sa.Column('parameters', sa.JSON(), nullable=True),
        sa.Column('threshold', sa.Float(), nullable=True),
        sa.Column('change_message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['metric_definition_id'], ['metric_definitions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('metric_definition_id', 'version', name='uq_metric_definition_versions_version')
    )
    op.create_index(op.f('ix_metric_definition_versions_id'), 'metric_definition_versions', ['id'], unique=False)
    op.create_index(
        op.f('ix_metric_definition_versions_metric_definition_id'),
        'metric_definition_versions',
        ['metric_definition_id'],
        unique=False
    )

    op.create_table(
        'quality_metrics',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('data_product_id', sa.Integer(), nullable=False),
        sa.Column('metric_definition_id', sa.Integer(), nullable=False),
        sa.Column('value', sa.Float(), nullable=False),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['data_product_id'], ['data_products.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['metric_definition_id'], ['metric_definitions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_quality_metrics_id'), 'quality_metrics', ['id'], unique=False)
    op.create_index(op.f('ix_quality_metrics_data_product_id'), 'quality_metrics', ['data_product_id'], unique=False)
    op.create_index(
        op.f('ix_quality_metrics_metric_definition_id'), 'quality_metrics', ['metric_definition_id'], unique=False
    )
    op.create_index(op.f('ix_quality_metrics_timestamp'), 'quality_metrics', ['timestamp'], unique=False)

    # Create comment tables
    op.create_table(
        'comments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('data_product_id', sa.Integer(), nullable=False),
        sa.Column('author_name', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('like_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('helpful_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('insightful_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.CheckConstraint('like_count >= 0', name='ck_comments_like_count_non_negative'),
        sa.CheckConstraint('helpful_count >= 0', name='ck_comments_helpful_count_non_negative'),
        sa.CheckConstraint('insightful_count >= 0', name='ck_comments_insightful_count_non_negative'),
        sa.ForeignKeyConstraint(['data_product_id'], ['data_products.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_comments_id'), 'comments', ['id'], unique=False)
    op.create_index(op.f('ix_comments_data_product_id'), 'comments', ['data_product_id'], unique=False)
    op.create_index(op.f('ix_comments_author_name'), 'comments', ['author_name'], unique=False)
    op.create_index(op.f('ix_comments_created_at'), 'comments', ['created_at'], unique=False)

    op.create_table(
        'comment_reactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('comment_id', sa.Integer(), nullable=False),
        sa.Column('type', reaction_type, nullable=False),
        sa.Column('user_identifier', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['comment_id'], ['comments.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('comment_id', 'type', 'user_identifier', name='uq_comment_reactions_comment_type_user')
    )
    op.create_index(op.f('ix_comment_reactions_id'), 'comment_reactions', ['id'], unique=False)
    op.create_index(op.f('ix_comment_reactions_comment_id'), 'comment_reactions', ['comment_id'], unique=False)

    op.create_table(
        'comment_badges',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('comment_id', sa.Integer(), nullable=False),
        sa.Column('type', badge_type, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['comment_id'], ['comments.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_comment_badges_id'), 'comment_badges', ['id'], unique=False)
    op.create_index(op.f('ix_comment_badges_comment_id'), 'comment_badges', ['comment_id'], unique=False)

    # Create api_usage table
    op.create_table(
        'api_usage',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('endpoint', sa.String(length=500), nullable=False),
        sa.Column('method', sa.String(length=10), nullable=True),
        sa.Column('status_code', sa.Integer(), nullable=False),
        sa.Column('error_type', sa.String(length=100), nullable=True),
        sa.Column('quota_used', sa.Integer(), nullable=True),
        sa.Column('metadata', sa.JSON(), nullable=True),
        sa.Column('is_successful', sa.Boolean(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_api_usage_id'), 'api_usage', ['id'], unique=False)
    op.create_index(op.f('ix_api_usage_endpoint'), 'api_usage', ['endpoint'], unique=False)
    op.create_index(op.f('ix_api_usage_timestamp'), 'api_usage', ['timestamp'], unique=False)


def downgrade() -> None:
    op.drop_table('api_usage')
    op.drop_table('comment_badges')
    op.drop_table('comment_reactions')
    op.drop_table('comments')
    op.drop_table('quality_metrics')
    op.drop_table('metric_definition_versions')
    op.drop_table('metric_definitions')
    op.drop_table('metric_templates')
    op.drop_table('lineage_versions')
    op.drop_table('lineage_edges')
    op.drop_table('lineage_nodes')
    op.drop_table('data_products')

    bind = op.get_bind()
    for enum_type in reversed(ENUM_TYPES):
        enum_type.drop(bind, checkfirst=True)
