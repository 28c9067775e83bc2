"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2025-12-24 11:19:43.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None


INTERVENTION_STATUSES = ('pending', 'in_progress', 'resolved', 'cancelled')
INTERVENTION_PRIORITIES = ('low', 'medium', 'high', 'critical')


def timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # Profiles
    op.create_table(
        'profiles',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=False, unique=True, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('avatar_url', sa.String(), nullable=True),
        *timestamps(),
    )

    # Technicians
    op.create_table(
        'technicians',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('specialty', sa.String(255), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('avatar_url', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true(), index=True),
        *timestamps(),
    )

    # Machines
    op.create_table(
        'machines',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('model', sa.String(255), nullable=False),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('manual_pdf_url', sa.String(), nullable=True),
        sa.Column('specifications', postgresql.JSONB(), nullable=True, server_default=sa.text("'{}'::jsonb")),
        sa.Column('image_url', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true(), index=True),
        *timestamps(),
    )

    # Parts
    op.create_table(
        'parts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('stock_quantity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('compatible_machine_id', sa.Uuid(),
                  sa.ForeignKey('machines.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('min_stock_level', sa.Integer(), nullable=True, server_default='5'),
        sa.Column('unit_price', sa.Numeric(10, 2), nullable=True),
        *timestamps(),
    )

    # Interventions
    op.create_table(
        'interventions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('technician_id', sa.Uuid(),
                  sa.ForeignKey('technicians.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('machine_id', sa.Uuid(),
                  sa.ForeignKey('machines.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('problem_description', sa.Text(), nullable=True),
        sa.Column('audio_url', sa.String(), nullable=True),
        sa.Column('ai_solution', sa.Text(), nullable=True),
        sa.Column('status', sa.String(50), nullable=False, server_default='pending', index=True),
        sa.Column('priority', sa.String(20), nullable=False, server_default='medium'),
        *timestamps(),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "status IN ({})".format(", ".join(f"'{s}'" for s in INTERVENTION_STATUSES)),
            name='intervention_status'
        ),
        sa.CheckConstraint(
            "priority IN ({})".format(", ".join(f"'{p}'" for p in INTERVENTION_PRIORITIES)),
            name='intervention_priority'
        ),
    )
    op.create_index('ix_interventions_created_at', 'interventions', ['created_at'])


def downgrade() -> None:
    op.drop_index('ix_interventions_created_at', table_name='interventions')
    op.drop_table('interventions')
    op.drop_table('parts')
    op.drop_table('machines')
    op.drop_table('technicians')
    op.drop_table('profiles')
