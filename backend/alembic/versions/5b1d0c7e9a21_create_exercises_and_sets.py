"""create exercises and sets

Revision ID: 5b1d0c7e9a21
Revises:
Create Date: 2026-10-19 10:12:40.518204

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1d0c7e9a21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'exercises',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('date', sa.Date(), nullable=False, index=True),
        sa.Column('category', sa.String(length=50), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
    )

    # sets die with their exercise
    op.create_table(
        'sets',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('exercise_id', sa.Integer(), sa.ForeignKey('exercises.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('weight', sa.Integer(), nullable=False),
        sa.Column('reps', sa.Integer(), nullable=False),
    )


def downgrade() -> None:
    # child first
    op.drop_table('sets')
    op.drop_table('exercises')
