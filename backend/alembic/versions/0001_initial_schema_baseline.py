"""initial_schema_baseline

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-18 09:00:00.000000

Creates every table from the current model definitions: users, patients,
surgeons, procedures, cases, case_templates, case_photos and user_preferences.
Indexes and unique constraints come from the models.
"""
from typing import Sequence, Union
import sys
import os

# Add src directory to path to import models
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from alembic import op

# Import all models to ensure they're registered with Base.metadata
from core.database import Base
import models  # noqa: F401


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables, then constrain enumerated columns on PostgreSQL."""
    bind = op.get_bind()
    Base.metadata.create_all(bind=bind)

    if bind.dialect.name == "postgresql":
        op.create_check_constraint(
            'check_user_role',
            'users',
            "role IN ('user', 'admin')"
        )
        op.create_check_constraint(
            'check_case_status',
            'cases',
            "status IN ('in_progress', 'completed', 'cancelled')"
        )


def downgrade() -> None:
    """Drop all tables created by the baseline."""
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        op.drop_constraint('check_case_status', 'cases', type_='check')
        op.drop_constraint('check_user_role', 'users', type_='check')

    Base.metadata.drop_all(bind=bind)
