"""
Model package — imports all models so Alembic and SQLAlchemy can
discover them automatically when ``flask db`` commands are run.

  - organization.py -> department hierarchy + HR directory dependents
  - audit.py        -> audit trail
"""

from app.models.organization import (  # noqa: F401
    Department,
    Employee,
    Position,
)

from app.models.audit import AuditLog  # noqa: F401
