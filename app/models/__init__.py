"""SQLAlchemy models package for the RIWA planning backend.

Importing all models here ensures that SQLAlchemy's mapper registry is
populated before ``Base.metadata.create_all()`` or Alembic migrations run.
The import order follows the foreign-key dependency graph so that parent
tables are always registered before their children.

Usage from other modules:
    from app.models import Plan, PlanActivity
"""

# Accounts
from app.models.user import User  # noqa: F401

# Planning
from app.models.plan import Plan, PlanActivity  # noqa: F401
from app.models.plan_status_history import PlanStatusHistory  # noqa: F401

__all__ = [
    "User",
    "Plan",
    "PlanActivity",
    "PlanStatusHistory",
]
