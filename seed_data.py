"""Seed data script for the RIWA planning database.

Creates a demo account for BUTARO HOSPITAL and one costed HIV plan so the
frontend has something to show on a fresh database.  The script is
idempotent: it checks for existing records before inserting.

Usage (from the repository root):
    python seed_data.py
"""

from __future__ import annotations

import os
import sys
from decimal import Decimal

# Ensure the app package is importable when running from the repository root
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.database import SessionLocal  # noqa: E402
from app.models import User  # noqa: E402
from app.schemas.plan import PlanMetadata  # noqa: E402
from app.services import plan_lifecycle, plan_service  # noqa: E402
from app.utils.constants import FACILITY_TYPE_HOSPITAL  # noqa: E402
from app.utils.security import hash_password  # noqa: E402

FISCAL_YEAR = "FY 2024"

DEMO_USER = {
    "name": "Demo Planner",
    "email": "demo@butaro.rw",
    "province": "Northern",
    "district": "Burera",
    "hospital": "BUTARO HOSPITAL",
}
DEMO_PASSWORD = "Demo123!"

# activity name -> (quantity, frequency, unit_cost)
DEMO_COSTS: dict[str, tuple[str, str, str]] = {
    "Salaries": ("10", "1", "450000"),
    "Home visits": ("4", "3", "15000"),
    "Supervision": ("2", "1", "60000"),
    "Bank charges": ("1", "3", "5000"),
}


# ---------------------------------------------------------------------------
# Seed functions
# ---------------------------------------------------------------------------


def seed_user(session) -> User:
    user = session.query(User).filter(User.email == DEMO_USER["email"]).first()
    if user is not None:
        print(f"  [SKIP] User {user.email} already exists.")
        return user

    user = User(**DEMO_USER, password_hash=hash_password(DEMO_PASSWORD), email_verified=True)
    session.add(user)
    session.commit()
    print(f"  [OK] User {user.email} / {DEMO_PASSWORD}")
    return user


def seed_hiv_plan(session, user: User) -> None:
    existing = plan_service.find_plan(
        session, user.hospital, FACILITY_TYPE_HOSPITAL, "HIV", FISCAL_YEAR
    )
    if existing is not None:
        print(f"  [SKIP] Plan {existing.plan_code} already exists.")
        return

    plan = plan_lifecycle.instantiate_plan(
        PlanMetadata(
            facility_name=user.hospital,
            facility_type=FACILITY_TYPE_HOSPITAL,
            facility_district=user.district,
            province=user.province,
            fiscal_year=FISCAL_YEAR,
            created_by=user.name,
            created_by_email=user.email,
        ),
        "HIV",
        is_hospital=True,
    )
    for index, activity in enumerate(plan.activities):
        if activity.activity in DEMO_COSTS:
            quantity, frequency, unit_cost = (Decimal(v) for v in DEMO_COSTS[activity.activity])
            plan = plan_lifecycle.apply_activity_edit(
                plan, index, {"quantity": quantity, "frequency": frequency, "unit_cost": unit_cost}
            )

    saved = plan_service.save_plan(session, plan)
    print(f"  [OK] Plan {saved.plan_code}: total {saved.general_total_budget:,.2f}")


def main() -> None:
    print("=" * 60)
    print("  RIWA Planning - Seed Data Script")
    print("=" * 60)

    session = SessionLocal()
    try:
        print("\n[1/2] Demo user...")
        user = seed_user(session)

        print("\n[2/2] HIV plan...")
        seed_hiv_plan(session, user)

        print("\n  Seed completed.")
    except Exception:
        session.rollback()
        print("\n[ERROR] Seed failed, rolled back.")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    main()
