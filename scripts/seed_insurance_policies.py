#!/usr/bin/env python3
"""
Seed insurance policies for local development.

Policies are owned by the insurance administration side; this script
stands in for that system so eligibility checks have data to read.
"""

import argparse
import asyncio
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.database import AsyncSessionLocal, engine  # noqa: E402
from app.repositories.insurance_repository import InsuranceRepository  # noqa: E402
from app.schemas.insurance import PolicyStatus  # noqa: E402


async def seed(patient_id: str, provider: str, coverage: Decimal, max_coverage: Decimal) -> None:
    """Create one active, year-long policy for a patient."""
    today = date.today()
    async with AsyncSessionLocal() as session:
        repository = InsuranceRepository(session)
        policy = await repository.create_policy(
            {
                "patient_id": patient_id,
                "policy_number": f"POL-{patient_id}-{today:%Y%m%d}",
                "provider": provider,
                "coverage_percentage": coverage,
                "max_coverage": max_coverage,
                "start_date": today,
                "end_date": today + timedelta(days=365),
                "status": PolicyStatus.ACTIVE.value,
            }
        )

    await engine.dispose()
    print(f"✓ Created policy {policy['policy_number']} for patient {patient_id}")


def main() -> int:
    """Parse arguments and seed a policy."""
    parser = argparse.ArgumentParser(description="Seed an insurance policy")
    parser.add_argument("patient_id")
    parser.add_argument("--provider", default="Acme Health")
    parser.add_argument("--coverage", type=Decimal, default=Decimal("80"))
    parser.add_argument("--max-coverage", type=Decimal, default=Decimal("10000"))
    args = parser.parse_args()

    asyncio.run(seed(args.patient_id, args.provider, args.coverage, args.max_coverage))
    return 0


if __name__ == "__main__":
    sys.exit(main())
