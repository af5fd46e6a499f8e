import argparse
import asyncio
import logging
import sys
from pathlib import Path

"""
Re-run cost reconciliation for one work period's periodic consumption.

Use after entering physical counts for a period that is already closed:
  uv run python scripts/recalculate_costs.py --work-period-id 12
"""

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from core.logging_config import configure_logging  # noqa: E402
from db.database import async_session_maker  # noqa: E402
from services.consumption import get_periodic_consumption  # noqa: E402
from services.costing import calculate_cost  # noqa: E402
from services.work_periods import get_work_period  # noqa: E402

logger = logging.getLogger("recalculate_costs")


async def recalculate(work_period_id: int, dry_run: bool) -> int:
    async with async_session_maker() as session:
        wp = await get_work_period(session, work_period_id)
        if wp is None:
            logger.error("Work period %s not found", work_period_id)
            return 1
        pc = await get_periodic_consumption(session, wp.id)
        if pc is None:
            logger.error("Work period %s has no periodic consumption", work_period_id)
            return 1

        updated = await calculate_cost(session, pc, wp)
        for ci in pc.cost_items:
            print(f"  {ci.name:<30} qty={ci.quantity:>10} predicted={ci.cost_prediction:>12} cost={ci.cost:>10}")

        if dry_run:
            print(f"[recalculate_costs] DRY RUN: would update {updated} cost items")
            return 0

        await session.commit()
        print(f"[recalculate_costs] Updated {updated} cost items for work period {work_period_id}")
        return 0


def main():
    p = argparse.ArgumentParser()
    p.add_argument("--work-period-id", type=int, required=True)
    p.add_argument("--dry-run", action="store_true", help="Do not commit, just print the reconciled costs")
    args = p.parse_args()

    configure_logging()
    sys.exit(asyncio.run(recalculate(args.work_period_id, args.dry_run)))


if __name__ == "__main__":
    main()
