"""
Costing reactions to work period transitions.

closed: make sure the closed period has a periodic consumption record.
A record created on demand while the period was open only gets its end
date and name stamped.
opened: reconcile the previous period's cost items, now that physical
counts for it may have been entered.
Nothing happens while no recipe exists.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.events import WorkPeriodStatus, WorkPeriodStatusChanged
from core.exceptions import CostingError
from db.models import WorkPeriod
from services.consumption import get_current_periodic_consumption, get_periodic_consumption, period_name
from services.costing import calculate_cost
from services.recipes import count_recipes
from services.work_periods import get_previous_work_period, get_work_period

logger = logging.getLogger(__name__)


async def _on_closed(db: AsyncSession, work_period: WorkPeriod) -> None:
    pc = await get_periodic_consumption(db, work_period.id)
    if pc is None:
        await get_current_periodic_consumption(db, work_period)
    elif pc.end_date is None:
        pc.end_date = work_period.end_date
        pc.name = period_name(work_period)
        logger.info("Stamped end date on periodic consumption %s", pc.id)
    await db.commit()


async def _on_opened(db: AsyncSession, work_period: WorkPeriod) -> None:
    previous = await get_previous_work_period(db, work_period)
    if previous is None:
        return
    pc = await get_periodic_consumption(db, previous.id)
    if pc is None:
        logger.info("Work period %s has no periodic consumption to reconcile", previous.id)
        return
    await calculate_cost(db, pc, previous)
    await db.commit()


def make_work_period_handler(session_maker: async_sessionmaker):
    async def on_work_period_status_changed(event: WorkPeriodStatusChanged) -> None:
        async with session_maker() as db:
            if await count_recipes(db) <= 0:
                logger.debug("No recipes defined, skipping costing for work period %s", event.work_period_id)
                return

            work_period = await get_work_period(db, event.work_period_id)
            if work_period is None:
                logger.warning("Work period %s not found", event.work_period_id)
                return

            try:
                if event.new_status == WorkPeriodStatus.CLOSED:
                    await _on_closed(db, work_period)
                else:
                    await _on_opened(db, work_period)
            except CostingError:
                await db.rollback()
                raise
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error("Costing for work period %s failed: %s", event.work_period_id, e)
                raise CostingError(
                    f"Costing for work period {event.work_period_id} ({event.new_status.value}) failed"
                ) from e

    return on_work_period_status_changed
