"""
Work period state: current/previous lookups and open/close transitions.

Transitions are committed before the status change is published, so
handlers always see the new state.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.events import WorkPeriodStatus, WorkPeriodStatusChanged, emit_work_period_event, utcnow
from core.exceptions import WorkPeriodStateError
from db.models import WorkPeriod

logger = logging.getLogger(__name__)


async def get_work_period(db: AsyncSession, work_period_id: int) -> Optional[WorkPeriod]:
    return await db.get(WorkPeriod, work_period_id)


async def get_current_work_period(db: AsyncSession) -> Optional[WorkPeriod]:
    res = await db.execute(
        select(WorkPeriod).order_by(WorkPeriod.start_date.desc(), WorkPeriod.id.desc()).limit(1)
    )
    return res.scalar_one_or_none()


async def get_previous_work_period(db: AsyncSession, work_period: Optional[WorkPeriod]) -> Optional[WorkPeriod]:
    if work_period is None:
        return None
    res = await db.execute(
        select(WorkPeriod)
        .where(WorkPeriod.id != work_period.id)
        .where(
            (WorkPeriod.start_date < work_period.start_date)
            | and_(WorkPeriod.start_date == work_period.start_date, WorkPeriod.id < work_period.id)
        )
        .order_by(WorkPeriod.start_date.desc(), WorkPeriod.id.desc())
        .limit(1)
    )
    return res.scalar_one_or_none()


def period_window(date_column, work_period: WorkPeriod) -> List:
    """Rows dated after the period start and, once closed, not after its end"""
    conditions = [date_column > work_period.start_date]
    if work_period.end_date is not None:
        conditions.append(date_column <= work_period.end_date)
    return conditions


async def start_work_period(
    db: AsyncSession,
    *,
    description: Optional[str] = None,
    now: Optional[datetime] = None,
) -> WorkPeriod:
    current = await get_current_work_period(db)
    if current is not None and current.is_open:
        raise WorkPeriodStateError(f"Work period {current.id} is already open")

    wp = WorkPeriod(start_date=now or utcnow(), start_description=description)
    db.add(wp)
    await db.commit()
    logger.info("Work period %s opened at %s", wp.id, wp.start_date)

    await emit_work_period_event(
        WorkPeriodStatusChanged(
            work_period_id=wp.id,
            old_status=WorkPeriodStatus.CLOSED if current is not None else None,
            new_status=WorkPeriodStatus.OPENED,
        )
    )
    return wp


async def end_work_period(
    db: AsyncSession,
    *,
    description: Optional[str] = None,
    now: Optional[datetime] = None,
) -> WorkPeriod:
    current = await get_current_work_period(db)
    if current is None or not current.is_open:
        raise WorkPeriodStateError("There is no open work period")

    current.end_date = now or utcnow()
    current.end_description = description
    await db.commit()
    logger.info("Work period %s closed at %s", current.id, current.end_date)

    await emit_work_period_event(
        WorkPeriodStatusChanged(
            work_period_id=current.id,
            old_status=WorkPeriodStatus.OPENED,
            new_status=WorkPeriodStatus.CLOSED,
        )
    )
    return current
