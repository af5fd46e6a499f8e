"""
Work period lifecycle events.

Handlers are registered explicitly and receive a typed
WorkPeriodStatusChanged payload. They run one after another, in
registration order, so two costing passes never overlap.
"""

import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Union

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Naive UTC now; work period dates are stored without a zone"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class WorkPeriodStatus(str, Enum):
    OPENED = "opened"
    CLOSED = "closed"


@dataclass(frozen=True)
class WorkPeriodStatusChanged:
    work_period_id: int
    old_status: Optional[WorkPeriodStatus]
    new_status: WorkPeriodStatus
    timestamp: datetime = field(default_factory=utcnow)


WorkPeriodHandler = Callable[[WorkPeriodStatusChanged], Union[Awaitable[None], None]]

work_period_handlers: List[WorkPeriodHandler] = []


def register_work_period_handler(handler: WorkPeriodHandler) -> None:
    if handler in work_period_handlers:
        return
    work_period_handlers.append(handler)
    logger.info("Registered work period handler %s", getattr(handler, "__name__", repr(handler)))


def unregister_work_period_handler(handler: WorkPeriodHandler) -> None:
    if handler in work_period_handlers:
        work_period_handlers.remove(handler)


async def emit_work_period_event(event: WorkPeriodStatusChanged) -> None:
    """Deliver an event to every handler; the first failure propagates"""
    if not work_period_handlers:
        logger.debug("No handlers registered for work period %s", event.new_status.value)
        return

    logger.info("Emitting work period %s for period %s", event.new_status.value, event.work_period_id)
    for handler in list(work_period_handlers):
        try:
            result = handler(event)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception(
                "Handler %s failed for work period %s",
                getattr(handler, "__name__", repr(handler)),
                event.work_period_id,
            )
            raise
