from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from db.models import InventoryTransaction, InventoryTransactionItem, WorkPeriod
from services.work_periods import period_window


async def get_transaction_items(db: AsyncSession, work_period: WorkPeriod) -> List[InventoryTransactionItem]:
    """Flat list of receipt lines dated inside the work period"""
    res = await db.execute(
        select(InventoryTransaction)
        .options(selectinload(InventoryTransaction.items))
        .where(*period_window(InventoryTransaction.date, work_period))
        .order_by(InventoryTransaction.date, InventoryTransaction.id)
    )
    return [ti for t in res.scalars().all() for ti in t.items]


def group_by_inventory_item(items: List[InventoryTransactionItem]) -> Dict[int, List[InventoryTransactionItem]]:
    out: Dict[int, List[InventoryTransactionItem]] = {}
    for ti in items:
        out.setdefault(ti.inventory_item_id, []).append(ti)
    return out
