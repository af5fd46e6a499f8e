from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import InventoryItem


async def get_inventory_item_names(db: AsyncSession) -> List[str]:
    res = await db.execute(
        select(InventoryItem.name)
        .where(InventoryItem.name.is_not(None), InventoryItem.name != "")
        .distinct()
        .order_by(InventoryItem.name)
    )
    return list(res.scalars().all())


async def get_group_codes(db: AsyncSession) -> List[str]:
    res = await db.execute(
        select(InventoryItem.group_code)
        .where(InventoryItem.group_code.is_not(None), InventoryItem.group_code != "")
        .distinct()
        .order_by(InventoryItem.group_code)
    )
    return list(res.scalars().all())
