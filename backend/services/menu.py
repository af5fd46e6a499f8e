from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from db.models import MenuItem


async def get_menu_item_by_id(db: AsyncSession, menu_item_id: int) -> Optional[MenuItem]:
    """Menu item with its ordered portions"""
    res = await db.execute(
        select(MenuItem)
        .options(selectinload(MenuItem.portions))
        .where(MenuItem.id == menu_item_id)
    )
    return res.scalar_one_or_none()
