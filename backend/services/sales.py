"""
Sales aggregation for a work period.

Orders that decrease inventory are reduced to one SalesData per
(menu item, portion). Order tag values that point at another sellable
(menu_item_id > 0) add tag quantity x order quantity to that sellable's
entry, creating it when the sellable was never sold on its own.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.converters import to_decimal
from db.models import MenuItemPortion, Order, Recipe, Ticket, WorkPeriod
from services.menu import get_menu_item_by_id
from services.work_periods import period_window

logger = logging.getLogger(__name__)

SalesKey = Tuple[int, Optional[str]]


@dataclass
class SalesData:
    menu_item_id: int
    menu_item_name: str
    portion_name: Optional[str]
    total: Decimal = Decimal("0")

    @property
    def key(self) -> SalesKey:
        return (self.menu_item_id, self.portion_name)


async def get_orders_from_recipes(db: AsyncSession, work_period: WorkPeriod) -> List[Order]:
    """Inventory-decreasing orders in the period whose menu item has a recipe"""
    recipe_menu_item_ids = (
        select(MenuItemPortion.menu_item_id)
        .join(Recipe, Recipe.portion_id == MenuItemPortion.id)
        .distinct()
    )
    res = await db.execute(
        select(Order)
        .join(Ticket, Order.ticket_id == Ticket.id)
        .options(selectinload(Order.tag_values))
        .where(*period_window(Ticket.date, work_period))
        .where(Order.decrease_inventory.is_(True))
        .where(Order.menu_item_id.in_(recipe_menu_item_ids))
        .order_by(Ticket.date, Order.id)
    )
    return list(res.scalars().all())


async def get_sales(db: AsyncSession, work_period: WorkPeriod) -> List[SalesData]:
    orders = await get_orders_from_recipes(db, work_period)

    sales: Dict[SalesKey, SalesData] = {}
    for order in orders:
        key = (order.menu_item_id, order.portion_name)
        sd = sales.get(key)
        if sd is None:
            sd = sales[key] = SalesData(
                menu_item_id=order.menu_item_id,
                menu_item_name=order.menu_item_name,
                portion_name=order.portion_name,
            )
        sd.total += to_decimal(order.quantity)

    # (tag menu item id, tag portion name) -> sum(tag qty * order qty)
    tag_totals: Dict[SalesKey, Decimal] = {}
    for order in orders:
        for tv in order.tag_values:
            if not tv.menu_item_id or tv.menu_item_id <= 0:
                continue
            key = (tv.menu_item_id, tv.portion_name)
            tag_totals[key] = tag_totals.get(key, Decimal("0")) + to_decimal(tv.quantity) * to_decimal(order.quantity)

    for (menu_item_id, portion_name), total in tag_totals.items():
        menu_item = await get_menu_item_by_id(db, menu_item_id)
        if menu_item is None or not menu_item.portions:
            logger.warning(
                "Order tag refers to menu item %s which has no portions; %s units skipped",
                menu_item_id,
                total,
            )
            continue
        portion = menu_item.get_portion(portion_name)
        key = (menu_item.id, portion.name)
        sd = sales.get(key)
        if sd is None:
            sd = sales[key] = SalesData(
                menu_item_id=menu_item.id,
                menu_item_name=menu_item.name,
                portion_name=portion.name,
            )
        sd.total += total

    return list(sales.values())
