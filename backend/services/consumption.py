"""
Periodic consumption records.

A record is created once per work period, the first time it is asked for:
one item per inventory item (opening stock and cost carried over from the
previous period, purchases from this period's receipts, moving-average
cost), then theoretical consumption and one predicted cost per sold
portion, then a first reconciliation pass.
"""

import logging
from decimal import Decimal
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.converters import round_cost, round_quantity, to_decimal, unit_multiplier
from core.exceptions import ConsumptionInvariantError
from db.models import (
    CostItem,
    InventoryItem,
    PeriodicConsumption,
    PeriodicConsumptionItem,
    WorkPeriod,
)
from services.costing import calculate_cost
from services.recipes import load_recipes_by_portion
from services.sales import get_sales
from services.transactions import get_transaction_items, group_by_inventory_item
from services.work_periods import get_previous_work_period

logger = logging.getLogger(__name__)


def period_name(work_period: WorkPeriod) -> str:
    if work_period.end_date is None:
        return f"{work_period.start_date:%Y-%m-%d %H:%M} -"
    return f"{work_period.start_date:%Y-%m-%d %H:%M} - {work_period.end_date:%Y-%m-%d %H:%M}"


async def get_periodic_consumption(db: AsyncSession, work_period_id: int) -> Optional[PeriodicConsumption]:
    res = await db.execute(
        select(PeriodicConsumption)
        .options(
            selectinload(PeriodicConsumption.items),
            selectinload(PeriodicConsumption.cost_items),
        )
        .where(PeriodicConsumption.work_period_id == work_period_id)
    )
    return res.scalar_one_or_none()


async def get_periodic_consumption_by_id(db: AsyncSession, periodic_consumption_id: int) -> Optional[PeriodicConsumption]:
    res = await db.execute(
        select(PeriodicConsumption)
        .options(
            selectinload(PeriodicConsumption.items),
            selectinload(PeriodicConsumption.cost_items),
            selectinload(PeriodicConsumption.work_period),
        )
        .where(PeriodicConsumption.id == periodic_consumption_id)
    )
    return res.scalar_one_or_none()


async def get_previous_periodic_consumption(db: AsyncSession, work_period: WorkPeriod) -> Optional[PeriodicConsumption]:
    previous = await get_previous_work_period(db, work_period)
    if previous is None:
        return None
    return await get_periodic_consumption(db, previous.id)


async def get_current_periodic_consumption(db: AsyncSession, work_period: WorkPeriod) -> PeriodicConsumption:
    """Existing record of the period, or a new one added to the session (not committed)"""
    pc = await get_periodic_consumption(db, work_period.id)
    if pc is not None:
        return pc

    pc = await create_periodic_consumption(db, work_period)
    db.add(pc)
    await db.flush()
    logger.info(
        "Created periodic consumption %s for work period %s (%d items, %d cost items)",
        pc.id,
        work_period.id,
        len(pc.items),
        len(pc.cost_items),
    )
    return pc


async def create_periodic_consumption(db: AsyncSession, work_period: WorkPeriod) -> PeriodicConsumption:
    pc = PeriodicConsumption(
        work_period_id=work_period.id,
        name=period_name(work_period),
        start_date=work_period.start_date,
        end_date=work_period.end_date,
        items=[],
        cost_items=[],
    )
    await create_periodic_consumption_items(db, pc, work_period)
    await update_consumption(db, pc, work_period)
    await calculate_cost(db, pc, work_period)
    return pc


async def create_periodic_consumption_items(db: AsyncSession, pc: PeriodicConsumption, work_period: WorkPeriod) -> None:
    previous_pc = await get_previous_periodic_consumption(db, work_period)
    previous_items: Dict[int, PeriodicConsumptionItem] = (
        {p.inventory_item_id: p for p in previous_pc.items} if previous_pc is not None else {}
    )
    transactions = group_by_inventory_item(await get_transaction_items(db, work_period))

    res = await db.execute(select(InventoryItem).order_by(InventoryItem.id))
    for inventory_item in res.scalars().all():
        pci = PeriodicConsumptionItem(
            inventory_item_id=inventory_item.id,
            inventory_item=inventory_item,
            unit_multiplier=unit_multiplier(inventory_item.transaction_unit_multiplier),
            in_stock=Decimal("0"),
            purchase=Decimal("0"),
            consumption=Decimal("0"),
            cost=Decimal("0"),
        )
        pc.items.append(pci)

        previous_cost = Decimal("0")
        previous_pci = previous_items.get(inventory_item.id)
        if previous_pci is not None:
            pci.in_stock = to_decimal(previous_pci.physical_stock)
            previous_cost = to_decimal(previous_pci.cost) * pci.in_stock

        lines = transactions.get(inventory_item.id, [])
        pci.purchase = round_quantity(
            sum((to_decimal(ti.quantity) * to_decimal(ti.multiplier) for ti in lines), Decimal("0"))
            / pci.unit_multiplier
        )
        total_price = sum((to_decimal(ti.price) * to_decimal(ti.quantity) for ti in lines), Decimal("0"))

        # moving average; without stock the cost keeps its default
        if pci.in_stock + pci.purchase > 0:
            pci.cost = round_cost((total_price + previous_cost) / (pci.in_stock + pci.purchase))


async def update_consumption(db: AsyncSession, pc: PeriodicConsumption, work_period: WorkPeriod) -> None:
    sales = await get_sales(db, work_period)
    recipes = await load_recipes_by_portion(db)
    items_by_inventory_id = {pci.inventory_item_id: pci for pci in pc.items}
    cost_items_by_portion = {ci.portion_id: ci for ci in pc.cost_items}

    for sale in sales:
        recipe = recipes.get(sale.key)
        if recipe is None:
            logger.debug("No recipe for %s/%s, sale skipped", sale.menu_item_name, sale.portion_name)
            continue

        cost = to_decimal(recipe.fixed_cost)
        for recipe_item in recipe.costed_items:
            pci = items_by_inventory_id.get(recipe_item.inventory_item_id)
            if pci is None:
                raise ConsumptionInvariantError(
                    recipe_item.inventory_item_id,
                    portion_name=sale.portion_name,
                    menu_item_id=sale.menu_item_id,
                )
            quantity = to_decimal(recipe_item.quantity)
            pci.consumption += round_quantity((quantity * sale.total) / pci.unit_multiplier)
            if pci.consumption <= 0:
                logger.warning(
                    "Consumption of inventory item %s is %s after selling %s x %s/%s",
                    pci.inventory_item_id,
                    pci.consumption,
                    sale.total,
                    sale.menu_item_name,
                    sale.portion_name,
                )
            cost += quantity * (to_decimal(pci.cost) / pci.unit_multiplier)

        ci = cost_items_by_portion.get(recipe.portion_id)
        if ci is None:
            ci = CostItem(
                portion_id=recipe.portion_id,
                portion=recipe.portion,
                name=sale.menu_item_name,
                quantity=Decimal("0"),
                cost_prediction=Decimal("0"),
                cost=Decimal("0"),
            )
            pc.cost_items.append(ci)
            cost_items_by_portion[recipe.portion_id] = ci
        ci.cost_prediction = round_quantity(cost)
        ci.quantity = round_quantity(sale.total)
