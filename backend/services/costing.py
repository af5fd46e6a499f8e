"""
Realized cost per sold portion.

Runs after consumption is known for real (physical counts entered, usually
at the next period's open). Each recipe line's theoretical cost is scaled
by actual / predicted consumption of its inventory item. Sales are read
again for the period rather than reused from the creation pass.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from core.converters import round_cost, to_decimal
from db.models import PeriodicConsumption, WorkPeriod
from services.recipes import load_recipes_by_portion
from services.sales import get_sales

logger = logging.getLogger(__name__)


async def calculate_cost(db: AsyncSession, pc: PeriodicConsumption, work_period: WorkPeriod) -> int:
    """Update CostItem.cost in place; returns the number of cost items updated"""
    sales = await get_sales(db, work_period)
    recipes = await load_recipes_by_portion(db)
    items_by_inventory_id = {pci.inventory_item_id: pci for pci in pc.items}
    cost_items_by_portion = {ci.portion_id: ci for ci in pc.cost_items}

    updated = 0
    for sale in sales:
        recipe = recipes.get(sale.key)
        if recipe is None:
            continue

        total_cost = to_decimal(recipe.fixed_cost)
        for recipe_item in recipe.costed_items:
            pci = items_by_inventory_id.get(recipe_item.inventory_item_id)
            if pci is None or pci.predicted_consumption <= 0:
                continue
            cost = to_decimal(recipe_item.quantity) * (to_decimal(pci.cost) / to_decimal(pci.unit_multiplier))
            total_cost += (to_decimal(pci.actual_consumption) * cost) / pci.predicted_consumption

        ci = cost_items_by_portion.get(recipe.portion_id)
        if ci is None:
            # reconciliation never creates cost items
            logger.debug("No cost item for portion %s in %s", recipe.portion_id, pc.name)
            continue
        ci.cost = round_cost(total_cost)
        updated += 1

    logger.info("Recalculated %d cost items for work period %s", updated, work_period.id)
    return updated
