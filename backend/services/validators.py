"""
Save/delete validators.

Each returns an error message for the user, or an empty string when the
operation may proceed. Nothing is raised and nothing is written.
"""

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import InventoryItem, MenuItem, MenuItemPortion, PeriodicConsumptionItem, Recipe


SAVE_ERROR_ZERO_OR_NULL_INVENTORY_LINES = "Recipe lines should have an inventory item and a quantity greater than zero."
A_PORTION_SHOULD_BE_SELECTED = "A portion should be selected."
THERE_IS_ANOTHER_RECIPE_FOR = "There is another recipe for {}."
DELETE_ERROR_INVENTORY_ITEM_USED_IN_END_OF_DAY_RECORD = (
    "This inventory item is used in an end of day record and cannot be deleted."
)


async def validate_recipe_save(db: AsyncSession, recipe: Recipe) -> str:
    if any(ri.inventory_item_id is None or not ri.quantity for ri in recipe.items):
        return SAVE_ERROR_ZERO_OR_NULL_INVENTORY_LINES
    if recipe.portion_id is None:
        return A_PORTION_SHOULD_BE_SELECTED

    # the recipe may be pending or modified; do not flush it while checking
    with db.sync_session.no_autoflush:
        stmt = select(Recipe.id).where(Recipe.portion_id == recipe.portion_id)
        if recipe.id is not None:
            stmt = stmt.where(Recipe.id != recipe.id)
        duplicate = (await db.execute(select(stmt.exists()))).scalar()
        if duplicate:
            res = await db.execute(
                select(MenuItem.name, MenuItemPortion.name)
                .join(MenuItemPortion, MenuItemPortion.menu_item_id == MenuItem.id)
                .where(MenuItemPortion.id == recipe.portion_id)
            )
            row = res.first()
            label = f"{row[0]} ({row[1]})" if row else str(recipe.portion_id)
            return THERE_IS_ANOTHER_RECIPE_FOR.format(label)
    return ""


async def validate_inventory_item_delete(db: AsyncSession, inventory_item: InventoryItem) -> str:
    used = (
        await db.execute(
            select(exists().where(PeriodicConsumptionItem.inventory_item_id == inventory_item.id))
        )
    ).scalar()
    if used:
        return DELETE_ERROR_INVENTORY_ITEM_USED_IN_END_OF_DAY_RECORD
    return ""
