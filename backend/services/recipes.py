from typing import Dict, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from db.models import MenuItemPortion, Recipe


RecipeKey = Tuple[int, str]


async def count_recipes(db: AsyncSession) -> int:
    res = await db.execute(select(func.count()).select_from(Recipe))
    return int(res.scalar_one() or 0)


async def get_recipe(db: AsyncSession, recipe_id: int) -> Optional[Recipe]:
    res = await db.execute(
        select(Recipe)
        .options(selectinload(Recipe.items), selectinload(Recipe.portion))
        .where(Recipe.id == recipe_id)
    )
    return res.scalar_one_or_none()


async def load_recipes_by_portion(db: AsyncSession) -> Dict[RecipeKey, Recipe]:
    """Recipes keyed by (menu item id, portion name) with lines preloaded"""
    res = await db.execute(
        select(Recipe)
        .join(MenuItemPortion, Recipe.portion_id == MenuItemPortion.id)
        .options(selectinload(Recipe.items), selectinload(Recipe.portion))
        .order_by(Recipe.id)
    )
    out: Dict[RecipeKey, Recipe] = {}
    for recipe in res.scalars().all():
        out[(recipe.portion.menu_item_id, recipe.portion.name)] = recipe
    return out
