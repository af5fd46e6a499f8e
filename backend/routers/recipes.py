from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.converters import to_decimal
from db.database import get_async_session
from db.models import Recipe as RecipeModel, RecipeItem as RecipeItemModel
from schemas.recipes import RecipeCreate, RecipeUpdate
from services.recipes import get_recipe
from services.validators import validate_recipe_save

router = APIRouter()


def _recipe_items(payload: RecipeCreate) -> List[RecipeItemModel]:
    return [
        RecipeItemModel(inventory_item_id=ri.inventory_item_id, quantity=to_decimal(ri.quantity))
        for ri in payload.items
    ]


@router.get("/", response_model=List[Dict])
async def get_recipes(db: AsyncSession = Depends(get_async_session)):
    res = await db.execute(select(RecipeModel).options(selectinload(RecipeModel.items)).order_by(RecipeModel.id))
    return [r.to_schema for r in res.scalars().all()]


@router.get("/{recipe_id}", response_model=Dict)
async def get_recipe_by_id(recipe_id: int, db: AsyncSession = Depends(get_async_session)):
    recipe = await get_recipe(db, recipe_id)
    if not recipe:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Recipe with id {recipe_id} not found")
    return recipe.to_schema


@router.post("/", response_model=Dict, status_code=status.HTTP_201_CREATED)
async def create_recipe(payload: RecipeCreate, db: AsyncSession = Depends(get_async_session)):
    recipe = RecipeModel(
        name=payload.name,
        portion_id=payload.portion_id,
        fixed_cost=to_decimal(payload.fixed_cost),
        items=_recipe_items(payload),
    )
    error = await validate_recipe_save(db, recipe)
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    db.add(recipe)
    await db.commit()
    recipe = await get_recipe(db, recipe.id)
    return recipe.to_schema


@router.put("/{recipe_id}", response_model=Dict)
async def update_recipe(recipe_id: int, payload: RecipeUpdate, db: AsyncSession = Depends(get_async_session)):
    recipe = await get_recipe(db, recipe_id)
    if not recipe:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Recipe with id {recipe_id} not found")

    recipe.name = payload.name
    recipe.portion_id = payload.portion_id
    recipe.fixed_cost = to_decimal(payload.fixed_cost)
    recipe.items = _recipe_items(payload)

    error = await validate_recipe_save(db, recipe)
    if error:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    await db.commit()
    recipe = await get_recipe(db, recipe_id)
    return recipe.to_schema
