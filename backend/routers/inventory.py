from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.converters import to_decimal
from db.database import get_async_session
from db.models import InventoryItem as InventoryItemModel
from schemas.inventory import InventoryItemCreate
from services.inventory import get_group_codes, get_inventory_item_names
from services.validators import validate_inventory_item_delete

router = APIRouter()


@router.get("/item-names", response_model=List[str])
async def list_inventory_item_names(db: AsyncSession = Depends(get_async_session)):
    return await get_inventory_item_names(db)


@router.get("/group-codes", response_model=List[str])
async def list_group_codes(db: AsyncSession = Depends(get_async_session)):
    return await get_group_codes(db)


@router.get("/items", response_model=List[Dict])
async def list_inventory_items(db: AsyncSession = Depends(get_async_session)):
    res = await db.execute(select(InventoryItemModel).order_by(InventoryItemModel.name))
    return [it.to_schema for it in res.scalars().all()]


@router.post("/items", response_model=Dict, status_code=status.HTTP_201_CREATED)
async def create_inventory_item(payload: InventoryItemCreate, db: AsyncSession = Depends(get_async_session)):
    item = InventoryItemModel(
        name=payload.name,
        group_code=payload.group_code,
        base_unit=payload.base_unit,
        transaction_unit=payload.transaction_unit,
        transaction_unit_multiplier=to_decimal(payload.transaction_unit_multiplier),
    )
    db.add(item)
    await db.commit()
    return item.to_schema


@router.delete("/items/{inventory_item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_inventory_item(inventory_item_id: int, db: AsyncSession = Depends(get_async_session)):
    item = await db.get(InventoryItemModel, inventory_item_id)
    if not item:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Inventory item with id {inventory_item_id} not found"
        )

    error = await validate_inventory_item_delete(db, item)
    if error:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=error)

    await db.delete(item)
    await db.commit()
    return None
