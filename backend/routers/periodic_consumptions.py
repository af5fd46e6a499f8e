from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.converters import round_quantity
from core.exceptions import CostingError
from db.database import get_async_session
from schemas.inventory import PhysicalInventoryUpdate
from services.consumption import (
    get_current_periodic_consumption,
    get_periodic_consumption_by_id,
    get_previous_periodic_consumption,
)
from services.costing import calculate_cost
from services.work_periods import get_current_work_period

router = APIRouter()


async def _require_current_work_period(db: AsyncSession):
    wp = await get_current_work_period(db)
    if wp is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No work period found")
    return wp


async def _require_periodic_consumption(db: AsyncSession, periodic_consumption_id: int):
    pc = await get_periodic_consumption_by_id(db, periodic_consumption_id)
    if pc is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Periodic consumption with id {periodic_consumption_id} not found"
        )
    return pc


@router.get("/current", response_model=Dict)
async def get_current(db: AsyncSession = Depends(get_async_session)):
    """Current period's record, created on first request"""
    wp = await _require_current_work_period(db)
    try:
        pc = await get_current_periodic_consumption(db, wp)
        await db.commit()
    except CostingError as e:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return pc.to_schema


@router.get("/previous", response_model=Dict)
async def get_previous(db: AsyncSession = Depends(get_async_session)):
    wp = await _require_current_work_period(db)
    pc = await get_previous_periodic_consumption(db, wp)
    if pc is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No previous periodic consumption")
    return pc.to_schema


@router.get("/{periodic_consumption_id}", response_model=Dict)
async def get_periodic_consumption(periodic_consumption_id: int, db: AsyncSession = Depends(get_async_session)):
    pc = await _require_periodic_consumption(db, periodic_consumption_id)
    return pc.to_schema


@router.post("/{periodic_consumption_id}/calculate-cost", response_model=Dict)
async def recalculate_cost(periodic_consumption_id: int, db: AsyncSession = Depends(get_async_session)):
    """Reconcile cost items against actual consumption of the record's own period"""
    pc = await _require_periodic_consumption(db, periodic_consumption_id)
    await calculate_cost(db, pc, pc.work_period)
    await db.commit()
    return pc.to_schema


@router.put("/{periodic_consumption_id}/items/{item_id}/physical-inventory", response_model=Dict)
async def set_physical_inventory(
    periodic_consumption_id: int,
    item_id: int,
    payload: PhysicalInventoryUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    pc = await _require_periodic_consumption(db, periodic_consumption_id)
    pci = next((x for x in pc.items if x.id == item_id), None)
    if pci is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Item {item_id} not found in periodic consumption {periodic_consumption_id}"
        )
    pci.physical_inventory = (
        round_quantity(payload.physical_inventory) if payload.physical_inventory is not None else None
    )
    await db.commit()
    return pci.to_schema
