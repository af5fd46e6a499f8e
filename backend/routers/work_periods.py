from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import CostingError, WorkPeriodStateError
from db.database import get_async_session
from schemas.work_periods import WorkPeriodTransition
from services.work_periods import end_work_period, get_current_work_period, start_work_period

router = APIRouter()


@router.get("/current", response_model=Dict)
async def get_current(db: AsyncSession = Depends(get_async_session)):
    wp = await get_current_work_period(db)
    if wp is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No work period found")
    return wp.to_schema


@router.post("/start", response_model=Dict, status_code=status.HTTP_201_CREATED)
async def start(payload: Optional[WorkPeriodTransition] = None, db: AsyncSession = Depends(get_async_session)):
    """Open a new work period; previous period costs are reconciled"""
    try:
        wp = await start_work_period(db, description=payload.description if payload else None)
    except WorkPeriodStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except CostingError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return wp.to_schema


@router.post("/end", response_model=Dict)
async def end(payload: Optional[WorkPeriodTransition] = None, db: AsyncSession = Depends(get_async_session)):
    """Close the open work period; its periodic consumption is created"""
    try:
        wp = await end_work_period(db, description=payload.description if payload else None)
    except WorkPeriodStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except CostingError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return wp.to_schema
