from typing import Optional

from pydantic import BaseModel, field_validator


class InventoryItemCreate(BaseModel):
    name: str
    group_code: Optional[str] = None
    base_unit: Optional[str] = None
    transaction_unit: Optional[str] = None
    transaction_unit_multiplier: Optional[float] = None

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator("group_code", "base_unit", "transaction_unit")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class PhysicalInventoryUpdate(BaseModel):
    # null clears the count
    physical_inventory: Optional[float] = None

    @field_validator("physical_inventory")
    @classmethod
    def _non_negative(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError("physical_inventory must be >= 0")
        return v
