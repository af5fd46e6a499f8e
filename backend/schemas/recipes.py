from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class RecipeItemIn(BaseModel):
    inventory_item_id: Optional[int] = None
    quantity: float = 0


class RecipeCreate(BaseModel):
    name: Optional[str] = None
    portion_id: Optional[int] = None
    fixed_cost: float = 0
    items: List[RecipeItemIn] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class RecipeUpdate(RecipeCreate):
    pass
