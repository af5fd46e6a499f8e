from typing import Optional

from pydantic import BaseModel


class WorkPeriodTransition(BaseModel):
    description: Optional[str] = None
