from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, Field


class PartLine(BaseModel):
    """A part consumed during a work session."""

    part_id: str
    name: str = Field(min_length=1)
    quantity: int = Field(gt=0)
    estimated_cost: float = Field(ge=0)

    @property
    def line_total(self) -> float:
        return round(self.quantity * self.estimated_cost, 2)


class PartCreate(BaseModel):
    name: str = Field(min_length=1)
    cost: float = Field(ge=0)
    category: str = ""
    in_stock: bool = True


class PartRead(BaseModel):
    id: str
    name: str
    cost: float
    category: str
    in_stock: bool
    created_at: datetime

    model_config = {"from_attributes": True}
