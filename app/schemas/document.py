from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, Field

from app.schemas.enums import DocumentKind


class DocumentItem(BaseModel):
    part_id: str | None = None
    description: str = Field(min_length=1)
    quantity: float = Field(gt=0)
    unit_price: float = Field(ge=0)


class DocumentCreate(BaseModel):
    kind: DocumentKind
    items: list[DocumentItem] = Field(min_length=1)
    tax_rate: float | None = Field(default=None, ge=0)
    notes: str = ""
    valid_until: datetime | None = None
    draft: bool = False


class SignatureIn(BaseModel):
    signature: str = Field(min_length=1)  # opaque image payload (data URI or URL)


class RejectIn(BaseModel):
    reason: str = ""
