from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, Field

from app.schemas.enums import Role


class ProfileCreate(BaseModel):
    email: str = Field(min_length=3)
    display_name: str = ""
    phone: str = ""
    role: Role = Role.CLIENT


class ProfileRead(BaseModel):
    id: str
    email: str
    display_name: str
    phone: str = ""
    role: str
    is_active: bool = True
    created_at: datetime

    model_config = {"from_attributes": True}


class MachineCreate(BaseModel):
    client_id: str
    name: str = Field(min_length=1)
    model: str = ""
    serial_number: str = ""


class MachineRead(BaseModel):
    id: str
    client_id: str
    name: str
    model: str
    serial_number: str

    model_config = {"from_attributes": True}
