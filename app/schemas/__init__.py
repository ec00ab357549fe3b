"""Pydantic request/response schemas."""

from app.schemas.enums import (
    WorkOrderType, WorkOrderStatus, Priority, DocumentKind, DocumentStatus, Role,
)
from app.schemas.work_order import (
    WorkOrderCreate, WorkOrderFilters, WorkOrderStatusUpdate, TechnicianAssign, KPIRead,
)
from app.schemas.part import PartLine, PartCreate, PartRead
from app.schemas.session import SessionStart, SessionDetails, SessionFinish
from app.schemas.document import DocumentItem, DocumentCreate, SignatureIn, RejectIn
from app.schemas.profile import ProfileCreate, ProfileRead, MachineCreate, MachineRead

__all__ = [
    "WorkOrderType", "WorkOrderStatus", "Priority", "DocumentKind", "DocumentStatus", "Role",
    "WorkOrderCreate", "WorkOrderFilters", "WorkOrderStatusUpdate", "TechnicianAssign", "KPIRead",
    "PartLine", "PartCreate", "PartRead",
    "SessionStart", "SessionDetails", "SessionFinish",
    "DocumentItem", "DocumentCreate", "SignatureIn", "RejectIn",
    "ProfileCreate", "ProfileRead", "MachineCreate", "MachineRead",
]
