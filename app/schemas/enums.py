"""Canonical enumerations.

Screens of the mobile app used several spellings for the same concept; each
enumeration below is the superset of observed values, and the alias tables
map the alternate spellings onto it. Unknown values are rejected, never
dropped.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated

from pydantic import BeforeValidator


class WorkOrderType(str, Enum):
    PREVENTIVE_MAINTENANCE = "preventive_maintenance"
    PIPING = "piping"
    INSTALLATION = "installation"
    MEASUREMENT = "measurement"
    IMMEDIATE_SERVICE = "immediate_service"


class WorkOrderStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    ARCHIVED = "archived"


class Priority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class DocumentKind(str, Enum):
    QUOTE = "quote"
    PURCHASE_ORDER = "purchase_order"
    INVOICE = "invoice"


class DocumentStatus(str, Enum):
    DRAFT = "draft"
    PENDING_SIGNATURE = "pending_signature"
    SIGNED = "signed"
    REJECTED = "rejected"


class Role(str, Enum):
    ADMIN = "admin"
    TECHNICIAN = "technician"
    CLIENT = "client"


TYPE_ALIASES = {
    "preventive": WorkOrderType.PREVENTIVE_MAINTENANCE,
    "immediate": WorkOrderType.IMMEDIATE_SERVICE,
}
STATUS_ALIASES = {
    "completed": WorkOrderStatus.DONE,
}
PRIORITY_ALIASES = {
    "medium": Priority.NORMAL,
}


def _normalizer(aliases: dict):
    def _normalize(value):
        if isinstance(value, str):
            key = value.strip().lower().replace(" ", "_")
            return aliases.get(key, key)
        return value
    return _normalize


normalize_type = _normalizer(TYPE_ALIASES)
normalize_status = _normalizer(STATUS_ALIASES)
normalize_priority = _normalizer(PRIORITY_ALIASES)

WorkOrderTypeField = Annotated[WorkOrderType, BeforeValidator(normalize_type)]
WorkOrderStatusField = Annotated[WorkOrderStatus, BeforeValidator(normalize_status)]
PriorityField = Annotated[Priority, BeforeValidator(normalize_priority)]
