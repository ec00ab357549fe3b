"""SQLAlchemy ORM models.

Primary collections: work_orders, work_sessions.
Lookup collections: profiles, machines, parts_catalog, documents, portal_links.
"""

from app.models.base import Base
from app.models.auth_models import Profile, UserSession
from app.models.machine import Machine
from app.models.part import Part
from app.models.work_order import WorkOrder
from app.models.session import WorkSession
from app.models.document import Document
from app.models.portal_link import PortalLink

__all__ = [
    "Base", "Profile", "UserSession",
    "Machine", "Part",
    "WorkOrder", "WorkSession", "Document", "PortalLink",
]
