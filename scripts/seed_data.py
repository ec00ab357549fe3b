"""Seed the database with demo profiles, a machine, catalog parts and two work orders."""

import asyncio
from datetime import datetime, timedelta, timezone

from app.db.engine import create_all, async_session_factory
from app.db import crud
from app.schemas import WorkOrderCreate
from app.services import work_orders
from app.services.auth import AuthContext


async def seed():
    await create_all()

    async with async_session_factory() as db:
        if await crud.get_profile_by_email(db, "admin@demo.local"):
            print("Demo data already exists, skipping seed.")
            return

        admin = await crud.create_profile(db, "admin@demo.local", "admin", "Demo Admin")
        tech = await crud.create_profile(db, "tech@demo.local", "technician", "Laura Técnica")
        client = await crud.create_profile(db, "client@demo.local", "client", "Metalurgia Norte")
        machine = await crud.create_machine(db, client.id, "CNC-001", "Haas VF-2", "SN-12345")
        print(f"Created profiles: {admin.email}, {tech.email}, {client.email}")

        for name, cost, category, in_stock in [
            ("Filtro de Aceite", 25.99, "mechanical", True),
            ("Correa de Transmisión", 45.5, "mechanical", True),
            ("Sensor de Temperatura", 89.99, "electrical", False),
            ("Válvula Hidráulica", 156.75, "hydraulic", True),
            ("Cilindro Neumático", 234.0, "pneumatic", True),
            ("Lubricante Industrial", 18.99, "consumables", True),
        ]:
            await crud.create_part(db, name, cost, category, in_stock)
        print("Created 6 catalog parts")

        auth = AuthContext.for_profile(admin)
        now = datetime.now(timezone.utc)
        wo1 = await work_orders.create_work_order(db, WorkOrderCreate(
            client_id=client.id, machine_id=machine.id, type="preventive_maintenance",
            title="Mantenimiento Preventivo CNC-001", estimated_date=now + timedelta(hours=6),
            technician_id=tech.id,
        ), auth)
        wo2 = await work_orders.create_work_order(db, WorkOrderCreate(
            client_id=client.id, type="installation", priority="high",
            title="Instalación Nueva Máquina", description="Install and level a new lathe",
            estimated_date=now + timedelta(days=3),
        ), auth)
        print(f"Created work orders: {wo1.id}, {wo2.id}")

    print("\nSeed complete. Issue a token with: python -m app.cli issue-token --email admin@demo.local")


if __name__ == "__main__":
    asyncio.run(seed())
