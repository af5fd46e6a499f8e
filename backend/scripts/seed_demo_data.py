import asyncio
import sys
from datetime import timedelta
from pathlib import Path
from decimal import Decimal

"""
Seed a small burger menu with recipes, one purchase and one closed work period.

This script can be run from either:
- backend/: `uv run python scripts/seed_demo_data.py`
- repo root: `uv run python backend/scripts/seed_demo_data.py`
"""

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import select  # noqa: E402
from sqlalchemy.orm import selectinload  # noqa: E402

from core.events import register_work_period_handler, utcnow  # noqa: E402
from core.logging_config import configure_logging  # noqa: E402
from db.database import async_session_maker, create_db_and_tables  # noqa: E402
from db.models import (  # noqa: E402
    InventoryItem,
    InventoryTransaction,
    InventoryTransactionItem,
    MenuItem,
    MenuItemPortion,
    Order,
    OrderTagValue,
    Recipe,
    RecipeItem,
    Ticket,
)
from services.consumption import get_periodic_consumption  # noqa: E402
from services.lifecycle import make_work_period_handler  # noqa: E402
from services.work_periods import end_work_period, start_work_period  # noqa: E402


async def get_or_create_menu_item(session, name: str, portions) -> MenuItem:
    result = await session.execute(
        select(MenuItem).options(selectinload(MenuItem.portions)).where(MenuItem.name == name)
    )
    menu_item = result.scalar_one_or_none()
    if menu_item:
        return menu_item

    menu_item = MenuItem(name=name, portions=[MenuItemPortion(name=p, multiplier=Decimal("1")) for p in portions])
    session.add(menu_item)
    await session.flush()
    return menu_item


async def get_or_create_inventory_item(session, name: str, group_code: str, base_unit: str, transaction_unit: str, multiplier: str) -> InventoryItem:
    result = await session.execute(select(InventoryItem).where(InventoryItem.name == name))
    item = result.scalar_one_or_none()
    if item:
        return item

    item = InventoryItem(
        name=name,
        group_code=group_code,
        base_unit=base_unit,
        transaction_unit=transaction_unit,
        transaction_unit_multiplier=Decimal(multiplier),
    )
    session.add(item)
    await session.flush()
    return item


async def seed():
    await create_db_and_tables()
    register_work_period_handler(make_work_period_handler(async_session_maker))

    base = utcnow() - timedelta(hours=8)

    async with async_session_maker() as session:
        burger = await get_or_create_menu_item(session, "Burger", ["Regular", "Large"])
        extra_beef = await get_or_create_menu_item(session, "Extra Beef", ["Regular"])

        bun = await get_or_create_inventory_item(session, "Bun", "Bakery", "pcs", "pcs", "0")
        beef = await get_or_create_inventory_item(session, "Beef", "Meat", "g", "kg", "1000")

        existing = (await session.execute(select(Recipe))).scalars().first()
        if existing is None:
            regular, large = burger.portions
            session.add_all([
                Recipe(name="Burger Regular", portion_id=regular.id, fixed_cost=Decimal("0.10"), items=[
                    RecipeItem(inventory_item_id=bun.id, quantity=Decimal("1")),
                    RecipeItem(inventory_item_id=beef.id, quantity=Decimal("200")),
                ]),
                Recipe(name="Burger Large", portion_id=large.id, fixed_cost=Decimal("0.10"), items=[
                    RecipeItem(inventory_item_id=bun.id, quantity=Decimal("1")),
                    RecipeItem(inventory_item_id=beef.id, quantity=Decimal("300")),
                ]),
                Recipe(name="Extra Beef", portion_id=extra_beef.portions[0].id, fixed_cost=Decimal("0"), items=[
                    RecipeItem(inventory_item_id=beef.id, quantity=Decimal("100")),
                ]),
            ])
        await session.commit()

        await start_work_period(session, description="Demo day", now=base)

        session.add(InventoryTransaction(name="Morning delivery", date=base + timedelta(minutes=30), items=[
            InventoryTransactionItem(inventory_item_id=bun.id, unit="pcs", multiplier=Decimal("1"), quantity=Decimal("100"), price=Decimal("0.40")),
            InventoryTransactionItem(inventory_item_id=beef.id, unit="kg", multiplier=Decimal("1000"), quantity=Decimal("20"), price=Decimal("12.50")),
        ]))
        session.add(Ticket(ticket_number="1", date=base + timedelta(hours=2), orders=[
            Order(menu_item_id=burger.id, menu_item_name="Burger", portion_name="Regular", quantity=Decimal("5"), decrease_inventory=True, tag_values=[
                OrderTagValue(name="Extra Beef", menu_item_id=extra_beef.id, portion_name="Regular", quantity=Decimal("1")),
            ]),
            Order(menu_item_id=burger.id, menu_item_name="Burger", portion_name="Large", quantity=Decimal("2"), decrease_inventory=True),
        ]))
        await session.commit()

        wp = await end_work_period(session, description="Demo close", now=base + timedelta(hours=7))

    async with async_session_maker() as session:
        pc = await get_periodic_consumption(session, wp.id)
        if pc is None:
            print("[seed_demo_data] No periodic consumption was created")
            return
        print(f"[seed_demo_data] Periodic consumption {pc.id}: {pc.name}")
        for pci in pc.items:
            print(f"  item {pci.inventory_item_id}: in_stock={pci.in_stock} purchase={pci.purchase} consumption={pci.consumption} cost={pci.cost}")
        for ci in pc.cost_items:
            print(f"  {ci.name}: qty={ci.quantity} predicted={ci.cost_prediction} cost={ci.cost}")


if __name__ == "__main__":
    configure_logging()
    asyncio.run(seed())
