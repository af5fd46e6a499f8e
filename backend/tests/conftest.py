"""
Pytest configuration for costing tests.
Every test gets its own in-memory SQLite database.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from datetime import datetime, timedelta  # noqa: E402
from decimal import Decimal  # noqa: E402
from typing import Iterable, Optional, Sequence, Tuple  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from core import events  # noqa: E402
from db.database import Base  # noqa: E402
from db.models import (  # noqa: E402
    InventoryItem,
    InventoryTransaction,
    InventoryTransactionItem,
    MenuItem,
    MenuItemPortion,
    Order,
    OrderTagValue,
    PeriodicConsumption,
    PeriodicConsumptionItem,
    Recipe,
    RecipeItem,
    Ticket,
    WorkPeriod,
)

T0 = datetime(2026, 1, 5, 8, 0)


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture(autouse=True)
def clear_work_period_handlers():
    events.work_period_handlers.clear()
    yield
    events.work_period_handlers.clear()


class Factory:
    """Builds and flushes domain rows for a test session"""

    def __init__(self, session):
        self.session = session

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def menu_item(self, name: str, portions: Sequence[str] = ("Regular",)) -> MenuItem:
        return await self._save(
            MenuItem(name=name, portions=[MenuItemPortion(name=p, multiplier=Decimal("1")) for p in portions])
        )

    async def inventory_item(
        self,
        name: str,
        multiplier: Optional[str] = None,
        group_code: Optional[str] = None,
    ) -> InventoryItem:
        return await self._save(
            InventoryItem(
                name=name,
                group_code=group_code,
                transaction_unit_multiplier=Decimal(multiplier) if multiplier is not None else None,
            )
        )

    async def recipe(
        self,
        portion: MenuItemPortion,
        lines: Iterable[Tuple[Optional[InventoryItem], str]],
        fixed_cost: str = "0",
    ) -> Recipe:
        return await self._save(
            Recipe(
                name=portion.name,
                portion_id=portion.id,
                fixed_cost=Decimal(fixed_cost),
                items=[
                    RecipeItem(inventory_item_id=item.id if item is not None else None, quantity=Decimal(qty))
                    for item, qty in lines
                ],
            )
        )

    async def work_period(self, start: datetime, end: Optional[datetime] = None) -> WorkPeriod:
        return await self._save(WorkPeriod(start_date=start, end_date=end))

    async def ticket(self, date: datetime, *orders: Order) -> Ticket:
        return await self._save(Ticket(date=date, orders=list(orders)))

    async def purchase(self, date: datetime, *lines: Tuple[InventoryItem, str, str, str]) -> InventoryTransaction:
        """lines: (item, quantity, multiplier, unit price)"""
        return await self._save(
            InventoryTransaction(
                date=date,
                items=[
                    InventoryTransactionItem(
                        inventory_item_id=item.id,
                        quantity=Decimal(qty),
                        multiplier=Decimal(mult),
                        price=Decimal(price),
                    )
                    for item, qty, mult, price in lines
                ],
            )
        )

    async def periodic_consumption(self, work_period: WorkPeriod, *items: PeriodicConsumptionItem) -> PeriodicConsumption:
        return await self._save(
            PeriodicConsumption(
                work_period_id=work_period.id,
                name="previous",
                start_date=work_period.start_date,
                end_date=work_period.end_date,
                items=list(items),
                cost_items=[],
            )
        )


@pytest.fixture
def factory(db_session):
    return Factory(db_session)


def order(menu_item: MenuItem, portion: str, quantity: str, *tags: OrderTagValue, decrease_inventory: bool = True) -> Order:
    return Order(
        menu_item_id=menu_item.id,
        menu_item_name=menu_item.name,
        portion_name=portion,
        quantity=Decimal(quantity),
        decrease_inventory=decrease_inventory,
        tag_values=list(tags),
    )


def tag(menu_item_id: int, portion: Optional[str], quantity: str, name: str = "tag") -> OrderTagValue:
    return OrderTagValue(name=name, menu_item_id=menu_item_id, portion_name=portion, quantity=Decimal(quantity))


@pytest.fixture
def make_order():
    return order


@pytest.fixture
def make_tag():
    return tag


@pytest_asyncio.fixture
async def burger_setup(factory, make_order, make_tag):
    """
    Burger/Regular = 1 bun + 200 g beef, Extra Beef/Regular = 100 g beef.
    One open period with 5 burgers sold, two of them with an Extra Beef tag,
    and purchases of 100 buns @ 0.40 and 20 kg beef @ 12.50/kg.
    """
    bun = await factory.inventory_item("Bun", multiplier="0", group_code="Bakery")
    beef = await factory.inventory_item("Beef", multiplier="1000", group_code="Meat")
    burger = await factory.menu_item("Burger", ("Regular", "Large"))
    extra_beef = await factory.menu_item("Extra Beef", ("Regular",))
    burger_recipe = await factory.recipe(burger.portions[0], [(bun, "1"), (beef, "200")])
    extra_recipe = await factory.recipe(extra_beef.portions[0], [(beef, "100")])

    wp = await factory.work_period(T0)
    await factory.purchase(
        T0 + timedelta(minutes=30),
        (bun, "100", "1", "0.40"),
        (beef, "20", "1000", "12.50"),
    )
    await factory.ticket(
        T0 + timedelta(hours=2),
        make_order(burger, "Regular", "3"),
        make_order(burger, "Regular", "2", make_tag(extra_beef.id, "Regular", "1", "Extra Beef")),
    )
    return {
        "bun": bun,
        "beef": beef,
        "burger": burger,
        "extra_beef": extra_beef,
        "burger_recipe": burger_recipe,
        "extra_recipe": extra_recipe,
        "work_period": wp,
    }
