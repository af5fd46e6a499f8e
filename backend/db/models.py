"""Import every model so string relationships resolve and metadata is complete."""

from db.menu import MenuItem, MenuItemPortion  # noqa: F401
from db.work_period import WorkPeriod  # noqa: F401
from db.recipe import Recipe, RecipeItem  # noqa: F401
from db.ticket import Ticket, Order, OrderTagValue  # noqa: F401
from db.inventory.item import InventoryItem  # noqa: F401
from db.inventory.transaction import InventoryTransaction, InventoryTransactionItem  # noqa: F401
from db.inventory.periodic_consumption import (  # noqa: F401
    CostItem,
    PeriodicConsumption,
    PeriodicConsumptionItem,
)
