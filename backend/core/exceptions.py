"""
Errors raised by the costing pipeline.

Validation problems are not exceptions here: validators return a message
string. These classes cover data-integrity failures that must abort a
costing batch.
"""

from typing import Optional


class CostingError(Exception):
    """Base class for costing pipeline failures"""


class ConsumptionInvariantError(CostingError):
    """A recipe references an inventory item missing from the period record"""

    def __init__(self, inventory_item_id: int, portion_name: Optional[str] = None, menu_item_id: Optional[int] = None):
        self.inventory_item_id = inventory_item_id
        self.portion_name = portion_name
        self.menu_item_id = menu_item_id
        super().__init__(
            f"Inventory item {inventory_item_id} used by recipe for menu item "
            f"{menu_item_id}/{portion_name} has no periodic consumption item"
        )


class WorkPeriodStateError(CostingError):
    """Work period transition requested from the wrong state"""
