"""
Inventory costing models.

Models:
- InventoryItem (purchasable stock item with a purchase-to-consumption unit multiplier)
- InventoryTransaction / InventoryTransactionItem (stock receipts, created by purchasing)
- PeriodicConsumption / PeriodicConsumptionItem / CostItem (per work period costing record)
"""
