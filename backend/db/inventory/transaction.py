from decimal import Decimal
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from ..database import Base


class InventoryTransaction(Base):
    """Dated stock receipt; written by purchasing, read-only for costing"""
    __tablename__ = "inventory_transactions"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=True)
    date = Column(DateTime, nullable=False, index=True)

    items = relationship("InventoryTransactionItem", back_populates="transaction", cascade="all, delete-orphan")


class InventoryTransactionItem(Base):
    __tablename__ = "inventory_transaction_items"

    id = Column(Integer, primary_key=True, index=True)
    inventory_transaction_id = Column(
        Integer,
        ForeignKey("inventory_transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    inventory_item_id = Column(Integer, ForeignKey("inventory_items.id", ondelete="RESTRICT"), nullable=False, index=True)

    unit = Column(String, nullable=True)
    multiplier = Column(Numeric(16, 4), nullable=False, default=Decimal("1"))
    quantity = Column(Numeric(16, 4), nullable=False, default=Decimal("0"))
    # price per purchased unit
    price = Column(Numeric(16, 4), nullable=False, default=Decimal("0"))

    transaction = relationship("InventoryTransaction", back_populates="items")
    inventory_item = relationship("InventoryItem")
