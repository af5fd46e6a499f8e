from decimal import Decimal
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from core.config import settings
from core.converters import QUANTITY_DECIMALS

from ..database import Base


class PeriodicConsumption(Base):
    """Costing record of a single work period"""
    __tablename__ = "periodic_consumptions"

    id = Column(Integer, primary_key=True, index=True)
    work_period_id = Column(Integer, ForeignKey("work_periods.id", ondelete="CASCADE"), nullable=False, unique=True)
    name = Column(String, nullable=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=True)

    items = relationship(
        "PeriodicConsumptionItem",
        back_populates="periodic_consumption",
        cascade="all, delete-orphan",
        order_by="PeriodicConsumptionItem.id",
    )
    cost_items = relationship(
        "CostItem",
        back_populates="periodic_consumption",
        cascade="all, delete-orphan",
        order_by="CostItem.id",
    )
    work_period = relationship("WorkPeriod")

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "work_period_id": self.work_period_id,
            "name": self.name,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "items": [pci.to_schema for pci in self.items],
            "cost_items": [ci.to_schema for ci in self.cost_items],
        }


class PeriodicConsumptionItem(Base):
    __tablename__ = "periodic_consumption_items"
    __table_args__ = (
        UniqueConstraint("periodic_consumption_id", "inventory_item_id", name="ux_pci_consumption_item"),
    )

    id = Column(Integer, primary_key=True, index=True)
    periodic_consumption_id = Column(
        Integer,
        ForeignKey("periodic_consumptions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    inventory_item_id = Column(Integer, ForeignKey("inventory_items.id", ondelete="RESTRICT"), nullable=False, index=True)

    unit_multiplier = Column(Numeric(16, 4), nullable=False, default=Decimal("1"))
    # quantities below are in purchase units
    in_stock = Column(Numeric(18, QUANTITY_DECIMALS), nullable=False, default=Decimal("0"))
    purchase = Column(Numeric(18, QUANTITY_DECIMALS), nullable=False, default=Decimal("0"))
    consumption = Column(Numeric(18, QUANTITY_DECIMALS), nullable=False, default=Decimal("0"))
    physical_inventory = Column(Numeric(18, QUANTITY_DECIMALS), nullable=True)
    # moving-average cost per purchase unit
    cost = Column(Numeric(16, settings.cost_decimals), nullable=False, default=Decimal("0"))

    periodic_consumption = relationship("PeriodicConsumption", back_populates="items")
    inventory_item = relationship("InventoryItem")

    @property
    def inventory_prediction(self) -> Decimal:
        """Predicted closing stock"""
        return (self.in_stock or 0) + (self.purchase or 0) - (self.consumption or 0)

    @property
    def predicted_consumption(self) -> Decimal:
        return self.consumption or Decimal("0")

    @property
    def actual_consumption(self) -> Decimal:
        if self.physical_inventory is None:
            return self.predicted_consumption
        return (self.in_stock or 0) + (self.purchase or 0) - self.physical_inventory

    @property
    def physical_stock(self) -> Decimal:
        if self.physical_inventory is None:
            return self.inventory_prediction
        return self.physical_inventory

    @property
    def variance(self) -> Decimal:
        if self.physical_inventory is None:
            return Decimal("0")
        return self.physical_inventory - self.inventory_prediction

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "inventory_item_id": self.inventory_item_id,
            "unit_multiplier": float(self.unit_multiplier or 0),
            "in_stock": float(self.in_stock or 0),
            "purchase": float(self.purchase or 0),
            "consumption": float(self.consumption or 0),
            "physical_inventory": float(self.physical_inventory) if self.physical_inventory is not None else None,
            "cost": float(self.cost or 0),
            "inventory_prediction": float(self.inventory_prediction),
            "variance": float(self.variance),
        }


class CostItem(Base):
    """Predicted and reconciled cost of one sold portion in a period"""
    __tablename__ = "cost_items"
    __table_args__ = (
        UniqueConstraint("periodic_consumption_id", "portion_id", name="ux_cost_items_consumption_portion"),
    )

    id = Column(Integer, primary_key=True, index=True)
    periodic_consumption_id = Column(
        Integer,
        ForeignKey("periodic_consumptions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    portion_id = Column(Integer, ForeignKey("menu_item_portions.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    quantity = Column(Numeric(18, QUANTITY_DECIMALS), nullable=False, default=Decimal("0"))
    cost_prediction = Column(Numeric(18, QUANTITY_DECIMALS), nullable=False, default=Decimal("0"))
    cost = Column(Numeric(16, settings.cost_decimals), nullable=False, default=Decimal("0"))

    periodic_consumption = relationship("PeriodicConsumption", back_populates="cost_items")
    portion = relationship("MenuItemPortion")

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "portion_id": self.portion_id,
            "name": self.name,
            "quantity": float(self.quantity or 0),
            "cost_prediction": float(self.cost_prediction or 0),
            "cost": float(self.cost or 0),
        }
