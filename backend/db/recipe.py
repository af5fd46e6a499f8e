from decimal import Decimal
from sqlalchemy import Column, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from .database import Base


class Recipe(Base):
    """Bill of materials for one menu item portion"""
    __tablename__ = "recipes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=True)
    # one recipe per portion
    portion_id = Column(Integer, ForeignKey("menu_item_portions.id", ondelete="CASCADE"), nullable=True, unique=True)
    fixed_cost = Column(Numeric(16, 4), nullable=False, default=Decimal("0"))

    portion = relationship("MenuItemPortion")
    items = relationship(
        "RecipeItem",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeItem.id",
    )

    @property
    def costed_items(self):
        """Lines that take part in consumption math"""
        return [ri for ri in self.items if ri.inventory_item_id is not None and (ri.quantity or 0) > 0]

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "name": self.name,
            "portion_id": self.portion_id,
            "fixed_cost": float(self.fixed_cost or 0),
            "items": [
                {
                    "id": ri.id,
                    "inventory_item_id": ri.inventory_item_id,
                    "quantity": float(ri.quantity or 0),
                }
                for ri in self.items
            ],
        }


class RecipeItem(Base):
    __tablename__ = "recipe_items"

    id = Column(Integer, primary_key=True, index=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False, index=True)
    inventory_item_id = Column(Integer, ForeignKey("inventory_items.id", ondelete="RESTRICT"), nullable=True, index=True)
    # in the inventory item's base (consumption) unit
    quantity = Column(Numeric(16, 4), nullable=False, default=Decimal("0"))

    recipe = relationship("Recipe", back_populates="items")
    inventory_item = relationship("InventoryItem")
