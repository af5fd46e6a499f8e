from sqlalchemy import Column, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from .database import Base


class MenuItem(Base):
    """Sellable menu item; its first portion is the default portion"""
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    group_code = Column(String, nullable=True)

    portions = relationship(
        "MenuItemPortion",
        back_populates="menu_item",
        cascade="all, delete-orphan",
        order_by="MenuItemPortion.id",
    )

    @property
    def default_portion(self):
        return self.portions[0] if self.portions else None

    def get_portion(self, name):
        """Portion by name, falling back to the default portion"""
        for portion in self.portions:
            if portion.name == name:
                return portion
        return self.default_portion


class MenuItemPortion(Base):
    __tablename__ = "menu_item_portions"

    id = Column(Integer, primary_key=True, index=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    multiplier = Column(Numeric(10, 3), nullable=False, default=1)

    menu_item = relationship("MenuItem", back_populates="portions")
