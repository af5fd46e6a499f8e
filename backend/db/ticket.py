from decimal import Decimal
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from .database import Base


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(DateTime, nullable=False, index=True)
    ticket_number = Column(String, nullable=True)

    orders = relationship("Order", back_populates="ticket", cascade="all, delete-orphan")


class Order(Base):
    """Sold line item"""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    ticket_id = Column(Integer, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_item_id = Column(Integer, nullable=False, index=True)
    menu_item_name = Column(String, nullable=False)
    portion_name = Column(String, nullable=True)
    quantity = Column(Numeric(16, 4), nullable=False, default=Decimal("1"))
    price = Column(Numeric(16, 2), nullable=True)
    decrease_inventory = Column(Boolean, nullable=False, default=True)

    ticket = relationship("Ticket", back_populates="orders")
    tag_values = relationship("OrderTagValue", back_populates="order", cascade="all, delete-orphan")


class OrderTagValue(Base):
    """Modifier on an order; menu_item_id > 0 marks a sellable add-on or substitute"""
    __tablename__ = "order_tag_values"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=True)
    menu_item_id = Column(Integer, nullable=False, default=0)
    portion_name = Column(String, nullable=True)
    # per unit of the parent order
    quantity = Column(Numeric(16, 4), nullable=False, default=Decimal("1"))

    order = relationship("Order", back_populates="tag_values")
