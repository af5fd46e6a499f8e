from decimal import Decimal
from sqlalchemy import Column, Integer, Numeric, String

from ..database import Base


class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    group_code = Column(String, nullable=True, index=True)

    # consumption unit (e.g. 'g'), purchase unit (e.g. 'kg') and how many
    # consumption units one purchase unit holds; 0/null means 1
    base_unit = Column(String, nullable=True)
    transaction_unit = Column(String, nullable=True)
    transaction_unit_multiplier = Column(Numeric(16, 4), nullable=True, default=Decimal("0"))

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "name": self.name,
            "group_code": self.group_code,
            "base_unit": self.base_unit,
            "transaction_unit": self.transaction_unit,
            "transaction_unit_multiplier": float(self.transaction_unit_multiplier or 0),
        }
