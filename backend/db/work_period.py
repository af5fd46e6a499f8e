from sqlalchemy import Column, DateTime, Integer, String

from .database import Base


class WorkPeriod(Base):
    """Trading interval; open while end_date is null"""
    __tablename__ = "work_periods"

    id = Column(Integer, primary_key=True, index=True)
    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=True)
    start_description = Column(String, nullable=True)
    end_description = Column(String, nullable=True)

    @property
    def is_open(self) -> bool:
        return self.end_date is None

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "start_description": self.start_description,
            "end_description": self.end_description,
            "is_open": self.is_open,
        }
