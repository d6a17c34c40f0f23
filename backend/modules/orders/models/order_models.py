from sqlalchemy import Column, Integer, String, DateTime, Numeric, Text, JSON
from core.database import Base


class OrderRecord(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    table_number = Column(Integer, nullable=False, index=True)
    items = Column(JSON, nullable=False)
    notes = Column(Text, nullable=True)
    total_price = Column(Numeric(10, 2), nullable=False, default=0)
    status = Column(String(20), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
