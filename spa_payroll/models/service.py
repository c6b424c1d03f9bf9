from datetime import datetime
from decimal import Decimal
from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Text
from spa_payroll.database import Base


class Service(Base):
    """Service catalog row.

    ``name`` doubles as the join key for legacy ``dichvu`` codes, so it is
    unique under case-insensitive comparison.
    """

    __tablename__ = "services"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    duration = Column(Integer, nullable=True)
    category = Column(String(50), nullable=True)
    commission_rate = Column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<Service {self.name} {self.price} @ {self.commission_rate}%>"
