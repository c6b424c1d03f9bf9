from datetime import datetime
from decimal import Decimal
from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String
from sqlalchemy.orm import relationship
from spa_payroll.database import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True)
    employee_code = Column(String(50), nullable=True, unique=True)
    fullname = Column(String(255), nullable=False)
    position = Column(String(100), nullable=True)
    base_salary = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    # Display only; per-service rates come from the services table
    commission_rate = Column(Numeric(5, 2), nullable=True, default=Decimal("0"))
    overtime_hourly_rate = Column(Numeric(10, 2), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    overtime_records = relationship("OvertimeRecord", back_populates="employee")

    def __repr__(self):
        return f"<Employee {self.employee_code} {self.fullname}>"
