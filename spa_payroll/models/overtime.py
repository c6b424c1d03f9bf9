from datetime import datetime
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import relationship
from spa_payroll.database import Base


class OvertimeRecord(Base):
    __tablename__ = "overtime"

    id = Column(Integer, primary_key=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)  # calendar date, no timezone
    hours = Column(Numeric(4, 2), nullable=False)
    hourly_rate = Column(Numeric(10, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)  # hours × hourly_rate
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    employee = relationship("Employee", back_populates="overtime_records")

    def __repr__(self):
        return f"<OvertimeRecord {self.employee_id} {self.date} {self.hours}h>"
