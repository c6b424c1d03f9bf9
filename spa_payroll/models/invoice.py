from datetime import datetime
from decimal import Decimal
from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from spa_payroll.database import Base


class Invoice(Base):
    __tablename__ = "invoices"

    PAID = "paid"

    id = Column(Integer, primary_key=True)
    invoice_number = Column(String(50), nullable=True, unique=True)
    customer_name = Column(String(255), nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    payment_status = Column(String(20), nullable=False, default="pending")
    # Naive UTC; bucket into months with spa_payroll.local_time
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    # Association columns, oldest to newest
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=True, index=True)
    employee_name = Column(Text, nullable=True)  # "An,Binh"
    dichvu = Column(Text, nullable=True)  # "2TI,1BÔNG"
    service_employee_mapping = Column(Text, nullable=True)  # JSON array

    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.id",
    )

    def __repr__(self):
        return f"<Invoice {self.invoice_number} {self.total_amount} ({self.payment_status})>"


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True)
    invoice_id = Column(
        Integer,
        ForeignKey("invoices.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Historically also used to hold food/buffet item ids
    service_id = Column(Integer, nullable=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=True, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(10, 2), nullable=False, default=Decimal("0"))

    invoice = relationship("Invoice", back_populates="items")
