"""
Payroll data access.

The payroll engine only reads. ``PayrollRepository`` is the contract it
consumes; ``SqlAlchemyPayrollRepository`` implements it against the POS
database.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from spa_payroll.local_time import month_bounds_utc
from spa_payroll.models import Employee, Invoice, InvoiceItem, OvertimeRecord, Service


class PayrollRepository:
    """Read operations the payroll engine needs."""

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def list_active_employees(self) -> List[Employee]:
        raise NotImplementedError

    def list_services(self, active_only: bool = True) -> List[Service]:
        raise NotImplementedError

    def list_creditable_invoices(self, employee_id: int, year: int, month: int) -> List[Invoice]:
        """Paid invoices associated with the employee in a Vietnam-local month.

        An invoice is associated when any of these name the employee:
        an invoice item's employee_id, the employee_name text, or the
        invoice's own employee_id. Each invoice appears once.
        """
        raise NotImplementedError

    def list_overtime_records(self, employee_id: int, year: int, month: int) -> List[OvertimeRecord]:
        raise NotImplementedError


def _month_dates(year: int, month: int):
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


class SqlAlchemyPayrollRepository(PayrollRepository):
    def __init__(self, db: Session):
        self.db = db

    def get_employee(self, employee_id: int) -> Optional[Employee]:
        return self.db.query(Employee).filter(Employee.id == employee_id).first()

    def list_active_employees(self) -> List[Employee]:
        return (
            self.db.query(Employee)
            .filter(Employee.is_active.is_(True))
            .order_by(Employee.id)
            .all()
        )

    def list_services(self, active_only: bool = True) -> List[Service]:
        query = self.db.query(Service)
        if active_only:
            query = query.filter(Service.is_active.is_(True))
        return query.order_by(Service.id).all()

    def list_creditable_invoices(self, employee_id: int, year: int, month: int) -> List[Invoice]:
        employee = self.get_employee(employee_id)
        if employee is None:
            return []

        start, end = month_bounds_utc(year, month)

        item_invoice_ids = select(InvoiceItem.invoice_id).where(
            InvoiceItem.employee_id == employee_id
        )
        associations = [
            Invoice.employee_id == employee_id,
            Invoice.id.in_(item_invoice_ids),
        ]
        if employee.fullname:
            associations.append(
                Invoice.employee_name.contains(employee.fullname, autoescape=True)
            )

        return (
            self.db.query(Invoice)
            .options(selectinload(Invoice.items))
            .filter(
                Invoice.payment_status == Invoice.PAID,
                Invoice.created_at >= start,
                Invoice.created_at < end,
                or_(*associations),
            )
            .order_by(Invoice.created_at.desc(), Invoice.id.desc())
            .all()
        )

    def list_overtime_records(self, employee_id: int, year: int, month: int) -> List[OvertimeRecord]:
        start, end = _month_dates(year, month)
        return (
            self.db.query(OvertimeRecord)
            .filter(
                OvertimeRecord.employee_id == employee_id,
                OvertimeRecord.date >= start,
                OvertimeRecord.date < end,
            )
            .order_by(OvertimeRecord.date.desc(), OvertimeRecord.id.desc())
            .all()
        )
