"""
Shared fixtures for payroll tests.

The engine only needs objects with the right attributes, so most tests run
against an in-memory repository of SimpleNamespace rows. Repository and
route tests use a throwaway SQLite database instead.
"""

import os

# Must be set before spa_payroll.database builds its engine
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest


class FakePayrollRepository:
    """In-memory PayrollRepository. Returns exactly what it was given."""

    def __init__(self):
        self.employees = {}
        self.services = []
        self.invoices = []
        self.overtime = []
        self.calls = []

    def get_employee(self, employee_id):
        self.calls.append("get_employee")
        return self.employees.get(employee_id)

    def list_active_employees(self):
        return [e for _, e in sorted(self.employees.items()) if e.is_active]

    def list_services(self, active_only=True):
        self.calls.append("list_services")
        return [s for s in self.services if s.is_active or not active_only]

    def list_creditable_invoices(self, employee_id, year, month):
        return [i for i in self.invoices if employee_id in i.associated_ids]

    def list_overtime_records(self, employee_id, year, month):
        return [
            r for r in self.overtime
            if r.employee_id == employee_id and (r.date.year, r.date.month) == (year, month)
        ]


@pytest.fixture
def repository():
    return FakePayrollRepository()


@pytest.fixture
def make_employee(repository):
    def _make(id=1, fullname="An", base_salary=5000000, is_active=True, **kwargs):
        employee = SimpleNamespace(
            id=id,
            employee_code=kwargs.get("employee_code", f"NV{id:03d}"),
            fullname=fullname,
            position=kwargs.get("position", "Kỹ thuật viên"),
            base_salary=Decimal(str(base_salary)),
            commission_rate=Decimal(str(kwargs.get("commission_rate", 0))),
            is_active=is_active,
        )
        repository.employees[id] = employee
        return employee
    return _make


@pytest.fixture
def make_service(repository):
    def _make(name, price, commission_rate, id=None, is_active=True):
        service = SimpleNamespace(
            id=id if id is not None else len(repository.services) + 1,
            name=name,
            price=Decimal(str(price)),
            commission_rate=Decimal(str(commission_rate)),
            is_active=is_active,
        )
        repository.services.append(service)
        return service
    return _make


@pytest.fixture
def make_invoice(repository):
    def _make(
        id=1,
        created_at=datetime(2025, 2, 10, 3, 0),
        total_amount=100000,
        payment_status="paid",
        dichvu=None,
        employee_name=None,
        service_employee_mapping=None,
        employee_id=None,
        items=(),
        associated_ids=(1,),
    ):
        invoice = SimpleNamespace(
            id=id,
            invoice_number=f"HD{id:05d}",
            customer_name="Khách lẻ",
            total_amount=Decimal(str(total_amount)),
            payment_status=payment_status,
            created_at=created_at,
            dichvu=dichvu,
            employee_name=employee_name,
            service_employee_mapping=service_employee_mapping,
            employee_id=employee_id,
            items=list(items),
            associated_ids=set(associated_ids),
        )
        repository.invoices.append(invoice)
        return invoice
    return _make


@pytest.fixture
def make_overtime(repository):
    def _make(employee_id=1, day=date(2025, 2, 5), hours=2, hourly_rate=20000, id=None):
        record = SimpleNamespace(
            id=id if id is not None else len(repository.overtime) + 1,
            employee_id=employee_id,
            date=day,
            hours=Decimal(str(hours)),
            hourly_rate=Decimal(str(hourly_rate)),
            total_amount=Decimal(str(hours)) * Decimal(str(hourly_rate)),
            notes=None,
        )
        repository.overtime.append(record)
        return record
    return _make


def invoice_item(service_id, quantity, unit_price, employee_id=None):
    return SimpleNamespace(
        service_id=service_id,
        quantity=quantity,
        unit_price=Decimal(str(unit_price)),
        employee_id=employee_id,
    )


@pytest.fixture
def make_item():
    return invoice_item


@pytest.fixture
def db_engine():
    """Fresh in-memory SQLite database with the payroll tables."""
    from sqlalchemy import create_engine
    from sqlalchemy.pool import StaticPool
    from spa_payroll.database import init_db

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    from sqlalchemy.orm import sessionmaker

    session = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)()
    try:
        yield session
    finally:
        session.close()
