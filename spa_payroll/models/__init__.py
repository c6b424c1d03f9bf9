from spa_payroll.models.employee import Employee
from spa_payroll.models.service import Service
from spa_payroll.models.invoice import Invoice, InvoiceItem
from spa_payroll.models.overtime import OvertimeRecord

__all__ = [
    "Employee",
    "Service",
    "Invoice",
    "InvoiceItem",
    "OvertimeRecord",
]
