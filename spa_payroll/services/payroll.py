"""
Payroll Aggregation Service

Builds the monthly payroll report for an employee:
- base salary from the employee record
- commission from every paid invoice the employee worked on that month
  (Vietnam local time), via credit resolution + commission calculation
- overtime from the overtime records of the same month

totalSalary = baseSalary + totalCommission + totalOvertimeAmount, all in
whole currency units.
"""

import logging
import re
from decimal import Decimal
from fractions import Fraction
from typing import List, Optional, Tuple

from spa_payroll.exceptions import InvalidPeriodError, NotFoundError
from spa_payroll.local_time import in_period, to_vietnam_local
from spa_payroll.repository import PayrollRepository
from spa_payroll.services.catalog import LegacyPriceFallbackPolicy, ServiceCatalog
from spa_payroll.services.commission import calculate_invoice_commission, round_half_up
from spa_payroll.services.credit import flag_credit_conflict, resolve_credit_source
from spa_payroll.services.diagnostics import Diagnostics, UNCREDITABLE_INVOICE

logger = logging.getLogger(__name__)

PERIOD_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")
# Local month bounds shift by the UTC offset, so the outer years can't be
# represented as datetimes.
MIN_YEAR, MAX_YEAR = 2, 9998


def parse_period(period: str) -> Tuple[int, int]:
    """
    Parse a "YYYY-MM" payroll period.

    Raises:
        InvalidPeriodError: if the string is malformed, the month isn't 1-12
            or the year is outside MIN_YEAR..MAX_YEAR
    """
    match = PERIOD_PATTERN.match(period) if isinstance(period, str) else None
    if not match:
        raise InvalidPeriodError(period)

    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidPeriodError(period)
    return year, month


def _decimal(value) -> Decimal:
    return Decimal(str(value if value is not None else 0))


def _employee_snapshot(employee) -> dict:
    return {
        "id": employee.id,
        "employeeCode": employee.employee_code,
        "fullname": employee.fullname,
        "position": employee.position,
        "baseSalary": round_half_up(_decimal(employee.base_salary)),
        "commissionRate": float(_decimal(employee.commission_rate)),
    }


def _overtime_entry(record) -> dict:
    return {
        "id": record.id,
        "date": record.date.isoformat(),
        "hours": float(_decimal(record.hours)),
        "hourlyRate": round_half_up(_decimal(record.hourly_rate)),
        "totalAmount": round_half_up(_decimal(record.total_amount)),
        "notes": record.notes,
    }


def _invoice_sort_key(invoice):
    return (to_vietnam_local(invoice.created_at), invoice.id)


def _select_invoices(invoices, year: int, month: int, diagnostics: Diagnostics) -> List:
    """Deduplicate by id and keep paid invoices inside the local month."""
    seen = set()
    selected = []
    for invoice in invoices:
        if invoice.id in seen:
            continue
        seen.add(invoice.id)

        if invoice.payment_status != "paid" or not in_period(invoice.created_at, year, month):
            diagnostics.add(
                UNCREDITABLE_INVOICE,
                "Invoice is unpaid or outside the payroll month, ignored",
                invoice_id=invoice.id,
                payment_status=invoice.payment_status,
            )
            continue
        selected.append(invoice)

    return sorted(selected, key=_invoice_sort_key, reverse=True)


def _invoice_breakdown(invoice, employee, catalog, fallback_policy, diagnostics) -> Tuple[dict, dict]:
    source = resolve_credit_source(invoice, diagnostics)
    flag_credit_conflict(invoice, employee, source, diagnostics)

    credit_lines = source.lines_for(employee)
    logger.debug(
        "Invoice %s: %s source, %d credit line(s)", invoice.id, source.kind, len(credit_lines)
    )

    result = calculate_invoice_commission(
        credit_lines,
        catalog,
        fallback_policy=fallback_policy,
        diagnostics=diagnostics,
        invoice_id=invoice.id,
    )
    breakdown = {
        "id": invoice.id,
        "invoiceNumber": invoice.invoice_number,
        "customerName": invoice.customer_name,
        "totalAmount": round_half_up(_decimal(invoice.total_amount)),
        "createdAt": to_vietnam_local(invoice.created_at).isoformat(),
        "dichvu": invoice.dichvu,
        "creditSource": source.kind,
        "employeeCommission": result["commission"],
        "items": result["items"],
    }
    return breakdown, result


def _build_report(
    repository: PayrollRepository,
    employee,
    period: str,
    year: int,
    month: int,
    catalog: ServiceCatalog,
    fallback_policy: LegacyPriceFallbackPolicy,
) -> dict:
    diagnostics = Diagnostics()

    invoices = _select_invoices(
        repository.list_creditable_invoices(employee.id, year, month), year, month, diagnostics
    )
    overtime_records = repository.list_overtime_records(employee.id, year, month)

    breakdowns = []
    legacy_default_lines = 0
    legacy_default_commission = 0
    for invoice in invoices:
        breakdown, result = _invoice_breakdown(
            invoice, employee, catalog, fallback_policy, diagnostics
        )
        breakdowns.append(breakdown)
        legacy_default_lines += result["legacy_default_lines"]
        legacy_default_commission += result["legacy_default_commission"]

    base_salary = round_half_up(_decimal(employee.base_salary))
    total_commission = sum(b["employeeCommission"] for b in breakdowns)
    total_overtime_amount = round_half_up(
        sum((_decimal(r.total_amount) for r in overtime_records), Decimal("0"))
    )
    total_revenue = round_half_up(
        sum((_decimal(invoice.total_amount) for invoice in invoices), Decimal("0"))
    )
    invoice_count = len(breakdowns)

    if invoice_count:
        average_commission = round_half_up(Fraction(total_commission, invoice_count))
    else:
        average_commission = 0

    report = {
        "employee": _employee_snapshot(employee),
        "period": period,
        "baseSalary": base_salary,
        "totalCommission": total_commission,
        "totalOvertimeAmount": total_overtime_amount,
        "totalSalary": base_salary + total_commission + total_overtime_amount,
        "invoices": breakdowns,
        "overtimeRecords": [_overtime_entry(record) for record in overtime_records],
        "summary": {
            "totalInvoices": invoice_count,
            "totalItems": sum(len(b["items"]) for b in breakdowns),
            "totalRevenue": total_revenue,
            "averageCommissionPerInvoice": average_commission,
            "totalOvertimeHours": float(
                sum((_decimal(r.hours) for r in overtime_records), Decimal("0"))
            ),
            "legacyDefaultLines": legacy_default_lines,
            "legacyDefaultCommission": legacy_default_commission,
        },
        "diagnostics": diagnostics.to_list(),
    }

    logger.info(
        "Payroll %s for %s: %d invoice(s) examined, commission=%s overtime=%s total=%s, %d diagnostic(s)",
        period,
        employee.fullname,
        invoice_count,
        total_commission,
        total_overtime_amount,
        report["totalSalary"],
        len(diagnostics),
    )
    return report


def load_catalog(repository: PayrollRepository) -> ServiceCatalog:
    """Snapshot the active service catalog for one payroll run."""
    return ServiceCatalog(repository.list_services(active_only=True))


def compute_payroll(
    repository: PayrollRepository,
    employee_id: int,
    period: str,
    fallback_policy: Optional[LegacyPriceFallbackPolicy] = None,
) -> dict:
    """
    Compute the payroll report for one employee and month.

    Args:
        repository: Data access for employees, services, invoices, overtime
        employee_id: Employee to pay
        period: "YYYY-MM", calendar month in Vietnam local time
        fallback_policy: Pricing for legacy codes missing from the catalog

    Returns:
        JSON-serializable PayrollReport dictionary

    Raises:
        NotFoundError: employee missing or inactive
        InvalidPeriodError: malformed period
    """
    employee = repository.get_employee(employee_id)
    if employee is None or not employee.is_active:
        raise NotFoundError(employee_id)

    year, month = parse_period(period)

    logger.info("Computing payroll %s for employee %s", period, employee_id)
    return _build_report(
        repository,
        employee,
        period,
        year,
        month,
        load_catalog(repository),
        fallback_policy or LegacyPriceFallbackPolicy(),
    )


def compute_payroll_overview(
    repository: PayrollRepository,
    period: str,
    fallback_policy: Optional[LegacyPriceFallbackPolicy] = None,
) -> List[dict]:
    """
    One summary row per active employee for ``period``.

    All rows share a single catalog snapshot.
    """
    year, month = parse_period(period)
    catalog = load_catalog(repository)
    fallback_policy = fallback_policy or LegacyPriceFallbackPolicy()

    rows = []
    for employee in repository.list_active_employees():
        report = _build_report(
            repository, employee, period, year, month, catalog, fallback_policy
        )
        rows.append(
            {
                "employeeId": employee.id,
                "employeeCode": employee.employee_code,
                "fullname": employee.fullname,
                "position": employee.position,
                "baseSalary": report["baseSalary"],
                "totalInvoices": report["summary"]["totalInvoices"],
                "totalRevenue": report["summary"]["totalRevenue"],
                "totalCommission": report["totalCommission"],
                "totalOvertimeAmount": report["totalOvertimeAmount"],
                "totalSalary": report["totalSalary"],
                "diagnosticCount": len(report["diagnostics"]),
            }
        )
    return rows
