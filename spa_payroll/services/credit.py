"""
Employee Credit Resolution

Works out which services on an invoice an employee is credited for, and
with what share. Invoices carry one of three historical shapes:

1. service_employee_mapping (JSON) => per-service employee lists with a
   stored commission_split, trusted as-is
2. dichvu + employee_name => every service split equally over the comma
   separated names (1 / number of names)
3. invoice_items.employee_id => the employee's own line items, full credit

The first shape present wins. An invoice with none of them credits nothing.
"""

import json
import logging
from decimal import Decimal
from fractions import Fraction
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from spa_payroll.exceptions import MappingParseError
from spa_payroll.services.diagnostics import (
    Diagnostics,
    CREDIT_SOURCE_CONFLICT,
    MALFORMED_MAPPING_ENTRY,
    MAPPING_PARSE_ERROR,
)
from spa_payroll.services.service_codes import parse_service_codes

logger = logging.getLogger(__name__)

SOURCE_STRUCTURED = "structured"
SOURCE_LEGACY = "legacy"
SOURCE_ITEMS = "items"
SOURCE_NONE = "none"


class CreditLine(NamedTuple):
    service: str
    quantity: int
    credit_share: Fraction
    source: str
    service_id: Optional[int] = None
    unit_price: Optional[Decimal] = None
    other_employees: Tuple[str, ...] = ()


class MappingEntry(NamedTuple):
    service: str
    employees: Tuple[str, ...]
    total_quantity: int
    commission_split: Fraction


# ---------------------------------------------------------------------------
# Credit sources
# ---------------------------------------------------------------------------
class CreditSource:
    """No usable credit data on the invoice."""

    kind = SOURCE_NONE

    def lines_for(self, employee) -> List[CreditLine]:
        return []


class StructuredSource(CreditSource):
    kind = SOURCE_STRUCTURED

    def __init__(self, entries: List[MappingEntry]):
        self.entries = entries

    def names_employee(self, fullname: str) -> bool:
        return any(fullname in entry.employees for entry in self.entries)

    def lines_for(self, employee) -> List[CreditLine]:
        lines = []
        for entry in self.entries:
            if employee.fullname not in entry.employees:
                continue
            lines.append(
                CreditLine(
                    service=entry.service,
                    quantity=entry.total_quantity,
                    credit_share=entry.commission_split,
                    source=self.kind,
                    other_employees=tuple(
                        name for name in entry.employees if name != employee.fullname
                    ),
                )
            )
        return lines


class LegacySource(CreditSource):
    kind = SOURCE_LEGACY

    def __init__(
        self,
        dichvu: str,
        employee_names: Optional[str],
        diagnostics: Optional[Diagnostics] = None,
        invoice_id: Optional[int] = None,
    ):
        self.dichvu = dichvu
        self.employee_names = employee_names or ""
        self.diagnostics = diagnostics
        self.invoice_id = invoice_id

    @property
    def employee_count(self) -> int:
        # Raw comma count: "An, An," is three names
        return len(self.employee_names.split(","))

    def lines_for(self, employee) -> List[CreditLine]:
        # Membership was established when the invoice was selected
        share = Fraction(1, self.employee_count)
        return [
            CreditLine(
                service=code.service_code,
                quantity=code.quantity,
                credit_share=share,
                source=self.kind,
            )
            for code in parse_service_codes(
                self.dichvu, self.diagnostics, self.invoice_id
            )
        ]


class ItemSource(CreditSource):
    kind = SOURCE_ITEMS

    def __init__(self, items: List[Any]):
        self.items = items

    def lines_for(self, employee) -> List[CreditLine]:
        return [
            CreditLine(
                service=f"#{item.service_id}",
                quantity=int(item.quantity or 0),
                credit_share=Fraction(1),
                source=self.kind,
                service_id=item.service_id,
                unit_price=Decimal(str(item.unit_price or 0)),
            )
            for item in self.items
            if item.employee_id == employee.id
        ]


NO_SOURCE = CreditSource()


# ---------------------------------------------------------------------------
# Mapping parsing
# ---------------------------------------------------------------------------
def _parse_entry(raw: Dict[str, Any]) -> MappingEntry:
    if not isinstance(raw, dict):
        raise MappingParseError(f"mapping entry is not an object: {raw!r}")

    service = raw.get("service")
    employees = raw.get("employees")
    quantity = raw.get("total_quantity")
    split = raw.get("commission_split")

    if not isinstance(service, str) or not service.strip():
        raise MappingParseError(f"mapping entry has no service name: {raw!r}")
    if not isinstance(employees, list) or not all(isinstance(e, str) for e in employees):
        raise MappingParseError(f"mapping entry has no employee list: {raw!r}")
    for name, value in (("total_quantity", quantity), ("commission_split", split)):
        if isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise MappingParseError(f"mapping entry has invalid {name}: {raw!r}")

    try:
        return MappingEntry(
            service=service,
            employees=tuple(employees),
            total_quantity=int(quantity),
            # str() keeps 0.5 as 1/2 rather than the binary float expansion
            commission_split=Fraction(str(split)),
        )
    except (TypeError, ValueError, ZeroDivisionError) as exc:
        raise MappingParseError(f"mapping entry has invalid numbers: {raw!r}") from exc


def parse_service_employee_mapping(
    raw,
    diagnostics: Optional[Diagnostics] = None,
    invoice_id: Optional[int] = None,
) -> List[MappingEntry]:
    """
    Parse a service_employee_mapping value.

    Only undecodable JSON is an error. Once the JSON decodes, the mapping
    stands: a non-array value yields no entries and malformed entries are
    skipped, each reported as ``malformed_mapping_entry``.

    Args:
        raw: JSON text, or an already decoded list (JSON columns)
        diagnostics: Collector for skipped entries
        invoice_id: Invoice the mapping belongs to, for diagnostics

    Returns:
        List of MappingEntry (possibly empty)

    Raises:
        MappingParseError: if the value isn't valid JSON
    """
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise MappingParseError(f"invalid JSON: {exc}") from exc
    else:
        data = raw

    if not isinstance(data, list):
        _report_malformed(
            f"expected a JSON array, got {type(data).__name__}", diagnostics, invoice_id
        )
        return []

    entries = []
    for raw_entry in data:
        try:
            entries.append(_parse_entry(raw_entry))
        except MappingParseError as exc:
            _report_malformed(str(exc), diagnostics, invoice_id)
    return entries


def _report_malformed(message: str, diagnostics: Optional[Diagnostics], invoice_id) -> None:
    if diagnostics is not None:
        diagnostics.add(MALFORMED_MAPPING_ENTRY, f"Skipped: {message}", invoice_id=invoice_id)
    else:
        logger.warning("Invoice %s mapping entry skipped: %s", invoice_id, message)


def _has_mapping(invoice) -> bool:
    raw = invoice.service_employee_mapping
    if raw is None:
        return False
    if isinstance(raw, (str, bytes)):
        return bool(raw.strip())
    return True


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------
def resolve_credit_source(invoice, diagnostics: Optional[Diagnostics] = None) -> CreditSource:
    """Pick the credit source for an invoice, newest data shape first."""
    if _has_mapping(invoice):
        try:
            entries = parse_service_employee_mapping(
                invoice.service_employee_mapping, diagnostics, invoice.id
            )
        except MappingParseError as exc:
            if diagnostics is not None:
                diagnostics.add(
                    MAPPING_PARSE_ERROR,
                    f"Falling back to dichvu: {exc}",
                    invoice_id=invoice.id,
                )
            else:
                logger.warning("Invoice %s mapping unusable: %s", invoice.id, exc)
        else:
            # Decoded mappings are authoritative, even with no usable entries
            return StructuredSource(entries)

    if invoice.dichvu and invoice.dichvu.strip():
        return LegacySource(invoice.dichvu, invoice.employee_name, diagnostics, invoice.id)

    items = [item for item in (invoice.items or []) if item.employee_id is not None]
    if items:
        return ItemSource(items)

    return NO_SOURCE


def resolve_credit(invoice, employee, diagnostics: Optional[Diagnostics] = None) -> List[CreditLine]:
    """Credit lines for ``employee`` on ``invoice``; empty if nothing applies."""
    source = resolve_credit_source(invoice, diagnostics)
    lines = source.lines_for(employee)
    logger.debug(
        "Invoice %s: %s source, %d credit line(s) for %s",
        invoice.id,
        source.kind,
        len(lines),
        employee.fullname,
    )
    return lines


def association_signals(invoice, employee, source: Optional[CreditSource] = None) -> Dict[str, bool]:
    """
    Whether each association field present on the invoice names the employee.

    Fields that are empty on the invoice are left out.
    """
    signals = {}

    if isinstance(source, StructuredSource):
        signals["service_employee_mapping"] = source.names_employee(employee.fullname)

    if invoice.employee_name and invoice.employee_name.strip():
        names = [name.strip() for name in invoice.employee_name.split(",")]
        signals["employee_name"] = employee.fullname in names

    if invoice.employee_id is not None:
        signals["employee_id"] = invoice.employee_id == employee.id

    item_employee_ids = {
        item.employee_id for item in (invoice.items or []) if item.employee_id is not None
    }
    if item_employee_ids:
        signals["invoice_items"] = employee.id in item_employee_ids

    return signals


def flag_credit_conflict(
    invoice,
    employee,
    source: CreditSource,
    diagnostics: Diagnostics,
) -> bool:
    """Report (never resolve) disagreeing association fields on an invoice."""
    signals = association_signals(invoice, employee, source)
    if len(set(signals.values())) <= 1:
        return False

    diagnostics.add(
        CREDIT_SOURCE_CONFLICT,
        f"Association fields disagree on crediting {employee.fullname}; "
        f"used {source.kind} source",
        invoice_id=invoice.id,
        signals=signals,
        used=source.kind,
    )
    return True
