"""
Commission Calculation Service

Handles:
- Per-line commission (unit_price × rate% × quantity × credit share)
- Per-line rounding to whole currency units (ROUND_HALF_UP)
- Invoice commission as the sum of the rounded lines
"""

from decimal import Decimal, ROUND_HALF_UP
from fractions import Fraction
from typing import Iterable, Optional

from spa_payroll.services.catalog import (
    LegacyPriceFallbackPolicy,
    ServiceCatalog,
    ServiceDefinition,
    PRICE_SOURCE_CATALOG,
    PRICE_SOURCE_INVOICE_ITEM,
    PRICE_SOURCE_LEGACY_DEFAULT,
)
from spa_payroll.services.credit import (
    CreditLine,
    SOURCE_ITEMS,
    SOURCE_LEGACY,
)
from spa_payroll.services.diagnostics import Diagnostics, CATALOG_MISS


def round_half_up(value) -> int:
    """Round a Decimal, Fraction or int to whole currency units, halves up."""
    if value is None:
        return 0

    if isinstance(value, Fraction):
        value = Decimal(value.numerator) / Decimal(value.denominator)
    elif not isinstance(value, Decimal):
        value = Decimal(str(value))

    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_line_commission(
    unit_price: Decimal,
    commission_rate: Decimal,
    quantity: int,
    credit_share: Fraction,
) -> int:
    """
    Calculate one credited line's commission.

    Args:
        unit_price: Service price
        commission_rate: Percentage, e.g. 10 for 10%
        quantity: Number of services rendered
        credit_share: Employee's fraction of the line, in (0, 1]

    Returns:
        unit_price × commission_rate / 100 × quantity × credit_share,
        rounded half up to a whole unit
    """
    if unit_price is None or commission_rate is None or not quantity:
        return 0

    exact = (
        Fraction(unit_price)
        * Fraction(commission_rate)
        / 100
        * quantity
        * Fraction(credit_share)
    )
    return round_half_up(exact)


def _line_breakdown(line: CreditLine, definition, unit_price, price_source) -> dict:
    commission = calculate_line_commission(
        unit_price, definition.commission_rate, line.quantity, line.credit_share
    )
    item = {
        "serviceName": definition.name,
        "quantity": line.quantity,
        "unitPrice": round_half_up(unit_price),
        "commissionRate": float(definition.commission_rate),
        "creditShare": float(line.credit_share),
        "commission": commission,
        "priceSource": price_source,
    }
    if line.other_employees:
        item["otherEmployees"] = list(line.other_employees)
    return item


def calculate_invoice_commission(
    credit_lines: Iterable[CreditLine],
    catalog: ServiceCatalog,
    fallback_policy: Optional[LegacyPriceFallbackPolicy] = None,
    diagnostics: Optional[Diagnostics] = None,
    invoice_id: Optional[int] = None,
) -> dict:
    """
    Price every credit line of one invoice and total them.

    Catalog misses never raise. Legacy dichvu lines fall back to
    ``fallback_policy``; structured lines are dropped; invoice-item lines
    keep their own price at 0%.

    Returns:
        Dictionary with:
        - items: per-line breakdown
        - commission: sum of the rounded line commissions
        - legacy_default_lines / legacy_default_commission
    """
    if fallback_policy is None:
        fallback_policy = LegacyPriceFallbackPolicy()
    if diagnostics is None:
        diagnostics = Diagnostics()

    items = []
    legacy_default_lines = 0
    legacy_default_commission = 0

    for line in credit_lines:
        if line.source == SOURCE_ITEMS:
            definition = catalog.lookup_id(line.service_id)
            if definition is None:
                diagnostics.add(
                    CATALOG_MISS,
                    f"Service id {line.service_id} not in catalog, commission rate 0",
                    invoice_id=invoice_id,
                    service_id=line.service_id,
                )
                definition = ServiceDefinition(
                    line.service_id, line.service, line.unit_price, Decimal("0")
                )
            items.append(
                _line_breakdown(line, definition, line.unit_price, PRICE_SOURCE_INVOICE_ITEM)
            )
            continue

        definition = catalog.lookup(line.service)
        if definition is not None:
            items.append(
                _line_breakdown(line, definition, definition.unit_price, PRICE_SOURCE_CATALOG)
            )
            continue

        if line.source != SOURCE_LEGACY:
            diagnostics.add(
                CATALOG_MISS,
                f"Service {line.service!r} not in catalog, line skipped",
                invoice_id=invoice_id,
                service=line.service,
            )
            continue

        definition = fallback_policy.price_for(line.service)
        if definition is None:
            diagnostics.add(
                CATALOG_MISS,
                f"Service {line.service!r} not in catalog and legacy pricing is off, line skipped",
                invoice_id=invoice_id,
                service=line.service,
            )
            continue

        diagnostics.add(
            CATALOG_MISS,
            f"Service {line.service!r} not in catalog, priced with legacy default",
            invoice_id=invoice_id,
            service=line.service,
            unit_price=round_half_up(definition.unit_price),
        )
        item = _line_breakdown(line, definition, definition.unit_price, PRICE_SOURCE_LEGACY_DEFAULT)
        legacy_default_lines += 1
        legacy_default_commission += item["commission"]
        items.append(item)

    return {
        "items": items,
        "commission": sum(item["commission"] for item in items),
        "legacy_default_lines": legacy_default_lines,
        "legacy_default_commission": legacy_default_commission,
    }

