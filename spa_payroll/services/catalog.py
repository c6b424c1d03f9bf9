"""
Service Catalog

Handles:
- Case-insensitive lookup of service price and commission rate by name
- Lookup by service id for invoice-item rows
- The legacy price fallback used when a dichvu code has no catalog entry
"""

import os
from decimal import Decimal
from typing import Dict, Iterable, NamedTuple, Optional

PRICE_SOURCE_CATALOG = "catalog"
PRICE_SOURCE_LEGACY_DEFAULT = "legacyDefault"
PRICE_SOURCE_INVOICE_ITEM = "invoiceItem"


class ServiceDefinition(NamedTuple):
    id: Optional[int]
    name: str
    unit_price: Decimal
    commission_rate: Decimal


def normalize_service_name(name: Optional[str]) -> str:
    """Lookup key for a service name: trimmed and upper-cased."""
    return (name or "").strip().upper()


def _to_decimal(value) -> Decimal:
    return Decimal(str(value if value is not None else 0))


class ServiceCatalog:
    """Read-only snapshot of the service catalog for one payroll run."""

    def __init__(self, services: Iterable):
        self._by_name: Dict[str, ServiceDefinition] = {}
        self._by_id: Dict[int, ServiceDefinition] = {}

        for service in services:
            definition = ServiceDefinition(
                id=getattr(service, "id", None),
                name=service.name,
                unit_price=_to_decimal(getattr(service, "price", None)),
                commission_rate=_to_decimal(service.commission_rate),
            )
            key = normalize_service_name(definition.name)
            # First definition wins if the table breaks name uniqueness
            self._by_name.setdefault(key, definition)
            if definition.id is not None:
                self._by_id[definition.id] = definition

    def lookup(self, name: Optional[str]) -> Optional[ServiceDefinition]:
        """Find a service by name, ignoring case and surrounding whitespace."""
        return self._by_name.get(normalize_service_name(name))

    def lookup_id(self, service_id: Optional[int]) -> Optional[ServiceDefinition]:
        if service_id is None:
            return None
        return self._by_id.get(service_id)

    def __len__(self):
        return len(self._by_name)

    def __contains__(self, name):
        return self.lookup(name) is not None


def _fallback_enabled_from_env() -> bool:
    return os.getenv("PAYROLL_LEGACY_PRICE_FALLBACK", "true").lower() == "true"


class LegacyPriceFallbackPolicy:
    """
    Last-resort pricing for legacy dichvu codes missing from the catalog.

    Exactly two buckets, as used by the first payroll screens: "TI" is
    priced at 100,000 with 10% commission, every other code at 50,000 with
    no commission. Lines priced this way are tagged ``legacyDefault``.
    """

    TI_CODE = "TI"
    TI_PRICE = Decimal("100000")
    TI_COMMISSION_RATE = Decimal("10")
    OTHER_PRICE = Decimal("50000")
    OTHER_COMMISSION_RATE = Decimal("0")

    def __init__(self, enabled: Optional[bool] = None):
        self.enabled = _fallback_enabled_from_env() if enabled is None else enabled

    def price_for(self, service_code: str) -> Optional[ServiceDefinition]:
        """Heuristic definition for ``service_code``, or None when disabled."""
        if not self.enabled:
            return None

        code = normalize_service_name(service_code)
        if code == self.TI_CODE:
            return ServiceDefinition(None, code, self.TI_PRICE, self.TI_COMMISSION_RATE)
        return ServiceDefinition(None, code, self.OTHER_PRICE, self.OTHER_COMMISSION_RATE)
