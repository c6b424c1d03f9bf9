"""
Diagnostics collector for recoverable data-quality events.

Events are additive metadata on the payroll report and never block it.
"""

import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

CATALOG_MISS = "catalog_miss"
MAPPING_PARSE_ERROR = "mapping_parse_error"
MALFORMED_MAPPING_ENTRY = "malformed_mapping_entry"
UNPARSABLE_SERVICE_SEGMENT = "unparsable_service_segment"
CREDIT_SOURCE_CONFLICT = "credit_source_conflict"
UNCREDITABLE_INVOICE = "uncreditable_invoice"


class Diagnostics:
    """Container for diagnostic events raised while building one report."""

    def __init__(self):
        self.events: List[Dict[str, Any]] = []

    def add(
        self,
        code: str,
        message: str,
        invoice_id: Optional[int] = None,
        **detail: Any,
    ):
        self.events.append(
            {
                "code": code,
                "message": message,
                "invoiceId": invoice_id,
                "detail": detail,
            }
        )
        logger.warning("%s (invoice=%s): %s", code, invoice_id, message)

    def count(self, code: str) -> int:
        return sum(1 for event in self.events if event["code"] == code)

    def __len__(self):
        return len(self.events)

    def to_list(self) -> List[Dict[str, Any]]:
        return [dict(event, detail=dict(event["detail"])) for event in self.events]
