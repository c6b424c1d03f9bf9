"""
Legacy service code parsing.

Older invoices store the services rendered in the ``dichvu`` column as a
compact comma separated string such as ``"2TI,1BÔNG"``: a quantity followed
by a service code.
"""

import re
from typing import List, NamedTuple, Optional

from spa_payroll.services.diagnostics import Diagnostics, UNPARSABLE_SERVICE_SEGMENT

# The quantity is required. A bare code like "TI" is skipped and reported,
# not read as quantity 1.
SEGMENT_PATTERN = re.compile(r"^(\d+)(\D.*)$")


class ServiceCode(NamedTuple):
    quantity: int
    service_code: str


def parse_service_codes(
    dichvu: Optional[str],
    diagnostics: Optional[Diagnostics] = None,
    invoice_id: Optional[int] = None,
) -> List[ServiceCode]:
    """
    Parse a ``dichvu`` string into ordered (quantity, code) pairs.

    Args:
        dichvu: Raw column value, e.g. "2TI,1BÔNG"
        diagnostics: Optional collector for skipped segments
        invoice_id: Invoice the string came from, for diagnostics

    Returns:
        List of ServiceCode with upper-cased codes. Segments that don't
        start with a quantity are skipped.
    """
    if not dichvu:
        return []

    parsed = []
    for segment in dichvu.split(","):
        segment = segment.strip()
        match = SEGMENT_PATTERN.match(segment)
        if not match:
            if diagnostics is not None:
                diagnostics.add(
                    UNPARSABLE_SERVICE_SEGMENT,
                    f"Skipped service segment {segment!r}",
                    invoice_id=invoice_id,
                    segment=segment,
                )
            continue

        parsed.append(
            ServiceCode(
                quantity=int(match.group(1)),
                service_code=match.group(2).strip().upper(),
            )
        )

    return parsed
