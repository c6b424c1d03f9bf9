from spa_payroll.services.service_codes import parse_service_codes
from spa_payroll.services.catalog import (
    ServiceCatalog,
    LegacyPriceFallbackPolicy,
)
from spa_payroll.services.credit import (
    resolve_credit,
    resolve_credit_source,
)
from spa_payroll.services.commission import (
    calculate_line_commission,
    calculate_invoice_commission,
    round_half_up,
)
from spa_payroll.services.payroll import (
    compute_payroll,
    compute_payroll_overview,
    parse_period,
)

__all__ = [
    'parse_service_codes',
    'ServiceCatalog',
    'LegacyPriceFallbackPolicy',
    'resolve_credit',
    'resolve_credit_source',
    'calculate_line_commission',
    'calculate_invoice_commission',
    'round_half_up',
    'compute_payroll',
    'compute_payroll_overview',
    'parse_period',
]
