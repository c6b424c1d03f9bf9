"""
Payroll error types.

Only two conditions abort a payroll request: an unknown/inactive employee
and a malformed period. Everything else (catalog misses, broken mappings,
unreadable service codes) is recorded as a diagnostic on the report.
"""


class PayrollError(Exception):
    """Base class for payroll failures surfaced to callers."""

    code = "payroll_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(PayrollError):
    """Employee does not exist or is no longer active."""

    code = "employee_not_found"
    status_code = 404

    def __init__(self, employee_id):
        super().__init__(f"Employee {employee_id} not found or inactive")
        self.employee_id = employee_id


class InvalidPeriodError(PayrollError):
    """Period is not a YYYY-MM string with a month between 01 and 12."""

    code = "invalid_period"
    status_code = 400

    def __init__(self, period):
        super().__init__(f"Invalid period {period!r}, expected YYYY-MM")
        self.period = period


class MappingParseError(ValueError):
    """service_employee_mapping is present but not a usable JSON array.

    Recovered by the credit resolver (falls back to dichvu), never raised to
    callers of the payroll engine.
    """
