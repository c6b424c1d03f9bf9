"""July Spa payroll and commission engine."""
