from spa_payroll.routes.payroll import router as payroll_router

__all__ = [
    'payroll_router',
]
