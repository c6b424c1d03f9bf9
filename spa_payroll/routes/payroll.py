from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from spa_payroll.database import get_db
from spa_payroll.exceptions import PayrollError
from spa_payroll.repository import SqlAlchemyPayrollRepository
from spa_payroll.services.payroll import compute_payroll, compute_payroll_overview

router = APIRouter(prefix="/payroll", tags=["payroll"])


def _error_response(exc: PayrollError) -> JSONResponse:
    return JSONResponse(
        {"error": exc.message, "code": exc.code},
        status_code=exc.status_code,
    )


# ---------------------------------------------------------------------------
# Overview: one row per active employee
# ---------------------------------------------------------------------------
@router.get("", response_class=JSONResponse)
def payroll_overview(
    month: str = Query(..., description="Payroll period, YYYY-MM"),
    db: Session = Depends(get_db),
):
    try:
        rows = compute_payroll_overview(SqlAlchemyPayrollRepository(db), month)
    except PayrollError as exc:
        return _error_response(exc)
    return {"period": month, "payroll": rows, "total": len(rows)}


# ---------------------------------------------------------------------------
# Employee payroll report
# ---------------------------------------------------------------------------
@router.get("/employee/{employee_id}", response_class=JSONResponse)
def employee_payroll(
    employee_id: int,
    month: str = Query(..., description="Payroll period, YYYY-MM"),
    db: Session = Depends(get_db),
):
    try:
        return compute_payroll(SqlAlchemyPayrollRepository(db), employee_id, month)
    except PayrollError as exc:
        return _error_response(exc)
