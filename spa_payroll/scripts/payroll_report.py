#!/usr/bin/env python3
"""
Print an employee's payroll report as JSON.

Usage:
    python -m spa_payroll.scripts.payroll_report 12 2025-02
    python -m spa_payroll.scripts.payroll_report --all 2025-02
"""
import argparse
import json
import logging
import os
import sys

from dotenv import load_dotenv
load_dotenv()

from spa_payroll.database import SessionLocal
from spa_payroll.exceptions import PayrollError
from spa_payroll.repository import SqlAlchemyPayrollRepository
from spa_payroll.services.payroll import compute_payroll, compute_payroll_overview


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compute a monthly payroll report.")
    parser.add_argument("employee_id", nargs="?", type=int, help="Employee id")
    parser.add_argument("period", help="Payroll month, YYYY-MM (Vietnam local time)")
    parser.add_argument("--all", action="store_true", help="Overview of all active employees")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "WARNING").upper())

    if not args.all and args.employee_id is None:
        print("employee_id is required unless --all is given", file=sys.stderr)
        return 2

    db = SessionLocal()
    try:
        repository = SqlAlchemyPayrollRepository(db)
        if args.all:
            result = compute_payroll_overview(repository, args.period)
        else:
            result = compute_payroll(repository, args.employee_id, args.period)
    except PayrollError as exc:
        print(f"✗ {exc.message}", file=sys.stderr)
        return 1
    finally:
        db.close()

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
