"""Maintenance CLI for staffdesk.

Usage:
    python manage_cli.py --init-db                 # create/migrate the employees table
    python manage_cli.py --seed                    # insert demo employees into an empty table
    python manage_cli.py --write-templates         # regenerate public/template_import.{csv,xlsx}
    python manage_cli.py --import employees.xlsx   # run the import pipeline on a local file

Flags can be combined; they run in the order listed above.  No emails are
sent from the CLI.  Exit code is 1 when any step fails or any row is rejected.
"""

import argparse
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from config import OPERATIONAL_DB_PATH
from errors import AppError
from logger_config import setup_logger

logger = setup_logger("manage_cli")


def run_init_db() -> bool:
    from api.database import init_db

    init_db()
    logger.info(f"Database ready: {OPERATIONAL_DB_PATH}")
    return True


def run_seed() -> bool:
    from seed_employees import seed

    n = seed()
    logger.info(f"Seed inserted {n} employee(s)")
    return True


def run_write_templates() -> bool:
    from employee_files import write_templates

    for path in write_templates():
        logger.info(f"  wrote {path}")
    return True


def run_import_file(path: Path) -> bool:
    """Import one CSV/Excel file.  False when the file is unreadable or any row failed."""
    from api.database import init_db
    from api.store import EmployeeStore
    from employee_files import read_rows_from_path
    from employee_import import run_import

    logger.info("=" * 60)
    logger.info(f"Import: {path}")
    logger.info("=" * 60)

    if not path.is_file():
        logger.error(f"File not found: {path}")
        return False

    start = time.perf_counter()
    try:
        rows = read_rows_from_path(path)
    except AppError as e:
        logger.error(f"Cannot read {path.name}: {e.message}")
        return False

    init_db()
    outcome = run_import(rows, EmployeeStore())
    elapsed = time.perf_counter() - start

    logger.info(outcome.message())
    for failure in outcome.errors:
        logger.warning(f"  row {failure.row:>4}  {failure.kind.value:<22} {failure.reason}")
    logger.info(f"Import finished in {elapsed:.1f}s")
    return outcome.failed == 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="staffdesk maintenance CLI")
    parser.add_argument("--init-db", action="store_true", help="Create or migrate the employees table")
    parser.add_argument("--seed", action="store_true", help="Insert demo employees when the table is empty")
    parser.add_argument("--write-templates", action="store_true", help="Write CSV/XLSX import templates")
    parser.add_argument("--import", dest="import_path", type=Path, metavar="PATH",
                        help="Import employees from a CSV or Excel file")
    args = parser.parse_args(argv)

    if not (args.init_db or args.seed or args.write_templates or args.import_path):
        parser.print_help()
        return 0

    success = True
    if args.init_db:
        success = run_init_db() and success
    if args.seed:
        success = run_seed() and success
    if args.write_templates:
        success = run_write_templates() and success
    if args.import_path:
        success = run_import_file(args.import_path) and success

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
