"""Demo employees for a fresh database.

Runs on API start when STAFFDESK_AUTO_SEED is set, or via
``python manage_cli.py --seed``.  Does nothing once the table has rows.
"""
from pathlib import Path

from api.database import init_db
from api.models import EmployeeCreate
from api.store import EmployeeStore
from logger_config import setup_logger

logger = setup_logger(__name__)

DEMO_EMPLOYEES = [
    {"name": "John Doe", "email": "john.doe@company.com", "phoneNumber": "1234567890",
     "address": "123 Main St", "dateOfBirth": "1985-01-01", "position": "Software Engineer"},
    {"name": "Jane Smith", "email": "jane.smith@company.com", "phoneNumber": None,
     "address": "456 Oak Ave", "dateOfBirth": "1990-05-12", "position": "Product Manager"},
    {"name": "Bob Johnson", "email": "bob.j@company.com", "phoneNumber": "0987654321",
     "address": None, "dateOfBirth": None, "position": "Designer"},
    {"name": "Siti Rahma", "email": "siti.rahma@company.com", "phoneNumber": "081298765432",
     "address": "Jl. Gatot Subroto 12, Jakarta", "dateOfBirth": "1993-08-17", "position": "HR Specialist"},
    {"name": "Carlos Mendes", "email": "carlos.mendes@company.com", "phoneNumber": "5511987654321",
     "address": "Rua Augusta 900, Sao Paulo", "dateOfBirth": "1988-11-02", "position": "Data Analyst"},
    {"name": "Aisha Khan", "email": "aisha.khan@company.com", "phoneNumber": None,
     "address": None, "dateOfBirth": "1995-02-28", "position": "QA Engineer"},
]


def seed(db_path: Path | None = None) -> int:
    """Insert DEMO_EMPLOYEES into an empty table.  Returns the number inserted."""
    init_db(db_path)
    store = EmployeeStore(db_path)
    if store.count() > 0:
        logger.info("Employees already exist, skipping seed")
        return 0

    for row in DEMO_EMPLOYEES:
        store.insert(EmployeeCreate.model_validate(row))
    logger.info(f"Seeded {len(DEMO_EMPLOYEES)} demo employees")
    return len(DEMO_EMPLOYEES)


if __name__ == "__main__":
    seed()
