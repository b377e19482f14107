"""Injected collaborators.  Tests swap them via app.dependency_overrides."""
from functools import lru_cache

from api.store import EmployeeStore
from notifications import EmailNotifier


def get_store() -> EmployeeStore:
    return EmployeeStore()


@lru_cache(maxsize=1)
def get_notifier() -> EmailNotifier:
    return EmailNotifier.from_config()
