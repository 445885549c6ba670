from mailinglist.adapters.sqlite.migrator import SQLiteMigrator
from mailinglist.adapters.sqlite.store import (
    SQLiteSubscriberStore,
    SQLiteUnitOfWork,
    sqlite_unit_of_work_factory,
)

__all__ = [
    "SQLiteMigrator",
    "SQLiteSubscriberStore",
    "SQLiteUnitOfWork",
    "sqlite_unit_of_work_factory",
]
