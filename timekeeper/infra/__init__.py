"""Infrastructure layer - Remote data service, local store and the data access facade"""

from .db import DatabaseEngine, init_db
from .models import KeyValueModel
from .local_store import LocalStore, StorageKeys
from .remote_store import RemoteStore, QueryResult, RemoteError, build_async_client
from .repository import Database
from .bootstrap import initialize_database

__all__ = [
    "DatabaseEngine", "init_db", "KeyValueModel",
    "LocalStore", "StorageKeys",
    "RemoteStore", "QueryResult", "RemoteError", "build_async_client",
    "Database", "initialize_database",
]
