"""
Repository Pattern Implementation - the data access facade.

Architecture Decision: Why Repository Pattern?
Callers get one contract per entity no matter which store answered:
- If the remote data service is not configured, the local store serves every call
- If it is configured, the remote store is tried first
    - the server reported an error -> log it and return the empty sentinel
      ([] / None / False); the local store is NOT consulted
    - the call raised (network, unreadable body, invalid record) -> log it and
      serve this one call from the local store

The decision is made per call; there is no sticky "offline mode". No
exception leaves these classes in normal operation.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from timekeeper.domain.models import (
    Customer, CustomerCreate, Project, ProjectCreate,
    TimeEntry, TimeEntryCreate, TimeEntryUpdate,
)
from timekeeper.infra.local_store import LocalStore, StorageKeys
from timekeeper.infra.remote_store import QueryResult, RemoteStore, rows

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
ResultT = TypeVar("ResultT")


class _FallbackRepository(Generic[ModelT]):
    """Shared fallback policy and record conversion"""

    table: str
    storage_key: str
    model: Type[ModelT]
    order_by: str = "name"
    descending: bool = False

    def __init__(self, local: LocalStore, remote: Optional[RemoteStore] = None):
        self.local = local
        self.remote = remote

    async def _run(self, action: str,
                   remote_call: Callable[[], Awaitable[QueryResult]],
                   convert: Callable[[Any], ResultT],
                   local_call: Callable[[], Awaitable[ResultT]],
                   failure: ResultT) -> ResultT:
        if self.remote is None:
            return await local_call()

        try:
            result = await remote_call()
            if result.error is not None:
                logger.error(f"Error {action}: {result.error}")
                return failure
            return convert(result.data)
        except Exception as e:
            logger.warning(f"Remote store failed while {action} ({type(e).__name__}: {e}); using local storage")
            return await local_call()

    # Conversion helpers. Remote conversion raises on bad data so the call
    # falls back; local conversion skips bad records so nothing is raised.

    def _remote_list(self, data: Any) -> List[ModelT]:
        return [self.model.model_validate(r) for r in rows(data)]

    def _remote_one(self, data: Any) -> Optional[ModelT]:
        if data is None:
            return None
        if isinstance(data, list):
            if not data:
                return None
            data = data[0]
        return self.model.model_validate(data)

    def _local_list(self, records: Iterable[Dict[str, Any]]) -> List[ModelT]:
        models = []
        for record in records:
            model = self._local_one(record)
            if model is not None:
                models.append(model)
        return models

    def _local_one(self, record: Optional[Dict[str, Any]]) -> Optional[ModelT]:
        if record is None:
            return None
        try:
            return self.model.model_validate(record)
        except ValidationError as e:
            logger.error(f"Skipping invalid record in local storage ({self.storage_key}): {e}")
            return None

    # Generic operations used by the entity repositories

    async def _get_all(self, action: str) -> List[ModelT]:
        async def local_call():
            return self._local_list(await self.local.get_all(self.storage_key))

        return await self._run(
            action,
            lambda: self.remote.select(self.table, order=self.order_by, descending=self.descending),
            self._remote_list,
            local_call,
            [],
        )

    async def _get_where(self, action: str, field: str, value: str) -> List[ModelT]:
        async def local_call():
            return self._local_list(await self.local.filter_by(self.storage_key, field, value))

        return await self._run(
            action,
            lambda: self.remote.select(self.table, order=self.order_by, descending=self.descending,
                                       filters={field: value}),
            self._remote_list,
            local_call,
            [],
        )

    async def _get_by_id(self, action: str, record_id: str) -> Optional[ModelT]:
        async def local_call():
            return self._local_one(await self.local.get_by_id(self.storage_key, record_id))

        return await self._run(
            action,
            lambda: self.remote.select_one(self.table, record_id),
            self._remote_one,
            local_call,
            None,
        )

    async def _create(self, action: str, payload: BaseModel) -> Optional[ModelT]:
        fields = payload.model_dump(mode="json")

        async def local_call():
            return self._local_one(await self.local.create(self.storage_key, fields))

        return await self._run(
            action,
            lambda: self.remote.insert(self.table, fields),
            self._remote_one,
            local_call,
            None,
        )


class CustomerRepository(_FallbackRepository[Customer]):
    """Customers, ordered by name on the remote store"""

    table = "customers"
    storage_key = StorageKeys.CUSTOMERS
    model = Customer

    async def get_all(self) -> List[Customer]:
        return await self._get_all("fetching customers")

    async def get_by_id(self, customer_id: str) -> Optional[Customer]:
        return await self._get_by_id("fetching customer", customer_id)

    async def create(self, customer: CustomerCreate) -> Optional[Customer]:
        return await self._create("creating customer", customer)


class ProjectRepository(_FallbackRepository[Project]):
    """Projects, ordered by name on the remote store"""

    table = "projects"
    storage_key = StorageKeys.PROJECTS
    model = Project

    async def get_all(self) -> List[Project]:
        return await self._get_all("fetching projects")

    async def get_by_customer_id(self, customer_id: str) -> List[Project]:
        """Projects of one customer (name order remotely, insertion order locally)"""
        return await self._get_where("fetching projects by customer", "customer_id", customer_id)

    async def get_by_id(self, project_id: str) -> Optional[Project]:
        return await self._get_by_id("fetching project", project_id)

    async def create(self, project: ProjectCreate) -> Optional[Project]:
        return await self._create("creating project", project)


class TimeEntryRepository(_FallbackRepository[TimeEntry]):
    """Time entries, newest first on the remote store"""

    table = "time_entries"
    storage_key = StorageKeys.TIME_ENTRIES
    model = TimeEntry
    order_by = "created_at"
    descending = True

    async def get_all(self) -> List[TimeEntry]:
        return await self._get_all("fetching time entries")

    async def get_by_user_id(self, user_id: str) -> List[TimeEntry]:
        return await self._get_where("fetching time entries by user", "user_id", user_id)

    async def get_by_customer_id(self, customer_id: str) -> List[TimeEntry]:
        return await self._get_where("fetching time entries by customer", "customer_id", customer_id)

    async def get_by_project_id(self, project_id: str) -> List[TimeEntry]:
        return await self._get_where("fetching time entries by project", "project_id", project_id)

    async def get_by_id(self, entry_id: str) -> Optional[TimeEntry]:
        return await self._get_by_id("fetching time entry", entry_id)

    async def create(self, entry: TimeEntryCreate) -> Optional[TimeEntry]:
        return await self._create("creating time entry", entry)

    async def update(self, entry_id: str, updates: TimeEntryUpdate) -> Optional[TimeEntry]:
        """Apply only the fields set on `updates`"""
        fields = updates.model_dump(mode="json", exclude_unset=True)

        async def local_call():
            current = await self.local.get_by_id(self.storage_key, entry_id)
            if current is None:
                return None
            try:
                self.model.model_validate({**current, **fields, "id": entry_id})
            except ValidationError as e:
                logger.error(f"Refusing to store invalid time entry {entry_id}: {e}")
                return None
            return self._local_one(await self.local.update(self.storage_key, entry_id, fields))

        return await self._run(
            "updating time entry",
            lambda: self.remote.update(self.table, entry_id, fields),
            self._remote_one,
            local_call,
            None,
        )

    async def delete(self, entry_id: str) -> bool:
        return await self._run(
            "deleting time entry",
            lambda: self.remote.delete(self.table, entry_id),
            lambda _data: True,
            lambda: self.local.delete(self.storage_key, entry_id),
            False,
        )


class Database:
    """
    The data access facade: `db.customers`, `db.projects`, `db.time_entries`.

    Pass `remote=None` to run entirely on the local store.
    """

    def __init__(self, local: LocalStore, remote: Optional[RemoteStore] = None):
        self.local = local
        self.remote = remote
        self.customers = CustomerRepository(local, remote)
        self.projects = ProjectRepository(local, remote)
        self.time_entries = TimeEntryRepository(local, remote)
