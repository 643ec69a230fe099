"""
Timer Service - running timer and manual time entries.

Entries are only written when a timer stops or a manual entry is saved;
nothing is persisted while a timer runs. Both paths build the entry the
same way: end_time is "now", start_time is end_time minus the duration.
"""

import datetime
import logging
from typing import Callable, Optional

from timekeeper.domain.models import Project, TimeEntry, TimeEntryCreate, UserPreferences
from timekeeper.infra.repository import Database

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTION = "Untitled task"

Clock = Callable[[], datetime.datetime]


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class TimerService:
    """
    The time tracking engine. Holds the running timer state; the data
    access facade does the persistence.
    """

    def __init__(self, db: Database, preferences: Optional[UserPreferences] = None,
                 clock: Clock = utc_now):
        self.db = db
        self.preferences = preferences or UserPreferences()
        self.clock = clock

        self.started_at: Optional[datetime.datetime] = None
        self.description: str = ""
        self.project_id: Optional[str] = None
        self.billable: bool = True

    def is_tracking(self) -> bool:
        """Check if currently tracking time"""
        return self.started_at is not None

    def start(self, description: str = "", project_id: Optional[str] = None, billable: bool = True):
        """Start the timer; the project may also be chosen when stopping"""
        if self.is_tracking():
            raise RuntimeError("Timer is already running")

        self.description = description
        self.project_id = project_id
        self.billable = billable
        self.started_at = self.clock()
        logger.debug(f"Timer started at {self.started_at.isoformat()}")

    def elapsed_seconds(self) -> int:
        """Whole seconds since start (0 when idle)"""
        if not self.started_at:
            return 0
        return max(0, int((self.clock() - self.started_at).total_seconds()))

    def reset(self):
        self.started_at = None
        self.description = ""
        self.project_id = None
        self.billable = True

    async def stop(self, project_id: Optional[str] = None,
                   customer_id: Optional[str] = None) -> Optional[TimeEntry]:
        """
        Stop the timer and save the tracked time.

        Args:
            project_id: Overrides the project given at start
            customer_id: Overrides the customer inherited from the project

        Returns:
            The created entry, or None when nothing was tracked or the store failed
        """
        if not self.is_tracking():
            return None

        now = self.clock()
        seconds = max(0, int((now - self.started_at).total_seconds()))
        description = self.description
        billable = self.billable
        project_id = project_id or self.project_id
        self.reset()

        if seconds <= 0:
            return None

        return await self._create_entry(description, project_id, customer_id,
                                        seconds, billable, now)

    async def add_manual_entry(self, hours: int = 0, minutes: int = 0, description: str = "",
                               project_id: Optional[str] = None, customer_id: Optional[str] = None,
                               billable: bool = True) -> Optional[TimeEntry]:
        """
        Record time worked without the timer. The entry ends now.

        Returns None when hours and minutes add up to nothing.
        """
        if hours < 0 or minutes < 0:
            raise ValueError("Hours and minutes must not be negative")

        seconds = hours * 3600 + minutes * 60
        if seconds <= 0:
            return None

        return await self._create_entry(description, project_id, customer_id,
                                        seconds, billable, self.clock())

    async def _resolve_project(self, project_id: Optional[str]) -> Project:
        if not project_id:
            raise ValueError("A project is required for a time entry")

        project = await self.db.projects.get_by_id(project_id)
        if not project:
            raise ValueError(f"Project {project_id} not found")
        return project

    async def _create_entry(self, description: str, project_id: Optional[str],
                            customer_id: Optional[str], seconds: int, billable: bool,
                            end_time: datetime.datetime) -> Optional[TimeEntry]:
        project = await self._resolve_project(project_id)

        customer_id = customer_id or project.customer_id
        if not customer_id:
            raise ValueError(f"Project {project.name} has no customer; choose one explicitly")

        entry = TimeEntryCreate(
            description=description or DEFAULT_DESCRIPTION,
            project_id=project.id,
            customer_id=customer_id,
            start_time=end_time - datetime.timedelta(seconds=seconds),
            end_time=end_time,
            duration=seconds,
            billable=billable,
            user_id=self.preferences.user_id,
        )
        created = await self.db.time_entries.create(entry)
        if created is None:
            logger.error(f"Time entry for project {project.id} could not be saved")
        return created
