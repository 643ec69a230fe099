"""Domain layer - Pure business entities"""

from .models import (
    Customer,
    CustomerCreate,
    Project,
    ProjectCreate,
    TimeEntry,
    TimeEntryCreate,
    TimeEntryUpdate,
    UserPreferences,
)

__all__ = [
    "Customer",
    "CustomerCreate",
    "Project",
    "ProjectCreate",
    "TimeEntry",
    "TimeEntryCreate",
    "TimeEntryUpdate",
    "UserPreferences",
]
