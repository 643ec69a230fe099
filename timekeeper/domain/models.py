"""
Domain Models using Pydantic for validation.

Architecture Decision: Why Pydantic?
Records arrive from two places (the remote data service as JSON and the local
key-value store as JSON). Pydantic validates both on the way in and gives a
single serialization path (`model_dump(mode="json")`) on the way out.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator


def as_utc(value: datetime) -> datetime:
    """Naive timestamps are taken to be UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class _Timestamped(BaseModel):
    """Every datetime field comes out timezone-aware"""

    @field_validator("*", mode="after")
    @classmethod
    def _aware_datetimes(cls, value):
        if isinstance(value, datetime):
            return as_utc(value)
        return value


class Customer(_Timestamped):
    """
    A customer time can be billed to.

    Customers are immutable once created (no update/delete is exposed).
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str = Field(..., min_length=1)
    email: Optional[str] = None
    company: Optional[str] = None
    created_at: Optional[datetime] = None


class CustomerCreate(BaseModel):
    """Fields a caller supplies when creating a customer"""
    name: str = Field(..., min_length=1)
    email: Optional[str] = None
    company: Optional[str] = None


class Project(_Timestamped):
    """
    A project, optionally owned by a customer.

    A project without customer_id is an internal project.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str = Field(..., min_length=1)
    customer_id: Optional[str] = None
    active: bool = True
    created_at: Optional[datetime] = None


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1)
    customer_id: Optional[str] = None
    active: bool = True


class TimeEntry(_Timestamped):
    """
    Represents a single completed block of tracked time.

    duration always equals end_time - start_time in whole seconds; every
    entry point builds it that way, the stores do not re-check it.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    description: str = ""
    project_id: str
    customer_id: str
    start_time: datetime
    end_time: datetime
    duration: int = Field(default=0, ge=0)  # seconds
    billable: bool = True
    user_id: str
    created_at: Optional[datetime] = None


class TimeEntryCreate(_Timestamped):
    description: str = ""
    project_id: str
    customer_id: str
    start_time: datetime
    end_time: datetime
    duration: int = Field(default=0, ge=0)
    billable: bool = True
    user_id: str


class TimeEntryUpdate(_Timestamped):
    """
    Partial update for a time entry.

    Only fields that were explicitly set are sent to the store
    (see `model_dump(exclude_unset=True)`).
    """
    description: Optional[str] = None
    project_id: Optional[str] = None
    customer_id: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: Optional[int] = Field(default=None, ge=0)
    billable: Optional[bool] = None
    user_id: Optional[str] = None

    @field_validator("*", mode="after")
    @classmethod
    def _not_null(cls, value, info):
        # None only means "leave unchanged"; passing it explicitly is an error
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class UserPreferences(BaseModel):
    """
    User configuration and preferences.

    Loaded from settings.yaml so rates and identity can change without code.
    """
    model_config = ConfigDict(from_attributes=True)

    user_id: str = Field(default="local-user", description="Owner recorded on new time entries")
    hourly_rate: float = Field(default=100.0, ge=0, description="Rate used for billable amounts")
    currency: str = Field(default="USD", description="ISO currency code for reports")
    report_template: str = "report.md"
    reports_directory: Optional[str] = None
