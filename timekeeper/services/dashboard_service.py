"""
Dashboard figures: hours today, hours this week, active projects, chart series.
"""

import datetime
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import List, Optional

from timekeeper.domain.models import TimeEntry, UserPreferences, as_utc
from timekeeper.infra.repository import Database
from timekeeper.services import aggregation


@dataclass
class DashboardStats:
    hours_today: float = 0.0
    hours_this_week: float = 0.0
    active_projects: int = 0
    weekly_hours: "OrderedDict[str, float]" = field(default_factory=OrderedDict)
    project_hours: "OrderedDict[str, float]" = field(default_factory=OrderedDict)
    today_entries: List[TimeEntry] = field(default_factory=list)  # by start_time


class DashboardService:

    def __init__(self, db: Database, preferences: Optional[UserPreferences] = None):
        self.db = db
        self.preferences = preferences or UserPreferences()

    async def get_stats(self, now: Optional[datetime.datetime] = None) -> DashboardStats:
        """
        Aggregate the current user's entries. The week starts on Monday;
        `now` decides which day and week count as current.
        """
        now = as_utc(now or datetime.datetime.now(datetime.timezone.utc))
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        start_of_week = start_of_day - datetime.timedelta(days=start_of_day.weekday())

        entries = await self.db.time_entries.get_by_user_id(self.preferences.user_id)
        projects = await self.db.projects.get_all()
        project_names = {p.id: p.name for p in projects}

        today = aggregation.entries_between(entries, start_of_day, start_of_day + datetime.timedelta(days=1))
        week = aggregation.entries_between(entries, start_of_week, start_of_week + datetime.timedelta(days=7))

        return DashboardStats(
            hours_today=aggregation.total_hours(today),
            hours_this_week=aggregation.total_hours(week),
            active_projects=sum(1 for p in projects if p.active),
            weekly_hours=aggregation.hours_by_weekday(week),
            project_hours=aggregation.hours_by_project(entries, project_names),
            today_entries=sorted(today, key=lambda e: e.start_time),
        )

    async def billable_summary(self, hourly_rate: Optional[float] = None) -> float:
        """Billable amount over all of the user's entries"""
        rate = self.preferences.hourly_rate if hourly_rate is None else hourly_rate
        entries = await self.db.time_entries.get_by_user_id(self.preferences.user_id)
        return aggregation.billable_amount(entries, rate)
