#!/usr/bin/env python

"""
Timekeeper - Main Entry Point

Initializes storage (remote data service when configured, local store
otherwise) and prints dashboard figures or a report.

Usage:
    python main.py                  # dashboard
    python main.py report [days]    # report for the last N days (default 7)

Configuration:
    TIMETRACKER_SUPABASE_URL / TIMETRACKER_SUPABASE_KEY enable the remote store.
"""

import asyncio
import datetime
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from timekeeper.infra.config import get_settings
from timekeeper.infra.db import init_db
from timekeeper.infra.local_store import LocalStore
from timekeeper.infra.remote_store import RemoteStore, build_async_client
from timekeeper.infra.repository import Database
from timekeeper.infra.bootstrap import initialize_database
from timekeeper.services import DashboardService, ReportService
from timekeeper.services.aggregation import format_currency, format_duration, format_hours


async def run(args) -> int:
    settings = get_settings()
    engine = await init_db(settings=settings)
    client = build_async_client(settings) if settings.remote_configured else None

    try:
        db = Database(LocalStore(engine), RemoteStore(client) if client else None)
        await initialize_database(db)
        prefs = settings.preferences

        if args and args[0] == "report":
            days = int(args[1]) if len(args) > 1 else 7
            end = datetime.datetime.now(datetime.timezone.utc)
            report = await ReportService(db, prefs).generate_report(end - datetime.timedelta(days=days), end)
            print(report)
            return 0

        dashboard = DashboardService(db, prefs)
        stats = await dashboard.get_stats()
        billable = await dashboard.billable_summary()
        print(f"Today's hours:   {format_hours(stats.hours_today)}")
        print(f"This week:       {format_hours(stats.hours_this_week)}")
        print(f"Active projects: {stats.active_projects}")
        print(f"Billable:        {format_currency(billable, prefs.currency)}")
        for name, hours in stats.project_hours.items():
            print(f"  {name}: {format_hours(hours)}")
        if stats.today_entries:
            print("Today:")
        for entry in stats.today_entries:
            span = f"{entry.start_time:%H:%M}-{entry.end_time:%H:%M}"
            print(f"  {span}  {format_duration(entry.duration)}  {entry.description}")
        return 0
    finally:
        if client is not None:
            await client.aclose()
        await engine.dispose()


def main():
    """Main entry point"""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return asyncio.run(run(sys.argv[1:]))


if __name__ == "__main__":
    sys.exit(main())
