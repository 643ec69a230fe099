"""
Report Generation Service using Jinja2 templates.

Architecture Decision: Template Pattern
Allows users to customize reports without changing code.
"""

import datetime
import logging
from pathlib import Path
from typing import List, Optional
from jinja2 import Environment, FileSystemLoader

from timekeeper.domain.models import UserPreferences, as_utc
from timekeeper.infra.repository import Database
from timekeeper.services import aggregation

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "resources" / "templates"


class ReportService:
    """
    Generates reports from time tracking data using Jinja2 templates.
    """

    def __init__(self, db: Database, preferences: Optional[UserPreferences] = None,
                 template_dir: Optional[Path] = None):
        """
        Initialize the report service.

        Args:
            db: Data access facade
            preferences: Rate, currency and default template
            template_dir: Directory containing Jinja2 templates
        """
        if template_dir is None:
            template_dir = TEMPLATE_DIR

        self.db = db
        self.preferences = preferences or UserPreferences()
        self.template_dir = template_dir

        # Setup Jinja2 environment
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True
        )

        # Add custom filters
        self.env.filters['format_duration'] = aggregation.format_duration
        self.env.filters['format_duration_short'] = aggregation.format_duration_short
        self.env.filters['format_hours'] = aggregation.format_hours
        self.env.filters['format_currency'] = aggregation.format_currency
        self.env.filters['format_date'] = self._format_date

    @staticmethod
    def _format_date(dt: datetime.datetime, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
        """Format datetime object"""
        return dt.strftime(fmt)

    async def generate_report(self, start_date: datetime.datetime,
                              end_date: datetime.datetime,
                              project_id: Optional[str] = None,
                              template_name: Optional[str] = None,
                              output_file: Optional[Path] = None) -> str:
        """
        Generate a report for a date range.

        Args:
            start_date: Start of reporting period (inclusive)
            end_date: End of reporting period (exclusive)
            project_id: Only include this project's entries
            template_name: Template file; defaults to the preference
            output_file: Optional file path to save the report

        Returns:
            The generated report as a string
        """
        start_date, end_date = as_utc(start_date), as_utc(end_date)
        if project_id:
            entries = await self.db.time_entries.get_by_project_id(project_id)
        else:
            entries = await self.db.time_entries.get_all()
        entries = aggregation.entries_between(entries, start_date, end_date)
        entries.sort(key=lambda e: e.start_time)

        projects = await self.db.projects.get_all()
        project_names = {p.id: p.name for p in projects}
        project = next((p for p in projects if p.id == project_id), None) if project_id else None

        rate = self.preferences.hourly_rate
        context = {
            'start_date': start_date,
            'end_date': end_date,
            'project': project,
            'entries': [
                {'entry': e, 'project_name': project_names.get(e.project_id, 'Untitled Project')}
                for e in entries
            ],
            'project_hours': aggregation.hours_by_project(entries, project_names),
            'total_hours': aggregation.total_hours(entries),
            'billable_amount': aggregation.billable_amount(entries, rate),
            'hourly_rate': rate,
            'currency': self.preferences.currency,
            'generated_at': datetime.datetime.now(),
        }

        template = self.env.get_template(template_name or self.preferences.report_template)
        report_content = template.render(**context)

        if output_file:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            with open(output_file, 'w', encoding='utf-8') as f:
                f.write(report_content)
            logger.info(f"Report written to {output_file}")

        return report_content

    def list_templates(self) -> List[str]:
        """List all available template files"""
        return [f.name for f in self.template_dir.glob("*.txt")] + \
               [f.name for f in self.template_dir.glob("*.md")] + \
               [f.name for f in self.template_dir.glob("*.html")]
