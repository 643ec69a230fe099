"""Services layer - Business logic"""

from .timer_service import TimerService
from .dashboard_service import DashboardService, DashboardStats
from .report_service import ReportService

__all__ = ["TimerService", "DashboardService", "DashboardStats", "ReportService"]
