"""
Vehicle mileage tracking against a yearly distance allowance.

This package provides:
- MileageEntry: a cumulative odometer reading
- YearlyData: one calendar year's bucket of entries
- AppSettings: yearly limit, rolling period start and preferences
- Calculation functions: target, variance, projection and pace
- Severity: five-level banding of derived metrics
- EntryStore: persistence of entries and settings on a key-value backend
- SettingsService: owner of the current settings
- Dashboard: every derived metric for one instant
"""

from .errors import MileageError, StorageError, InvalidInputError
from .severity import Severity, MetricKind
from .entry import MileageEntry
from .yearly_data import YearlyData
from .settings import (
    AppSettings,
    AppConfig,
    DEFAULT_SETTINGS,
    YEARLY_LIMIT,
    default_settings,
)
from .calculations import (
    get_current_year_data,
    get_total_kilometers,
    get_latest_reading,
    get_daily_target,
    get_target_for_date,
    get_target_for_today,
    get_variance_from_target,
    get_remaining_kilometers,
    get_remaining_days,
    get_daily_average,
    get_projected_total,
    get_required_daily_average,
    get_days_passed_ratio,
)
from .colors import get_color_for_value, get_color_for_daily_average, severity_hex
from .storage import YamlFileStore
from .store import EntryStore
from .settings_service import SettingsService
from .dashboard import Dashboard, build_dashboard
from .progress import ProgressPoint, build_progress_chart

__all__ = [
    "MileageError",
    "StorageError",
    "InvalidInputError",
    "Severity",
    "MetricKind",
    "MileageEntry",
    "YearlyData",
    "AppSettings",
    "AppConfig",
    "DEFAULT_SETTINGS",
    "YEARLY_LIMIT",
    "default_settings",
    "get_current_year_data",
    "get_total_kilometers",
    "get_latest_reading",
    "get_daily_target",
    "get_target_for_date",
    "get_target_for_today",
    "get_variance_from_target",
    "get_remaining_kilometers",
    "get_remaining_days",
    "get_daily_average",
    "get_projected_total",
    "get_required_daily_average",
    "get_days_passed_ratio",
    "get_color_for_value",
    "get_color_for_daily_average",
    "severity_hex",
    "YamlFileStore",
    "EntryStore",
    "SettingsService",
    "Dashboard",
    "build_dashboard",
    "ProgressPoint",
    "build_progress_chart",
]
