"""Persistence package exports."""

from tripvoice.persistence.models import (
    DailyPlanRecord,
    ExpenseRecord,
    TripRecord,
    UserRecord,
    UserSettingsRecord,
)
from tripvoice.persistence.repository import NoopTravelRepository, TravelRepository, get_repository
from tripvoice.persistence.sqlite_repository import SQLiteTravelRepository

__all__ = [
    "DailyPlanRecord",
    "ExpenseRecord",
    "NoopTravelRepository",
    "SQLiteTravelRepository",
    "TravelRepository",
    "TripRecord",
    "UserRecord",
    "UserSettingsRecord",
    "get_repository",
]
