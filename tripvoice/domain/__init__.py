"""Domain package exports."""

from tripvoice.domain.enums import AlertLevel, DraftSource, ExpenseCategory, RouteMode, TravelStyle
from tripvoice.domain.exceptions import DomainError, InvalidDraft, RecordNotFound
from tripvoice.domain.models import (
    CATEGORY_LABELS,
    Activity,
    ExpenseDraft,
    MapLocation,
    RouteSummary,
    TripRequestDraft,
)

__all__ = [
    "Activity",
    "AlertLevel",
    "CATEGORY_LABELS",
    "DomainError",
    "DraftSource",
    "ExpenseCategory",
    "ExpenseDraft",
    "InvalidDraft",
    "MapLocation",
    "RecordNotFound",
    "RouteMode",
    "RouteSummary",
    "TravelStyle",
    "TripRequestDraft",
]
