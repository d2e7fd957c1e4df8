"""Application orchestration layer."""

from tripvoice.application.expense_intake import FallbackExpenseParser, parse_expense
from tripvoice.application.trip_intake import parse_trip_request

__all__ = ["FallbackExpenseParser", "parse_expense", "parse_trip_request"]
