"""Domain enums."""

from enum import Enum


class ExpenseCategory(str, Enum):
    TRANSPORT = "TRANSPORT"
    ACCOMMODATION = "ACCOMMODATION"
    FOOD = "FOOD"
    SIGHTSEEING = "SIGHTSEEING"
    SHOPPING = "SHOPPING"
    OTHER = "OTHER"


class TravelStyle(str, Enum):
    RELAXATION = "relaxation"
    ADVENTURE = "adventure"
    CULTURAL = "cultural"
    FOOD = "food"
    SHOPPING = "shopping"
    NATURE = "nature"
    SIGHTSEEING = "sightseeing"
    BUSINESS = "business"


class DraftSource(str, Enum):
    LLM = "llm"
    HEURISTIC = "heuristic"


class RouteMode(str, Enum):
    DRIVING = "driving"
    WALKING = "walking"
    TRANSIT = "transit"


class AlertLevel(str, Enum):
    WARNING = "warning"
    DANGER = "danger"
