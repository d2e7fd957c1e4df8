"""Deterministic parsing helpers."""

from tripvoice.parsing.categorizer import CATEGORY_KEYWORDS, categorize_expense, score_categories
from tripvoice.parsing.expense_extractors import AmountMatch, extract_amount, parse_expense_locally
from tripvoice.parsing.json_block import extract_json_block
from tripvoice.parsing.trip_extractors import parse_trip_locally

__all__ = [
    "AmountMatch",
    "CATEGORY_KEYWORDS",
    "categorize_expense",
    "extract_amount",
    "extract_json_block",
    "parse_expense_locally",
    "parse_trip_locally",
    "score_categories",
]
