"""Utility exports."""

from .helpers import format_number, format_timestamp, pluralize
from .logger import get_logger

__all__ = [
    "get_logger",
    "format_number",
    "format_timestamp",
    "pluralize",
]
