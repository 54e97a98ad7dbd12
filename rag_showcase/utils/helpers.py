"""Helper utilities for the RAG showcase client."""

from datetime import datetime
from typing import Union

Number = Union[int, float]


def format_number(value: Number) -> str:
    """5.0 -> '5', 2.5 -> '2.5', 1234567.5 -> '1234567.5' (two decimals at most)."""
    if value is None:
        return "0"
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def pluralize(count: Number, noun: str) -> str:
    """'1 skill', '2 skills'."""
    return f"{format_number(count)} {noun}{'' if count == 1 else 's'}"


def format_timestamp(value: str) -> str:
    """ISO-8601 string as a German-style date (dd.mm.yyyy, hh:mm:ss); unparseable input is returned as-is."""
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%d.%m.%Y, %H:%M:%S")
