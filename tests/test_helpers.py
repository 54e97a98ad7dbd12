import pytest

from rag_showcase.utils.helpers import format_number, format_timestamp, pluralize


@pytest.mark.parametrize(
    "value, expected",
    [(5.0, "5"), (5, "5"), (2.5, "2.5"), (1234567.5, "1234567.5"), (3.14159, "3.14"), (None, "0")],
)
def test_format_number(value, expected):
    assert format_number(value) == expected


def test_pluralize():
    assert pluralize(1, "job title") == "1 job title"
    assert pluralize(2, "skill") == "2 skills"
    assert pluralize(0, "chunk") == "0 chunks"


def test_format_timestamp():
    assert format_timestamp("2025-01-15T10:30:00Z") == "15.01.2025, 10:30:00"
    assert format_timestamp("yesterday") == "yesterday"
    assert format_timestamp("") == ""
