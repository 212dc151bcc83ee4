"""
Column profiling for Data Fusion.

This module computes per-column statistics (inferred type, distinct count,
null count and example values) from decoded rows. Type inference is driven
by an ordered rule table: each non-null value takes the type of the first
rule it matches, and the column takes the most frequent value type.
"""

import re
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Sequence, Tuple

from .models import CellValue, ColumnProfile, ColumnType, Row, canonical_key, is_missing

RE_ISO_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")
RE_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+\Z")
RE_PHONE = re.compile(r"^[\+]?[(]?[0-9]{3}[)]?[-\s\.]?[0-9]{3}[-\s\.]?[0-9]{4,6}\Z")


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_date(value: Any) -> bool:
    # datetime is a subclass of date
    if isinstance(value, date):
        return True
    return isinstance(value, str) and RE_ISO_DATE_PREFIX.match(value) is not None


def _matches(pattern: re.Pattern) -> Callable[[Any], bool]:
    def check(value: Any) -> bool:
        return isinstance(value, str) and pattern.match(value) is not None
    return check


# Ordered (predicate, type) rules; the first matching rule wins
VALUE_TYPE_RULES: Tuple[Tuple[Callable[[Any], bool], ColumnType], ...] = (
    (_is_bool, ColumnType.BOOLEAN),
    (_is_number, ColumnType.NUMBER),
    (_is_date, ColumnType.DATE),
    (_matches(RE_EMAIL), ColumnType.EMAIL),
    (_matches(RE_PHONE), ColumnType.PHONE),
)


def infer_value_type(value: CellValue) -> ColumnType:
    """Classify one non-null cell value."""
    for predicate, column_type in VALUE_TYPE_RULES:
        if predicate(value):
            return column_type
    return ColumnType.STRING


def detect_column_type(values: Iterable[CellValue]) -> ColumnType:
    """
    Majority vote over the per-value types of a column.

    Ties go to the type that was observed first while scanning the values.

    Args:
        values: Non-null values of the column in row order

    Returns:
        The column type, or ColumnType.NULL when there are no values
    """
    counts: Dict[ColumnType, int] = {}
    for value in values:
        value_type = infer_value_type(value)
        counts[value_type] = counts.get(value_type, 0) + 1

    if not counts:
        return ColumnType.NULL

    # dicts keep first-insertion order and max() keeps the first maximum
    return max(counts, key=counts.get)


def profile_column(column: str, rows: Sequence[Row], example_value_count: int = 3) -> ColumnProfile:
    """
    Profile a single column.

    Args:
        column: Column name
        rows: Rows of the dataset; a row lacking the column counts as null
        example_value_count: Number of leading non-null values to keep

    Returns:
        ColumnProfile for the column
    """
    null_count = 0
    non_null_values: List[CellValue] = []
    distinct_keys = set()

    # Split nulls from values, tracking distinct canonical keys
    for row in rows:
        value = row.get(column)
        if is_missing(value):
            null_count += 1
            continue
        non_null_values.append(value)
        distinct_keys.add(canonical_key(value))

    return ColumnProfile(
        column=column,
        type=detect_column_type(non_null_values),
        unique_count=len(distinct_keys),
        null_count=null_count,
        example_values=tuple(non_null_values[:example_value_count])
    )


def profile_columns(headers: Sequence[str], rows: Sequence[Row],
                    example_value_count: int = 3) -> List[ColumnProfile]:
    """Profile every header of a dataset, in header order."""
    return [profile_column(header, rows, example_value_count) for header in headers]
