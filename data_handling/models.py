"""
Data model for Data Fusion.

This module defines the typed structures that flow through the profiling and
merge pipeline: rows, column profiles, datasets, column mappings, merge
strategies and merged tables, plus the canonicalization used to compare
identifier values.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

import pandas as pd

from core.exceptions import ValidationError

CellValue = Union[str, int, float, bool, date, datetime, None]
Row = Dict[str, CellValue]

ROW_INDEX_COLUMN = '_row_index'


def is_missing(value: Any) -> bool:
    """Return True for values counted as null: None, empty string or NaN."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ''
    if isinstance(value, float):
        return math.isnan(value)
    return False


def canonical_key(value: Any) -> Optional[str]:
    """
    Canonical comparison key for a cell value.

    Every identifier comparison and distinct-value count goes through this
    function so that ``1``, ``1.0`` and ``"1"`` compare equal.

    Returns:
        The canonical string, or None when the value is missing
    """
    if is_missing(value):
        return None
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


class ColumnType(Enum):
    """Inferred column types."""
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    EMAIL = "email"
    PHONE = "phone"
    NULL = "null"


class MergeStrategy(Enum):
    """Strategies for combining several datasets into one table."""
    INNER_JOIN = "inner_join"
    LEFT_JOIN = "left_join"
    OUTER_JOIN = "outer_join"
    SMART_MERGE = "smart_merge"
    APPEND = "append"

    @property
    def is_join(self) -> bool:
        return self is not MergeStrategy.APPEND

    @classmethod
    def parse(cls, value: Union[str, 'MergeStrategy']) -> 'MergeStrategy':
        """Convert a strategy name into a MergeStrategy."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = [s.value for s in cls]
            raise ValidationError(f"Unknown merge strategy, expected one of {valid}",
                                  field='merge_strategy', value=value)


@dataclass(frozen=True)
class ColumnProfile:
    """Per-column statistics computed once per dataset."""
    column: str
    type: ColumnType
    unique_count: int
    null_count: int
    example_values: Tuple[CellValue, ...] = ()

    def to_dict(self) -> dict:
        return {
            'column': self.column,
            'type': self.type.value,
            'unique_count': self.unique_count,
            'null_count': self.null_count,
            'example_values': list(self.example_values),
        }


@dataclass(frozen=True)
class ColumnMapping:
    """Maps a source column of one dataset onto a target schema column."""
    source_column: str
    target_column: str
    confidence: float = 1.0
    description: Optional[str] = None

    def __post_init__(self):
        if not 0 <= self.confidence <= 1:
            raise ValidationError("Mapping confidence must be between 0 and 1",
                                  field='confidence', value=self.confidence)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        data = {
            'source_column': self.source_column,
            'target_column': self.target_column,
            'confidence': self.confidence,
        }
        if self.description is not None:
            data['description'] = self.description
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'ColumnMapping':
        """Create from a dictionary using snake_case or camelCase keys."""
        source = data.get('source_column', data.get('sourceColumn'))
        target = data.get('target_column', data.get('targetColumn'))
        if not isinstance(source, str) or not source:
            raise ValidationError("Column mapping requires a source column", field='source_column', value=source)
        if not isinstance(target, str):
            raise ValidationError("Column mapping requires a target column", field='target_column', value=target)

        confidence = data.get('confidence', 1.0)
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            raise ValidationError("Mapping confidence must be a number", field='confidence', value=confidence)

        return cls(
            source_column=source,
            target_column=target,
            confidence=float(confidence),
            description=data.get('description')
        )


@dataclass(frozen=True)
class Dataset:
    """A profiled table. Immutable; re-profiling requires a new Dataset."""
    id: str
    name: str
    headers: Tuple[str, ...]
    rows: Tuple[Row, ...]
    quality_score: int
    issues: Tuple[str, ...]
    column_profiles: Tuple[ColumnProfile, ...]
    suggested_identifier: Optional[str] = None
    sample_row_count: int = 5

    @property
    def total_rows(self) -> int:
        return len(self.rows)

    @property
    def sample_rows(self) -> List[Row]:
        return [dict(row) for row in self.rows[:self.sample_row_count]]

    def get_profile(self, column: str) -> Optional[ColumnProfile]:
        for profile in self.column_profiles:
            if profile.column == column:
                return profile
        return None

    def to_dict(self, include_rows: bool = False) -> dict:
        """Convert to a JSON-ready dictionary, optionally with every row."""
        data = {
            'id': self.id,
            'name': self.name,
            'headers': list(self.headers),
            'total_rows': self.total_rows,
            'quality_score': self.quality_score,
            'issues': list(self.issues),
            'column_profiles': [p.to_dict() for p in self.column_profiles],
            'suggested_identifier': self.suggested_identifier,
            'sample_rows': self.sample_rows,
        }
        if include_rows:
            data['rows'] = [dict(row) for row in self.rows]
        return data


@dataclass(frozen=True)
class NormalizedDataset:
    """A dataset whose rows have been renamed onto the target schema."""
    id: str
    rows: Tuple[Row, ...]


@dataclass(frozen=True)
class MergeMetadata:
    """Provenance of a merged table."""
    total_rows: int
    sources: Tuple[str, ...]
    strategy: MergeStrategy
    join_key: str
    generated_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> dict:
        return {
            'total_rows': self.total_rows,
            'sources': list(self.sources),
            'generated_at': self.generated_at,
            'strategy': self.strategy.value,
            'join_key': self.join_key,
        }


@dataclass(frozen=True)
class MergedTable:
    """Output of a merge; recomputed wholesale on every merge invocation."""
    columns: Tuple[str, ...]
    rows: Tuple[Row, ...]
    metadata: MergeMetadata

    @property
    def total_rows(self) -> int:
        return len(self.rows)

    def to_dict(self) -> dict:
        return {
            'columns': list(self.columns),
            'rows': [dict(row) for row in self.rows],
            'metadata': self.metadata.to_dict(),
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Return the merged rows as a DataFrame in declared column order."""
        return pd.DataFrame(
            [[row.get(column) for column in self.columns] for row in self.rows],
            columns=list(self.columns),
            dtype=object
        )
