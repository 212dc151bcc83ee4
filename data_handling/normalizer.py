"""
Schema normalization for Data Fusion.

Applies a column mapping to a dataset's rows, renaming source columns onto
the target schema and optionally projecting away columns outside it.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Union

from .models import ColumnMapping, Dataset, NormalizedDataset, Row


def build_mapping_lookup(mappings: Iterable[ColumnMapping]) -> Dict[str, str]:
    """
    Build a source -> target lookup.

    A later mapping for the same source column replaces an earlier one, and a
    mapping with an empty target leaves the column name unchanged.
    """
    lookup = {}
    for mapping in mappings:
        lookup[mapping.source_column] = mapping.target_column or mapping.source_column
    return lookup


def normalize_row(row: Row, lookup: Dict[str, str], target_schema: Optional[set] = None) -> Row:
    """Rename the keys of one row; collisions are last-write-wins in key order."""
    normalized = {}
    for key, value in row.items():
        target_key = lookup.get(key, key)
        if target_schema is not None and target_key not in target_schema:
            continue
        normalized[target_key] = value
    return normalized


def normalize_rows(
    rows: Iterable[Row],
    mappings: Iterable[ColumnMapping],
    target_schema: Optional[Sequence[str]] = None
) -> List[Row]:
    """
    Rename every row onto the target schema.

    Args:
        rows: Source rows; their key order decides renaming collisions
        mappings: Column mappings for this dataset
        target_schema: When given, keys outside it are dropped after renaming

    Returns:
        New rows; the input rows are not modified
    """
    lookup = build_mapping_lookup(mappings)
    schema = set(target_schema) if target_schema is not None else None
    return [normalize_row(row, lookup, schema) for row in rows]


def normalize_dataset(
    dataset: Union[Dataset, NormalizedDataset],
    mappings: Optional[Iterable[ColumnMapping]] = None,
    target_schema: Optional[Sequence[str]] = None
) -> NormalizedDataset:
    """Normalize a dataset's rows; a missing mapping list means identity."""
    rows = normalize_rows(dataset.rows, mappings or [], target_schema)
    return NormalizedDataset(id=dataset.id, rows=tuple(rows))
