"""
Merge engine for combining normalized datasets.

This module reconciles several datasets that share a target schema into one
table, either by joining rows on an identifier column (inner, left, outer)
or by appending every row as-is.
"""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Union

from .models import (
    ROW_INDEX_COLUMN,
    ColumnMapping,
    Dataset,
    MergedTable,
    MergeMetadata,
    MergeStrategy,
    NormalizedDataset,
    Row,
    canonical_key,
)
from .normalizer import normalize_dataset

logger = logging.getLogger(__name__)


class MergeEngine:
    """Combines normalized datasets under one of the merge strategies."""

    def identifier_of(self, row: Row, identifier_column: str) -> Optional[str]:
        """Canonical identifier of a row, or None when it has none."""
        return canonical_key(row.get(identifier_column))

    def collect_ids(self, dataset: NormalizedDataset, identifier_column: str) -> List[str]:
        """Distinct identifiers of one dataset in first-appearance order."""
        seen = {}
        for row in dataset.rows:
            row_id = self.identifier_of(row, identifier_column)
            if row_id is not None and row_id not in seen:
                seen[row_id] = None
        return list(seen)

    def build_id_set(
        self,
        datasets: Sequence[NormalizedDataset],
        identifier_column: str,
        strategy: MergeStrategy
    ) -> List[str]:
        """
        Identifiers that survive a join strategy, in emission order.

        Emission order is first appearance scanning datasets in order and
        rows in order, filtered by membership in the strategy's id set.

        Args:
            datasets: Normalized datasets in priority order
            identifier_column: Join key in the target schema
            strategy: A join strategy

        Returns:
            Ordered list of canonical identifiers
        """
        if not datasets:
            return []

        per_dataset = [self.collect_ids(ds, identifier_column) for ds in datasets]

        ordered: Dict[str, None] = {}
        for ids in per_dataset:
            for row_id in ids:
                ordered.setdefault(row_id, None)

        if strategy is MergeStrategy.INNER_JOIN:
            members: Set[str] = set(per_dataset[0])
            for ids in per_dataset[1:]:
                members &= set(ids)
        elif strategy is MergeStrategy.LEFT_JOIN:
            members = set(per_dataset[0])
        elif strategy in (MergeStrategy.OUTER_JOIN, MergeStrategy.SMART_MERGE):
            members = set(ordered)
        else:
            raise ValueError(f"{strategy.value} is not a join strategy")

        return [row_id for row_id in ordered if row_id in members]

    def index_rows(self, dataset: NormalizedDataset, identifier_column: str) -> Dict[str, Row]:
        """Map each identifier to the first row carrying it."""
        index = {}
        for row in dataset.rows:
            row_id = self.identifier_of(row, identifier_column)
            if row_id is not None and row_id not in index:
                index[row_id] = row
        return index

    def _join_rows(
        self,
        datasets: Sequence[NormalizedDataset],
        identifier_column: str,
        strategy: MergeStrategy
    ) -> List[Row]:
        # Index each dataset once by canonical identifier
        ids = self.build_id_set(datasets, identifier_column, strategy)
        indexes = [self.index_rows(ds, identifier_column) for ds in datasets]

        # Overlay matching rows in dataset order
        joined = []
        for row_id in ids:
            merged_row: Row = {identifier_column: row_id}
            for index in indexes:
                source_row = index.get(row_id)
                if source_row is not None:
                    merged_row.update(source_row)
            joined.append(merged_row)
        return joined

    def _append_rows(self, datasets: Sequence[NormalizedDataset]) -> List[Row]:
        return [dict(row) for ds in datasets for row in ds.rows]

    def _output_columns(self, rows: Sequence[Row], target_schema: Optional[Sequence[str]]) -> List[str]:
        if target_schema is not None:
            columns = []
            for column in target_schema:
                if column != ROW_INDEX_COLUMN and column not in columns:
                    columns.append(column)
            return columns

        seen = set()
        for row in rows:
            seen.update(row)
        seen.discard(ROW_INDEX_COLUMN)
        return sorted(seen)

    def merge(
        self,
        datasets: Sequence[NormalizedDataset],
        identifier_column: str,
        strategy: Union[MergeStrategy, str],
        target_schema: Optional[Sequence[str]] = None
    ) -> MergedTable:
        """
        Merge normalized datasets into one table.

        Join strategies emit one row per surviving identifier, built by
        overlaying each dataset's first matching row in dataset order, so
        later datasets win on field collisions. Append emits every row of
        every dataset in dataset order then row order.

        Args:
            datasets: Normalized datasets in priority order
            identifier_column: Join key in the target schema
            strategy: Merge strategy or its name
            target_schema: Output columns; when omitted, the sorted union of
                all field names

        Returns:
            MergedTable whose first column is always '_row_index'
        """
        strategy = MergeStrategy.parse(strategy)

        # Combine rows
        if strategy.is_join:
            rows = self._join_rows(datasets, identifier_column, strategy)
        else:
            rows = self._append_rows(datasets)

        # Project onto output columns and number rows
        columns = self._output_columns(rows, target_schema)

        output_rows = []
        for position, row in enumerate(rows, start=1):
            output_row: Row = {ROW_INDEX_COLUMN: position}
            for column in columns:
                output_row[column] = row.get(column)
            output_rows.append(output_row)

        # Record merge metadata
        metadata = MergeMetadata(
            total_rows=len(output_rows),
            sources=tuple(ds.id for ds in datasets),
            strategy=strategy,
            join_key=identifier_column
        )

        logger.info(
            f"Merged {len(datasets)} datasets with {strategy.value} on '{identifier_column}': "
            f"{len(output_rows)} rows, {len(columns) + 1} columns"
        )
        if strategy.is_join and datasets and not output_rows:
            logger.warning(f"No rows matched identifier column '{identifier_column}'")

        return MergedTable(
            columns=(ROW_INDEX_COLUMN, *columns),
            rows=tuple(output_rows),
            metadata=metadata
        )


def merge_datasets(
    datasets: Sequence[Union[Dataset, NormalizedDataset]],
    mappings: Mapping[str, Iterable[ColumnMapping]],
    identifier_column: str,
    strategy: Union[MergeStrategy, str],
    target_schema: Optional[Sequence[str]] = None,
    engine: Optional[MergeEngine] = None
) -> MergedTable:
    """
    Normalize each dataset with its own mapping list, then merge.

    Args:
        datasets: Datasets in priority order
        mappings: Mapping lists keyed by dataset id; a missing entry means identity
        identifier_column: Join key in the target schema
        strategy: Merge strategy or its name
        target_schema: Optional output column list, also used to project rows
        engine: Engine to use (a new MergeEngine when omitted)

    Returns:
        MergedTable
    """
    normalized = [normalize_dataset(ds, mappings.get(ds.id), target_schema) for ds in datasets]
    return (engine or MergeEngine()).merge(normalized, identifier_column, strategy, target_schema)


def create_merge_engine() -> MergeEngine:
    """Factory function to create a merge engine."""
    return MergeEngine()
