"""
Pipeline facade for Data Fusion.

Wires ingestion, schema suggestion, merging, analysis and export together
around one configuration. The merge path itself is pure; collaborators are
called strictly before (schema suggestion) or after (insights) it.
"""

import logging
from typing import Iterable, Mapping, Optional, Sequence, Union

from analysis.insights import AnalysisResult, InsightGenerator, run_insight_analysis
from core.config import Config
from core.exceptions import CollaboratorError, ValidationError
from data_handling.merge_strategy import MergeEngine, create_merge_engine, merge_datasets
from data_handling.models import ColumnMapping, Dataset, MergedTable, MergeStrategy
from data_handling.schema_suggestion import SchemaSuggester, SchemaSuggestion, request_schema_suggestion
from file_handling.csv_utils import encode_csv
from file_handling.upload import ingest_csv

logger = logging.getLogger(__name__)


class DataFusionPipeline:
    """Profiles uploads and merges them into one table."""

    def __init__(
        self,
        config: Optional[Config] = None,
        suggester: Optional[SchemaSuggester] = None,
        insight_generator: Optional[InsightGenerator] = None,
        engine: Optional[MergeEngine] = None
    ):
        self.config = config or Config()
        self.suggester = suggester
        self.insight_generator = insight_generator
        self.engine = engine or create_merge_engine()

    def ingest(self, content: Union[str, bytes], name: str, dataset_id: Optional[str] = None) -> Dataset:
        """Decode and profile one CSV upload."""
        return ingest_csv(content, name, dataset_id=dataset_id, config=self.config)

    def suggest_mappings(self, datasets: Sequence[Dataset]) -> SchemaSuggestion:
        """
        Ask the schema-suggestion collaborator for mappings.

        Raises:
            CollaboratorError: If no suggester is configured or it fails
        """
        if self.suggester is None:
            raise CollaboratorError("No schema suggester configured", collaborator='SchemaSuggester')
        return request_schema_suggestion(self.suggester, datasets, self.config.csv.sample_row_count)

    def merge(
        self,
        datasets: Sequence[Dataset],
        mappings: Optional[Mapping[str, Iterable[ColumnMapping]]],
        identifier_column: str,
        strategy: Union[MergeStrategy, str, None] = None,
        target_schema: Optional[Sequence[str]] = None
    ) -> MergedTable:
        """
        Normalize and merge datasets.

        Args:
            datasets: Datasets in priority order
            mappings: Mapping lists keyed by dataset id
            identifier_column: Join key in the target schema
            strategy: Merge strategy (configured default when omitted)
            target_schema: Optional output column list

        Raises:
            ValidationError: If the strategy name is unknown, or a join
                strategy is given no identifier column
        """
        strategy = MergeStrategy.parse(strategy if strategy is not None else self.config.merge.default_strategy)
        # Append never reads the identifier
        if strategy.is_join and not identifier_column:
            raise ValidationError("An identifier column is required for join strategies", field='identifier_column')

        return merge_datasets(
            datasets,
            mappings or {},
            identifier_column,
            strategy,
            target_schema=target_schema,
            engine=self.engine
        )

    def merge_with_suggestion(
        self,
        datasets: Sequence[Dataset],
        suggestion: SchemaSuggestion,
        identifier_column: Optional[str] = None
    ) -> MergedTable:
        """
        Merge using a suggestion's mappings, strategy and target schema.

        The identifier defaults to the suggestion's first common identifier.

        Raises:
            ValidationError: If a join strategy is suggested and no identifier
                column can be determined
        """
        identifier_column = identifier_column or suggestion.identifier_column or ''
        if suggestion.merge_strategy.is_join and not identifier_column:
            raise ValidationError("Schema suggestion names no common identifier", field='common_identifiers')

        return self.merge(
            datasets,
            suggestion.mappings,
            identifier_column,
            strategy=suggestion.merge_strategy,
            target_schema=suggestion.target_schema or None
        )

    def analyze(self, table: MergedTable) -> AnalysisResult:
        """Run insight generation; failures yield a flagged empty result."""
        return run_insight_analysis(self.insight_generator, table, max_rows=self.config.analysis.max_rows)

    def export_csv(self, table: MergedTable) -> str:
        return encode_csv(table)
