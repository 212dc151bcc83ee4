"""
Data handling module for Data Fusion.

This module provides the profiling and merge engine: column profiling,
quality scoring, identifier detection, schema normalization and merge
strategies, plus the schema-suggestion collaborator interface.
"""

from .dataset import build_dataset
from .identifier import detect_identifier, find_identifier_candidates
from .merge_strategy import MergeEngine, create_merge_engine, merge_datasets
from .models import (
    ROW_INDEX_COLUMN,
    ColumnMapping,
    ColumnProfile,
    ColumnType,
    Dataset,
    MergedTable,
    MergeMetadata,
    MergeStrategy,
    NormalizedDataset,
    canonical_key,
    is_missing,
)
from .normalizer import build_mapping_lookup, normalize_dataset, normalize_rows
from .profiling import detect_column_type, infer_value_type, profile_column, profile_columns
from .quality import QualityReport, score_quality
from .schema_suggestion import (
    SchemaSuggester,
    SchemaSuggestion,
    build_suggestion_request,
    request_schema_suggestion,
)

__all__ = [
    # Models
    'ROW_INDEX_COLUMN',
    'ColumnMapping',
    'ColumnProfile',
    'ColumnType',
    'Dataset',
    'MergedTable',
    'MergeMetadata',
    'MergeStrategy',
    'NormalizedDataset',
    'canonical_key',
    'is_missing',

    # Profiling
    'build_dataset',
    'profile_column',
    'profile_columns',
    'infer_value_type',
    'detect_column_type',
    'QualityReport',
    'score_quality',
    'detect_identifier',
    'find_identifier_candidates',

    # Normalization and merge
    'build_mapping_lookup',
    'normalize_rows',
    'normalize_dataset',
    'MergeEngine',
    'create_merge_engine',
    'merge_datasets',

    # Schema suggestion
    'SchemaSuggester',
    'SchemaSuggestion',
    'build_suggestion_request',
    'request_schema_suggestion',
]

# Version info
__version__ = "1.0.0"
