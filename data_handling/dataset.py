"""
Dataset assembly for Data Fusion.

Runs the profiler, quality scorer and identifier detector over decoded rows
and freezes the result into a Dataset.
"""

import logging
from typing import Optional, Sequence
from uuid import uuid4

from core.config import ProfilingConfig

from .identifier import detect_identifier
from .models import Dataset, Row
from .profiling import profile_columns
from .quality import score_quality

logger = logging.getLogger(__name__)


def build_dataset(
    headers: Sequence[str],
    rows: Sequence[Row],
    name: str,
    dataset_id: Optional[str] = None,
    profiling_config: Optional[ProfilingConfig] = None,
    sample_row_count: int = 5
) -> Dataset:
    """
    Profile decoded rows and build an immutable Dataset.

    Args:
        headers: Ordered header list
        rows: Decoded rows in file order
        name: Display name, typically the uploaded file name
        dataset_id: Identifier to use; a random UUID when omitted
        profiling_config: Profiling settings (defaults when omitted)
        sample_row_count: Number of leading rows exposed as sample rows

    Returns:
        Dataset with profiles, quality score, issues and suggested identifier
    """
    profiling_config = profiling_config or ProfilingConfig()
    headers = tuple(headers)
    frozen_rows = tuple(dict(row) for row in rows)

    profiles = profile_columns(headers, frozen_rows, profiling_config.example_value_count)
    report = score_quality(headers, profiles, len(frozen_rows))
    identifier = detect_identifier(
        profiles,
        row_count=len(frozen_rows),
        uniqueness_basis=profiling_config.identifier_uniqueness_basis
    )

    dataset = Dataset(
        id=dataset_id or str(uuid4()),
        name=name,
        headers=headers,
        rows=frozen_rows,
        quality_score=report.score,
        issues=tuple(report.issues),
        column_profiles=tuple(profiles),
        suggested_identifier=identifier,
        sample_row_count=sample_row_count
    )

    logger.info(
        f"Profiled dataset '{name}': {len(headers)} columns, {dataset.total_rows} rows, "
        f"quality {dataset.quality_score}, identifier {identifier!r}"
    )
    if report.issues:
        logger.debug(f"Quality issues for '{name}': {', '.join(report.issues)}")

    return dataset
