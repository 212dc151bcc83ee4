"""
Dataset quality scoring for Data Fusion.

Derives a 0-100 health score and a list of issues from column profiles,
based on null density and the presence of a unique identifier column.
"""

from dataclasses import dataclass, field
from typing import List, Sequence

from .models import ColumnProfile

NO_HEADERS = "no headers"
HIGH_MISSING_VALUES = "high number of missing values (>50%)"
SOME_MISSING_VALUES = "some missing values detected"
NO_UNIQUE_IDENTIFIER = "no clear unique identifier column found"


@dataclass
class QualityReport:
    """Quality score and the issues that lowered it."""
    score: int
    issues: List[str] = field(default_factory=list)


def score_quality(headers: Sequence[str], profiles: Sequence[ColumnProfile], row_count: int) -> QualityReport:
    """
    Score the quality of a dataset.

    Args:
        headers: Dataset header list
        profiles: Column profiles for the headers
        row_count: Number of rows in the dataset

    Returns:
        QualityReport with a score clamped to [0, 100]
    """
    if not headers:
        return QualityReport(score=0, issues=[NO_HEADERS])

    score = 100
    issues = []

    if profiles:
        null_rates = [p.null_count / max(row_count, 1) for p in profiles]
        avg_null_rate = sum(null_rates) / len(null_rates)

        if avg_null_rate > 0.5:
            score -= 20
            issues.append(HIGH_MISSING_VALUES)
        elif avg_null_rate > 0.1:
            score -= 5
            issues.append(SOME_MISSING_VALUES)

    has_identifier = any(p.unique_count == row_count for p in profiles)
    if row_count > 0 and not has_identifier:
        score -= 10
        issues.append(NO_UNIQUE_IDENTIFIER)

    return QualityReport(score=max(0, min(100, score)), issues=issues)
