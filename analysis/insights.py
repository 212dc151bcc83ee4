"""
Insight-generation collaborator interface for Data Fusion.

Narrative analysis of a merged table is produced outside this package,
usually by an LLM-backed service. It runs strictly after a merge, so its
failures never affect merge results: any error degrades to an empty,
explicitly flagged AnalysisResult.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from data_handling.models import MergedTable, Row

logger = logging.getLogger(__name__)

ANALYSIS_FAILED_SUMMARY = "Analysis failed due to LLM error."
ANALYSIS_UNAVAILABLE_SUMMARY = "Analysis unavailable: no insight generator configured."


@dataclass
class AnalysisResult:
    """Narrative analysis of a merged table."""
    insights: List[Dict[str, Any]] = field(default_factory=list)
    anomalies: List[Dict[str, Any]] = field(default_factory=list)
    recommendations: List[Dict[str, Any]] = field(default_factory=list)
    correlations: List[Dict[str, Any]] = field(default_factory=list)
    summary: str = ''
    failed: bool = False

    @classmethod
    def empty(cls, reason: str = ANALYSIS_FAILED_SUMMARY) -> 'AnalysisResult':
        """An empty result flagged as failed."""
        return cls(summary=reason, failed=True)

    @classmethod
    def from_dict(cls, data: Any) -> 'AnalysisResult':
        """
        Build a result from a collaborator payload.

        Raises:
            ValueError: If the payload is not an object or a section has the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError(f"Analysis payload must be an object, got {type(data).__name__}")

        sections = {}
        for name in ('insights', 'anomalies', 'recommendations', 'correlations'):
            value = data.get(name, [])
            if not isinstance(value, list):
                raise ValueError(f"Analysis section '{name}' must be a list")
            sections[name] = list(value)

        summary = data.get('summary', '')
        if not isinstance(summary, str):
            raise ValueError("Analysis summary must be a string")

        return cls(summary=summary, **sections)

    def to_dict(self) -> dict:
        return {
            'insights': self.insights,
            'anomalies': self.anomalies,
            'recommendations': self.recommendations,
            'correlations': self.correlations,
            'summary': self.summary,
            'failed': self.failed,
        }


class InsightGenerator(ABC):
    """Abstract collaborator that analyses merged rows."""

    @abstractmethod
    def generate(self, rows: List[Row], columns: List[str]) -> dict:
        """
        Analyse rows and return a payload with insights, anomalies,
        recommendations, correlations and summary.
        """
        pass


def run_insight_analysis(
    generator: Optional[InsightGenerator],
    data: Union[MergedTable, Sequence[Row]],
    columns: Optional[Sequence[str]] = None,
    max_rows: int = 100
) -> AnalysisResult:
    """
    Run the insight collaborator over a capped slice of the data.

    Args:
        generator: Collaborator to call; None yields a flagged empty result
        data: Merged table or plain rows
        columns: Column list (taken from the table when omitted)
        max_rows: Maximum number of rows handed to the collaborator

    Returns:
        AnalysisResult; never raises for collaborator failures
    """
    if isinstance(data, MergedTable):
        rows = list(data.rows)
        columns = list(columns if columns is not None else data.columns)
    else:
        rows = list(data)
        columns = list(columns or [])

    if generator is None:
        logger.info("Skipping analysis: no insight generator configured")
        return AnalysisResult.empty(ANALYSIS_UNAVAILABLE_SUMMARY)

    limited_rows = [dict(row) for row in rows[:max_rows]]
    if len(rows) > max_rows:
        logger.debug(f"Capped analysis input from {len(rows)} to {max_rows} rows")

    try:
        payload = generator.generate(limited_rows, columns)
        result = AnalysisResult.from_dict(payload)
    except Exception as e:
        logger.warning(f"Insight generation failed in {type(generator).__name__}: {e}")
        return AnalysisResult.empty()

    logger.info(
        f"Analysis produced {len(result.insights)} insights and {len(result.anomalies)} anomalies"
    )
    return result
