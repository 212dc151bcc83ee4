"""
Analysis module for Data Fusion.

This module provides the interface to the downstream insight-generation
collaborator and its graceful-degradation policy.
"""

from .insights import (
    ANALYSIS_FAILED_SUMMARY,
    ANALYSIS_UNAVAILABLE_SUMMARY,
    AnalysisResult,
    InsightGenerator,
    run_insight_analysis,
)

__all__ = [
    'ANALYSIS_FAILED_SUMMARY',
    'ANALYSIS_UNAVAILABLE_SUMMARY',
    'AnalysisResult',
    'InsightGenerator',
    'run_insight_analysis',
]

# Version info
__version__ = "1.0.0"
