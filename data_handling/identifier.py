"""
Join-key detection for Data Fusion.

Heuristically picks the column most likely to identify a record across
datasets, preferring contact-style keys over generic id columns.
"""

import logging
import re
from typing import Optional, Sequence

from core.exceptions import ValidationError

from .models import ColumnProfile

logger = logging.getLogger(__name__)

RE_IDENTIFIER_NAME = re.compile(r"id|code|key|no\.", re.IGNORECASE)
RE_SPECIFIC_IDENTIFIER = re.compile(r"email|phone|ssn|uuid", re.IGNORECASE)
RE_GENERIC_ID = re.compile(r"id", re.IGNORECASE)

UNIQUENESS_THRESHOLD = 0.9


def _uniqueness_basis(profile: ColumnProfile, basis: str, row_count: Optional[int]) -> int:
    if basis == 'examples':
        return len(profile.example_values)
    if basis == 'non_null':
        if row_count is None:
            raise ValidationError("row_count is required for the 'non_null' uniqueness basis",
                                  field='row_count')
        return row_count - profile.null_count
    raise ValidationError("Unknown identifier uniqueness basis", field='uniqueness_basis', value=basis)


def find_identifier_candidates(
    profiles: Sequence[ColumnProfile],
    row_count: Optional[int] = None,
    uniqueness_basis: str = 'examples'
) -> list:
    """
    Return profiles that could serve as an identifier, in header order.

    A column qualifies when its distinct count exceeds 90% of the basis, or
    when its name looks like an identifier (id, code, key, no.).

    Args:
        profiles: Column profiles in header order
        row_count: Dataset row count, needed for the 'non_null' basis
        uniqueness_basis: 'examples' compares against the stored example
            values (at most three), 'non_null' against the true non-null count
    """
    candidates = []
    for profile in profiles:
        basis = _uniqueness_basis(profile, uniqueness_basis, row_count)
        if profile.unique_count > UNIQUENESS_THRESHOLD * basis or RE_IDENTIFIER_NAME.search(profile.column):
            candidates.append(profile)
    return candidates


def detect_identifier(
    profiles: Sequence[ColumnProfile],
    row_count: Optional[int] = None,
    uniqueness_basis: str = 'examples'
) -> Optional[str]:
    """
    Pick the best join-key column.

    Selection order: the first candidate named like a contact or global key
    (email, phone, ssn, uuid), then the first candidate containing 'id', then
    the first candidate at all.

    Returns:
        Column name, or None when no column qualifies
    """
    candidates = find_identifier_candidates(profiles, row_count, uniqueness_basis)

    for candidate in candidates:
        if RE_SPECIFIC_IDENTIFIER.search(candidate.column):
            return candidate.column

    for candidate in candidates:
        if RE_GENERIC_ID.search(candidate.column):
            return candidate.column

    if candidates:
        return candidates[0].column

    logger.debug(f"No identifier candidate among {len(profiles)} columns")
    return None
