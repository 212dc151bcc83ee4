"""
CSV ingestion for Data Fusion.

This module turns uploaded CSV content into a profiled Dataset: it enforces
the configured size limit, decodes the CSV and runs dataset assembly. No
partial Dataset is produced when decoding fails.
"""

import logging
from typing import Optional, Union

from core.config import Config
from core.exceptions import CSVDecodeError, ValidationError
from data_handling.dataset import build_dataset
from data_handling.models import Dataset

from .csv_utils import decode_csv

logger = logging.getLogger(__name__)


def content_size_bytes(content: Union[str, bytes]) -> int:
    """Size of uploaded content in bytes, measuring text as UTF-8."""
    if isinstance(content, str):
        return len(content.encode('utf-8'))
    return len(content)


def validate_upload_size(content: Union[str, bytes], max_size_mb: float, file_name: Optional[str] = None) -> None:
    """
    Reject content larger than the configured limit.

    Raises:
        ValidationError: If the content exceeds max_size_mb
    """
    size = content_size_bytes(content)
    if size > max_size_mb * 1024 * 1024:
        raise ValidationError(
            f"File '{file_name or '<upload>'}' too large (maximum {max_size_mb}MB)",
            field='file_size',
            value=size
        )


def ingest_csv(
    content: Union[str, bytes],
    name: str,
    dataset_id: Optional[str] = None,
    config: Optional[Config] = None
) -> Dataset:
    """
    Decode and profile one CSV upload.

    Args:
        content: CSV text or UTF-8 bytes
        name: File name of the upload
        dataset_id: Identifier to assign (random UUID when omitted)
        config: Application configuration (defaults when omitted)

    Returns:
        Profiled Dataset

    Raises:
        ValidationError: If the upload exceeds the size limit
        CSVDecodeError: If the content is not valid CSV
    """
    config = config or Config()

    validate_upload_size(content, config.csv.max_upload_mb, name)

    try:
        headers, rows = decode_csv(content, dynamic_typing=config.csv.dynamic_typing, file_name=name)
    except CSVDecodeError:
        logger.error(f"Failed to ingest '{name}'")
        raise

    if not headers:
        logger.warning(f"File '{name}' has no headers")

    return build_dataset(
        headers,
        rows,
        name=name,
        dataset_id=dataset_id,
        profiling_config=config.profiling,
        sample_row_count=config.csv.sample_row_count
    )
