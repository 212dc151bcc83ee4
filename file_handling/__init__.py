"""
File handling module for Data Fusion.

This module provides CSV decoding and encoding plus ingestion of uploaded
CSV content into profiled datasets.
"""

# CSV utilities
from .csv_utils import (
    coerce_cell,
    decode_csv,
    encode_csv,
    render_cell
)

# Upload handling
from .upload import (
    content_size_bytes,
    ingest_csv,
    validate_upload_size
)

__all__ = [
    # CSV utilities
    'coerce_cell',
    'decode_csv',
    'encode_csv',
    'render_cell',

    # Upload handling
    'content_size_bytes',
    'ingest_csv',
    'validate_upload_size',
]

# Version info
__version__ = "1.0.0"
