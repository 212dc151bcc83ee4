"""
CSV utilities for Data Fusion.

This module converts CSV text into rows of typed cell values and serializes
merged tables back to CSV in their declared column order.
"""

import logging
import re
from io import StringIO
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd

from core.exceptions import CSVDecodeError
from data_handling.models import MergedTable, Row, CellValue, canonical_key

logger = logging.getLogger(__name__)

RE_FLOAT = re.compile(r"^\s*-?(\d+\.?|\.\d+|\d+\.\d+)([eE][-+]?\d+)?\s*\Z")
RE_INTEGER = re.compile(r"^\s*-?\d+\s*\Z")
RE_ISO_DATETIME = re.compile(
    r"^\d{4}-[01]\d-[0-3]\dT[0-2]\d:[0-5]\d(:[0-5]\d(\.\d+)?)?([+-][0-2]\d:[0-5]\d|Z)\Z"
)

# Numbers beyond this magnitude cannot be represented exactly and stay text
MAX_SAFE_INTEGER = 2 ** 53 - 1

TRUE_VALUES = ('true', 'TRUE')
FALSE_VALUES = ('false', 'FALSE')


def coerce_cell(value: Union[str, float, None]) -> CellValue:
    """
    Convert one raw CSV cell into a typed value.

    Empty cells become None, true/false literals become booleans, numeric
    text becomes int or float, and full ISO-8601 timestamps become datetimes
    (truncated to microsecond precision). Anything else is returned unchanged.
    """
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    if value == '':
        return None
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False

    if RE_FLOAT.match(value):
        number = int(value) if RE_INTEGER.match(value) else float(value)
        if abs(number) <= MAX_SAFE_INTEGER:
            return number
        return value

    if RE_ISO_DATETIME.match(value):
        # datetime holds microseconds; finer fractional digits are truncated
        try:
            return pd.Timestamp(value).to_pydatetime(warn=False)
        except ValueError:
            return value

    return value


def _deduplicate_headers(headers: Sequence[str]) -> List[str]:
    """Suffix repeated header names with _1, _2, ... so row keys stay distinct."""
    seen: Dict[str, int] = {}
    result = []
    taken = set(headers)
    for header in headers:
        if header not in seen:
            seen[header] = 0
            result.append(header)
            continue
        count = seen[header]
        candidate = header
        while candidate in taken:
            count += 1
            candidate = f"{header}_{count}"
        seen[header] = count
        taken.add(candidate)
        result.append(candidate)
    return result


def decode_csv(
    content: Union[str, bytes],
    dynamic_typing: bool = True,
    file_name: Optional[str] = None
) -> Tuple[List[str], List[Row]]:
    """
    Parse CSV text with a header row into rows.

    Args:
        content: CSV text (bytes are decoded as UTF-8)
        dynamic_typing: Whether to coerce cells into typed values
        file_name: Name used in error messages

    Returns:
        Tuple of (header list, rows); each row's keys follow header order

    Raises:
        CSVDecodeError: If the content is not valid CSV
    """
    # Accept raw upload bytes, dropping a UTF-8 BOM
    if isinstance(content, bytes):
        try:
            content = content.decode('utf-8-sig')
        except UnicodeDecodeError:
            raise CSVDecodeError("CSV encoding not supported (please use UTF-8)", file_name=file_name)

    if not content.strip():
        return [], []

    # Read every cell as text
    try:
        frame = pd.read_csv(
            StringIO(content),
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True
        )
    except pd.errors.EmptyDataError:
        return [], []
    except pd.errors.ParserError as e:
        logger.error(f"Invalid CSV format in '{file_name or '<text>'}': {e}")
        raise CSVDecodeError(f"Invalid CSV format: {e}", file_name=file_name)

    records = frame.values.tolist()
    if not records:
        return [], []

    # First record is the header row
    headers = _deduplicate_headers(['' if pd.isna(h) else str(h) for h in records[0]])

    # Build rows keyed in header order
    rows = []
    for record in records[1:]:
        if dynamic_typing:
            values = [coerce_cell(cell) for cell in record]
        else:
            values = [None if pd.isna(cell) else cell for cell in record]
        rows.append(dict(zip(headers, values)))

    logger.debug(f"Decoded CSV '{file_name or '<text>'}': {len(headers)} columns, {len(rows)} rows")
    return headers, rows


def render_cell(value: CellValue) -> str:
    """Render one cell for CSV output; None becomes an empty string."""
    key = canonical_key(value)
    return '' if key is None else key


def encode_csv(table: MergedTable) -> str:
    """
    Serialize a merged table in its declared column order.

    Args:
        table: Merged table to serialize

    Returns:
        CSV text with one header row followed by one line per row
    """
    if not table.columns:
        return ''

    columns = list(table.columns)
    frame = pd.DataFrame(
        [[render_cell(row.get(column)) for column in columns] for row in table.rows],
        columns=columns,
        dtype=object
    )
    return frame.to_csv(index=False)
