#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ICE Mapper - Fixed-Width Processor

This module turns raw fixed-width text into records and decodes records into
field values using the current field mappings.

Features:
    - Record length derived from the layout (largest end position)
    - Line-break agnostic segmentation into fixed-length records
    - Per-field decode by 1-based inclusive positions, tolerant of short records
    - Sentinel-fill emptiness classifier (all 9s, 0s, underscores, asterisks)
    - Column-wise decode into a polars DataFrame

Classes:
    - FixedWidthProcessor: Reads, segments and decodes data documents

Dependencies:
    - config_options: ProcessorConfig
    - types_and_errors: FieldMapping, ParsedField, DataFileError
"""

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

import polars as pl

from .config_options import ProcessorConfig, DEFAULT_RECORD_LENGTH
from .loader import read_text
from .types_and_errors import DataFileError, FieldMapping, ParsedField, ParsedRecord

logger = logging.getLogger(__name__)

LINE_BREAKS = re.compile(r'\r\n|\n|\r')
EMPTY_PATTERNS = [
    re.compile(r'^9+$'),
    re.compile(r'^_+$'),
    re.compile(r'^\*+$'),
    re.compile(r'^0+$'),
]

# ==========================================
# SEGMENTATION
# ==========================================

def detect_record_length(mappings: Sequence[FieldMapping], default: int = DEFAULT_RECORD_LENGTH) -> int:
    """Record length is the largest end position in the layout."""
    if not mappings:
        return default
    return max(m.position_end for m in mappings)


def reformat_fixed_width(text: str, record_length: int) -> List[str]:
    """
    Split raw text into records of exactly record_length characters.

    All line breaks are removed first, so records may be wrapped anywhere in
    the source. Chunks that are entirely blank are dropped; the last chunk is
    right-padded with spaces.

    Args:
        text: Raw document text
        record_length: Characters per record

    Returns:
        List of records in document order
    """
    if record_length < 1:
        raise ValueError(f"Record length must be >= 1, got {record_length}")

    cleaned = LINE_BREAKS.sub('', text)

    records = []
    for offset in range(0, len(cleaned), record_length):
        chunk = cleaned[offset:offset + record_length]
        if chunk.strip():
            records.append(chunk.ljust(record_length))
    return records

# ==========================================
# DECODING
# ==========================================

def field_bounds(mapping: FieldMapping) -> tuple:
    """0-based half-open slice bounds for a mapping, clamped at zero; reversed bounds are swapped."""
    start, end = sorted((max(mapping.position_start - 1, 0), max(mapping.position_end, 0)))
    return start, end


def extract_field(record: str, mapping: FieldMapping) -> str:
    """Decode one field; out-of-range positions give whatever is available."""
    start, end = field_bounds(mapping)
    return record[start:end].strip()


def parse_record(record: str, mappings: Iterable[FieldMapping]) -> ParsedRecord:
    """Decode every mapped field of one record, keyed by element."""
    parsed: Dict[str, ParsedField] = {}
    for mapping in mappings:
        parsed[mapping.element] = ParsedField(
            name=mapping.label,
            value=extract_field(record, mapping),
            type=mapping.type,
        )
    return parsed


def parse_all_records(records: Iterable[str], mappings: Sequence[FieldMapping]) -> List[ParsedRecord]:
    """Decode records in order."""
    return [parse_record(record, mappings) for record in records]


def is_field_empty(value: Optional[str]) -> bool:
    """
    True for blank values and sentinel fills.

    Legacy fixed-width exports often pad "no data" with a single repeated
    character; all 9s, all underscores, all asterisks and all zeros count as
    empty here.
    """
    if not value or not value.strip():
        return True
    trimmed = value.strip()
    return any(pattern.match(trimmed) for pattern in EMPTY_PATTERNS)


def records_to_frame(
    records: Sequence[str],
    mappings: Sequence[FieldMapping],
    text_column_name: str = "text_content"
) -> pl.DataFrame:
    """
    Decode records column-wise into a DataFrame with one column per element.

    Values match parse_record. When an element is mapped more than once the
    later mapping wins.
    """
    columns: Dict[str, pl.Expr] = {}
    for mapping in mappings:
        start, end = field_bounds(mapping)
        columns[mapping.element] = (
            pl.col(text_column_name)
            .str.slice(start, end - start)
            .str.strip_chars()
            .alias(mapping.element)
        )

    df = pl.DataFrame({text_column_name: list(records)}, schema={text_column_name: pl.Utf8})
    return df.select(list(columns.values()))


class FixedWidthProcessor:
    """
    Reads fixed-width data documents and decodes them with a layout.
    """

    def __init__(self, config: Optional[ProcessorConfig] = None):
        self.config = config or ProcessorConfig()
        self.logger = logging.getLogger(__name__)

    def record_length(self, mappings: Sequence[FieldMapping]) -> int:
        return detect_record_length(mappings, self.config.default_record_length)

    def read_data_file(self, file_path: Union[str, Path]) -> str:
        """Read a data document as text."""
        file_path = Path(file_path)
        if not file_path.exists():
            raise DataFileError(f"Data file not found: {file_path}")
        return read_text(file_path, self.config.encoding, self.config.fallback_encoding)

    def segment(self, text: str, record_length: int, source: str = '') -> List[str]:
        """
        Segment a data document, failing when it holds no records.

        Raises:
            DataFileError: On an invalid record length or no non-blank records
        """
        try:
            records = reformat_fixed_width(text, record_length)
        except ValueError as e:
            raise DataFileError(str(e)) from e

        if not records:
            raise DataFileError(f"No valid records found in {source or 'data file'}")

        self.logger.info(f"Segmented {len(records)} records of {record_length} characters"
                         f"{' from ' + source if source else ''}")
        return records

    def decode(self, records: Sequence[str], mappings: Sequence[FieldMapping]) -> List[ParsedRecord]:
        parsed = parse_all_records(records, mappings)
        self.logger.debug(f"Decoded {len(parsed)} records with {len(mappings)} fields")
        return parsed

    def decode_frame(self, records: Sequence[str], mappings: Sequence[FieldMapping]) -> pl.DataFrame:
        return records_to_frame(records, mappings, self.config.text_column_name)
