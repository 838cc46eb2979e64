#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ICE Mapper - Mapper Reader

This module contains the MapperReader class, which turns a tabular layout
description ("mapper") into an ordered list of FieldMapping objects. Layouts
arrive either as delimited text (comma, tab, pipe or semicolon separated) or as
spreadsheet rows; both are reduced to rows of named string cells and go through
the same row ingestion.

Features:
    - Column name matching against canonical names (case-insensitive, substring)
    - Position strings in "<start> to <end>" or "<start>-<end>" form
    - Declared length with fallback to the length implied by the positions
    - Per-row ingestion report (accepted / skipped / rejected)
    - Inverse serialization back to mapper rows and CSV text

Classes:
    - MapperReader: Main layout reading class

Dependencies:
    - config_options: MapperReaderConfig
    - types_and_errors: FieldMapping, IngestionReport, MapperReaderError
"""

import io
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd

from .config_options import MapperReaderConfig, DEFAULT_COLUMN_SYNONYMS
from .loader import read_text
from .types_and_errors import FieldMapping, IngestionReport, MapperReaderError

logger = logging.getLogger(__name__)

POSITION_PATTERN = re.compile(r'^\s*(\d+)\s*(to|-)\s*(\d+)\s*$', re.IGNORECASE)
LENGTH_PATTERN = re.compile(r'^\s*([+-]?\d+)')

MAPPER_HEADERS = ['Element', 'Value', 'Description', 'Type', 'Position', 'Length', 'Preview']

# ==========================================
# ROW-LEVEL HELPERS
# ==========================================

def normalize_column_name(
    column: Any,
    synonyms: List[Tuple[str, List[str]]] = DEFAULT_COLUMN_SYNONYMS
) -> Optional[str]:
    """
    Map a header to its canonical name.

    The header is trimmed and lowercased, then checked against each canonical
    name's synonyms in order; the first synonym contained in the header wins.

    Returns:
        The canonical name, or None if nothing matches
    """
    normalized = str(column).strip().lower()
    if not normalized:
        return None
    for canonical, names in synonyms:
        for name in names:
            if name.lower() in normalized:
                return canonical
    return None


def cell_text(value: Any) -> str:
    """Render one cell as trimmed text; missing cells become ''."""
    if value is None:
        return ''
    if not isinstance(value, str):
        try:
            if pd.isna(value):
                return ''
        except (TypeError, ValueError):
            pass
        value = str(value)
    return value.strip()


def parse_position(position: str) -> Optional[Tuple[int, int]]:
    """Parse "<start> to <end>" or "<start>-<end>" into (start, end)."""
    match = POSITION_PATTERN.match(position or '')
    if not match:
        return None
    return int(match.group(1)), int(match.group(3))


def parse_declared_length(text: str, calculated_length: int) -> int:
    """
    Resolve the declared length of a field.

    The leading integer of the cell is used; a missing, non-numeric or zero
    value falls back to the length implied by the positions. The two are not
    reconciled here.
    """
    match = LENGTH_PATTERN.match(text or '')
    if match:
        declared = int(match.group(1))
        if declared:
            return declared
    return calculated_length


def resolve_row(
    row: Mapping[str, Any],
    synonyms: List[Tuple[str, List[str]]] = DEFAULT_COLUMN_SYNONYMS
) -> Dict[str, str]:
    """Collapse a raw row onto canonical names. The first column for a name wins."""
    resolved: Dict[str, str] = {}
    for column, value in row.items():
        canonical = normalize_column_name(column, synonyms)
        if canonical is None or canonical in resolved:
            continue
        resolved[canonical] = cell_text(value)
    return resolved


def normalize_rows(
    rows: Iterable[Mapping[str, Any]],
    config: Optional[MapperReaderConfig] = None,
    source: str = ''
) -> Tuple[List[FieldMapping], IngestionReport]:
    """
    Turn layout rows into field mappings sorted by start position.

    Rows with a blank position or the unused-row sentinel are skipped silently.
    Rows with an unparseable position or no element are rejected and reported;
    ingestion always continues with the next row.

    Args:
        rows: Rows of column name -> cell value
        config: Reader configuration (synonyms, default type, sentinel)
        source: Name of the document, for the report

    Returns:
        Tuple of (mappings, report)
    """
    config = config or MapperReaderConfig()
    report = IngestionReport(source)
    mappings: List[FieldMapping] = []

    for index, row in enumerate(rows):
        try:
            resolved = resolve_row(row, config.column_synonyms)
            position = resolved.get('position', '')

            if not position or position == config.unused_position:
                report.add_skip(index, 'unused row', position)
                continue

            bounds = parse_position(position)
            if bounds is None:
                logger.warning(f"Skipping row {index}: Invalid position format \"{position}\"")
                report.add_reject(index, f'invalid position format "{position}"', position)
                continue

            position_start, position_end = bounds
            calculated_length = position_end - position_start + 1
            length = parse_declared_length(resolved.get('length', ''), calculated_length)

            mapping = FieldMapping(
                element=resolved.get('element', ''),
                value=resolved.get('value', ''),
                description=resolved.get('description', ''),
                type=resolved.get('type', '') or config.default_type,
                position_start=position_start,
                position_end=position_end,
                length=length,
                preview=resolved.get('preview', ''),
            )

            if not mapping.element:
                logger.warning(f"Skipping row {index}: No element name")
                report.add_reject(index, 'missing element', position)
                continue

            mappings.append(mapping)
            report.add_accept(index, position)

        except (TypeError, ValueError, AttributeError) as e:
            logger.error(f"Error parsing row {index}: {e}")
            report.add_reject(index, f'error parsing row: {e}')

    # Stable: rows sharing a start keep document order
    mappings.sort(key=lambda m: m.position_start)

    return mappings, report

# ==========================================
# INVERSE SERIALIZATION
# ==========================================

def mapper_to_rows(mappings: Iterable[FieldMapping]) -> List[Dict[str, str]]:
    """Serialize mappings back to mapper rows (the inverse of normalize_rows)."""
    return [
        {
            'Element': m.element,
            'Value': m.value,
            'Description': m.description,
            'Type': m.type,
            'Position': f"{m.position_start} to {m.position_end}",
            'Length': str(m.length),
            'Preview': m.preview,
        }
        for m in mappings
    ]


def mapper_to_csv(mappings: Iterable[FieldMapping]) -> str:
    """Render mappings as mapper CSV text."""
    df = pd.DataFrame(mapper_to_rows(mappings), columns=MAPPER_HEADERS)
    return df.to_csv(index=False, lineterminator='\n')


class MapperReader:
    """
    Reads mapper documents into field mappings.

    Every read returns the mappings together with an IngestionReport. A document
    that yields no mappings at all raises MapperReaderError.
    """

    def __init__(self, config: Optional[MapperReaderConfig] = None):
        self.config = config or MapperReaderConfig()
        self.logger = logging.getLogger(__name__)

    def detect_delimiter(self, text: str) -> str:
        """
        Detect the delimiter of a delimited mapper from its header line.

        Args:
            text: Mapper text

        Returns:
            str: The candidate delimiter occurring most often in the header, ',' if none
        """
        header = next((line for line in text.splitlines() if line.strip()), '')
        counts = {delimiter: header.count(delimiter) for delimiter in self.config.delimiters}
        delimiter, count = max(counts.items(), key=lambda item: item[1], default=(',', 0))
        if count == 0:
            return ','
        self.logger.debug(f"Detected delimiter: {delimiter!r} ({count + 1} columns)")
        return delimiter

    def read_rows(
        self,
        rows: Iterable[Mapping[str, Any]],
        source: str = ''
    ) -> Tuple[List[FieldMapping], IngestionReport]:
        """Normalize rows; raise if none survive."""
        mappings, report = normalize_rows(rows, self.config, source)

        if report.rejected:
            self.logger.warning(f"{report.rejected} row(s) rejected while reading {source or 'mapper'}")

        if not mappings:
            raise MapperReaderError(f"No valid mappings found in {source or 'mapper'}")

        self.logger.info(f"Loaded {len(mappings)} mappings from {source or 'mapper'} "
                         f"({report.skipped} skipped, {report.rejected} rejected)")
        return mappings, report

    def read_csv_text(self, text: str, source: str = '') -> Tuple[List[FieldMapping], IngestionReport]:
        """
        Read a delimited mapper.

        Args:
            text: Mapper text (comma, tab, pipe or semicolon separated, with header)
            source: Name of the document

        Returns:
            Tuple of (mappings, report)
        """
        text = text.lstrip('\ufeff')
        if not text.strip():
            raise MapperReaderError(f"Mapper file is empty: {source or 'mapper'}")

        delimiter = self.detect_delimiter(text)
        try:
            column_count = len(pd.read_csv(io.StringIO(text), sep=delimiter, nrows=0).columns)

            def truncate_ragged_row(cells: List[str]) -> List[str]:
                # Extra cells shift into the following columns; the row is then
                # accepted or rejected on its own by normalize_rows
                self.logger.warning(f"Row with {len(cells)} cells in {source or 'mapper'} "
                                    f"(expected {column_count}): {cells}")
                return cells[:column_count]

            df = pd.read_csv(
                io.StringIO(text),
                sep=delimiter,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                engine='python',
                on_bad_lines=truncate_ragged_row,
            )
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise MapperReaderError(f"Failed to parse mapper {source or 'text'}: {e}") from e

        return self.read_rows(df.to_dict(orient='records'), source)

    def read_excel(self, source: Union[str, Path, io.BytesIO], name: str = '') -> Tuple[List[FieldMapping], IngestionReport]:
        """
        Read a spreadsheet mapper (first sheet, header row first).

        Args:
            source: Path or file-like object of an .xlsx/.xls workbook
            name: Name of the document

        Returns:
            Tuple of (mappings, report)
        """
        name = name or str(source)
        try:
            df = pd.read_excel(source, sheet_name=0, dtype=str, keep_default_na=False)
        except (ValueError, IndexError, OSError, KeyError) as e:
            raise MapperReaderError(f"Failed to read Excel file {name}: {e}") from e

        if df.empty:
            raise MapperReaderError(f"Excel sheet is empty: {name}")

        return self.read_rows(df.to_dict(orient='records'), name)

    def read_file(self, file_path: Union[str, Path]) -> Tuple[List[FieldMapping], IngestionReport]:
        """
        Read a mapper file, choosing the reader by extension.

        Args:
            file_path: Path to a .csv/.txt/.tsv or .xlsx/.xls mapper

        Returns:
            Tuple of (mappings, report)
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise MapperReaderError(f"Mapper file not found: {file_path}")

        if file_path.suffix.lower() in self.config.spreadsheet_extensions:
            return self.read_excel(file_path, file_path.name)

        text = read_text(file_path, self.config.encoding, self.config.fallback_encoding)
        return self.read_csv_text(text, file_path.name)
