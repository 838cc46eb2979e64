#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ICE Mapper Pipeline

This module contains the MapperPipeline class that owns one working session:
the current layout, the raw data, the decoded records, the validation findings
and a list of user-facing notices. Every change to the layout re-derives the
record length, re-segments the raw data and re-decodes it.

Features:
    - Layout loading from files, text, rows or a remote sample
    - Data loading with automatic segmentation and decoding
    - Layout editing that keeps decoded data in step
    - Validation, summary and export
    - Session save / restore

Classes:
    - Notice: One user-facing message
    - MapperPipeline: Main workflow orchestrator

Workflow:
    1. Load a layout (mapper)
    2. Load fixed-width data
    3. Validate, edit, export

Dependencies:
    - All other modules (mapper_reader, processor, validator, editor, exporter, session_store)
    - config_options: PipelineConfig
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import requests

from .config_options import PipelineConfig
from .editor import MappingEditor
from .exporter import MapperExporter
from .loader import build_session, fetch_text
from .mapper_reader import MapperReader
from .processor import FixedWidthProcessor
from .session_store import SessionStore
from .types_and_errors import (
    DataFileError,
    FieldMapping,
    IceMapperError,
    IngestionReport,
    MapperNotLoadedError,
    MapperReaderError,
    ParsedRecord,
    ValidationIssue,
    ValidationSummary,
)
from .validator import MapperValidator, ValidationState


@dataclass(frozen=True)
class Notice:
    """A user-facing message: 'success', 'error', 'warning' or 'info'."""
    level: str
    message: str


class MapperPipeline:
    """
    One working session over a layout and its fixed-width data.

    The layout is the single source of truth: record length, segmentation and
    decoding are all derived from it and recomputed in full whenever it changes.
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        """
        Initialize the pipeline.

        Args:
            config: PipelineConfig with one config per component
        """
        self.config = config or PipelineConfig()
        self._setup_logging()

        self.reader = MapperReader(self.config.reader)
        self.processor = FixedWidthProcessor(self.config.processor)
        self.validation = ValidationState(MapperValidator(self.config.validation))
        self.exporter = MapperExporter(self.config.export)
        self.session_store = SessionStore(self.config.session)
        self.editor = MappingEditor()

        self.notices: List[Notice] = []
        self._clear_state()

        self.logger.info("ICE Mapper pipeline initialized")

    def _setup_logging(self) -> None:
        """Set up pipeline logging."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)
        if self.config.verbose:
            level = logging.DEBUG

        handlers: List[logging.Handler] = [logging.StreamHandler()]
        if self.config.log_to_file:
            self.config.logs_folder.mkdir(parents=True, exist_ok=True)
            handlers.insert(0, logging.FileHandler(self.config.logs_folder / 'ice_mapper.log'))

        logging.basicConfig(
            level=level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=handlers
        )
        self.logger = logging.getLogger(__name__)

    def _clear_state(self) -> None:
        self.editor.mappings = []
        self.editor.clear_selection()
        self.raw_text = ''
        self.raw_records: List[str] = []
        self.parsed_records: List[ParsedRecord] = []
        self.record_length = self.config.processor.default_record_length
        self.ingestion_report: Optional[IngestionReport] = None
        self.mapper_source: Optional[str] = None
        self.data_source: Optional[str] = None
        self.error: Optional[str] = None
        self.validation.clear()

    # ==========================================
    # STATE
    # ==========================================

    @property
    def mappings(self) -> List[FieldMapping]:
        return self.editor.mappings

    @property
    def mapper_loaded(self) -> bool:
        return bool(self.editor.mappings)

    @property
    def data_loaded(self) -> bool:
        return bool(self.raw_records)

    def notify(self, level: str, message: str) -> None:
        self.notices.append(Notice(level, message))

    def clear_notices(self) -> None:
        self.notices = []

    def _fail(self, error: IceMapperError) -> None:
        self.error = str(error)
        self.notify('error', self.error)
        self.logger.error(self.error)

    # ==========================================
    # LAYOUT
    # ==========================================

    def _apply_mappings(self, mappings: List[FieldMapping], report: IngestionReport) -> None:
        self.editor.mappings = mappings
        self.editor.clear_selection()
        self.ingestion_report = report
        self.error = None

        if report.rejected:
            self.notify('warning', f"{report.rejected} mapper row(s) could not be read")
        self.notify('success', f"Loaded {len(mappings)} field mappings")

        self.reparse()

    def load_mapper_file(self, file_path: Union[str, Path]) -> List[FieldMapping]:
        """Load a layout from a CSV or spreadsheet file."""
        try:
            mappings, report = self.reader.read_file(file_path)
        except IceMapperError as e:
            self._fail(e)
            raise
        self.mapper_source = str(file_path)
        self._apply_mappings(mappings, report)
        return self.mappings

    def load_mapper_text(self, text: str, source: str = 'mapper') -> List[FieldMapping]:
        """Load a layout from delimited text."""
        try:
            mappings, report = self.reader.read_csv_text(text, source)
        except IceMapperError as e:
            self._fail(e)
            raise
        self.mapper_source = source
        self._apply_mappings(mappings, report)
        return self.mappings

    def load_mapper_rows(self, rows: Iterable[Mapping[str, Any]], source: str = 'rows') -> List[FieldMapping]:
        """Load a layout from already tabulated rows."""
        try:
            mappings, report = self.reader.read_rows(rows, source)
        except IceMapperError as e:
            self._fail(e)
            raise
        self.mapper_source = source
        self._apply_mappings(mappings, report)
        return self.mappings

    # ==========================================
    # DATA
    # ==========================================

    def load_data_text(self, text: str, source: str = 'data') -> List[ParsedRecord]:
        """
        Segment and decode a fixed-width document with the current layout.

        Raises:
            MapperNotLoadedError: If no layout has been loaded
            DataFileError: If the document holds no records
        """
        try:
            if not self.mapper_loaded:
                raise MapperNotLoadedError("Please load a mapper file first")

            record_length = self.processor.record_length(self.mappings)
            records = self.processor.segment(text, record_length, source)
        except IceMapperError as e:
            self._fail(e)
            raise

        self.raw_text = text
        self.record_length = record_length
        self.raw_records = records
        self.parsed_records = self.processor.decode(records, self.mappings)
        self.data_source = source
        self.error = None
        self.notify('success', f"Loaded {len(records)} records")
        self._refresh_validation()

        if self.config.session.auto_save:
            self.save_session()
        return self.parsed_records

    def load_data_file(self, file_path: Union[str, Path]) -> List[ParsedRecord]:
        """Read a data file and decode it with the current layout."""
        try:
            if not self.mapper_loaded:
                raise MapperNotLoadedError("Please load a mapper file first")
            text = self.processor.read_data_file(file_path)
        except IceMapperError as e:
            self._fail(e)
            raise
        return self.load_data_text(text, Path(file_path).name)

    def load_sample_data(self, mapper_url: Optional[str] = None, data_url: Optional[str] = None) -> List[ParsedRecord]:
        """
        Fetch and load the sample layout and data documents.

        Raises:
            MapperReaderError: If the sample layout cannot be fetched or read
            DataFileError: If the sample data cannot be fetched or holds no records
        """
        mapper_url = mapper_url or self.config.sample_mapper_url
        data_url = data_url or self.config.sample_data_url
        timeout = self.config.request_timeout_s

        self.logger.info(f"Loading sample data from {mapper_url} and {data_url}")
        with build_session(self.config.retry_total, self.config.retry_backoff, self.config.retry_statuses) as session:
            try:
                mapper_text = fetch_text(mapper_url, session, timeout)
            except requests.RequestException as e:
                error = MapperReaderError(f"Failed to load sample mapper from {mapper_url}: {e}")
                self._fail(error)
                raise error from e
            self.load_mapper_text(mapper_text, mapper_url)

            try:
                data_text = fetch_text(data_url, session, timeout)
            except requests.RequestException as e:
                error = DataFileError(f"Failed to load sample data from {data_url}: {e}")
                self._fail(error)
                raise error from e
        return self.load_data_text(data_text, data_url)

    def reparse(self) -> None:
        """
        Re-derive record length, re-segment and re-decode from the current layout.

        Findings from an earlier validate() are refreshed so they describe the
        current layout and records.
        """
        self._rederive()
        self._refresh_validation()

    def _refresh_validation(self) -> None:
        if self.validation.last_validated is not None:
            self.validation.validate(self.mappings, self.parsed_records)

    def _rederive(self) -> None:
        self.record_length = self.processor.record_length(self.mappings)

        if not self.raw_text or not self.mappings:
            if not self.mappings:
                self.parsed_records = []
            return

        try:
            self.raw_records = self.processor.segment(self.raw_text, self.record_length, self.data_source or '')
        except IceMapperError as e:
            # Raw text is kept so a corrected layout can decode it again
            self._fail(e)
            self.raw_records = []
            self.parsed_records = []
            return

        self.parsed_records = self.processor.decode(self.raw_records, self.mappings)

        if self.config.session.auto_save:
            self.save_session()

    def reset(self) -> None:
        self._clear_state()
        self.clear_notices()
        self.logger.info("Pipeline state reset")

    # ==========================================
    # EDITING
    # ==========================================

    def add_field(self, mapping: FieldMapping) -> None:
        self.editor.add_field(mapping)
        self.reparse()

    def update_field(self, element: str, **updates) -> Optional[FieldMapping]:
        updated = self.editor.update_field(element, **updates)
        if updated is not None:
            self.reparse()
        return updated

    def delete_field(self, element: str) -> None:
        self.editor.delete_field(element)
        self.reparse()

    def delete_fields(self, elements: Iterable[str]) -> None:
        self.editor.delete_fields(elements)
        self.reparse()

    # ==========================================
    # VALIDATION AND OUTPUT
    # ==========================================

    def validate(self) -> List[ValidationIssue]:
        issues = self.validation.validate(self.mappings, self.parsed_records)
        if self.validation.has_errors:
            self.notify('error', f"Validation found {self.validation.error_count} error(s)")
        elif self.validation.has_warnings:
            self.notify('warning', f"Validation found {self.validation.warning_count} warning(s)")
        return issues

    @property
    def validation_status(self) -> str:
        return self.validation.status

    def summary(self) -> ValidationSummary:
        return self.validation.summary()

    def decoded_frame(self):
        """Decoded records as a polars DataFrame (one column per element)."""
        return self.processor.decode_frame(self.raw_records, self.mappings)

    def export_all(self) -> Dict[str, Any]:
        return self.exporter.export_all(self.mappings, self.parsed_records, self.validation.issues)

    def get_pipeline_status(self) -> Dict[str, Any]:
        return {
            'mapper_loaded': self.mapper_loaded,
            'data_loaded': self.data_loaded,
            'mappings': len(self.mappings),
            'records': len(self.raw_records),
            'record_length': self.record_length,
            'validation': self.validation_status,
            'error': self.error,
        }

    # ==========================================
    # SESSION
    # ==========================================

    def save_session(self) -> Path:
        if not self.mapper_loaded:
            raise MapperNotLoadedError("Nothing to save: no mapper loaded")
        return self.session_store.save_session(self.mappings, self.raw_records)

    def restore_session(self) -> bool:
        """Restore the saved session. Returns False if there is none."""
        snapshot = self.session_store.load_session()
        if snapshot is None:
            return False

        self._clear_state()
        self.editor.mappings = list(snapshot.mappings)
        self.record_length = self.processor.record_length(self.mappings)
        self.raw_records = list(snapshot.raw_records)
        self.raw_text = ''.join(snapshot.raw_records)
        self.parsed_records = self.processor.decode(self.raw_records, self.mappings)
        self.notify('info', f"Restored session with {len(self.mappings)} mappings and {len(self.raw_records)} records")
        return True
