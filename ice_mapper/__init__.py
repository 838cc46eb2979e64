#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ICE Mapper - Fixed-Width Layout Mapping and Validation

This package decodes fixed-width text records into named fields using a tabular
layout description ("mapper"), and validates both the layout and the decoded
data.

Components:
    - MapperReader: Read CSV / spreadsheet layouts into FieldMapping objects
    - FixedWidthProcessor: Segment raw text into records and decode fields
    - MapperValidator: Layout and data validation
    - MappingEditor: Field-by-field layout editing
    - MapperExporter: CSV export of layout, data and validation report
    - SessionStore: Save and restore a working session
    - MapperPipeline: Complete workflow orchestrator

Usage:
    from ice_mapper import MapperPipeline, PipelineConfig

    pipeline = MapperPipeline(PipelineConfig())
    pipeline.load_mapper_file("layout.csv")
    pipeline.load_data_file("data.txt")
    issues = pipeline.validate()

    # Quick pipeline creation
    from ice_mapper.utils import create_pipeline_from_env
    pipeline = create_pipeline_from_env()
"""

from .config_options import (
    MapperReaderConfig,
    ProcessorConfig,
    ValidationConfig,
    SessionConfig,
    ExportConfig,
    PipelineConfig,
)

from .types_and_errors import (
    FieldMapping,
    ParsedField,
    ValidationIssue,
    ValidationSummary,
    RowOutcome,
    IngestionReport,
    IceMapperError,
    MapperReaderError,
    DataFileError,
    MapperNotLoadedError,
    SessionError,
)

from .mapper_reader import MapperReader, normalize_rows, mapper_to_rows, mapper_to_csv
from .processor import (
    FixedWidthProcessor,
    detect_record_length,
    reformat_fixed_width,
    parse_record,
    parse_all_records,
    is_field_empty,
)
from .validator import (
    MapperValidator,
    ValidationState,
    validate_mappings,
    validate_parsed_data,
    get_validation_summary,
)
from .editor import MappingEditor
from .exporter import MapperExporter
from .session_store import SessionStore, SessionSnapshot
from .pipeline import MapperPipeline, Notice

from .utils import (
    create_default_configs,
    create_pipeline_from_env
)

# Define what gets imported with "from ice_mapper import *"
__all__ = [
    # Main classes
    'MapperReader',
    'FixedWidthProcessor',
    'MapperValidator',
    'ValidationState',
    'MappingEditor',
    'MapperExporter',
    'SessionStore',
    'SessionSnapshot',
    'MapperPipeline',
    'Notice',

    # Configuration classes
    'MapperReaderConfig',
    'ProcessorConfig',
    'ValidationConfig',
    'SessionConfig',
    'ExportConfig',
    'PipelineConfig',

    # Data model and result classes
    'FieldMapping',
    'ParsedField',
    'ValidationIssue',
    'ValidationSummary',
    'RowOutcome',
    'IngestionReport',

    # Exceptions
    'IceMapperError',
    'MapperReaderError',
    'DataFileError',
    'MapperNotLoadedError',
    'SessionError',

    # Core functions
    'normalize_rows',
    'mapper_to_rows',
    'mapper_to_csv',
    'detect_record_length',
    'reformat_fixed_width',
    'parse_record',
    'parse_all_records',
    'is_field_empty',
    'validate_mappings',
    'validate_parsed_data',
    'get_validation_summary',

    # Utility functions
    'create_default_configs',
    'create_pipeline_from_env'
]

# Package metadata
__version__ = "1.0.0"
__description__ = "Fixed-width layout mapping, decoding and validation"
