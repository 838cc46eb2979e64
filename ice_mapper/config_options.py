#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ICE Mapper - Configuration Options

This module contains all configuration dataclasses for the fixed-width mapper.
Each component takes its own config object so it can be built and tested alone.

Classes:
    - MapperReaderConfig: Configuration for MapperReader
    - ProcessorConfig: Configuration for FixedWidthProcessor
    - ValidationConfig: Configuration for MapperValidator
    - SessionConfig: Configuration for SessionStore
    - ExportConfig: Configuration for MapperExporter
    - PipelineConfig: Configuration for MapperPipeline (aggregates the others)
"""

from pathlib import Path
from typing import List, Tuple, Union
from dataclasses import dataclass, field

# ==========================================
# DEFAULTS
# ==========================================

# Order matters: a header is mapped to the first canonical name it matches
DEFAULT_COLUMN_SYNONYMS: List[Tuple[str, List[str]]] = [
    ('element', ['element']),
    ('value', ['value']),
    ('description', ['description']),
    ('type', ['type']),
    ('position', ['position']),
    ('length', ['length']),
    ('preview', ['preview']),
]

DEFAULT_RECORD_LENGTH = 1040

# ==========================================
# CONFIGURATION CLASSES
# ==========================================

@dataclass
class MapperReaderConfig:
    """Configuration class for the mapper (layout) reader."""
    column_synonyms: List[Tuple[str, List[str]]] = field(
        default_factory=lambda: [(name, list(syns)) for name, syns in DEFAULT_COLUMN_SYNONYMS]
    )
    default_type: str = "CHR"
    unused_position: str = "0 to 0"

    # File reading
    encoding: str = "utf-8"
    fallback_encoding: str = "iso-8859-1"
    delimiters: List[str] = field(default_factory=lambda: [',', '\t', '|', ';'])
    spreadsheet_extensions: List[str] = field(default_factory=lambda: ['.xlsx', '.xls'])


@dataclass
class ProcessorConfig:
    """Configuration class for the fixed-width processor."""
    default_record_length: int = DEFAULT_RECORD_LENGTH
    encoding: str = "utf-8"
    fallback_encoding: str = "iso-8859-1"
    text_column_name: str = "text_content"


@dataclass
class ValidationConfig:
    """Configuration class for the validation engine."""
    sample_size: int = 100
    empty_threshold: float = 0.8
    numeric_types: List[str] = field(default_factory=lambda: ['FCV', 'NUM'])
    date_types: List[str] = field(default_factory=lambda: ['FCD'])
    enabled: bool = True


@dataclass
class SessionConfig:
    """Configuration class for session snapshots."""
    session_folder: Union[str, Path] = "session"
    auto_save: bool = False
    text_column_name: str = "text_content"


@dataclass
class ExportConfig:
    """Configuration class for the exporter."""
    output_folder: Union[str, Path] = "exports"
    mapper_filename: str = "mapper.csv"
    data_filename: str = "parsed-data.csv"
    report_filename: str = "validation-report.csv"


@dataclass
class PipelineConfig:
    """Configuration class for the pipeline (holds one config per component)."""
    reader: MapperReaderConfig = field(default_factory=MapperReaderConfig)
    processor: ProcessorConfig = field(default_factory=ProcessorConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    # Sample documents
    sample_mapper_url: str = "http://localhost:5173/sample-data/SRV.mapper.csv"
    sample_data_url: str = "http://localhost:5173/sample-data/sample-data.txt"

    # Request/Retry/Timeout settings
    request_timeout_s: int = 30
    retry_total: int = 3
    retry_backoff: float = 1.0
    retry_statuses: List[int] = field(default_factory=lambda: [429, 500, 502, 503, 504])

    # Logging and behavior settings
    log_level: str = "INFO"
    logs_folder: Path = Path("logs")
    log_to_file: bool = True
    verbose: bool = False
