#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ICE Mapper - Type Definitions and Result Classes

This module contains the data model, result classes and exceptions used across
the mapper, the fixed-width decoder and the validation engine.

Classes:
    - FieldMapping: One layout entry (element, positions, declared length, ...)
    - ParsedField: One decoded field value
    - ValidationIssue: One validation finding (error or warning)
    - ValidationSummary: Counts and per-field grouping of findings
    - RowOutcome / IngestionReport: Per-row results of reading a layout
    - IceMapperError and subclasses: Document-level failures
"""

import datetime
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional

# ==========================================
# DATA MODEL
# ==========================================

ERROR = 'error'
WARNING = 'warning'


@dataclass
class FieldMapping:
    """One entry of a fixed-width layout. Positions are 1-based and inclusive."""
    element: str
    value: str = ''
    description: str = ''
    type: str = 'CHR'
    position_start: int = 1
    position_end: int = 1
    length: int = 1
    preview: str = ''

    @property
    def calculated_length(self) -> int:
        return self.position_end - self.position_start + 1

    @property
    def label(self) -> str:
        """Human label: description, then value, then element."""
        return self.description or self.value or self.element

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict) -> 'FieldMapping':
        return cls(
            element=str(data['element']),
            value=str(data.get('value') or ''),
            description=str(data.get('description') or ''),
            type=str(data.get('type') or 'CHR'),
            position_start=int(data['position_start']),
            position_end=int(data['position_end']),
            length=int(data['length']),
            preview=str(data.get('preview') or ''),
        )


@dataclass(frozen=True)
class ParsedField:
    """Decoded value of one field in one record."""
    name: str
    value: str
    type: str


# element -> decoded field
ParsedRecord = Dict[str, ParsedField]


@dataclass(frozen=True)
class ValidationIssue:
    """A single validation finding."""
    type: str
    field: str
    message: str
    line: Optional[int] = None

    @property
    def is_error(self) -> bool:
        return self.type == ERROR

    @property
    def is_warning(self) -> bool:
        return self.type == WARNING


@dataclass
class ValidationSummary:
    """Derived summary consumed by reporting and export."""
    total_errors: int = 0
    total_warnings: int = 0
    errors_by_field: Dict[str, List[ValidationIssue]] = field(default_factory=dict)

# ==========================================
# RESULT CLASSES
# ==========================================

ACCEPTED = 'accepted'
SKIPPED = 'skipped'
REJECTED = 'rejected'


@dataclass(frozen=True)
class RowOutcome:
    """What happened to one row of a layout document."""
    index: int
    status: str
    reason: str = ''
    position: str = ''


class IngestionReport:
    """Container for layout ingestion results."""

    def __init__(self, source: str = ''):
        self.source = source
        self.accepted = 0
        self.skipped = 0
        self.rejected = 0
        self.rows: List[RowOutcome] = []
        self.created_at = datetime.datetime.now().isoformat()

    @property
    def total(self) -> int:
        return self.accepted + self.skipped + self.rejected

    @property
    def accepted_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return (self.accepted / self.total) * 100

    @property
    def rejections(self) -> List[RowOutcome]:
        return [row for row in self.rows if row.status == REJECTED]

    def add_accept(self, index: int, position: str = ''):
        self.accepted += 1
        self.rows.append(RowOutcome(index, ACCEPTED, position=position))

    def add_skip(self, index: int, reason: str, position: str = ''):
        self.skipped += 1
        self.rows.append(RowOutcome(index, SKIPPED, reason, position))

    def add_reject(self, index: int, reason: str, position: str = ''):
        self.rejected += 1
        self.rows.append(RowOutcome(index, REJECTED, reason, position))

    def __repr__(self) -> str:
        return (f"IngestionReport(source={self.source!r}, accepted={self.accepted}, "
                f"skipped={self.skipped}, rejected={self.rejected})")

# ==========================================
# EXCEPTION CLASSES
# ==========================================

class IceMapperError(Exception):
    """Base exception for document-level failures."""
    pass


class MapperReaderError(IceMapperError):
    """Custom exception for layout documents that yield no usable mappings."""
    pass


class DataFileError(IceMapperError):
    """Custom exception for data documents that yield no usable records."""
    pass


class MapperNotLoadedError(IceMapperError):
    """Raised when data is loaded before any layout."""
    pass


class SessionError(IceMapperError):
    """Custom exception for unreadable session snapshots."""
    pass
