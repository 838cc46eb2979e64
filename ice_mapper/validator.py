#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ICE Mapper - Validation Engine

Two independent passes over a layout and its decoded data:

    - Layout validation: overlaps and gaps between neighbouring fields, declared
      vs. calculated length, position bounds, duplicate elements.
    - Data validation: on a sample of decoded records, numeric and date format
      checks per field and a summary of mostly-empty fields.

Both passes return findings in check order and never raise on bad data.

Classes:
    - MapperValidator: Runs both passes with a ValidationConfig
    - ValidationState: Holds the latest findings and derived status

Dependencies:
    - config_options: ValidationConfig
    - processor: is_field_empty
"""

import datetime
import logging
import re
from collections import Counter
from typing import Dict, List, Optional, Sequence

from .config_options import ValidationConfig
from .processor import is_field_empty
from .types_and_errors import (
    ERROR,
    WARNING,
    FieldMapping,
    ParsedRecord,
    ValidationIssue,
    ValidationSummary,
)

logger = logging.getLogger(__name__)

NUMERIC_PATTERN = re.compile(r'^[\d\s.-]+$')
DATE_PATTERN = re.compile(r'^\d{6,8}$')
WHITESPACE = re.compile(r'\s')

# ==========================================
# LAYOUT VALIDATION
# ==========================================

def validate_mappings(mappings: Sequence[FieldMapping]) -> List[ValidationIssue]:
    """
    Check a layout for structural problems.

    Overlaps and gaps are only checked between neighbours in the given order,
    which is expected to be sorted by start position.

    Args:
        mappings: Field mappings sorted by position_start

    Returns:
        List of findings: overlaps, then gaps, then per-field checks, then duplicates
    """
    issues: List[ValidationIssue] = []

    if not mappings:
        return issues

    pairs = list(zip(mappings, mappings[1:]))

    for current, following in pairs:
        if current.position_end >= following.position_start:
            issues.append(ValidationIssue(
                ERROR,
                current.element,
                f"Overlapping with {following.element}: positions "
                f"{current.position_start}-{current.position_end} and "
                f"{following.position_start}-{following.position_end}",
            ))

    for current, following in pairs:
        gap = following.position_start - current.position_end - 1
        if gap > 0:
            issues.append(ValidationIssue(
                WARNING,
                current.element,
                f"Gap of {gap} characters between {current.element} (ends at {current.position_end}) "
                f"and {following.element} (starts at {following.position_start})",
            ))

    for mapping in mappings:
        calculated_length = mapping.calculated_length
        if calculated_length != mapping.length:
            issues.append(ValidationIssue(
                WARNING,
                mapping.element,
                f"Length mismatch: specified {mapping.length} but calculated {calculated_length} "
                f"from positions {mapping.position_start}-{mapping.position_end}",
            ))

        if mapping.position_start < 1:
            issues.append(ValidationIssue(
                ERROR,
                mapping.element,
                f"Invalid position start: {mapping.position_start} (must be >= 1)",
            ))

        if mapping.position_end < mapping.position_start:
            issues.append(ValidationIssue(
                ERROR,
                mapping.element,
                f"Position end ({mapping.position_end}) is less than position start ({mapping.position_start})",
            ))

    element_counts = Counter(m.element for m in mappings)
    for element, count in element_counts.items():
        if count > 1:
            issues.append(ValidationIssue(
                WARNING,
                element,
                f"Duplicate element appears {count} times",
            ))

    return issues

# ==========================================
# DATA VALIDATION
# ==========================================

def validate_parsed_data(
    parsed_records: Sequence[ParsedRecord],
    mappings: Sequence[FieldMapping],
    config: Optional[ValidationConfig] = None
) -> List[ValidationIssue]:
    """
    Check decoded records against the layout's field types.

    Only the first config.sample_size records are examined. Line numbers in
    findings are 1-based record indices.

    Args:
        parsed_records: Decoded records in document order
        mappings: Field mappings used to decode them
        config: Sample size, emptiness threshold and type families

    Returns:
        List of findings: format warnings in record order, then mostly-empty fields
    """
    config = config or ValidationConfig()
    issues: List[ValidationIssue] = []

    if not parsed_records or not mappings:
        return issues

    numeric_types = {t.upper() for t in config.numeric_types}
    date_types = {t.upper() for t in config.date_types}

    sample_size = min(config.sample_size, len(parsed_records))
    sample = parsed_records[:sample_size]

    empty_counts: Dict[str, int] = {}

    for record_index, record in enumerate(sample):
        line = record_index + 1
        for mapping in mappings:
            parsed = record.get(mapping.element)

            if parsed is None or is_field_empty(parsed.value):
                empty_counts[mapping.element] = empty_counts.get(mapping.element, 0) + 1
                continue

            value = parsed.value
            field_type = (mapping.type or '').upper()

            if field_type in numeric_types and not NUMERIC_PATTERN.match(value):
                issues.append(ValidationIssue(
                    WARNING,
                    mapping.element,
                    f"Non-numeric value in numeric field: \"{value}\"",
                    line,
                ))

            if field_type in date_types and value:
                if not DATE_PATTERN.match(WHITESPACE.sub('', value)):
                    issues.append(ValidationIssue(
                        WARNING,
                        mapping.element,
                        f"Invalid date format: \"{value}\"",
                        line,
                    ))

    empty_threshold = sample_size * config.empty_threshold
    for element, count in empty_counts.items():
        if count > empty_threshold:
            # Half-up rounding for the displayed percentage
            percentage = int((count / sample_size) * 100 + 0.5)
            issues.append(ValidationIssue(
                WARNING,
                element,
                f"Field is {percentage}% empty in sampled records ({count}/{sample_size})",
            ))

    return issues


def get_validation_summary(issues: Sequence[ValidationIssue]) -> ValidationSummary:
    """Count errors and warnings and group findings by field."""
    summary = ValidationSummary()
    for issue in issues:
        if issue.type == ERROR:
            summary.total_errors += 1
        elif issue.type == WARNING:
            summary.total_warnings += 1
        summary.errors_by_field.setdefault(issue.field, []).append(issue)
    return summary


class MapperValidator:
    """Runs layout and data validation with one configuration."""

    def __init__(self, config: Optional[ValidationConfig] = None):
        self.config = config or ValidationConfig()
        self.logger = logging.getLogger(__name__)

    def validate_mappings(self, mappings: Sequence[FieldMapping]) -> List[ValidationIssue]:
        return validate_mappings(mappings)

    def validate_data(
        self,
        parsed_records: Sequence[ParsedRecord],
        mappings: Sequence[FieldMapping]
    ) -> List[ValidationIssue]:
        return validate_parsed_data(parsed_records, mappings, self.config)

    def validate(
        self,
        mappings: Sequence[FieldMapping],
        parsed_records: Sequence[ParsedRecord] = ()
    ) -> List[ValidationIssue]:
        """Layout findings followed by data findings (when records are given)."""
        issues = self.validate_mappings(mappings)
        if parsed_records:
            issues.extend(self.validate_data(parsed_records, mappings))

        summary = get_validation_summary(issues)
        self.logger.info(f"Validation found {summary.total_errors} errors and "
                         f"{summary.total_warnings} warnings")
        return issues


class ValidationState:
    """
    Latest validation findings for a layout and its data.

    Disabling validation clears the findings; validate() is then a no-op.
    """

    def __init__(self, validator: Optional[MapperValidator] = None):
        self.validator = validator or MapperValidator()
        self.enabled = self.validator.config.enabled
        self.issues: List[ValidationIssue] = []
        self.last_validated: Optional[datetime.datetime] = None

    def validate(
        self,
        mappings: Sequence[FieldMapping],
        parsed_records: Sequence[ParsedRecord] = ()
    ) -> List[ValidationIssue]:
        if not self.enabled:
            return self.issues
        self.issues = self.validator.validate(mappings, parsed_records)
        self.last_validated = datetime.datetime.now()
        return self.issues

    def clear(self) -> None:
        self.issues = []
        self.last_validated = None

    def toggle(self) -> bool:
        self.enabled = not self.enabled
        if not self.enabled:
            self.clear()
        return self.enabled

    @property
    def errors(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.type == ERROR]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.type == WARNING]

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    @property
    def has_warnings(self) -> bool:
        return self.warning_count > 0

    @property
    def status(self) -> str:
        """'error', 'warning' or 'success'."""
        if self.has_errors:
            return 'error'
        if self.has_warnings:
            return 'warning'
        return 'success'

    def summary(self) -> ValidationSummary:
        return get_validation_summary(self.issues)

    def get_field_errors(self, element: str) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.field == element]

    def has_field_errors(self, element: str) -> bool:
        return any(issue.field == element and issue.type == ERROR for issue in self.issues)

    def has_field_warnings(self, element: str) -> bool:
        return any(issue.field == element and issue.type == WARNING for issue in self.issues)
