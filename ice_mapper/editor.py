#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ICE Mapper - Mapping Editor

Field-by-field editing of a layout. The editor owns its list of mappings and
keeps it sorted by start position after every change.
"""

import dataclasses
import logging
from typing import Iterable, List, Optional, Set

from .types_and_errors import ERROR, WARNING, FieldMapping, ValidationIssue


class MappingEditor:
    """Add, update, delete and select field mappings."""

    def __init__(self, mappings: Optional[Iterable[FieldMapping]] = None):
        self.mappings: List[FieldMapping] = list(mappings or [])
        self.selected: Set[str] = set()
        self.logger = logging.getLogger(__name__)

    def sort_mappings(self) -> None:
        self.mappings.sort(key=lambda m: m.position_start)

    def add_field(self, mapping: FieldMapping) -> None:
        self.mappings.append(mapping)
        self.sort_mappings()
        self.logger.debug(f"Added field {mapping.element}")

    def update_field(self, element: str, **updates) -> Optional[FieldMapping]:
        """
        Update the first field named element.

        When either position changes the length is recalculated from the new
        positions. Unknown elements are ignored.

        Returns:
            The updated mapping, or None if element is not in the layout
        """
        for index, mapping in enumerate(self.mappings):
            if mapping.element != element:
                continue

            updated = dataclasses.replace(mapping, **updates)
            if 'position_start' in updates or 'position_end' in updates:
                updated.length = updated.calculated_length

            self.mappings[index] = updated
            self.sort_mappings()
            return updated

        self.logger.warning(f"Cannot update unknown field: {element}")
        return None

    def delete_field(self, element: str) -> None:
        self.mappings = [m for m in self.mappings if m.element != element]
        self.selected.discard(element)

    def delete_fields(self, elements: Iterable[str]) -> None:
        elements = set(elements)
        self.mappings = [m for m in self.mappings if m.element not in elements]
        self.selected -= elements

    def get_field(self, element: str) -> Optional[FieldMapping]:
        return next((m for m in self.mappings if m.element == element), None)

    def field_exists(self, element: str) -> bool:
        return self.get_field(element) is not None

    # Selection

    def toggle_selection(self, element: str) -> None:
        if element in self.selected:
            self.selected.discard(element)
        else:
            self.selected.add(element)

    def select_all(self) -> None:
        self.selected.update(m.element for m in self.mappings)

    def clear_selection(self) -> None:
        self.selected.clear()

    @property
    def selected_elements(self) -> List[str]:
        """Selected elements in layout order."""
        return [m.element for m in self.mappings if m.element in self.selected]

    @staticmethod
    def validate_field(mapping: FieldMapping) -> List[ValidationIssue]:
        """Check a single field before it is added or saved."""
        issues: List[ValidationIssue] = []

        if not mapping.element or not mapping.element.strip():
            issues.append(ValidationIssue(ERROR, 'element', 'Element name is required'))

        if mapping.position_start < 1:
            issues.append(ValidationIssue(ERROR, 'position_start', 'Position start must be >= 1'))

        if mapping.position_end < mapping.position_start:
            issues.append(ValidationIssue(ERROR, 'position_end', 'Position end must be >= position start'))

        if mapping.length <= 0:
            issues.append(ValidationIssue(ERROR, 'length', 'Length must be > 0'))

        if mapping.calculated_length != mapping.length:
            issues.append(ValidationIssue(
                WARNING,
                'length',
                f"Length mismatch: calculated {mapping.calculated_length} but specified {mapping.length}",
            ))

        return issues
