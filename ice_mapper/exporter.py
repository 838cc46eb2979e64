#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ICE Mapper - Exporter

Writes the layout, the decoded records and the validation report as CSV files.

Classes:
    - MapperExporter: CSV export of mapper, data and validation report

Dependencies:
    - config_options: ExportConfig
    - mapper_reader: mapper_to_rows (inverse serialization)
    - validator: get_validation_summary
"""

import datetime
import logging
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

import pandas as pd

from .config_options import ExportConfig
from .mapper_reader import MAPPER_HEADERS, mapper_to_rows
from .types_and_errors import FieldMapping, ParsedRecord, ValidationIssue
from .validator import get_validation_summary

REPORT_HEADERS = ['Type', 'Field', 'Message', 'Line']


def parsed_records_to_frame(parsed_records: Sequence[ParsedRecord], mappings: Sequence[FieldMapping]) -> pd.DataFrame:
    """One row per record, one column per mapping (in layout order), values only."""
    rows = []
    for record in parsed_records:
        row = []
        for mapping in mappings:
            parsed = record.get(mapping.element)
            row.append(parsed.value if parsed is not None else '')
        rows.append(row)
    return pd.DataFrame(rows, columns=[m.element for m in mappings], dtype=str)


def validation_report_frame(issues: Sequence[ValidationIssue]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                'Type': issue.type.upper(),
                'Field': issue.field,
                'Message': issue.message,
                'Line': '' if issue.line is None else str(issue.line),
            }
            for issue in issues
        ],
        columns=REPORT_HEADERS,
    )


def validation_summary_frame(issues: Sequence[ValidationIssue], mappings: Sequence[FieldMapping]) -> pd.DataFrame:
    summary = get_validation_summary(issues)
    return pd.DataFrame([
        {'Metric': 'Total Fields', 'Value': str(len(mappings))},
        {'Metric': 'Total Errors', 'Value': str(summary.total_errors)},
        {'Metric': 'Total Warnings', 'Value': str(summary.total_warnings)},
        {'Metric': 'Validation Date', 'Value': datetime.datetime.now().isoformat()},
    ])


class MapperExporter:
    """Exports layouts, decoded data and validation reports to CSV."""

    def __init__(self, config: Optional[ExportConfig] = None):
        self.config = config or ExportConfig()
        self.logger = logging.getLogger(__name__)

    def _output_path(self, filename: str) -> Path:
        output_folder = Path(self.config.output_folder)
        output_folder.mkdir(parents=True, exist_ok=True)
        return output_folder / filename

    def export_mapper_csv(self, mappings: Sequence[FieldMapping], filename: Optional[str] = None) -> Path:
        output_path = self._output_path(filename or self.config.mapper_filename)
        df = pd.DataFrame(mapper_to_rows(mappings), columns=MAPPER_HEADERS)
        df.to_csv(output_path, index=False, lineterminator='\n')
        self.logger.info(f"Exported {len(mappings)} mappings to {output_path}")
        return output_path

    def export_data_csv(
        self,
        parsed_records: Sequence[ParsedRecord],
        mappings: Sequence[FieldMapping],
        filename: Optional[str] = None
    ) -> Path:
        output_path = self._output_path(filename or self.config.data_filename)
        df = parsed_records_to_frame(parsed_records, mappings)
        df.to_csv(output_path, index=False, lineterminator='\n')
        self.logger.info(f"Exported {len(parsed_records)} records to {output_path}")
        return output_path

    def export_validation_report(
        self,
        issues: Sequence[ValidationIssue],
        mappings: Sequence[FieldMapping],
        filename: Optional[str] = None
    ) -> Dict[str, Path]:
        """
        Write the findings and a summary next to each other.

        Returns:
            Dict with 'report' and 'summary' paths
        """
        report_path = self._output_path(filename or self.config.report_filename)
        summary_path = report_path.with_name(f"{report_path.stem}-summary{report_path.suffix}")

        validation_report_frame(issues).to_csv(report_path, index=False, lineterminator='\n')
        validation_summary_frame(issues, mappings).to_csv(summary_path, index=False, lineterminator='\n')

        self.logger.info(f"Exported validation report ({len(issues)} findings) to {report_path}")
        return {'report': report_path, 'summary': summary_path}

    def export_all(
        self,
        mappings: Sequence[FieldMapping],
        parsed_records: Sequence[ParsedRecord],
        issues: Sequence[ValidationIssue]
    ) -> Dict[str, Union[Path, Dict[str, Path]]]:
        """Export mapper, data (if any) and validation report with a date stamp."""
        stamp = datetime.date.today().isoformat()
        outputs: Dict[str, Union[Path, Dict[str, Path]]] = {
            'mapper': self.export_mapper_csv(mappings, f"mapper-{stamp}.csv"),
        }
        if parsed_records:
            outputs['data'] = self.export_data_csv(parsed_records, mappings, f"data-{stamp}.csv")
        outputs['validation'] = self.export_validation_report(issues, mappings, f"validation-{stamp}.csv")
        return outputs
