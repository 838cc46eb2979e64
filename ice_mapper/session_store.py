#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ICE Mapper - Session Store

Saves and restores a working session: the field mappings and the raw records.
Decoded records are not stored; they are a pure function of the two and are
recomputed on restore.

Layout of a session folder:
    session.yaml     - saved-at timestamp and counts
    mappings.yaml    - list of field mappings
    records.parquet  - one text_content row per raw record
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

import polars as pl
import yaml

from .config_options import SessionConfig
from .types_and_errors import FieldMapping, SessionError

METADATA_FILE = 'session.yaml'
MAPPINGS_FILE = 'mappings.yaml'
RECORDS_FILE = 'records.parquet'


@dataclass
class SessionSnapshot:
    mappings: List[FieldMapping] = field(default_factory=list)
    raw_records: List[str] = field(default_factory=list)
    timestamp: float = 0.0


class SessionStore:
    """Reads and writes session snapshots in a folder."""

    def __init__(self, config: Optional[SessionConfig] = None):
        self.config = config or SessionConfig()
        self.folder = Path(self.config.session_folder)
        self.logger = logging.getLogger(__name__)

    def has_session(self) -> bool:
        return (self.folder / METADATA_FILE).exists()

    def save_session(self, mappings: Sequence[FieldMapping], raw_records: Sequence[str]) -> Path:
        """Write a snapshot, replacing any previous one."""
        self.folder.mkdir(parents=True, exist_ok=True)

        with open(self.folder / MAPPINGS_FILE, 'w', encoding='utf-8') as f:
            yaml.safe_dump([m.to_dict() for m in mappings], f, sort_keys=False, allow_unicode=True)

        pl.DataFrame(
            {self.config.text_column_name: list(raw_records)},
            schema={self.config.text_column_name: pl.Utf8},
        ).write_parquet(self.folder / RECORDS_FILE)

        metadata = {
            'timestamp': time.time(),
            'mappings': len(mappings),
            'records': len(raw_records),
        }
        with open(self.folder / METADATA_FILE, 'w', encoding='utf-8') as f:
            yaml.safe_dump(metadata, f, sort_keys=False)

        self.logger.info(f"Saved session with {len(mappings)} mappings and {len(raw_records)} records to {self.folder}")
        return self.folder

    def load_session(self) -> Optional[SessionSnapshot]:
        """
        Read the saved snapshot.

        Returns:
            SessionSnapshot, or None if no session has been saved

        Raises:
            SessionError: If the snapshot exists but cannot be read
        """
        if not self.has_session():
            return None

        try:
            with open(self.folder / METADATA_FILE, 'r', encoding='utf-8') as f:
                metadata = yaml.safe_load(f) or {}
            with open(self.folder / MAPPINGS_FILE, 'r', encoding='utf-8') as f:
                mapping_dicts = yaml.safe_load(f) or []

            mappings = [FieldMapping.from_dict(item) for item in mapping_dicts]

            raw_records: List[str] = []
            records_path = self.folder / RECORDS_FILE
            if records_path.exists():
                raw_records = pl.read_parquet(records_path)[self.config.text_column_name].to_list()

        except (OSError, yaml.YAMLError, KeyError, TypeError, ValueError, pl.exceptions.PolarsError) as e:
            raise SessionError(f"Failed to load session from {self.folder}: {e}") from e

        return SessionSnapshot(
            mappings=mappings,
            raw_records=raw_records,
            timestamp=float(metadata.get('timestamp', 0.0)),
        )

    def clear_session(self) -> None:
        for name in (METADATA_FILE, MAPPINGS_FILE, RECORDS_FILE):
            path = self.folder / name
            if path.exists():
                path.unlink()

    def get_session_age(self) -> Optional[int]:
        """Age of the saved session in whole hours, or None."""
        snapshot = self.load_session()
        if snapshot is None:
            return None
        return int((time.time() - snapshot.timestamp) // 3600)
