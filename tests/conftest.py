"""Shared fixtures."""

from __future__ import annotations

import pytest

from ice_mapper.config_options import PipelineConfig
from ice_mapper.types_and_errors import FieldMapping

MAPPER_CSV = """Element,Value,Description,Type,Position,Length,Preview
ID,id,Record identifier,NUM,1 to 3,3,001
NAME,name,Customer name,CHR,4 to 8,5,ALICE
"""

DATA_TEXT = "001ALICE002BOB  "


@pytest.fixture
def mapper_csv() -> str:
    return MAPPER_CSV


@pytest.fixture
def data_text() -> str:
    return DATA_TEXT


@pytest.fixture
def id_name_mappings() -> list[FieldMapping]:
    return [
        FieldMapping(element="ID", position_start=1, position_end=3, length=3, type="NUM"),
        FieldMapping(element="NAME", position_start=4, position_end=8, length=5, type="CHR"),
    ]


@pytest.fixture
def pipeline_config(tmp_path) -> PipelineConfig:
    config = PipelineConfig(logs_folder=tmp_path / "logs", log_to_file=False)
    config.session.session_folder = tmp_path / "session"
    config.export.output_folder = tmp_path / "exports"
    return config
