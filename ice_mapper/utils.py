#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ICE Mapper - Utility Functions

Convenience functions for building configurations and pipelines.

Functions:
    - create_default_configs: Create a PipelineConfig rooted at one folder
    - create_pipeline_from_env: Create a pipeline from environment variables
"""

import os
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

from .config_options import PipelineConfig
from .pipeline import MapperPipeline

# ==========================================
# CONVENIENCE FUNCTIONS
# ==========================================

def create_default_configs(
    base_folder: Union[str, Path] = ".",
    log_level: str = "INFO",
    log_to_file: bool = True
) -> PipelineConfig:
    """
    Create a default configuration with all folders under base_folder.

    Args:
        base_folder: Folder holding logs, session and exports
        log_level: Logging level name
        log_to_file: Whether to also log to logs/ice_mapper.log

    Returns:
        PipelineConfig
    """
    base_folder = Path(base_folder)
    config = PipelineConfig(
        log_level=log_level,
        logs_folder=base_folder / "logs",
        log_to_file=log_to_file,
    )
    config.session.session_folder = base_folder / "session"
    config.export.output_folder = base_folder / "exports"
    return config


def create_pipeline_from_env(env_file: Optional[Union[str, Path]] = None) -> MapperPipeline:
    """
    Create a pipeline using environment variables (a .env file is read first).

    Recognized variables:
    - ICE_MAPPER_LOG_LEVEL
    - ICE_MAPPER_LOGS_FOLDER
    - ICE_MAPPER_SESSION_FOLDER
    - ICE_MAPPER_EXPORT_FOLDER
    - ICE_MAPPER_SAMPLE_MAPPER_URL
    - ICE_MAPPER_SAMPLE_DATA_URL

    Returns:
        Configured MapperPipeline instance
    """
    load_dotenv(env_file)

    config = create_default_configs(log_level=os.getenv('ICE_MAPPER_LOG_LEVEL', 'INFO'))

    if os.getenv('ICE_MAPPER_LOGS_FOLDER'):
        config.logs_folder = Path(os.getenv('ICE_MAPPER_LOGS_FOLDER'))
    if os.getenv('ICE_MAPPER_SESSION_FOLDER'):
        config.session.session_folder = os.getenv('ICE_MAPPER_SESSION_FOLDER')
    if os.getenv('ICE_MAPPER_EXPORT_FOLDER'):
        config.export.output_folder = os.getenv('ICE_MAPPER_EXPORT_FOLDER')
    if os.getenv('ICE_MAPPER_SAMPLE_MAPPER_URL'):
        config.sample_mapper_url = os.getenv('ICE_MAPPER_SAMPLE_MAPPER_URL')
    if os.getenv('ICE_MAPPER_SAMPLE_DATA_URL'):
        config.sample_data_url = os.getenv('ICE_MAPPER_SAMPLE_DATA_URL')

    return MapperPipeline(config)
