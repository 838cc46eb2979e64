#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Command line entry point.

    python -m ice_mapper MAPPER [DATA] [--export DIR] [--save-session] [--log-level LEVEL]
"""

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv

from .pipeline import MapperPipeline
from .types_and_errors import IceMapperError
from .utils import create_default_configs


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ice_mapper",
        description="Decode a fixed-width file with a mapper and validate both.",
    )
    parser.add_argument("mapper", type=Path, help="Mapper file (.csv, .txt, .xlsx, .xls)")
    parser.add_argument("data", type=Path, nargs="?", help="Fixed-width data file")
    parser.add_argument("--export", type=Path, default=None, help="Write mapper, data and report CSVs here")
    parser.add_argument("--save-session", action="store_true", help="Save the session after loading")
    parser.add_argument("--base-folder", type=Path, default=Path("."), help="Folder for logs and session")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    return parser


def main(argv=None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    config = create_default_configs(args.base_folder, args.log_level)
    if args.export is not None:
        config.export.output_folder = args.export

    pipeline = MapperPipeline(config)

    try:
        pipeline.load_mapper_file(args.mapper)
        if args.data is not None:
            pipeline.load_data_file(args.data)
    except IceMapperError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    issues = pipeline.validate()
    summary = pipeline.summary()

    print(f"Fields: {len(pipeline.mappings)}  Record length: {pipeline.record_length}  "
          f"Records: {len(pipeline.raw_records)}")
    print(f"Errors: {summary.total_errors}  Warnings: {summary.total_warnings}")
    for issue in issues:
        line = f" (line {issue.line})" if issue.line is not None else ""
        print(f"  [{issue.type.upper()}] {issue.field}{line}: {issue.message}")

    if args.export is not None:
        outputs = pipeline.export_all()
        print(f"Exported to {args.export}: {', '.join(outputs)}")

    if args.save_session:
        print(f"Session saved to {pipeline.save_session()}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
