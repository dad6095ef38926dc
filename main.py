#!/usr/bin/env python3
"""
yedxtract - Extract texts from yEd graph editor to Excel and back

Main entry point. Exports node and edge fields of a graphml file into an
Excel workbook, and imports edited workbooks back into the graphml file.
"""

import logging
import sys
import argparse
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import ValidationError

from yedxtract import __version__
from yedxtract.config import config
from yedxtract.errors import YedxtractError
from yedxtract.excel import create_xlsx, import_xlsx
from yedxtract.files import read_file
from yedxtract.graphml import (
    check_source_hash,
    convert_to_graphml_format,
    get_units_from_graph,
    parse_graphml_format,
    update_graph,
)
from yedxtract.models import FieldSchema, MergeReport, Metadata, XlsxOptions


def setup_logging():
    """Configure logging for the application."""
    level = getattr(logging, config.get("logging.level", "INFO").upper())
    format_str = config.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    log_file = config.log_filename

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file)
        ]
    )


def load_field_schema(fields_path: Optional[str] = None) -> FieldSchema:
    """
    Load the fields to export from a YAML or JSON file.

    Args:
        fields_path: Path to the schema file; the configured default is used when None

    Returns:
        The field schema
    """
    if fields_path is None:
        return FieldSchema.model_validate(config.export_fields)

    with open(fields_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    logging.info(f"Loaded field schema from {fields_path}")
    return FieldSchema.model_validate(data)


def run_export(graphml_path: str, output_path: Optional[str] = None,
               fields_path: Optional[str] = None,
               options: Optional[XlsxOptions] = None) -> Path:
    """
    Export a graphml file into an Excel workbook.

    Args:
        graphml_path: yEd graphml file to export
        output_path: Workbook to write (default: graphml path with .xlsx suffix)
        fields_path: Field schema file
        options: Columns to include or exclude

    Returns:
        Path of the written workbook
    """
    logging.info(f"Exporting {graphml_path}")

    source = read_file(graphml_path)
    graph = parse_graphml_format(source.data)
    schema = load_field_schema(fields_path)

    units = get_units_from_graph(graph, schema)

    metadata = Metadata(
        yedxtract_version=__version__,
        yed_filename=Path(graphml_path).name,
        yed_hash=source.hash,
        extracted_fields=schema,
    )

    output = Path(output_path) if output_path else Path(graphml_path).with_suffix(".xlsx")
    output.write_bytes(create_xlsx(units, metadata, options))

    logging.info(f"Wrote {len(units)} rows to {output}")
    return output


def run_import(graphml_path: str, xlsx_path: str, output_path: Optional[str] = None,
               options: Optional[XlsxOptions] = None) -> MergeReport:
    """
    Merge an edited Excel workbook back into a graphml file.

    Args:
        graphml_path: yEd graphml file the workbook was exported from
        xlsx_path: Edited workbook
        output_path: Graphml file to write (default: <name>_updated.graphml)
        options: Columns to include or exclude

    Returns:
        Summary of the merge
    """
    logging.info(f"Importing {xlsx_path} into {graphml_path}")

    source = read_file(graphml_path)
    units, metadata = import_xlsx(Path(xlsx_path).read_bytes(), options)

    if metadata.yed_filename != Path(graphml_path).name:
        logging.warning(
            f"Workbook was exported from {metadata.yed_filename}, not {Path(graphml_path).name}"
        )
    check_source_hash(metadata.yed_hash, source.hash)

    graph = parse_graphml_format(source.data)
    report = update_graph(graph, units, metadata.extracted_fields)

    graphml = Path(graphml_path)
    output = Path(output_path) if output_path else graphml.with_name(f"{graphml.stem}_updated{graphml.suffix}")
    output.write_text(convert_to_graphml_format(graph), encoding='utf-8')

    logging.info(f"Wrote updated graph to {output}")
    return report


def _xlsx_options(args) -> XlsxOptions:
    return XlsxOptions(include=args.include, exclude=args.exclude)


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="yedxtract - Extract texts from yEd graph editor to Excel and back",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py export diagram.graphml                          # Write diagram.xlsx
  python main.py export diagram.graphml --fields fields.yaml     # Export extra fields
  python main.py import diagram.graphml diagram.xlsx             # Write diagram_updated.graphml
  python main.py import diagram.graphml diagram.xlsx --include id label
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"yedxtract {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Export graphml fields to Excel")
    export_parser.add_argument("graphml", help="yEd graphml file")
    export_parser.add_argument("-o", "--output", help="Excel file to write")
    export_parser.add_argument("--fields", help="YAML or JSON file with the fields to export")

    import_parser = subparsers.add_parser("import", help="Merge Excel edits back into graphml")
    import_parser.add_argument("graphml", help="yEd graphml file the workbook was exported from")
    import_parser.add_argument("xlsx", help="Edited Excel file")
    import_parser.add_argument("-o", "--output", help="Graphml file to write")

    for sub in (export_parser, import_parser):
        columns = sub.add_mutually_exclusive_group()
        columns.add_argument("--include", nargs="+", help="Only use these columns")
        columns.add_argument("--exclude", nargs="+", help="Ignore these columns")

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    args = parse_arguments(argv)
    setup_logging()

    try:
        if args.command == "export":
            output = run_export(args.graphml, args.output, args.fields, _xlsx_options(args))
            print(f"Exported to {output}")
        else:
            report = run_import(args.graphml, args.xlsx, args.output, _xlsx_options(args))
            print(f"Merged {report.updated} rows ({report.skipped} skipped, "
                  f"{len(report.warnings)} warnings)")

    except (YedxtractError, OSError, ValidationError, yaml.YAMLError) as e:
        logging.error(f"{args.command.capitalize()} failed: {e}")
        print(f"\n{args.command.capitalize()} failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
