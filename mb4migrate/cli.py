#!/usr/bin/env python3
"""
Generate a utf8mb4 conversion script for a MySQL/MariaDB database.

Reads table/column metadata (from a live database or a JSON snapshot),
builds a conversion plan and prints a bash script that runs
pt-online-schema-change for every table that needs converting.

Modes:
- columns: MODIFY every TEXT/VARCHAR column to the target charset/collation,
  keeping type, nullability and default (default)
- tables: rebuild every table with ENGINE=InnoDB and the target row format
  and default charset/collation

Usage:
    # Column conversions for the database in DATABASE_URL
    mb4migrate > convert.sh

    # Row format conversion, executing instead of dry-running
    mb4migrate --mode tables --row-format DYNAMIC --execute -o convert_tables.sh

    # Shorten indexed VARCHARs to 191 first, planning from a saved snapshot
    mb4migrate --input snapshot.json --clamp-varchar
"""

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from mb4migrate.config import OscMode, PlanMode, settings
from mb4migrate.core.database import get_engine, snapshot_connection
from mb4migrate.core.exceptions import ConversionPlanError
from mb4migrate.core.logging import bind_context, configure_logging, get_logger
from mb4migrate.schemas.metadata import DatabaseSpec
from mb4migrate.services.catalog import read_database_spec
from mb4migrate.services.planner import (
    clamp_varchar_lengths,
    generate_plan,
    generate_table_options_plan,
)
from mb4migrate.services.script import (
    OnlineSchemaChangeOptions,
    render_column_script,
    render_table_options_script,
)

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mb4migrate",
        description="Generate a pt-online-schema-change script converting a database to utf8mb4",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--database-url",
        help="SQLAlchemy URL to read metadata from (default: DATABASE_URL)",
    )
    source.add_argument(
        "--input",
        type=Path,
        help="Plan from a JSON DatabaseSpec snapshot instead of a live database",
    )
    parser.add_argument(
        "--database",
        help="Database to convert (default: the one in the URL)",
    )
    parser.add_argument(
        "--mode",
        choices=[PlanMode.COLUMNS, PlanMode.TABLES],
        default=PlanMode.COLUMNS,
        help="Convert columns or whole tables (default: columns)",
    )
    parser.add_argument("--charset", help=f"Target charset (default: {settings.TARGET_CHARSET})")
    parser.add_argument("--collation", help=f"Target collation (default: {settings.TARGET_COLLATION})")
    parser.add_argument("--row-format", help=f"Target row format (default: {settings.TARGET_ROW_FORMAT})")
    parser.add_argument(
        "--clamp-varchar",
        type=int,
        nargs="?",
        const=settings.VARCHAR_INDEX_LIMIT,
        metavar="N",
        help=f"Shorten indexed VARCHARs longer than N (default N: {settings.VARCHAR_INDEX_LIMIT})",
    )
    parser.add_argument(
        "--execute",
        action="store_true",
        help="Generate the script in execute mode instead of dry-run",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Write the script to this file (default: stdout)",
    )
    parser.add_argument(
        "--save-snapshot",
        type=Path,
        metavar="FILE",
        help="Also write the metadata snapshot as JSON",
    )
    parser.add_argument("--log-level", help=f"Log level (default: {settings.LOG_LEVEL})")
    return parser


def load_snapshot(path: Path) -> DatabaseSpec:
    """Load a DatabaseSpec from a JSON snapshot file"""
    return DatabaseSpec.model_validate_json(path.read_text(encoding="utf-8"))


def load_database_spec(args: argparse.Namespace) -> DatabaseSpec:
    if args.input:
        spec = load_snapshot(args.input)
        overrides = {
            key: value
            for key, value in (
                ("charset", args.charset),
                ("collation", args.collation),
                ("row_format", args.row_format.upper() if args.row_format else None),
            )
            if value
        }
        return spec.model_copy(update=overrides) if overrides else spec

    engine = get_engine(args.database_url)
    try:
        with snapshot_connection(engine) as conn:
            return read_database_spec(
                conn,
                database=args.database,
                charset=args.charset,
                collation=args.collation,
                row_format=args.row_format.upper() if args.row_format else None,
            )
    finally:
        engine.dispose()


def build_script(spec: DatabaseSpec, args: argparse.Namespace) -> str:
    """Plan and render the script for the requested mode"""
    if args.clamp_varchar is not None:
        spec = clamp_varchar_lengths(spec, args.clamp_varchar)

    options = OnlineSchemaChangeOptions.from_settings()
    if args.execute:
        options = options.model_copy(update={"mode": OscMode.EXECUTE})

    if args.mode == PlanMode.TABLES:
        table_plan = generate_table_options_plan(spec)
        logger.info("plan_generated", mode=args.mode, tables=len(table_plan.actions))
        return render_table_options_script(table_plan, options)

    plan = generate_plan(spec)
    logger.info(
        "plan_generated",
        mode=args.mode,
        tables=len(plan.actions),
        tables_to_convert=len(plan.alter_actions),
    )
    return render_column_script(plan, options)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        spec = load_database_spec(args)
    except (ValidationError, ValueError, FileNotFoundError) as e:
        # Bad snapshot file or missing DATABASE_URL; driver errors still propagate
        logger.error("input_failed", error=str(e))
        return 1
    bind_context(database=spec.name)

    if args.save_snapshot:
        args.save_snapshot.write_text(spec.model_dump_json(indent=2), encoding="utf-8")
        logger.info("snapshot_saved", path=str(args.save_snapshot))

    try:
        script = build_script(spec, args)
    except ConversionPlanError as e:
        # No partial script is written
        logger.error("plan_failed", error=e.message, table=e.table, column=e.column)
        return 1

    if args.output:
        args.output.write_text(script, encoding="utf-8")
        logger.info("script_written", path=str(args.output))
    else:
        sys.stdout.write(script)

    return 0


if __name__ == "__main__":
    sys.exit(main())
