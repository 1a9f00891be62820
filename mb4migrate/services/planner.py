"""
Conversion Plan Generator

Pure, deterministic transformation from a DatabaseSpec snapshot to the DDL
needed to move the database and all of its TEXT/VARCHAR columns to a target
character set and collation.

Each column keeps its declared type (upper-cased, never resized, VARCHAR
synonyms spelled VARCHAR), its nullability and its default. The generator only looks at the declared type
family, not at the column's current charset: running it against an already
converted database produces the same plan, and re-applying that plan is a
no-op at the SQL level.
"""

import re

from mb4migrate.core.exceptions import DuplicateColumnName, MalformedTypeDescriptor
from mb4migrate.schemas.metadata import ColumnSpec, DatabaseSpec, TableSpec
from mb4migrate.schemas.plan import (
    AlterAction,
    ConversionPlan,
    ModifyClause,
    NoConversionNecessary,
    TableOptionsAction,
    TableOptionsPlan,
    quote_identifier,
)
from mb4migrate.services.column_types import Varchar, canonical_type, needs_conversion, parse_column_type

TABLE_ENGINE = "InnoDB"

VARCHAR_ARGS_RE = re.compile(r"\(\s*[0-9]+\s*\)")


def quote_default(value: str) -> str:
    """Double-quote a default value as a MySQL string literal"""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def render_default(column: ColumnSpec) -> str:
    """DEFAULT clause for a column, empty when it has no default"""
    # None means no default; "" is a real default and is kept
    if column.default is None:
        return ""
    if column.default_is_expression:
        return f"DEFAULT ({column.default})"
    return f"DEFAULT {quote_default(column.default)}"


def database_statement(database: DatabaseSpec) -> str:
    """Statement setting the database defaults used by tables created later"""
    return (
        f"ALTER DATABASE {quote_identifier(database.name)} "
        f"CHARACTER SET {database.charset} COLLATE {database.collation}"
    )


def render_modify_clause(column: ColumnSpec, charset: str, collation: str) -> ModifyClause | None:
    """
    Build the MODIFY clause converting one column.

    Args:
        column: Column to convert
        charset: Target character set
        collation: Target collation

    Returns:
        The clause, or None when the column is not TEXT or VARCHAR

    Raises:
        MalformedTypeDescriptor: If the declared type can't be parsed
    """
    column_type = parse_column_type(column.column_type)
    if not needs_conversion(column_type):
        return None

    return ModifyClause(
        column=column.name,
        column_type=canonical_type(column.column_type).upper(),
        charset=charset,
        collation=collation,
        default_clause=render_default(column),
        null_clause="" if column.nullable else "NOT NULL",
    )


def _check_unique_columns(table: TableSpec) -> None:
    seen: set[str] = set()
    for column in table.columns:
        # MySQL column names are case-insensitive
        key = column.name.casefold()
        if key in seen:
            raise DuplicateColumnName(table.name, column.name)
        seen.add(key)


def plan_table(table: TableSpec, charset: str, collation: str) -> AlterAction | NoConversionNecessary:
    """Plan the column conversions for a single table"""
    _check_unique_columns(table)

    clauses = []
    for column in table.columns:
        try:
            clause = render_modify_clause(column, charset, collation)
        except MalformedTypeDescriptor as e:
            raise e.for_column(table.name, column.name) from None
        if clause is not None:
            clauses.append(clause)

    if not clauses:
        return NoConversionNecessary(table=table.name)
    return AlterAction(table=table.name, clauses=tuple(clauses))


def generate_plan(database: DatabaseSpec) -> ConversionPlan:
    """
    Generate the column-level conversion plan for a database.

    Tables are planned in input order, one action per table. Any malformed
    type or duplicate column aborts the whole plan.

    Args:
        database: Metadata snapshot with conversion targets

    Returns:
        ConversionPlan with the database statement and per-table actions

    Raises:
        MalformedTypeDescriptor: A column type is empty or unparseable
        DuplicateColumnName: Two columns of one table share a name
    """
    actions = tuple(
        plan_table(table, database.charset, database.collation) for table in database.tables
    )
    return ConversionPlan(
        database=database.name,
        database_statement=database_statement(database),
        actions=actions,
    )


def table_options_spec(database: DatabaseSpec) -> str:
    return (
        f"ENGINE={TABLE_ENGINE} ROW_FORMAT={database.row_format} "
        f"CHARACTER SET {database.charset} COLLATE {database.collation}"
    )


def generate_table_options_plan(database: DatabaseSpec) -> TableOptionsPlan:
    """
    Generate the whole-table plan: rebuild every table with the target row
    format and default charset/collation.

    Column types aren't parsed here; every table gets the same alter-spec.
    """
    spec = table_options_spec(database)
    return TableOptionsPlan(
        database=database.name,
        database_statement=database_statement(database),
        actions=tuple(TableOptionsAction(table=table.name, alter_spec=spec) for table in database.tables),
    )


def clamp_varchar_lengths(database: DatabaseSpec, max_length: int = 191) -> DatabaseSpec:
    """
    Shorten indexed VARCHAR columns so their utf8mb4 index keys fit.

    A utf8mb4 character takes up to 4 bytes, so an indexed VARCHAR(255)
    exceeds the 767-byte key prefix of COMPACT tables. Every indexed
    VARCHAR(n) with n > max_length becomes VARCHAR(max_length). Data longer
    than max_length will be truncated when the plan runs.

    Args:
        database: Snapshot to adjust
        max_length: Maximum VARCHAR length for indexed columns

    Returns:
        A new DatabaseSpec; the input is left untouched
    """
    if max_length <= 0:
        raise ValueError("max_length must be positive")

    tables = []
    for table in database.tables:
        columns = []
        for column in table.columns:
            try:
                column_type = parse_column_type(column.column_type)
            except MalformedTypeDescriptor as e:
                raise e.for_column(table.name, column.name) from None
            if column.indexed and isinstance(column_type, Varchar) and column_type.length > max_length:
                column = column.model_copy(
                    update={
                        "column_type": VARCHAR_ARGS_RE.sub(f"({max_length})", column.column_type, count=1)
                    }
                )
            columns.append(column)
        tables.append(table.model_copy(update={"columns": tuple(columns)}))

    return database.model_copy(update={"tables": tuple(tables)})
