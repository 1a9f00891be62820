"""
Catalog reader

Builds a DatabaseSpec snapshot from information_schema. This is the only
place that talks to a live database; driver errors (connection loss,
missing privileges) propagate unchanged.
"""

import re
from collections import defaultdict

from sqlalchemy import text
from sqlalchemy.engine import Connection

from mb4migrate.config import settings
from mb4migrate.core.logging import get_logger
from mb4migrate.schemas.metadata import ColumnSpec, DatabaseSpec, TableSpec

logger = get_logger(__name__)

TABLES_QUERY = text(
    "SELECT TABLE_NAME FROM information_schema.TABLES "
    "WHERE TABLE_SCHEMA = :schema AND TABLE_TYPE = 'BASE TABLE' "
    "ORDER BY TABLE_NAME"
)

COLUMNS_QUERY = text(
    "SELECT TABLE_NAME, COLUMN_NAME, COLUMN_TYPE, IS_NULLABLE, COLUMN_DEFAULT, EXTRA "
    "FROM information_schema.COLUMNS "
    "WHERE TABLE_SCHEMA = :schema "
    "ORDER BY TABLE_NAME, ORDINAL_POSITION"
)

INDEXED_COLUMNS_QUERY = text(
    "SELECT DISTINCT TABLE_NAME, COLUMN_NAME FROM information_schema.STATISTICS "
    "WHERE TABLE_SCHEMA = :schema"
)

NUMERIC_LITERAL_RE = re.compile(r"^[+-]?[0-9]+(?:\.[0-9]*)?(?:[eE][+-]?[0-9]+)?$")


def normalize_default(raw: str | None, mariadb: bool) -> str | None:
    """
    Turn an information_schema COLUMN_DEFAULT into a plain value.

    MariaDB (10.2.7+) quotes literal defaults ('abc') and reports a NULL
    default as the bare word NULL; MySQL returns the raw value or SQL NULL.
    Expressions such as uuid() come back unchanged; see is_expression_default.
    """
    if raw is None:
        return None
    if not mariadb:
        return raw
    if raw == "NULL":
        return None
    if len(raw) >= 2 and raw.startswith("'") and raw.endswith("'"):
        return raw[1:-1].replace("''", "'")
    return raw


def is_expression_default(raw: str | None, extra: str | None, mariadb: bool) -> bool:
    """
    True when a COLUMN_DEFAULT is an SQL expression rather than a literal.

    MySQL 8.0.13+ flags expression defaults with DEFAULT_GENERATED in EXTRA.
    MariaDB has no such flag, but quotes every string literal, so anything
    left unquoted that isn't NULL or a number is an expression.
    """
    if raw is None:
        return False
    if not mariadb:
        return "DEFAULT_GENERATED" in (extra or "").upper()
    if raw == "NULL" or (len(raw) >= 2 and raw.startswith("'") and raw.endswith("'")):
        return False
    return not NUMERIC_LITERAL_RE.match(raw)


def is_mariadb(connection: Connection) -> bool:
    version = connection.execute(text("SELECT VERSION()")).scalar() or ""
    return "mariadb" in str(version).lower()


def current_database(connection: Connection) -> str:
    """Name of the connection's default database"""
    name = connection.execute(text("SELECT DATABASE()")).scalar()
    if not name:
        raise ValueError("No database selected; pass a database name or put one in the URL")
    return str(name)


def read_database_spec(
    connection: Connection,
    database: str | None = None,
    charset: str | None = None,
    collation: str | None = None,
    row_format: str | None = None,
) -> DatabaseSpec:
    """
    Read table and column metadata for one database.

    Args:
        connection: Open connection, ideally from snapshot_connection()
        database: Database to read, defaults to the connection's current one
        charset: Target charset (default: settings.TARGET_CHARSET)
        collation: Target collation (default: settings.TARGET_COLLATION)
        row_format: Target row format (default: settings.TARGET_ROW_FORMAT)

    Returns:
        DatabaseSpec with tables sorted by name and columns in ordinal order
    """
    name = database or current_database(connection)
    mariadb = is_mariadb(connection)
    params = {"schema": name}

    table_names = list(connection.execute(TABLES_QUERY, params).scalars().all())

    indexed = {
        (row["TABLE_NAME"], row["COLUMN_NAME"])
        for row in connection.execute(INDEXED_COLUMNS_QUERY, params).mappings().all()
    }

    columns_by_table: dict[str, list[ColumnSpec]] = defaultdict(list)
    for row in connection.execute(COLUMNS_QUERY, params).mappings().all():
        table_name = row["TABLE_NAME"]
        columns_by_table[table_name].append(
            ColumnSpec(
                name=row["COLUMN_NAME"],
                column_type=row["COLUMN_TYPE"],
                nullable=row["IS_NULLABLE"] == "YES",
                default=normalize_default(row["COLUMN_DEFAULT"], mariadb),
                default_is_expression=is_expression_default(
                    row["COLUMN_DEFAULT"], row.get("EXTRA"), mariadb
                ),
                indexed=(table_name, row["COLUMN_NAME"]) in indexed,
            )
        )

    # Views show up in COLUMNS but not in the BASE TABLE list; they're skipped
    tables = tuple(
        TableSpec(name=table_name, columns=tuple(columns_by_table.get(table_name, ())))
        for table_name in table_names
    )

    logger.info(
        "catalog_read",
        database=name,
        tables=len(tables),
        columns=sum(len(table.columns) for table in tables),
        mariadb=mariadb,
    )

    return DatabaseSpec(
        name=name,
        charset=charset or settings.TARGET_CHARSET,
        collation=collation or settings.TARGET_COLLATION,
        row_format=row_format or settings.TARGET_ROW_FORMAT,
        tables=tables,
    )
