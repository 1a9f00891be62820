"""
Table creation defaults

New tables should be created with the target row format and charset so
they never need converting later. Instead of patching the dialect's table
creation globally, the defaults are passed explicitly through
create_table(), which works for both MetaData-bound tables and Alembic's
op.create_table() (via table_options()).
"""

from typing import Any

from sqlalchemy import MetaData, Table

from mb4migrate.config import settings


def table_options(
    row_format: str | None = None,
    charset: str | None = None,
    collation: str | None = None,
    engine: str = "InnoDB",
) -> dict[str, str]:
    """
    MySQL table kwargs for SQLAlchemy Table() / op.create_table().

    Example:
        op.create_table("users", sa.Column(...), **table_options())
    """
    return {
        "mysql_engine": engine,
        "mysql_row_format": (row_format or settings.TARGET_ROW_FORMAT).upper(),
        "mysql_charset": charset or settings.TARGET_CHARSET,
        "mysql_collate": collation or settings.TARGET_COLLATION,
    }


def create_table(name: str, metadata: MetaData, *columns: Any, **kwargs: Any) -> Table:
    """
    Build a Table with the default engine/row format/charset options.

    Explicit kwargs win over the defaults, so a table can still opt out,
    e.g. create_table("log", metadata, ..., mysql_row_format="COMPRESSED").
    """
    options = table_options()
    options.update(kwargs)
    return Table(name, metadata, *columns, **options)
