"""
Schema metadata snapshot schemas

Immutable description of a database's tables and columns, as read from the
live catalog (or from a JSON snapshot) once per run.
"""

from pydantic import BaseModel, ConfigDict, Field


class ColumnSpec(BaseModel):
    """
    A single column as reported by the catalog.

    column_type is the full declared SQL type (information_schema
    COLUMN_TYPE), e.g. "varchar(255)" or "int(11) unsigned".
    default is None when the column has no default; "" is a real default.
    default_is_expression marks defaults that are SQL expressions (uuid(),
    current_timestamp()) rather than literal values.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "name": "name",
                "column_type": "varchar(255)",
                "nullable": False,
                "default": "Anonymous",
                "indexed": True,
            }
        },
    )

    name: str = Field(min_length=1)
    column_type: str
    nullable: bool = True
    default: str | None = None
    default_is_expression: bool = False
    indexed: bool = False


class TableSpec(BaseModel):
    """A table and its columns in catalog (ordinal) order"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    columns: tuple[ColumnSpec, ...] = ()


class DatabaseSpec(BaseModel):
    """A database snapshot plus the conversion targets to apply to it"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    charset: str = "utf8mb4"
    collation: str = "utf8mb4_unicode_ci"
    row_format: str = "DYNAMIC"
    tables: tuple[TableSpec, ...] = ()
