"""
Errors raised while building a conversion plan.

Plan generation is fail-fast: any of these aborts the whole run, since a
partial plan is not useful for a schema migration.
"""


class ConversionPlanError(Exception):
    """Base class for conversion plan errors"""

    def __init__(self, message: str, table: str | None = None, column: str | None = None):
        super().__init__(message)
        self.message = message
        self.table = table
        self.column = column


class MalformedTypeDescriptor(ConversionPlanError):
    """A column's declared type string is empty or structurally invalid"""

    def __init__(self, column_type: str, table: str | None = None, column: str | None = None):
        self.column_type = column_type
        location = f"{table}.{column}" if table and column else column or table
        where = f" for column {location}" if location else ""
        super().__init__(f"Malformed column type {column_type!r}{where}", table=table, column=column)

    def for_column(self, table: str, column: str) -> "MalformedTypeDescriptor":
        """Return a copy of this error naming the offending table and column"""
        return MalformedTypeDescriptor(self.column_type, table=table, column=column)


class DuplicateColumnName(ConversionPlanError):
    """Two columns in the same table share a name (metadata corruption)"""

    def __init__(self, table: str, column: str):
        super().__init__(f"Duplicate column name {column!r} in table {table!r}", table=table, column=column)
