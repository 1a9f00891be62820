"""
Pytest configuration and shared fixtures.

Everything here is an in-memory metadata snapshot; no test needs a live
database.
"""

import pytest

from mb4migrate.schemas.metadata import ColumnSpec, DatabaseSpec, TableSpec


@pytest.fixture
def users_table() -> TableSpec:
    """Table mixing converted and skipped column types"""
    return TableSpec(
        name="users",
        columns=(
            ColumnSpec(name="id", column_type="int(11)", nullable=False),
            ColumnSpec(
                name="name",
                column_type="varchar(255)",
                nullable=False,
                default="Anonymous",
                indexed=True,
            ),
            ColumnSpec(name="bio", column_type="text", nullable=True),
            ColumnSpec(name="created_at", column_type="datetime", nullable=False),
        ),
    )


@pytest.fixture
def settings_table() -> TableSpec:
    """Table with nothing to convert"""
    return TableSpec(
        name="settings",
        columns=(ColumnSpec(name="value", column_type="INT", nullable=False, default="0"),),
    )


@pytest.fixture
def sample_database(users_table: TableSpec, settings_table: TableSpec) -> DatabaseSpec:
    return DatabaseSpec(name="app", tables=(users_table, settings_table))
