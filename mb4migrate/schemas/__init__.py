"""
Pydantic schemas for metadata snapshots and conversion plans
"""
from mb4migrate.schemas.metadata import ColumnSpec, DatabaseSpec, TableSpec
from mb4migrate.schemas.plan import (
    AlterAction,
    ConversionPlan,
    ModifyClause,
    NoConversionNecessary,
    TableOptionsAction,
    TableOptionsPlan,
)

__all__ = [
    "AlterAction",
    "ColumnSpec",
    "ConversionPlan",
    "DatabaseSpec",
    "ModifyClause",
    "NoConversionNecessary",
    "TableOptionsAction",
    "TableOptionsPlan",
    "TableSpec",
]
