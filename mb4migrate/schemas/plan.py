"""
Conversion plan schemas

Output of the plan generator. Every action is either an alter-spec ready
to be handed to pt-online-schema-change as its --alter payload, or a
marker saying the table needs nothing.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


def quote_identifier(name: str) -> str:
    """Backtick-quote an identifier, doubling any embedded backticks"""
    escaped = name.replace("`", "``")
    return f"`{escaped}`"


class ModifyClause(BaseModel):
    """One column-level MODIFY clause of an alter-spec"""

    model_config = ConfigDict(frozen=True)

    column: str
    column_type: str
    charset: str
    collation: str
    default_clause: str = ""
    null_clause: str = ""

    def render(self) -> str:
        """Render the clause, leaving out absent optional parts"""
        parts = [
            f"MODIFY {quote_identifier(self.column)} {self.column_type}",
            f"CHARACTER SET {self.charset}",
            f"COLLATE {self.collation}",
            self.default_clause,
            self.null_clause,
        ]
        return " ".join(part for part in parts if part).strip()


class AlterAction(BaseModel):
    """Column conversions for one table"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["alter"] = "alter"
    table: str
    clauses: tuple[ModifyClause, ...] = Field(min_length=1)

    @property
    def alter_spec(self) -> str:
        return ", ".join(clause.render() for clause in self.clauses)


class NoConversionNecessary(BaseModel):
    """Marker for a table without any TEXT or VARCHAR column"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["noop"] = "noop"
    table: str

    @property
    def comment(self) -> str:
        return f"NO CONVERSIONS NECESSARY FOR {self.table}"


class ConversionPlan(BaseModel):
    """
    Column-level conversion plan for a whole database.

    database_statement sets the database defaults and is always present;
    actions hold one entry per input table, in input order.
    """

    model_config = ConfigDict(frozen=True)

    database: str
    database_statement: str
    actions: tuple[AlterAction | NoConversionNecessary, ...] = ()

    @property
    def alter_actions(self) -> list[AlterAction]:
        return [action for action in self.actions if isinstance(action, AlterAction)]


class TableOptionsAction(BaseModel):
    """Whole-table engine/row format/charset conversion for one table"""

    model_config = ConfigDict(frozen=True)

    table: str
    alter_spec: str


class TableOptionsPlan(BaseModel):
    """Row format conversion plan: one TableOptionsAction per table"""

    model_config = ConfigDict(frozen=True)

    database: str
    database_statement: str
    actions: tuple[TableOptionsAction, ...] = ()
