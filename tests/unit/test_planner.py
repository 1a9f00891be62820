"""
Unit tests for the conversion plan generator.

These tests verify clause rendering, table/column ordering and the
fail-fast error policy.
"""

import pytest

from mb4migrate.core.exceptions import DuplicateColumnName, MalformedTypeDescriptor
from mb4migrate.schemas.metadata import ColumnSpec, DatabaseSpec, TableSpec
from mb4migrate.schemas.plan import AlterAction, NoConversionNecessary
from mb4migrate.services.planner import (
    clamp_varchar_lengths,
    database_statement,
    generate_plan,
    generate_table_options_plan,
    quote_default,
    render_modify_clause,
)

CHARSET = "utf8mb4"
COLLATION = "utf8mb4_unicode_ci"


def _clause(column: ColumnSpec) -> str:
    clause = render_modify_clause(column, CHARSET, COLLATION)
    assert clause is not None
    return clause.render()


def _database(*tables: TableSpec) -> DatabaseSpec:
    return DatabaseSpec(name="app", charset=CHARSET, collation=COLLATION, tables=tables)


@pytest.mark.unit
class TestRenderModifyClause:
    def test_nullable_text_without_default(self):
        column = ColumnSpec(name="bio", column_type="TEXT", nullable=True)
        assert _clause(column) == "MODIFY `bio` TEXT CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"

    def test_not_null_varchar_with_default(self):
        column = ColumnSpec(name="name", column_type="VARCHAR(255)", nullable=False, default="Anonymous")
        assert _clause(column) == (
            'MODIFY `name` VARCHAR(255) CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci '
            'DEFAULT "Anonymous" NOT NULL'
        )

    def test_absent_default_is_not_synthesized(self):
        column = ColumnSpec(name="title", column_type="varchar(10)", nullable=False)
        rendered = _clause(column)
        assert "DEFAULT" not in rendered
        assert rendered.endswith("NOT NULL")

    def test_empty_string_default_is_kept(self):
        column = ColumnSpec(name="title", column_type="varchar(10)", nullable=True, default="")
        rendered = _clause(column)
        assert 'DEFAULT ""' in rendered
        assert "NOT NULL" not in rendered

    def test_nullable_never_gets_not_null(self):
        column = ColumnSpec(name="note", column_type="mediumtext", nullable=True, default="x")
        assert "NOT NULL" not in _clause(column)

    def test_type_is_upper_cased_verbatim(self):
        column = ColumnSpec(name="slug", column_type="varchar(1024)", nullable=True)
        assert "VARCHAR(1024)" in _clause(column)

    def test_no_trailing_whitespace(self):
        column = ColumnSpec(name="bio", column_type="longtext", nullable=True)
        rendered = _clause(column)
        assert rendered == rendered.strip()
        assert "  " not in rendered

    def test_quotes_in_default_are_escaped(self):
        column = ColumnSpec(name="q", column_type="varchar(20)", nullable=True, default='say "hi"')
        assert 'DEFAULT "say \\"hi\\""' in _clause(column)

    def test_other_types_are_skipped(self):
        column = ColumnSpec(name="id", column_type="int(11)", nullable=False)
        assert render_modify_clause(column, CHARSET, COLLATION) is None

    def test_backtick_in_column_name_is_doubled(self):
        column = ColumnSpec(name="a`b", column_type="text")
        assert _clause(column) == "MODIFY `a``b` TEXT CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"

    def test_expression_default_is_parenthesized(self):
        column = ColumnSpec(
            name="token", column_type="varchar(36)", nullable=False, default="uuid()", default_is_expression=True
        )
        assert _clause(column) == (
            "MODIFY `token` VARCHAR(36) CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci "
            "DEFAULT (uuid()) NOT NULL"
        )

    def test_literal_default_that_looks_like_a_call_stays_quoted(self):
        column = ColumnSpec(name="token", column_type="varchar(36)", default="uuid()")
        assert 'DEFAULT "uuid()"' in _clause(column)

    @pytest.mark.parametrize("column_type", ["national varchar(10)", "character varying(10)", "nvarchar(10)"])
    def test_varchar_synonyms_render_as_varchar(self, column_type):
        column = ColumnSpec(name="code", column_type=column_type)
        assert _clause(column) == "MODIFY `code` VARCHAR(10) CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"


@pytest.mark.unit
class TestGeneratePlan:
    def test_single_text_column(self):
        table = TableSpec(name="users", columns=[ColumnSpec(name="bio", column_type="TEXT", nullable=True)])
        plan = generate_plan(_database(table))

        assert len(plan.actions) == 1
        action = plan.actions[0]
        assert isinstance(action, AlterAction)
        assert action.alter_spec == "MODIFY `bio` TEXT CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"

    def test_table_without_string_columns(self, settings_table):
        plan = generate_plan(_database(settings_table))

        assert plan.actions == (NoConversionNecessary(table="settings"),)
        assert plan.actions[0].comment == "NO CONVERSIONS NECESSARY FOR settings"
        assert plan.alter_actions == []

    def test_clauses_joined_in_column_order(self):
        table = TableSpec(
            name="posts",
            columns=[
                ColumnSpec(name="body", column_type="text", nullable=True),
                ColumnSpec(name="id", column_type="int(11)", nullable=False),
                ColumnSpec(name="title", column_type="varchar(100)", nullable=False, default=""),
            ],
        )
        plan = generate_plan(_database(table))

        assert plan.actions[0].alter_spec == (
            "MODIFY `body` TEXT CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci, "
            'MODIFY `title` VARCHAR(100) CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci DEFAULT "" NOT NULL'
        )

    def test_only_string_columns_referenced(self, sample_database):
        plan = generate_plan(sample_database)
        users = plan.actions[0]

        assert [clause.column for clause in users.clauses] == ["name", "bio"]
        assert "`id`" not in users.alter_spec
        assert "created_at" not in users.alter_spec

    def test_table_order_preserved(self, users_table, settings_table):
        tables = [settings_table, users_table, TableSpec(name="aardvark")]
        plan = generate_plan(_database(*tables))

        assert [action.table for action in plan.actions] == ["settings", "users", "aardvark"]

    def test_database_statement_always_emitted(self):
        plan = generate_plan(_database())

        assert plan.actions == ()
        assert plan.database_statement == (
            "ALTER DATABASE `app` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )

    def test_backtick_in_database_name_is_doubled(self):
        database = DatabaseSpec(name="x`y", charset=CHARSET, collation=COLLATION)
        assert database_statement(database) == (
            "ALTER DATABASE `x``y` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )

    def test_empty_table_is_not_an_error(self):
        plan = generate_plan(_database(TableSpec(name="empty")))
        assert plan.actions == (NoConversionNecessary(table="empty"),)

    def test_deterministic(self, sample_database):
        first = generate_plan(sample_database)
        second = generate_plan(sample_database)

        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_target_charset_from_database_spec(self, users_table):
        database = DatabaseSpec(name="app", charset="utf8mb4", collation="utf8mb4_0900_ai_ci", tables=[users_table])
        plan = generate_plan(database)

        assert "COLLATE utf8mb4_0900_ai_ci" in plan.actions[0].alter_spec
        assert plan.database_statement.endswith("COLLATE utf8mb4_0900_ai_ci")


@pytest.mark.unit
class TestPlanErrors:
    def test_empty_type_fails(self):
        table = TableSpec(
            name="users",
            columns=[
                ColumnSpec(name="bio", column_type="text"),
                ColumnSpec(name="broken", column_type=""),
            ],
        )
        with pytest.raises(MalformedTypeDescriptor) as exc_info:
            generate_plan(_database(table))

        assert exc_info.value.table == "users"
        assert exc_info.value.column == "broken"

    def test_malformed_type_in_later_table_aborts_whole_plan(self, users_table):
        bad = TableSpec(name="bad", columns=[ColumnSpec(name="x", column_type="varchar(")])
        with pytest.raises(MalformedTypeDescriptor):
            generate_plan(_database(users_table, bad))

    def test_duplicate_column_name(self):
        table = TableSpec(
            name="users",
            columns=[
                ColumnSpec(name="email", column_type="varchar(255)"),
                ColumnSpec(name="Email", column_type="varchar(255)"),
            ],
        )
        with pytest.raises(DuplicateColumnName) as exc_info:
            generate_plan(_database(table))

        assert exc_info.value.table == "users"
        assert exc_info.value.column == "Email"

    def test_same_column_name_in_different_tables_is_fine(self):
        first = TableSpec(name="a", columns=[ColumnSpec(name="name", column_type="text")])
        second = TableSpec(name="b", columns=[ColumnSpec(name="name", column_type="text")])
        plan = generate_plan(_database(first, second))
        assert len(plan.alter_actions) == 2


@pytest.mark.unit
class TestTableOptionsPlan:
    def test_every_table_gets_row_format(self, sample_database):
        plan = generate_table_options_plan(sample_database)

        assert [action.table for action in plan.actions] == ["users", "settings"]
        for action in plan.actions:
            assert action.alter_spec == (
                "ENGINE=InnoDB ROW_FORMAT=DYNAMIC CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
            )

    def test_database_statement(self, sample_database):
        plan = generate_table_options_plan(sample_database)
        assert plan.database_statement == database_statement(sample_database)

    def test_custom_row_format(self):
        database = DatabaseSpec(name="app", row_format="COMPRESSED", tables=[TableSpec(name="t")])
        plan = generate_table_options_plan(database)
        assert "ROW_FORMAT=COMPRESSED" in plan.actions[0].alter_spec


@pytest.mark.unit
class TestClampVarcharLengths:
    def test_indexed_long_varchar_is_shortened(self, sample_database):
        clamped = clamp_varchar_lengths(sample_database, 191)
        name = clamped.tables[0].columns[1]

        assert name.column_type == "varchar(191)"
        # Everything else about the column is kept
        assert name.default == "Anonymous"
        assert name.nullable is False

    def test_input_is_not_modified(self, sample_database):
        clamp_varchar_lengths(sample_database, 191)
        assert sample_database.tables[0].columns[1].column_type == "varchar(255)"

    def test_unindexed_and_short_columns_untouched(self):
        table = TableSpec(
            name="t",
            columns=[
                ColumnSpec(name="a", column_type="varchar(255)", indexed=False),
                ColumnSpec(name="b", column_type="varchar(100)", indexed=True),
                ColumnSpec(name="c", column_type="text", indexed=True),
            ],
        )
        clamped = clamp_varchar_lengths(_database(table), 191)
        assert clamped == _database(table)

    def test_clamped_plan_uses_new_length(self, sample_database):
        plan = generate_plan(clamp_varchar_lengths(sample_database))
        assert "VARCHAR(191)" in plan.actions[0].alter_spec

    def test_max_length_must_be_positive(self, sample_database):
        with pytest.raises(ValueError):
            clamp_varchar_lengths(sample_database, 0)


@pytest.mark.unit
def test_quote_default():
    assert quote_default("") == '""'
    assert quote_default("Anonymous") == '"Anonymous"'
    assert quote_default("a\\b") == '"a\\\\b"'
