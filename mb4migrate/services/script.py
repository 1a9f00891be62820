"""
Conversion script renderer

Turns a plan into a bash script that runs pt-online-schema-change once per
table. The script starts in dry-run mode; flip COMMAND to execute once the
dry run looks right. The pt-online-schema-change options are passed through
unchanged from configuration.
"""

import shlex

from pydantic import BaseModel, ConfigDict, Field

from mb4migrate.config import ForeignKeyMethod, OscMode, Settings, settings
from mb4migrate.schemas.plan import AlterAction, ConversionPlan, TableOptionsPlan

PT_OSC = "pt-online-schema-change"


class OnlineSchemaChangeOptions(BaseModel):
    """Operational options handed to pt-online-schema-change"""

    model_config = ConfigDict(frozen=True)

    user: str = "root"
    chunk_size: str = "10k"  # rows per copy batch
    critical_load_threads: int = Field(default=200, gt=0)  # Threads_running at which copying aborts
    lock_wait_timeout: int = Field(default=2, gt=0)  # seconds
    alter_foreign_keys_method: str = Field(
        default=ForeignKeyMethod.AUTO,
        pattern="^(auto|rebuild_constraints|drop_swap|none)$",
    )
    mode: str = Field(default=OscMode.DRY_RUN, pattern="^(dry-run|execute)$")

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "OnlineSchemaChangeOptions":
        config = config or settings
        return cls(
            user=config.OSC_USER,
            chunk_size=config.OSC_CHUNK_SIZE,
            critical_load_threads=config.OSC_CRITICAL_LOAD_THREADS,
            lock_wait_timeout=config.OSC_LOCK_WAIT_TIMEOUT,
            alter_foreign_keys_method=config.OSC_ALTER_FOREIGN_KEYS_METHOD,
            mode=config.OSC_MODE,
        )


def _header(database: str, database_statement: str, options: OnlineSchemaChangeOptions) -> list[str]:
    return [
        "#!/bin/bash",
        "",
        "# change dry-run to execute when you are confident the script is ready:",
        f"COMMAND={shlex.quote(options.mode)}",
        "",
        "# put your db password in here:",
        "DBPASS='fill me out'",
        "",
        "# database defaults, used by tables created from now on",
        "if [ \"$COMMAND\" = 'execute' ]; then",
        f"  mysql -u{shlex.quote(options.user)} -p\"$DBPASS\" {shlex.quote(database)}"
        f" -e {shlex.quote(database_statement)}",
        "else",
        f"  echo {shlex.quote(database_statement + ';')}",
        "fi",
        "",
    ]


def pt_osc_command(database: str, table: str, alter_spec: str, options: OnlineSchemaChangeOptions) -> str:
    """Render one pt-online-schema-change invocation"""
    dsn = f"D={database},t={table}"
    return " ".join(
        [
            PT_OSC,
            f"-u{shlex.quote(options.user)}",
            '-p"$DBPASS"',
            "--alter",
            shlex.quote(alter_spec),
            shlex.quote(dsn),
            f"--chunk-size={shlex.quote(options.chunk_size)}",
            f"--critical-load Threads_running={options.critical_load_threads}",
            f"--set-vars innodb_lock_wait_timeout={options.lock_wait_timeout}",
            f"--alter-foreign-keys-method={options.alter_foreign_keys_method}",
            "--$COMMAND",
        ]
    )


def render_column_script(plan: ConversionPlan, options: OnlineSchemaChangeOptions | None = None) -> str:
    """Render the column-level conversion script"""
    options = options or OnlineSchemaChangeOptions.from_settings()
    lines = _header(plan.database, plan.database_statement, options)

    for action in plan.actions:
        lines.append(f"# {action.table}")
        if isinstance(action, AlterAction):
            lines.append(pt_osc_command(plan.database, action.table, action.alter_spec, options))
        else:
            lines.append(f"# {action.comment}")
        lines.append("")

    return "\n".join(lines)


def render_table_options_script(plan: TableOptionsPlan, options: OnlineSchemaChangeOptions | None = None) -> str:
    """Render the whole-table row format/charset conversion script"""
    options = options or OnlineSchemaChangeOptions.from_settings()
    lines = _header(plan.database, plan.database_statement, options)

    for action in plan.actions:
        lines.append(f"# {action.table}")
        lines.append(pt_osc_command(plan.database, action.table, action.alter_spec, options))
        lines.append("")

    return "\n".join(lines)
