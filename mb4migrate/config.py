"""
Application Configuration
Uses Pydantic Settings for environment-based configuration
"""

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra env vars like MARIADB_* used by docker-compose
    )

    # Application
    PROJECT_NAME: str = "mb4migrate"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(default="development", pattern="^(development|staging|production)$")

    # Source database (metadata is read from here)
    DATABASE_URL: str | None = Field(default=None)
    DB_ECHO: bool = False

    # Conversion targets
    TARGET_CHARSET: str = "utf8mb4"
    TARGET_COLLATION: str = "utf8mb4_unicode_ci"
    TARGET_ROW_FORMAT: str = Field(
        default="DYNAMIC",
        pattern="^(DEFAULT|DYNAMIC|COMPACT|COMPRESSED|REDUNDANT)$",
    )

    # Index key limit for utf8mb4 on COMPACT tables (767 bytes / 4)
    VARCHAR_INDEX_LIMIT: int = Field(default=191, gt=0)

    # pt-online-schema-change pass-through options
    OSC_USER: str = "root"
    OSC_CHUNK_SIZE: str = "10k"
    OSC_CRITICAL_LOAD_THREADS: int = Field(default=200, gt=0)
    OSC_LOCK_WAIT_TIMEOUT: int = Field(default=2, gt=0)  # seconds
    OSC_ALTER_FOREIGN_KEYS_METHOD: str = Field(
        default="auto",
        pattern="^(auto|rebuild_constraints|drop_swap|none)$",
    )
    OSC_MODE: str = Field(default="dry-run", pattern="^(dry-run|execute)$")

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    @field_validator("TARGET_ROW_FORMAT", mode="before")
    @classmethod
    def upper_row_format(cls, v: str) -> str:
        """Row formats are keywords; accept any case"""
        if isinstance(v, str):
            return v.strip().upper()
        return v


# Create global settings instance

load_dotenv()
settings = Settings()


class OscMode:
    """pt-online-schema-change execution modes"""

    DRY_RUN = "dry-run"
    EXECUTE = "execute"


class ForeignKeyMethod:
    """pt-online-schema-change --alter-foreign-keys-method values"""

    AUTO = "auto"
    REBUILD_CONSTRAINTS = "rebuild_constraints"
    DROP_SWAP = "drop_swap"
    NONE = "none"


class PlanMode:
    """Kinds of conversion script the CLI can produce"""

    COLUMNS = "columns"
    TABLES = "tables"
