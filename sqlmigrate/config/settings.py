"""
Environment-driven settings.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..database.migrations.base import MigrationOptions


class Settings(BaseSettings):
    """Migration settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="SQLMIGRATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database settings
    database_url: str = "sqlite:///migrations.db"
    echo_sql: bool = False

    # Migration table settings
    table_name: str = "migrations"
    id_column_name: str = "id"
    id_column_size: int = Field(default=255, ge=0)

    # Logging settings
    log_level: str = "INFO"

    def to_options(self) -> MigrationOptions:
        """Migration options described by these settings."""
        return MigrationOptions(
            table_name=self.table_name,
            id_column_name=self.id_column_name,
            id_column_size=self.id_column_size,
        ).with_defaults()
