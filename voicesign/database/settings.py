"""Database settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database configuration settings.

    Supports both SQLite and PostgreSQL backends.
    """

    model_config = SettingsConfigDict(
        env_prefix="VOICESIGN_DB_",
        env_file=".env",
        extra="ignore",
    )

    db_type: str = "sqlite"  # "sqlite" or "postgres"
    sqlite_path: str = "./data/voicesign.db"
    postgres_server: str = ""
    postgres_port: int = Field(default=5432)
    postgres_user: str = ""
    postgres_password: str = ""
    postgres_db: str = ""
    echo: bool = False

    @property
    def database_url(self) -> str:
        """Generate database URL based on db_type."""
        if self.db_type == "postgres":
            # Cloud SQL Proxy (Unix socket)
            if self.postgres_server.startswith("/cloudsql/"):
                return (
                    f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}"
                    f"@/{self.postgres_db}?host={self.postgres_server}"
                )
            return (
                f"postgresql://{self.postgres_user}:{self.postgres_password}"
                f"@{self.postgres_server}:{self.postgres_port}/{self.postgres_db}"
            )
        return f"sqlite:///{self.sqlite_path}"


settings = DatabaseSettings()
