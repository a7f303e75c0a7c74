"""Database session management."""

from collections.abc import Generator
from pathlib import Path

from sqlmodel import Session, create_engine

from voicesign.database.settings import settings

if settings.db_type == "sqlite":
    Path(settings.sqlite_path).parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(
        settings.database_url,
        echo=settings.echo,
        connect_args={"check_same_thread": False},
    )
else:
    engine = create_engine(settings.database_url, echo=settings.echo)


def get_session() -> Generator[Session, None, None]:
    """Get a database session.

    Yields:
        SQLModel Session instance.
    """
    with Session(engine) as session:
        yield session
