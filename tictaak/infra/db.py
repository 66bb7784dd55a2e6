import logging

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from tictaak.config import SETTINGS

logger = logging.getLogger(__name__)


def make_engine(url: str) -> Engine:
    new_engine = create_engine(url, pool_pre_ping=True)
    if new_engine.dialect.name == "sqlite":
        # SQLite leaves foreign keys off per connection unless asked.
        @event.listens_for(new_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _record) -> None:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


engine = make_engine(SETTINGS.database_url)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base = declarative_base()


def init_db() -> None:
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
    logger.debug("Connected to %s", engine.url.render_as_string(hide_password=True))
