import time
from collections.abc import Generator
from fastapi import Request
from sqlalchemy import Engine, URL, create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import PostgresSettings, Settings
from app.core.errors import StartupError
from app.core.logging import get_logger

logger = get_logger(__name__)


def database_url(pg: PostgresSettings) -> URL:
    return URL.create(
        "postgresql+psycopg",
        username=pg.user,
        password=pg.password,
        host=pg.host,
        port=pg.port,
        database=pg.database,
        query={"sslmode": pg.sslmode},
    )


class Database:
    """
    Engine plus session factory, built once at startup and shared by every request.
    """

    def __init__(self, engine: Engine):
        self.engine: Engine = engine
        self.session_factory: sessionmaker[Session] = sessionmaker(
            bind=engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            future=True,
        )

    def session(self) -> Session:
        return self.session_factory()

    def ping(self) -> None:
        """Liveness probe: a round-trip, no business query."""
        with self.engine.connect() as conn:
            _ = conn.execute(text("SELECT 1"))

    def dispose(self) -> None:
        self.engine.dispose()


def open_database(url: URL | str) -> Database:
    """
    Create the engine. This does not touch the network; a malformed URL or a
    missing driver raises here, before any probing.
    """
    engine = create_engine(url, pool_pre_ping=True, future=True)
    return Database(engine)


def wait_for_database(
    database: Database,
    timeout: float = 60.0,
    interval: float = 1.0,
) -> Database:
    """
    Block until the database answers a ping or the deadline passes.
    Probe failures are retried; only the deadline is fatal.
    """
    deadline = time.monotonic() + timeout
    attempt = 0
    while True:
        attempt += 1
        try:
            database.ping()
        except SQLAlchemyError as exc:
            logger.warning(
                "Database not ready (attempt %d): %s", attempt, exc.__class__.__name__
            )
        else:
            logger.info("Database is ready after %d attempt(s)", attempt)
            return database

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break
        time.sleep(min(interval, remaining))

    logger.error("Database unreachable after %.1f seconds", timeout)
    raise StartupError(f"connection timeout after {timeout:g}s")


def connect(settings: Settings) -> Database:
    database = open_database(database_url(settings.postgres))
    try:
        return wait_for_database(
            database,
            timeout=settings.startup.timeout,
            interval=settings.startup.interval,
        )
    except StartupError:
        database.dispose()
        raise


# One session per request, from the handle stored on the application.
def get_db(request: Request) -> Generator[Session, None, None]:
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()
