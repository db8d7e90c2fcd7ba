"""Database connection and session management."""

from contextlib import contextmanager, nullcontext
from typing import ContextManager, Generator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from spinrewards.logging_config import get_logger
from spinrewards.settings import settings
from spinrewards.storage.models import Base

logger = get_logger(__name__)


def _install_sqlite_begin(engine: Engine) -> None:
    """Let SQLAlchemy emit BEGIN itself on SQLite.

    pysqlite defers BEGIN until the first write, so a SELECT that guards a
    write runs outside the transaction. Emitting BEGIN when the transaction
    starts fixes that, and connections carrying the ``sqlite_begin`` execution
    option open with ``BEGIN IMMEDIATE``, which waits for (and then holds) the write lock.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        mode = conn.get_execution_options().get("sqlite_begin", "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")


class Database:
    """Database connection manager."""

    def __init__(self, database_url: str | None = None):
        """Initialize database connection.

        Args:
            database_url: Database URL (defaults to settings)
        """
        self.database_url = database_url or settings.database_url
        connect_args = {}
        if self.database_url.startswith("sqlite"):
            # Request handlers run in a threadpool
            connect_args["check_same_thread"] = False
        self.engine = create_engine(
            self.database_url,
            echo=False,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        self.is_sqlite = self.engine.dialect.name == "sqlite"
        locking_engine = self.engine
        if self.is_sqlite:
            _install_sqlite_begin(self.engine)
            locking_engine = self.engine.execution_options(sqlite_begin="IMMEDIATE")

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine,
        )
        # Sessions that take the write lock when their transaction begins
        self.LockingSessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=locking_engine,
        )
        logger.info("database_initialized", url=self.engine.url.render_as_string(hide_password=True))

    def create_tables(self) -> None:
        """Create all tables in the database."""
        # Import the models so every table is registered on Base.metadata
        import spinrewards.accounts.models  # noqa: F401
        import spinrewards.referral.models  # noqa: F401
        import spinrewards.spins.models  # noqa: F401
        import spinrewards.withdrawals.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("tables_created")

    def drop_tables(self) -> None:
        """Drop all tables from the database."""
        Base.metadata.drop_all(bind=self.engine)
        logger.warning("tables_dropped")

    @contextmanager
    def session(self, immediate: bool = False) -> Generator[Session, None, None]:
        """Provide a transactional scope for database operations.

        Args:
            immediate: Take the write lock when the transaction begins. Use it
                for check-then-write sequences (quota checks, signups). On
                SQLite this issues ``BEGIN IMMEDIATE``; other backends rely on
                the ``SELECT ... FOR UPDATE`` row locks the callers take.

        Yields:
            Database session
        """
        factory = self.LockingSessionLocal if immediate else self.SessionLocal
        session = factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def scope(self, session: Session | None = None) -> ContextManager[Session]:
        """Join the caller's transaction if one is given, else open a new one."""
        if session is not None:
            return nullcontext(session)
        return self.session()


# Global database instance
db = Database()
