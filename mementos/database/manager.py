#!/usr/bin/env python3
"""
manager.py
--------------------
Data-access handle for the Mementos database.

Provides the MementosDB class, which owns the SQLAlchemy engine and session
factory, and the OwnerScope bundle of entity managers bound to one user.
Handles:
    - Initialization of the database engine and sessionmaker
    - Transactional units of work with commit/rollback logging
    - Owner-scoped manager bundles for request handlers
    - Schema creation and reset directly from the ORM models
    - Connection health checks

Key Features:
    - One explicitly constructed handle per process, disposed at shutdown
    - SQLite foreign keys and SAVEPOINTs enabled on every connection
    - Managers share one session so association changes stay atomic

Usage:
    db = MementosDB.from_settings(Settings.load())
    db.create_schema()

    with db.owner_scope(user.id) as scope:
        place = scope.places.create({"name": "Blue Bottle Cafe", ...})
        scope.associations.set_memory_event(memory.id, lunch.id)

    db.dispose()
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional, Union

# --- Third party imports ---
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# --- Local imports ---
from mementos.core.config import Settings
from mementos.core.exceptions import DatabaseError
from mementos.core.logging_manager import MementosLogger, safe_logger
from mementos.database.decorators import DatabaseOperation
from mementos.database.models import Base
from mementos.database.managers import (
    AssociationManager,
    AttributeManager,
    CollectionManager,
    EventManager,
    MemoryManager,
    PersonManager,
    PlaceManager,
    ReflectionManager,
    UserManager,
)


class OwnerScope:
    """
    Entity managers bound to one session and one owner.

    All managers share the same AssociationManager and AttributeManager,
    so reconciliation triggered from one entity type sees the same
    session state as the others.

    Attributes:
        session: Session of the enclosing unit of work
        owner_id: Internal id of the user every query is filtered by
    """

    def __init__(
        self,
        session: Session,
        owner_id: int,
        logger: Optional[MementosLogger] = None,
        strict_place_lock: bool = True,
        default_quota_limit: int = 100,
    ) -> None:
        self.session = session
        self.owner_id = owner_id

        self.associations = AssociationManager(
            session, owner_id, logger, strict_place_lock=strict_place_lock
        )
        self.attributes = AttributeManager(session, owner_id, logger)
        self.people = PersonManager(session, owner_id, logger, attributes=self.attributes)
        self.places = PlaceManager(session, owner_id, logger, attributes=self.attributes)
        self.events = EventManager(
            session,
            owner_id,
            logger,
            associations=self.associations,
            attributes=self.attributes,
        )
        self.memories = MemoryManager(
            session, owner_id, logger, associations=self.associations
        )
        self.reflections = ReflectionManager(session, owner_id, logger)
        self.collections = CollectionManager(session, owner_id, logger)
        self.users = UserManager(session, logger, default_quota_limit=default_quota_limit)


class MementosDB:
    """
    Main data-access handle for the Mementos database.

    Attributes:
        database_url: SQLAlchemy URL of the store
        engine: SQLAlchemy engine instance
        SessionLocal: SQLAlchemy session factory
        logger: Logger for the 'database' component (or None)
        strict_place_lock: Passed to every AssociationManager
        default_quota_limit: Quota assigned to newly synced users
    """

    def __init__(
        self,
        database_url: str,
        log_dir: Optional[Union[str, Path]] = None,
        strict_place_lock: bool = True,
        default_quota_limit: int = 100,
        logger: Optional[MementosLogger] = None,
    ) -> None:
        """
        Initialize database engine and session factory.

        Args:
            database_url: SQLAlchemy URL (``sqlite:///path/to/mementos.db``)
            log_dir: Directory for log files; ignored when logger is given
            strict_place_lock: Reject place changes locked by an event
            default_quota_limit: Quota for newly synced users
            logger: Pre-built logger to share with other components
        """
        self.database_url = database_url
        self.strict_place_lock = strict_place_lock
        self.default_quota_limit = default_quota_limit

        if logger is not None:
            self.logger: Optional[MementosLogger] = logger
        elif log_dir:
            self.logger = MementosLogger(Path(log_dir).expanduser(), component_name="database")
        else:
            self.logger = None

        self._setup_engine()

    @classmethod
    def from_settings(
        cls, settings: Settings, logger: Optional[MementosLogger] = None
    ) -> "MementosDB":
        """Build a handle from process settings."""
        return cls(
            settings.database_url,
            log_dir=settings.log_dir,
            strict_place_lock=settings.strict_place_lock,
            default_quota_limit=settings.default_quota_limit,
            logger=logger,
        )

    def _setup_engine(self) -> None:
        """Initialize database engine and session factory."""
        log = safe_logger(self.logger)
        try:
            log.log_operation("database_init_start", {"database_url": self._safe_url()})

            url = make_url(self.database_url)
            engine_kwargs = {"echo": False, "pool_pre_ping": True}

            if url.get_backend_name() == "sqlite":
                # Request handlers run in worker threads
                engine_kwargs["connect_args"] = {"check_same_thread": False}
                if url.database in (None, "", ":memory:"):
                    engine_kwargs["poolclass"] = StaticPool
                else:
                    Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)

            self.engine: Engine = create_engine(self.database_url, **engine_kwargs)

            if url.get_backend_name() == "sqlite":
                self._configure_sqlite(self.engine)

            self.SessionLocal: sessionmaker = sessionmaker(
                bind=self.engine,
                autoflush=True,
                expire_on_commit=False,
            )

            log.log_operation("database_init_complete", {"success": True})

        except Exception as e:
            log.log_error(e, {"operation": "database_init"})
            raise DatabaseError(f"Database initialization failed: {e}") from e

    @staticmethod
    def _configure_sqlite(engine: Engine) -> None:
        """
        Enable foreign keys and working SAVEPOINTs on SQLite.

        The pysqlite driver manages transactions on its own and breaks
        nested transactions; SQLAlchemy is given control of BEGIN instead.
        """

        @event.listens_for(engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql("BEGIN")

    def _safe_url(self) -> str:
        return make_url(self.database_url).render_as_string(hide_password=True)

    # ---- Session Management ----
    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Provide a transactional scope around operations with logging.

        Usage:
            with db.session_scope() as session:
                user, _ = UserManager(session).sync("user_2abc")
        """
        log = safe_logger(self.logger)
        session = self.SessionLocal()
        session_id = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        log.log_debug("session_start", {"session_id": session_id})

        try:
            yield session
            session.commit()
            log.log_debug("session_commit", {"session_id": session_id})
        except Exception as e:
            session.rollback()
            log.log_error(e, {"operation": "session_rollback", "session_id": session_id})
            raise
        finally:
            session.close()
            log.log_debug("session_close", {"session_id": session_id})

    def scope_for(self, session: Session, owner_id: int) -> OwnerScope:
        """Bind the entity managers to an open session and an owner."""
        return OwnerScope(
            session,
            owner_id,
            logger=self.logger,
            strict_place_lock=self.strict_place_lock,
            default_quota_limit=self.default_quota_limit,
        )

    @contextmanager
    def owner_scope(self, owner_id: int) -> Iterator[OwnerScope]:
        """Unit of work with the entity managers of one owner."""
        with self.session_scope() as session:
            yield self.scope_for(session, owner_id)

    def users(self, session: Session) -> UserManager:
        """UserManager bound to an open session."""
        return UserManager(session, self.logger, default_quota_limit=self.default_quota_limit)

    # ---- Schema ----
    def create_schema(self) -> None:
        """Create every table that does not exist yet."""
        with DatabaseOperation(self.logger, "create_schema", "Schema creation failed"):
            Base.metadata.create_all(self.engine)

    def reset(self) -> None:
        """Drop all tables and recreate them empty."""
        with DatabaseOperation(self.logger, "drop_schema", "Schema reset failed", log_start=True):
            Base.metadata.drop_all(self.engine)
        safe_logger(self.logger).log_warning("schema_dropped", {"database_url": self._safe_url()})
        self.create_schema()

    def check_connection(self) -> bool:
        """
        Run a trivial query against the store.

        Raises:
            DatabaseError: If the database cannot be reached
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            safe_logger(self.logger).log_error(e, {"operation": "check_connection"})
            raise DatabaseError(f"Database connection failed: {e}") from e
        return True

    def dispose(self) -> None:
        """Release pooled connections and close the logger."""
        self.engine.dispose()
        if self.logger is not None:
            self.logger.log_debug("database_disposed")

    # ----- Context Manager Support -----
    def __enter__(self) -> "MementosDB":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        del exc_type, exc_val, exc_tb
        self.dispose()
