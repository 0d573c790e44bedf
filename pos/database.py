"""Database configuration and initialization (embedded SQLite store)."""
import logging
import os

from flask import current_app
from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base

from pos.exceptions import StorageError

logger = logging.getLogger(__name__)

# Create SQLAlchemy base
Base = declarative_base()

# Columns added after the first release; older database files get them on startup
ADDITIVE_COLUMNS = (
    ('sales', 'created_by', "created_by TEXT NOT NULL DEFAULT 'SYSTEM'"),
    ('payments', 'created_by', "created_by TEXT NOT NULL DEFAULT 'SYSTEM'"),
)


def _enable_sqlite_fk(dbapi_connection, connection_record):
    """Enable foreign key enforcement on every new SQLite connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_uri: str, echo: bool = False):
    """Create the engine, making sure the directory of a file-backed store exists."""
    url = make_url(database_uri)
    is_sqlite = url.get_backend_name() == 'sqlite'
    
    if is_sqlite and url.database and url.database != ':memory:':
        directory = os.path.dirname(os.path.abspath(url.database))
        os.makedirs(directory, exist_ok=True)
    
    engine = create_engine(database_uri, echo=echo, pool_pre_ping=True)
    if is_sqlite:
        event.listen(engine, 'connect', _enable_sqlite_fk)
    return engine


def column_exists(engine, table: str, column: str) -> bool:
    """Check whether a column is present on a table (case-insensitive)."""
    columns = inspect(engine).get_columns(table)
    return any(c['name'].lower() == column.lower() for c in columns)


def ensure_column(engine, table: str, column: str, definition: str) -> bool:
    """
    Add a column to an existing table if it is not already there.
    
    Returns True when the column was added, False when it already existed.
    A concurrent "duplicate column" failure counts as already present; any
    other ALTER failure raises StorageError.
    """
    if not table.isidentifier() or not column.isidentifier():
        raise ValueError(f'Invalid identifier: {table}.{column}')
    
    if column_exists(engine, table, column):
        return False
    
    try:
        with engine.begin() as conn:
            conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {definition}"))
    except OperationalError as e:
        if 'duplicate column' in str(e.orig).lower():
            return False
        raise StorageError(f'Could not add column {table}.{column}: {e.orig}') from e
    
    logger.info(f"Added column {table}.{column}")
    return True


def initialize(engine):
    """Create all tables if absent, then apply additive column upgrades."""
    # Import models so the metadata knows every table
    from pos import models  # noqa: F401
    
    try:
        Base.metadata.create_all(engine)
    except SQLAlchemyError as e:
        raise StorageError(f'Could not create schema: {e}') from e
    
    for table, column, definition in ADDITIVE_COLUMNS:
        ensure_column(engine, table, column, definition)
    
    logger.info(f"Schema ready on {engine.url.render_as_string(hide_password=True)}")


def init_db(app):
    """Initialize database connection and the shared session registry for the app."""
    engine = create_db_engine(
        app.config['SQLALCHEMY_DATABASE_URI'],
        echo=app.config.get('SQLALCHEMY_ECHO', False),
    )
    initialize(engine)
    
    db_session = scoped_session(
        sessionmaker(autoflush=False, bind=engine)
    )
    
    app.extensions['pos_engine'] = engine
    app.extensions['pos_db_session'] = db_session
    
    # Register teardown
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Close database session and rollback on error."""
        if exception:
            db_session.rollback()
        db_session.remove()
    
    return db_session


def get_session():
    """Get database session for the current application."""
    return current_app.extensions['pos_db_session']


def get_engine():
    """Get the engine for the current application."""
    return current_app.extensions['pos_engine']
