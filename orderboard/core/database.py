from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from orderboard.core.config import DATABASE_URL, DB_ECHO


def _unicode_lower(value):
    if isinstance(value, str):
        return value.lower()
    return value


def _on_sqlite_connect(dbapi_connection, _connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    # el lower() nativo de SQLite solo pasa a minúsculas ASCII ("GARCÍA" -> "garcÍa")
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def configure_sqlite_engine(sqlite_engine: Engine) -> Engine:
    """Foreign keys on and a Unicode-aware ``lower`` for ``ilike`` searches."""
    event.listen(sqlite_engine, "connect", _on_sqlite_connect)
    return sqlite_engine


connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False

engine = create_engine(
    DATABASE_URL,
    connect_args=connect_args,
    pool_pre_ping=True,
    echo=DB_ECHO,
)

if DATABASE_URL.startswith("sqlite"):
    configure_sqlite_engine(engine)


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
