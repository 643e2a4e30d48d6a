from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

from todo_api.config import get_settings

settings = get_settings()


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def register_sqlite_functions(engine) -> None:
    # SQLite's built-in lower() only folds ASCII; search needs full Unicode
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def make_engine(
    database_url: str,
    echo: bool = False,
    pool_size: int = 5,
    pool_timeout: int = 30,
):
    # For SQLite we must add connect_args; the pool options only apply to real servers
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            echo=echo,
        )
        register_sqlite_functions(engine)
        return engine

    return create_engine(
        database_url,
        pool_size=pool_size,
        pool_timeout=pool_timeout,
        pool_pre_ping=True,
        echo=echo,
    )


engine = make_engine(
    settings.database_url,
    echo=settings.db_echo,
    pool_size=settings.db_pool_size,
    pool_timeout=settings.db_pool_timeout,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
