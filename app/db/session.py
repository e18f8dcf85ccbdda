# app/db/session.py
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
)
from sqlalchemy.pool import StaticPool
from app.core.config import settings


def configure_sqlite(engine: AsyncEngine) -> None:
    """
    SQLite por defecto NO aplica FKs (y sin FKs no hay cascade ni
    ReferentialError). Además el driver abre la transacción tarde y los
    SAVEPOINT del upsert no funcionan: emitimos BEGIN nosotros.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_engine(db_url: str) -> AsyncEngine:
    # Timeouts cortos: si la DB no responde → falla rápido (5s)
    if db_url.startswith("sqlite+aiosqlite"):
        in_memory = db_url.rstrip("/").endswith(":memory:") or db_url.endswith("://")
        kwargs = {"poolclass": StaticPool} if in_memory else {}
        engine = create_async_engine(
            db_url,
            connect_args={"check_same_thread": False} if in_memory else {},
            **kwargs,
        )
        configure_sqlite(engine)
        return engine

    if db_url.startswith("postgresql+psycopg"):
        # psycopg (async) usa 'connect_timeout' en segundos
        connect_args = {"connect_timeout": 5}
    elif db_url.startswith("postgresql+asyncpg"):
        connect_args = {
            "timeout": 5,
            "server_settings": {"client_encoding": "UTF8"},
        }
    else:
        connect_args = {}

    return create_async_engine(
        db_url,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=5,
        max_overflow=10,
        connect_args=connect_args,
    )


engine = build_engine(settings.DATABASE_URL)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
