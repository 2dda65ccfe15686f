"""Database engine, session factory and schema management.

Every aggregate maps onto the single declarative ``Base`` below so one
``create_all`` builds the whole schema.

SQLite needs two adjustments to behave like a server database under
concurrent writers: pysqlite's implicit transaction handling is switched off
and every transaction is opened with ``BEGIN IMMEDIATE``, so a writer takes
the database write lock up front and competing writers queue on the busy
timeout instead of failing on a SHARED -> RESERVED lock upgrade.
"""

from sqlalchemy import Engine, MetaData, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from shared.config import Settings

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def make_engine(settings: Settings) -> Engine:
    """Build the engine for ``settings.database_url``."""
    url = settings.database_url

    if not url.startswith("sqlite"):
        return create_engine(url, echo=settings.database_echo, pool_pre_ping=True)

    engine = create_engine(
        url,
        echo=settings.database_echo,
        connect_args={
            "check_same_thread": False,
            "timeout": settings.sqlite_busy_timeout,
        },
    )

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):  # noqa: ARG001
        dbapi_connection.isolation_level = None
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    # Aggregates are handed back to callers after the transaction closes
    return sessionmaker(bind=engine, expire_on_commit=False)


def _load_models() -> None:
    """Import every mapped module so its tables are registered on ``Base``."""
    import catalogue.product.product  # noqa: F401
    import identity.customer.customer  # noqa: F401
    import ordering.cart.cart  # noqa: F401
    import ordering.order.order  # noqa: F401


def setup_db(engine: Engine) -> None:
    """Create database schema."""
    _load_models()
    Base.metadata.create_all(engine)


def drop_db(engine: Engine) -> None:
    """Drop database schema."""
    _load_models()
    Base.metadata.drop_all(engine)
