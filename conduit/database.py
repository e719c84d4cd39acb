from typing import Awaitable, Callable

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from conduit.config import settings
from conduit.middleware import install_query_counter

# Backends with INSERT ... ON CONFLICT DO NOTHING, used for favorites and follows.
_CONFLICT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

_AFTER_COMMIT = "after_commit"


def check_dialect(engine) -> None:
    """Refuse to start on a database backend the relation writes cannot target."""
    name = engine.dialect.name
    if name not in _CONFLICT_INSERTS:
        supported = ", ".join(sorted(_CONFLICT_INSERTS))
        raise ValueError(f"Unsupported database backend {name!r}; expected one of: {supported}")


# Module-level engine variable allows tests to override with a test engine.
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)
check_dialect(engine)

# Register the per-request SQL query counter on the production engine.
install_query_counter(engine)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


def insert_ignore(db: AsyncSession, model):
    """
    Return an ``INSERT ... ON CONFLICT DO NOTHING`` for *model*'s table.

    Lets the unique constraint decide whether a relation row already
    exists, so concurrent duplicate writes are absorbed instead of racing
    a pre-check.
    """
    insert = _CONFLICT_INSERTS[db.get_bind().dialect.name]
    return insert(model.__table__).on_conflict_do_nothing()


def after_commit(db: AsyncSession, hook: Callable[[], Awaitable[None]]) -> None:
    """Queue *hook* to run once *db*'s transaction commits; a rollback drops it."""
    db.info.setdefault(_AFTER_COMMIT, []).append(hook)


async def commit(db: AsyncSession) -> None:
    """
    Commit the request's transaction, then run its ``after_commit`` hooks.

    Write routes call this before building their response, so a client
    never sees a success status for a write that is not yet durable.
    """
    await db.commit()
    for hook in db.info.pop(_AFTER_COMMIT, []):
        await hook()


async def rollback(db: AsyncSession) -> None:
    """Roll back the request's transaction and discard its ``after_commit`` hooks."""
    db.info.pop(_AFTER_COMMIT, None)
    await db.rollback()


async def get_db():
    """
    Yield one session per request.

    The session is the request's transaction: write routes commit it
    through ``commit`` before responding; anything still pending when the
    handler returns is committed here, and everything is rolled back when
    the handler raises.
    """
    async with async_session() as session:
        try:
            yield session
            await commit(session)
        except Exception:
            await rollback(session)
            raise
