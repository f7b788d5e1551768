from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool


Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    if not database_url.startswith('sqlite'):
        return create_engine(database_url, pool_pre_ping=True)

    # FastAPI runs sync handlers in a threadpool, so SQLite connections get shared across threads.
    engine_kwargs = {'connect_args': {'check_same_thread': False}}
    if database_url in {'sqlite://', 'sqlite:///:memory:'}:
        engine_kwargs['poolclass'] = StaticPool
    return create_engine(database_url, **engine_kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )


def init_schema(engine: Engine) -> None:
    # Registers the users table on Base.metadata.
    from school_backend.models import user  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
