"""
Shared pytest fixtures.

Uses an on-disk SQLite database so no Postgres is required for tests.
Tests share one schema for the whole session; each test keeps to its own
user ids so rows written by one test never show up in another.
"""
import os

SQLITE_URL = "sqlite:///./test_tracking_metrics.db"
os.environ.setdefault("DATABASE_URL", SQLITE_URL)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from tracking_metrics.db.base import Base, get_db  # noqa: E402
from tracking_metrics.main import app  # noqa: E402
import tracking_metrics.models  # noqa: E402,F401

engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})


# pysqlite defers BEGIN on its own, which breaks SAVEPOINT; let SQLAlchemy emit it.
@event.listens_for(engine, "connect")
def _disable_pysqlite_begin(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _emit_begin(conn):
    conn.exec_driver_sql("BEGIN")


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def create_tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
