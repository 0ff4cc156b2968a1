"""
Point settings at SQLite before liftlog is imported, and give every test its
own in-memory database with foreign keys enforced.
"""
import os

os.environ.setdefault("DB_URL", "sqlite://")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from liftlog.db import get_db, init_db, make_engine
from liftlog.main import app
from liftlog.repositories.exercise_repo import ExerciseRepository
from liftlog.services.exercise_writer import ExerciseWriter


@pytest.fixture
def engine():
    eng = make_engine("sqlite://", poolclass=StaticPool)
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def repo(db):
    return ExerciseRepository(db)


@pytest.fixture
def writer(repo):
    return ExerciseWriter(repo)


@pytest.fixture
def client(engine):
    TestSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()

