# File: tests/conftest.py

import pytest
import os
import sys
import sqlalchemy
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy_utils import database_exists, create_database

# 1. Add project root to path
sys.path.append(os.getcwd())

# 2. Default to a throwaway SQLite file; export DATABASE_URL to test against Postgres
os.environ.setdefault("USE_SQLITE", "true")

# 3. Import Settings
from mediasense.core.config.settings import settings

# 4. Create Test Engine
TEST_ENGINE = create_engine(settings.DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=TEST_ENGINE)


@pytest.fixture(scope="session", autouse=True)
def global_setup():
    """
    Runs once per test session.
    Ensures DB and working dirs exist.
    """
    settings.ensure_dirs()

    if not database_exists(TEST_ENGINE.url):
        create_database(TEST_ENGINE.url)

    # Import all models to ensure they are registered
    from mediasense.core.database.base import Base
    import mediasense.core.jobs.models

    # Create tables once
    Base.metadata.create_all(bind=TEST_ENGINE)

    yield


@pytest.fixture(scope="function", autouse=True)
def clean_db(global_setup):
    """
    Runs before EVERY test.
    Detects DB type and cleans tables appropriately.
    """
    from mediasense.core.database.base import Base

    Base.metadata.create_all(bind=TEST_ENGINE)

    with TEST_ENGINE.connect() as conn:
        trans = conn.begin()

        is_sqlite = "sqlite" in str(TEST_ENGINE.url)
        table_names = sqlalchemy.inspect(TEST_ENGINE).get_table_names()

        for table in table_names:
            if is_sqlite:
                conn.execute(text(f'DELETE FROM "{table}";'))
            else:
                conn.execute(text(f'TRUNCATE TABLE "{table}" CASCADE;'))

        trans.commit()

    yield


@pytest.fixture(scope="function")
def db_session():
    """
    Provides a session for the test to use.
    """
    connection = TEST_ENGINE.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def audio_file(tmp_path):
    """A file big enough to pass the corrupted/empty size check."""
    p = tmp_path / "speech.wav"
    p.write_bytes(b"RIFF" + b"\x00" * 4096)
    return p
