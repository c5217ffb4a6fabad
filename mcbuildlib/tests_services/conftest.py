# tests_services/conftest.py
import os
import pytest

# Set required environment variables for testing
os.environ.setdefault('JWT_SECRET', 'test-secret-key-for-testing-only')

from mcbuildlib.db.engine import make_engine, init_db
from mcbuildlib.services import builds
from mcbuildlib.services.builds import BuildInput


@pytest.fixture
def engine(tmp_path):
    """Fresh SQLite file database with every table created"""
    eng = make_engine(f"sqlite:///{tmp_path / 'catalog.db'}")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def conn(engine):
    """Connection whose uncommitted work is rolled back when the test ends"""
    with engine.connect() as c:
        yield c


@pytest.fixture
def make_build(conn):
    """Create a build on ``conn``; keyword arguments override the defaults"""
    def _make(name, **kwargs):
        kwargs.setdefault('authors', ['Steve'])
        kwargs.setdefault('themes', ['Castle'])
        kwargs.setdefault('colors', ['Gray'])
        kwargs.setdefault('schem_file', b'\x0a\x00\x00schem')
        return builds.create(conn, BuildInput(name=name, **kwargs))
    return _make
