import pytest
from fastapi.testclient import TestClient

from api import create_app
from database import Database
from library import Library


@pytest.fixture
def database(tmp_path, request):
    # Each test gets its own database file
    db_file = str(tmp_path / f"test_{request.node.name}.db")
    db = Database(db_file)
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def lib(database):
    return Library(database)


@pytest.fixture
def client(database):
    with TestClient(create_app(database)) as test_client:
        yield test_client
