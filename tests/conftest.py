import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from workout_logger.database import get_store
from workout_logger.main import app
from workout_logger.services.repository import WorkoutRepository
from workout_logger.storage import KeyValueStore, SQLStore


@pytest.fixture(name="engine")
def engine_fixture():
    # StaticPool ensures the in-memory DB is shared across all connections,
    # including those spawned by TestClient's anyio thread pool.
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture(name="sql_store")
def sql_store_fixture(engine):
    store = SQLStore(engine=engine)
    store.initialize()
    return store


@pytest.fixture(name="kv_store")
def kv_store_fixture():
    store = KeyValueStore()
    store.initialize()
    return store


@pytest.fixture(name="store", params=["sql", "kv"])
def store_fixture(request):
    """Runs a test once against each storage backend."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture(name="session")
def session_fixture(sql_store: SQLStore):
    with Session(sql_store.engine) as session:
        yield session


@pytest.fixture(name="repository")
def repository_fixture(sql_store: SQLStore):
    return WorkoutRepository(sql_store)


@pytest.fixture(name="client")
def client_fixture(sql_store: SQLStore):
    app.dependency_overrides[get_store] = lambda: sql_store
    yield TestClient(app)
    app.dependency_overrides.clear()
