import pytest
import pytest_asyncio
from unittest.mock import Mock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from core.database import Base
from core.deps import get_order_broadcaster, get_order_store
from app.main import app
from modules.orders.services.order_event_broadcaster import OrderEventBroadcaster
from modules.orders.services.order_service import OrderService
from modules.orders.services.order_store import InMemoryOrderStore, SqlOrderStore

SQLALCHEMY_DATABASE_URL = "sqlite://"


@pytest.fixture(scope="function")
def session_factory():
    """Fresh in-memory SQLite database for each test."""
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=engine
    )
    try:
        yield TestingSessionLocal
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def order_store(request, session_factory):
    """Every store backend, so each test runs against both."""
    if request.param == "sql":
        return SqlOrderStore(session_factory)
    return InMemoryOrderStore()


@pytest.fixture
def memory_store():
    return InMemoryOrderStore()


@pytest.fixture
def mock_broadcaster():
    broadcaster = Mock(spec=OrderEventBroadcaster)
    broadcaster.publish.return_value = 0
    broadcaster.subscriber_count = 0
    return broadcaster


@pytest.fixture
def order_service(memory_store, mock_broadcaster):
    return OrderService(memory_store, mock_broadcaster)


@pytest_asyncio.fixture
async def broadcaster():
    """Real broadcaster with a short keep-alive; closed after the test."""
    broadcaster = OrderEventBroadcaster(keepalive_interval=0.05, max_queue_size=10)
    yield broadcaster
    broadcaster.close_all()


@pytest.fixture(scope="function")
def client(memory_store, mock_broadcaster):
    """Test client with the store and broadcaster dependencies overridden."""
    app.dependency_overrides[get_order_store] = lambda: memory_store
    app.dependency_overrides[get_order_broadcaster] = lambda: mock_broadcaster
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def sample_order(memory_store):
    return memory_store.create(
        table_number=5, items=["Soup", "Bread"], notes="No onions", total_price=12.5
    )
