"""Test configuration and fixtures for PaperMind."""

import os
import time
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

TEST_JWT_SECRET = "test-jwt-secret-for-papermind"

os.environ["ENVIRONMENT"] = "local"
os.environ["AUTH_JWT_SECRET"] = TEST_JWT_SECRET
os.environ["AUTH_JWT_AUDIENCE"] = "authenticated"
os.environ["ANTHROPIC_API_KEY"] = "test-anthropic-key"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"
os.environ["LOG_CONSOLE_ENABLED"] = "false"

import fitz  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

# mypy: disable-error-code="import-untyped"
from testcontainers.core.docker_client import DockerClient  # noqa: E402
from testcontainers.postgres import PostgresContainer  # noqa: E402

from papermind.infrastructure.analysis import DocumentAnalyzer  # noqa: E402
from papermind.infrastructure.database.session import Base, async_session  # noqa: E402
from papermind.infrastructure.extraction import TextExtractor  # noqa: E402
from papermind.infrastructure.logging import configure_testing_logging  # noqa: E402
from papermind.infrastructure.storage import LocalObjectStore  # noqa: E402
from papermind.interfaces.api.dependencies import get_analyzer, get_extractor, get_storage  # noqa: E402
from papermind.interfaces.main import app  # noqa: E402
from papermind.modules.document import models as document_models  # noqa: E402,F401
from papermind.modules.ingestion.services import IngestionService  # noqa: E402
from papermind.modules.reminder import models as reminder_models  # noqa: E402,F401
from papermind.modules.user import models as user_models  # noqa: E402,F401

configure_testing_logging()

ANALYSIS_RESPONSE = """Here is the analysis you asked for.

```json
{
  "summary": "- Electricity invoice for March\\n- Payment due on 2025-06-01",
  "actionItems": [
    {"task": "Pay electricity invoice", "dueDate": "2025-06-01", "priority": "high"},
    {"task": "File the receipt", "dueDate": "whenever", "priority": "urgent"}
  ],
  "tags": ["finance", "invoice", "finance"]
}
```
"""


def is_docker_running() -> bool:
    """Check if Docker daemon is running."""
    try:
        DockerClient()
        return True
    except Exception:
        return False


def make_pdf(*lines: str) -> bytes:
    """Build a one-page PDF holding ``lines`` of text."""
    document = fitz.open()
    page = document.new_page()
    y = 72
    for line in lines or ("Electricity invoice", "Total due by 2025-06-01"):
        page.insert_text((72, y), line)
        y += 20
    data = document.tobytes()
    document.close()
    return data


def make_token(user_id: str, secret: str = TEST_JWT_SECRET, expires_in: int = 3600, **claims: Any) -> str:
    payload: Dict[str, Any] = {"sub": user_id, "aud": "authenticated", "exp": int(time.time()) + expires_in}
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_headers(user_id: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


class FakeMessages:
    """Stands in for ``AsyncAnthropic.messages``; replies are queued per test."""

    def __init__(self) -> None:
        self.replies: List[str] = []
        self.default_reply = ANALYSIS_RESPONSE
        self.error: Optional[BaseException] = None
        self.calls: List[Dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        text = self.replies.pop(0) if self.replies else self.default_reply
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])


class FakeAnthropicClient:
    def __init__(self) -> None:
        self.messages = FakeMessages()
        self.closed = False

    async def close(self) -> None:
        self.closed = True


@pytest.fixture(scope="session")
def pg_container():
    """Create a PostgreSQL container for testing."""
    if not is_docker_running():
        pytest.skip("Docker is required, but not running")

    with PostgresContainer() as pg:
        yield pg


@pytest.fixture
def test_db_url(request, tmp_path) -> str:
    """SQLite file by default; a throw-away PostgreSQL when TEST_DATABASE_BACKEND=postgres."""
    if os.environ.get("TEST_DATABASE_BACKEND", "sqlite") != "postgres":
        return f"sqlite+aiosqlite:///{tmp_path / 'papermind-test.db'}"

    pg_container = request.getfixturevalue("pg_container")
    host = pg_container.get_container_host_ip()
    port = pg_container.get_exposed_port(5432)
    user = getattr(pg_container, "username", "test")
    password = getattr(pg_container, "password", "test")
    db = getattr(pg_container, "dbname", "test")
    return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db}"


@pytest_asyncio.fixture
async def test_db_engine(test_db_url):
    """Create a SQLAlchemy engine with all tables for one test."""
    engine = create_async_engine(test_db_url, echo=False)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(test_db_engine) -> async_sessionmaker:
    return async_sessionmaker(test_db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def anthropic_client() -> FakeAnthropicClient:
    return FakeAnthropicClient()


@pytest.fixture
def analyzer(anthropic_client) -> DocumentAnalyzer:
    return DocumentAnalyzer(client=anthropic_client, timeout=5)


@pytest.fixture
def object_store(tmp_path) -> LocalObjectStore:
    return LocalObjectStore(tmp_path / "objects")


@pytest.fixture
def extractor() -> TextExtractor:
    return TextExtractor(timeout=30)


@pytest.fixture
def ingestion_service(object_store, extractor, analyzer) -> IngestionService:
    return IngestionService(object_store=object_store, extractor=extractor, analyzer=analyzer)


@pytest_asyncio.fixture
async def client(session_factory, object_store, extractor, analyzer):
    """HTTP client whose requests each get their own session on the test database."""
    app.dependency_overrides = {}

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[async_session] = override_get_db
    app.dependency_overrides[get_storage] = lambda: object_store
    app.dependency_overrides[get_extractor] = lambda: extractor
    app.dependency_overrides[get_analyzer] = lambda: analyzer

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}


@pytest.fixture
def pdf_bytes() -> bytes:
    return make_pdf()


@pytest.fixture
def headers_for() -> Callable[[str], Dict[str, str]]:
    return auth_headers


@pytest_asyncio.fixture
async def processed_document(ingestion_service, db_session, pdf_bytes):
    """A document owned by ``alice`` that went through the full pipeline."""
    return await ingestion_service.submit_document(
        user_id="alice",
        data=pdf_bytes,
        mime_type="application/pdf",
        original_filename="march-invoice.pdf",
        db=db_session,
    )
