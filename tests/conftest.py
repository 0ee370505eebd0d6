"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory async database, manual clock and scheduler fakes,
vault client and summarizer mocks, case/document factories
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import tempfile
import uuid
from pathlib import Path
from typing import Awaitable, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from casevault.boundary.vault.schemas import IngestionJob, StorageTarget, Vault
from casevault.core.status_priority import IngestionStatus


class ManualClock:
    """Clock whose time only moves when a test says so."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def now(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class _ManualHandle:
    def __init__(self, due: float, callback: Callable[[], Awaitable[None]]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Scheduler that runs callbacks only from ``advance``.

    Shares a ManualClock so debounce windows and timers agree on time.
    """

    def __init__(self, clock: ManualClock) -> None:
        self.clock = clock
        self.handles: list[_ManualHandle] = []

    def call_later(self, delay: float, callback: Callable[[], Awaitable[None]]) -> _ManualHandle:
        handle = _ManualHandle(self.clock.now() + delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self) -> list[_ManualHandle]:
        return [h for h in self.handles if not h.cancelled]

    async def advance(self, seconds: float) -> None:
        """Move time forward and run every callback that came due, in due order."""
        self.clock.advance(seconds)
        due = sorted(
            (h for h in self.pending if h.due <= self.clock.now()),
            key=lambda h: h.due,
        )
        for handle in due:
            self.handles.remove(handle)
            await handle.callback()


@pytest.fixture
async def test_async_db():
    """
    Create in-memory SQLite async database for testing.

    Yields:
        AsyncSession: Test database session with cleanup (lazy imported to avoid settings issues)
    """
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
    from sqlalchemy.pool import StaticPool

    import casevault.boundary.db.models  # noqa: F401
    from casevault.boundary.db.base import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def manual_clock() -> ManualClock:
    """Provide a clock starting at t=1000s."""
    return ManualClock()


@pytest.fixture
def manual_scheduler(manual_clock: ManualClock) -> ManualScheduler:
    """Provide a scheduler driven by the manual clock."""
    return ManualScheduler(manual_clock)


@pytest.fixture
def mock_vault_client() -> AsyncMock:
    """
    Create mock VaultClient for testing.

    Returns:
        AsyncMock: Vault client whose calls succeed with plausible payloads
    """
    client = AsyncMock()
    client.create_vault = AsyncMock(return_value=Vault(id="vault-1", name="Test Case"))
    client.delete_vault = AsyncMock(return_value=None)
    client.create_storage_target = AsyncMock(
        side_effect=lambda vault_id, filename, content_type: StorageTarget(
            object_id=f"obj-{filename}",
            upload_url=f"https://storage.test/{filename}?sig=abc",
            expires_in=3600,
        )
    )
    client.trigger_ingestion = AsyncMock(
        side_effect=lambda vault_id, object_id: IngestionJob(
            object_id=object_id, workflow_id=f"wf-{object_id}", status="processing"
        )
    )
    client.list_objects = AsyncMock(return_value=[])
    client.delete_object = AsyncMock(return_value=None)
    return client


@pytest.fixture
def mock_summarizer() -> MagicMock:
    """
    Create mock LLMSummarizer for testing.

    Returns:
        MagicMock: Summarizer with async summary methods
    """
    summarizer = MagicMock()
    summarizer.summarize_search = AsyncMock(return_value="Overall findings.")
    summarizer.summarize_chunk = AsyncMock(return_value="Chunk relevance.")
    summarizer.analyze_case = AsyncMock()
    return summarizer


@pytest.fixture
def make_case(test_async_db):
    """Factory inserting a case row."""
    from casevault.boundary.db.CRUD.case_crud import case_crud

    async def _make(name: str = "Smith v. Jones", vault_id: str = "vault-1"):
        case = await case_crud.create(test_async_db, name=name, vault_id=vault_id, tags=[])
        await test_async_db.commit()
        return case

    return _make


@pytest.fixture
def make_document(test_async_db):
    """Factory inserting a document row for a case."""
    from casevault.boundary.db.CRUD.document_crud import document_crud

    async def _make(
        case_id: uuid.UUID,
        filename: str = "exhibit.pdf",
        status: IngestionStatus = IngestionStatus.PENDING,
        object_id: str | None = None,
        **fields,
    ):
        document = await document_crud.create(
            test_async_db,
            case_id=case_id,
            object_id=object_id or f"obj-{filename}",
            filename=filename,
            content_type="application/pdf",
            ingestion_status=status,
            **fields,
        )
        await test_async_db.commit()
        return document

    return _make


@pytest.fixture
def temp_pdf_file():
    """
    Create a temporary PDF-like file for testing.

    Yields:
        Path: Path to temporary PDF file
    """
    with tempfile.NamedTemporaryFile(suffix=".pdf", delete=False) as f:
        temp_path = Path(f.name)
        f.write(b"%PDF-1.4\n")
        f.write(b"1 0 obj\n<< >>\nendobj\n")

    yield temp_path

    if temp_path.exists():
        temp_path.unlink()
