"""
Dependency injection container.

Holds the components that live for the whole application (vault client,
sync engine, analysis trigger, stores, rate limiter) and the FastAPI
factories that build request-scoped services around them.

Dependencies: casevault.configs, casevault.application, casevault.boundary, casevault.core
System role: DI container for service injection
"""

from functools import partial

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from casevault.application.services import (
    AnalysisService,
    CaseService,
    DocumentService,
    SearchCacheManager,
    run_case_analysis,
)
from casevault.boundary.db import get_async_db, get_async_session_factory
from casevault.boundary.llm.summarizer import LLMSummarizer, build_chat_model
from casevault.boundary.vault.client import VaultClient
from casevault.configs import Settings, get_settings
from casevault.core.ingestion import AnalysisTrigger, IngestionSyncEngine
from casevault.core.rate_limiter import RateLimiter
from casevault.core.scheduling import AsyncioScheduler, Clock, Scheduler, SystemClock
from casevault.core.stores import KeyValueStore, create_key_value_store


class ServiceCache:
    """
    Container for application-lifetime component instances.

    Each component is built on first access. Tests pass ready-made fakes
    through the constructor instead.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        vault_client: VaultClient | None = None,
        store: KeyValueStore | None = None,
        scheduler: Scheduler | None = None,
        clock: Clock | None = None,
        summarizer: LLMSummarizer | None = None,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.clock = clock or SystemClock()
        self._vault_client = vault_client
        self._store = store
        self._scheduler = scheduler
        self._summarizer = summarizer
        self._session_factory = session_factory
        self._rate_limiter = rate_limiter
        self._analysis_trigger: AnalysisTrigger | None = None
        self._sync_engine: IngestionSyncEngine | None = None

    @property
    def vault_client(self) -> VaultClient:
        if self._vault_client is None:
            vault = self.settings.vault
            self._vault_client = VaultClient(
                base_url=vault.api_base_url,
                api_key=vault.api_key,
                timeout=vault.timeout_seconds,
            )
        return self._vault_client

    @property
    def store(self) -> KeyValueStore:
        if self._store is None:
            cache = self.settings.cache
            self._store = create_key_value_store(cache.backend, cache.redis_url, cache.key_prefix)
        return self._store

    @property
    def scheduler(self) -> Scheduler:
        if self._scheduler is None:
            self._scheduler = AsyncioScheduler()
        return self._scheduler

    @property
    def summarizer(self) -> LLMSummarizer:
        if self._summarizer is None:
            self._summarizer = LLMSummarizer(build_chat_model(self.settings.llm))
        return self._summarizer

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = get_async_session_factory()
        return self._session_factory

    @property
    def rate_limiter(self) -> RateLimiter:
        if self._rate_limiter is None:
            self._rate_limiter = RateLimiter(self.store)
        return self._rate_limiter

    @property
    def analysis_trigger(self) -> AnalysisTrigger:
        """Debounced analysis trigger; its job opens a fresh session per run."""
        if self._analysis_trigger is None:
            ingestion = self.settings.ingestion
            job = partial(
                _run_analysis_job,
                cache=self,
                max_documents=ingestion.analysis_max_documents,
                sample_chars=ingestion.analysis_sample_chars,
            )
            self._analysis_trigger = AnalysisTrigger(
                scheduler=self.scheduler,
                job=job,
                delay=ingestion.analysis_debounce_seconds,
            )
        return self._analysis_trigger

    @property
    def sync_engine(self) -> IngestionSyncEngine:
        if self._sync_engine is None:
            ingestion = self.settings.ingestion
            self._sync_engine = IngestionSyncEngine(
                vault_client=self.vault_client,
                store=self.store,
                analysis_trigger=self.analysis_trigger,
                clock=self.clock,
                active_window=ingestion.sync_debounce_active_seconds,
                idle_window=ingestion.sync_debounce_idle_seconds,
                cache_ttl=ingestion.sync_cache_ttl_seconds,
            )
        return self._sync_engine

    async def aclose(self) -> None:
        """Cancel timers and release network resources."""
        if self._analysis_trigger is not None:
            self._analysis_trigger.shutdown()
        if isinstance(self._scheduler, AsyncioScheduler):
            await self._scheduler.shutdown()
        if self._vault_client is not None:
            await self._vault_client.aclose()
        if self._store is not None and hasattr(self._store, "close"):
            await self._store.close()
        self.clear()

    def clear(self) -> None:
        """Drop all cached instances."""
        self._vault_client = None
        self._store = None
        self._scheduler = None
        self._summarizer = None
        self._session_factory = None
        self._rate_limiter = None
        self._analysis_trigger = None
        self._sync_engine = None


async def _run_analysis_job(case_id, cache: ServiceCache, max_documents: int, sample_chars: int):
    return await run_case_analysis(
        case_id,
        session_factory=cache.session_factory,
        vault_client=cache.vault_client,
        summarizer=cache.summarizer,
        max_documents=max_documents,
        sample_chars=sample_chars,
    )


# Global service cache
_service_cache: ServiceCache | None = None


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    global _service_cache
    if _service_cache is None:
        _service_cache = ServiceCache()
    return _service_cache


def get_case_service(
    db: AsyncSession = Depends(get_async_db),
    cache: ServiceCache = Depends(get_service_cache),
) -> CaseService:
    return CaseService(db=db, vault_client=cache.vault_client)


def get_document_service(
    db: AsyncSession = Depends(get_async_db),
    cache: ServiceCache = Depends(get_service_cache),
) -> DocumentService:
    """
    Get document service instance.

    Args:
        db: Async database session (injected via Depends)
        cache: Application-lifetime components

    Returns:
        DocumentService: Service wired to the shared sync engine
    """
    return DocumentService(
        db=db,
        vault_client=cache.vault_client,
        sync_engine=cache.sync_engine,
        max_batch_size=cache.settings.ingestion.max_batch_size,
    )


def get_search_service(
    db: AsyncSession = Depends(get_async_db),
    cache: ServiceCache = Depends(get_service_cache),
) -> SearchCacheManager:
    return SearchCacheManager(
        db=db,
        vault_client=cache.vault_client,
        summarizer=cache.summarizer,
        summarize_top_n=cache.settings.search.summarize_top_n,
    )


def get_analysis_service(
    db: AsyncSession = Depends(get_async_db),
    cache: ServiceCache = Depends(get_service_cache),
) -> AnalysisService:
    ingestion = cache.settings.ingestion
    return AnalysisService(
        db=db,
        vault_client=cache.vault_client,
        summarizer=cache.summarizer,
        max_documents=ingestion.analysis_max_documents,
        sample_chars=ingestion.analysis_sample_chars,
    )
