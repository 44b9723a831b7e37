"""Async corpus loading and caching"""
import asyncio
import logging
from typing import Optional, Protocol, Tuple
from ..config.settings import settings
from ..core.models import Patient
from .csv_loader import CsvCorpusProvider
from .synthetic import SyntheticCorpusProvider

logger = logging.getLogger(__name__)


class CorpusProvider(Protocol):
    async def provide(self) -> Tuple[Patient, ...]:
        """Return a complete snapshot of the patient corpus"""
        ...


def build_provider(config=settings) -> CorpusProvider:
    if config.CORPUS_SOURCE == "csv":
        return CsvCorpusProvider(config.CORPUS_CSV_PATH)
    if config.CORPUS_SOURCE == "synthetic":
        return SyntheticCorpusProvider(config.CORPUS_SIZE)
    raise ValueError(f"Unknown corpus source: {config.CORPUS_SOURCE}")


class CorpusStore:
    """Holds the current corpus snapshot.

    A snapshot is an immutable tuple replaced in one assignment, so a search
    that grabbed it never sees a partial refresh. The lock only serializes
    loads and refreshes against each other.
    """

    def __init__(self, provider: CorpusProvider):
        self.provider = provider
        self._patients: Optional[Tuple[Patient, ...]] = None
        self._loading_lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._patients is not None

    async def load(self) -> Tuple[Patient, ...]:
        """Load once; later calls return the cached snapshot"""
        async with self._loading_lock:
            if self._patients is None:
                logger.info("Loading patient corpus...")
                self._patients = await self.provider.provide()
            return self._patients

    async def refresh(self) -> Tuple[Patient, ...]:
        """Fetch a fresh snapshot and swap it in"""
        async with self._loading_lock:
            patients = await self.provider.provide()
            self._patients = patients
            logger.info(f"✅ Corpus refreshed: {len(patients)} patients")
            return patients

    def snapshot(self) -> Tuple[Patient, ...]:
        """Synchronous access to the current corpus"""
        if self._patients is None:
            raise RuntimeError("Corpus not loaded. Call load() first.")
        return self._patients


# Global corpus store instance
corpus_store = CorpusStore(build_provider())
