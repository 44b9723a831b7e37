"""Background corpus synchronisation"""
import asyncio
import logging
import random
import time
from typing import Optional
from ..config.settings import settings
from ..data.loader import CorpusStore
from .models import SyncConfig, SyncResult

logger = logging.getLogger(__name__)


def sync_delay(config: SyncConfig, rng: Optional[random.Random] = None) -> float:
    """Simulated remote round-trip, unless the caller pins it"""
    if config.delay_seconds is not None:
        return config.delay_seconds
    rng = rng or random
    return rng.uniform(settings.SYNC_MIN_DELAY_SECONDS, settings.SYNC_MAX_DELAY_SECONDS)


async def sync_patient_data(config: SyncConfig, store: CorpusStore) -> SyncResult:
    """Refresh the corpus out of band and return once it has settled"""
    started = time.monotonic()
    delay = sync_delay(config)
    logger.info(f"Background patient sync started (simulated {delay:.2f}s)")

    await asyncio.sleep(delay)

    if config.regenerate:
        patients = await store.refresh()
    else:
        patients = await store.load()

    duration = time.monotonic() - started
    logger.info(f"✅ Background patient sync complete in {duration:.2f}s")
    return SyncResult(success=True, patient_count=len(patients), duration_seconds=round(duration, 3))
