"""FastAPI handlers for patient search"""
import asyncio
import logging
from typing import Any, Dict
from fastapi import FastAPI, HTTPException, Request
from ..core.models import CorpusStats, RequestMessage, SearchRequest, SearchResponse, SyncConfig, SyncResult
from ..core.dispatcher import MessageDispatcher
from ..core.worker import SearchWorker
from ..data.loader import corpus_store
from ..utils.cache import SearchCache
from ..utils.stats import corpus_stats
from ..config.settings import settings
from .client import WorkerClient, WorkerError

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(title=settings.API_TITLE, version=settings.API_VERSION)


@app.on_event("startup")
async def startup_event():
    """Start the search worker and load the corpus"""
    logger.info("🚀 Starting Patient Search Engine...")

    worker = SearchWorker(MessageDispatcher(corpus_store))
    await asyncio.to_thread(worker.start)

    app.state.worker = worker
    app.state.client = WorkerClient(
        worker,
        cache=SearchCache(settings.SEARCH_CACHE_TTL_SECONDS, settings.SEARCH_CACHE_SIZE),
    )

    logger.info("✅ API startup complete")


@app.on_event("shutdown")
async def shutdown_event():
    client = getattr(app.state, "client", None)
    if client is not None:
        client.close()
    worker = getattr(app.state, "worker", None)
    if worker is not None:
        await asyncio.to_thread(worker.stop)


def _client(request: Request) -> WorkerClient:
    client = getattr(request.app.state, "client", None)
    if client is None:
        raise HTTPException(status_code=503, detail="Search worker is not running")
    return client


@app.post("/search", response_model=SearchResponse)
async def search(body: SearchRequest, request: Request):
    """Ranked patient search"""
    try:
        results = await _client(request).search(
            body.query,
            body.filters.model_dump(exclude_none=True),
            body.limit,
        )
        return SearchResponse(results=results, total=len(results))
    except WorkerError as e:
        logger.error(f"Error processing search: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except RuntimeError as e:
        logger.error(f"Search unavailable: {e}")
        raise HTTPException(status_code=503, detail=str(e))


@app.post("/sync", response_model=SyncResult)
async def sync(body: SyncConfig, request: Request):
    """Refresh the corpus; returns once the refresh has completed"""
    try:
        payload = await _client(request).sync(body.model_dump(by_alias=True, exclude_none=True))
        return SyncResult.model_validate(payload)
    except asyncio.TimeoutError:
        raise HTTPException(status_code=504, detail="Sync timed out")
    except WorkerError as e:
        logger.error(f"Error during sync: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/messages")
async def post_message(message: RequestMessage, request: Request) -> Dict[str, Any]:
    """Raw envelope in, correlated envelope out"""
    try:
        return await _client(request).forward(message.model_dump())
    except asyncio.TimeoutError:
        raise HTTPException(status_code=504, detail="No reply from search worker")


@app.get("/stats", response_model=CorpusStats)
def get_stats():
    """Patient counts per site and floor"""
    try:
        return corpus_stats(corpus_store.snapshot())
    except RuntimeError as e:
        logger.error(f"Error getting stats: {e}")
        raise HTTPException(status_code=503, detail=str(e))


@app.get("/")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "Patient Search Engine is running"}
