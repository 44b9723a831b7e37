"""Caller-side correlation of worker requests and replies"""
import asyncio
import logging
import threading
import uuid
from typing import Any, Dict, List, Optional
from ..config.settings import settings
from ..core.models import MessageType, SearchRequest
from ..core.ranking import search_patients
from ..core.worker import SearchWorker
from ..utils.cache import SearchCache

logger = logging.getLogger(__name__)


class WorkerError(Exception):
    """ERROR reply from the worker; terminal for that request id"""

    def __init__(self, message: str, message_id: str):
        super().__init__(message)
        self.message_id = message_id


class WorkerClient:
    """Posts requests to a SearchWorker and awaits the reply with the same id.

    Pending requests live in a correlation table keyed by id. Replies can
    arrive in any order; a reply whose id is no longer pending (timed out or
    never sent) is dropped. There is no retry.
    """

    def __init__(self, worker: SearchWorker, cache: Optional[SearchCache] = None, timeout: Optional[float] = None):
        self.worker = worker
        self.cache = cache
        self.timeout = timeout or settings.REQUEST_TIMEOUT_SECONDS
        self._pending: Dict[str, asyncio.Future] = {}
        self._lock = threading.Lock()
        worker.add_listener(self._on_message)

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def close(self) -> None:
        self.worker.remove_listener(self._on_message)

    async def _send(self, message_type: Any, payload: Any, timeout: Optional[float]) -> Dict[str, Any]:
        message_id = uuid.uuid4().hex
        future = asyncio.get_running_loop().create_future()
        with self._lock:
            self._pending[message_id] = future

        try:
            self.worker.post_message({"type": message_type, "payload": payload, "id": message_id})
            return await asyncio.wait_for(future, timeout or self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"⏱️ No reply for {message_type} request {message_id}")
            raise
        finally:
            with self._lock:
                self._pending.pop(message_id, None)

    async def request(self, message_type: str, payload: Any = None, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Round-trip one message; ERROR replies raise WorkerError"""
        response = await self._send(message_type, payload, timeout)
        if response.get("type") == MessageType.ERROR.value:
            raise WorkerError(response.get("error") or "Unknown worker error", response.get("id"))
        return response

    async def forward(self, message: Dict[str, Any], timeout: Optional[float] = None) -> Dict[str, Any]:
        """Relay a caller-built envelope and return the raw reply under the caller's id"""
        if message.get("type") == MessageType.SYNC_DATA.value:
            timeout = timeout or self.timeout + settings.SYNC_MAX_DELAY_SECONDS
        response = await self._send(message.get("type"), message.get("payload"), timeout)
        if response.get("type") == MessageType.SYNC_COMPLETE.value and self.cache is not None:
            self.cache.clear()
        return {**response, "id": message.get("id")}

    async def search(self, query: str, filters: Optional[Dict[str, Any]] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        use_cache = self.cache is not None and limit is None
        if use_cache:
            cached = self.cache.get(query, filters)
            if cached is not None:
                logger.info(f"Cache hit for query '{query}'")
                return cached

        if not self.worker.is_running:
            logger.warning(f"⚠️ Search worker not running, searching in process for '{query}'")
            return self.search_in_process(query, filters, limit)

        payload = {"query": query, "filters": filters or {}}
        if limit is not None:
            payload["limit"] = limit
        try:
            response = await self.request(MessageType.SEARCH_PATIENTS.value, payload)
        except asyncio.TimeoutError:
            logger.warning(f"⚠️ Search worker timed out, searching in process for '{query}'")
            return self.search_in_process(query, filters, limit)

        results = response["payload"]
        if use_cache:
            self.cache.set(query, filters, results)
        return results

    def search_in_process(self, query: str, filters: Optional[Dict[str, Any]] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Same pipeline on the caller side, over the worker's current snapshot"""
        request = SearchRequest.model_validate({"query": query, "filters": filters, "limit": limit})
        corpus = self.worker.dispatcher.store.snapshot()
        results = search_patients(corpus, request.query, request.filters, request.limit or settings.DEFAULT_SEARCH_LIMIT)
        return [result.model_dump(by_alias=True) for result in results]

    async def sync(self, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        # sync replies only after the refresh settled
        timeout = self.timeout + settings.SYNC_MAX_DELAY_SECONDS
        if config and config.get("delaySeconds") is not None:
            timeout = self.timeout + float(config["delaySeconds"])

        response = await self.request(MessageType.SYNC_DATA.value, config or {}, timeout=timeout)
        if self.cache is not None:
            self.cache.clear()
        return response["payload"]

    def _on_message(self, response: Dict[str, Any]) -> None:
        # Runs on the worker thread
        message_id = response.get("id")
        with self._lock:
            future = self._pending.get(message_id)
        if future is None:
            logger.warning(f"Dropping reply for unknown request {message_id!r}")
            return
        future.get_loop().call_soon_threadsafe(self._resolve, future, response)

    @staticmethod
    def _resolve(future: asyncio.Future, response: Dict[str, Any]) -> None:
        if not future.done():
            future.set_result(response)
