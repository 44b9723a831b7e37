"""Background worker hosting the message dispatcher"""
import asyncio
import logging
import threading
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional
from .dispatcher import MessageDispatcher, error_response

logger = logging.getLogger(__name__)

Listener = Callable[[Dict[str, Any]], None]

_STOP = object()


class SearchWorker:
    """Runs the dispatcher on its own thread and event loop.

    Messages are read one at a time from an inbound queue. A search is
    handled to completion before the next message is read; deferred messages
    (sync) run as tasks and reply when they finish, so replies are not
    guaranteed to come back in send order.
    """

    def __init__(self, dispatcher: MessageDispatcher, name: str = "patient-search-worker"):
        self.dispatcher = dispatcher
        self.name = name
        self._listeners: List[Listener] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._inbound: Optional[asyncio.Queue] = None
        self._thread: Optional[threading.Thread] = None
        self._ready = threading.Event()
        self._startup_error: Optional[BaseException] = None
        self._tasks: set = set()

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and self._ready.is_set()

    def start(self, timeout: Optional[float] = None) -> None:
        """Start the thread and block until the corpus is loaded"""
        if self._thread is not None and self._thread.is_alive():
            return

        self._ready.clear()
        self._startup_error = None
        self._thread = threading.Thread(target=self._run_loop, name=self.name, daemon=True)
        self._thread.start()

        if not self._ready.wait(timeout):
            raise TimeoutError(f"{self.name} did not start within {timeout}s")
        if self._startup_error is not None:
            self._thread.join()
            self._thread = None
            raise RuntimeError(f"{self.name} failed to start: {self._startup_error}") from self._startup_error

        logger.info(f"🚀 {self.name} started")

    def post_message(self, message: Any) -> None:
        """Thread-safe; the reply arrives later through the listeners"""
        if not self.is_running or self._loop is None:
            raise RuntimeError(f"{self.name} is not running")
        self._loop.call_soon_threadsafe(self._inbound.put_nowait, message)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Finish queued and in-flight messages, then join the thread"""
        if self._thread is None:
            return
        # refuse new posts before the stop marker is queued
        self._ready.clear()
        if self._loop is not None and self._loop.is_running():
            self._loop.call_soon_threadsafe(self._inbound.put_nowait, _STOP)
        self._thread.join(timeout)
        self._thread = None
        logger.info(f"{self.name} stopped")

    def _run_loop(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        try:
            loop.run_until_complete(self._serve())
        finally:
            self._loop = None
            loop.close()

    async def _serve(self) -> None:
        self._inbound = asyncio.Queue()
        try:
            await self.dispatcher.store.load()
        except Exception as e:
            logger.error(f"❌ Could not load patient corpus: {e}")
            self._startup_error = e
            self._ready.set()
            return
        self._ready.set()

        while True:
            message = await self._inbound.get()
            if message is _STOP:
                break
            if self.dispatcher.is_deferred(message):
                task = asyncio.create_task(self._handle(message))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)
            else:
                await self._handle(message)

        self._ready.clear()
        self._reject_leftovers()
        if self._tasks:
            await asyncio.gather(*self._tasks)

    def _reject_leftovers(self) -> None:
        """Answer anything queued behind the stop marker"""
        while not self._inbound.empty():
            message = self._inbound.get_nowait()
            if message is _STOP:
                continue
            message_id = message.get("id") if isinstance(message, Mapping) else None
            logger.warning(f"{self.name} stopped before handling message {message_id!r}")
            self._emit(error_response(message_id, f"{self.name} stopped before handling the message"))

    async def _handle(self, message: Any) -> None:
        response = await self.dispatcher.handle(message)
        self._emit(response)

    def _emit(self, response: Dict[str, Any]) -> None:
        for listener in list(self._listeners):
            try:
                listener(response)
            except Exception as e:
                logger.error(f"Listener failed for reply {response.get('id')!r}: {e}")
