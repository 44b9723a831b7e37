import asyncio
import queue

import pytest

from src.api.client import WorkerClient, WorkerError
from src.core.dispatcher import MessageDispatcher
from src.core.worker import _STOP, SearchWorker
from src.data.loader import CorpusStore
from src.data.synthetic import SyntheticCorpusProvider
from src.utils.cache import SearchCache
from tests.conftest import FailingProvider, GrowingProvider


@pytest.fixture
def worker():
    worker = SearchWorker(MessageDispatcher(CorpusStore(SyntheticCorpusProvider(100))))
    worker.start(timeout=5)
    yield worker
    worker.stop(timeout=10)


@pytest.fixture
def replies(worker):
    received = queue.Queue()
    worker.add_listener(received.put)
    return received


def test_worker_replies_with_same_id(worker, replies):
    worker.post_message({"type": "SEARCH_PATIENTS", "payload": {"query": "Martin", "filters": {}}, "id": "t1"})

    reply = replies.get(timeout=5)
    assert reply["type"] == "SEARCH_RESULTS"
    assert reply["id"] == "t1"
    assert reply["payload"][0]["name"] == "Martin"


def test_searches_are_answered_in_order(worker, replies):
    for i in range(5):
        worker.post_message({"type": "SEARCH_PATIENTS", "payload": {"query": "a"}, "id": i})

    assert [replies.get(timeout=5)["id"] for _ in range(5)] == [0, 1, 2, 3, 4]


def test_search_overtakes_slow_sync(worker, replies):
    worker.post_message({"type": "SYNC_DATA", "payload": {"delaySeconds": 0.5}, "id": "sync"})
    worker.post_message({"type": "SEARCH_PATIENTS", "payload": {"query": "anne"}, "id": "search"})

    first = replies.get(timeout=5)
    second = replies.get(timeout=5)
    assert first["id"] == "search"
    assert second["id"] == "sync"
    assert second["type"] == "SYNC_COMPLETE"


def test_unknown_type_does_not_stop_worker(worker, replies):
    worker.post_message({"type": "BOGUS", "payload": None, "id": "t2"})
    worker.post_message({"type": "SEARCH_PATIENTS", "payload": {"query": "paul"}, "id": "t3"})

    assert replies.get(timeout=5)["type"] == "ERROR"
    assert replies.get(timeout=5)["id"] == "t3"


def test_failing_listener_is_isolated(worker, replies):
    def broken(_):
        raise RuntimeError("listener bug")

    worker.add_listener(broken)
    worker.post_message({"type": "SEARCH_PATIENTS", "payload": {"query": "julie"}, "id": "x"})
    assert replies.get(timeout=5)["id"] == "x"


def test_stop_waits_for_in_flight_sync():
    worker = SearchWorker(MessageDispatcher(CorpusStore(SyntheticCorpusProvider(10))))
    received = queue.Queue()
    worker.add_listener(received.put)
    worker.start(timeout=5)

    worker.post_message({"type": "SYNC_DATA", "payload": {"delaySeconds": 0.2}, "id": "late"})
    worker.stop(timeout=10)

    assert received.get_nowait()["type"] == "SYNC_COMPLETE"
    assert not worker.is_running


def test_post_before_start_raises():
    worker = SearchWorker(MessageDispatcher(CorpusStore(SyntheticCorpusProvider(10))))
    with pytest.raises(RuntimeError, match="not running"):
        worker.post_message({"type": "SEARCH_PATIENTS", "payload": {"query": "a"}, "id": 1})


def test_start_fails_when_corpus_cannot_load():
    worker = SearchWorker(MessageDispatcher(CorpusStore(FailingProvider())))
    with pytest.raises(RuntimeError, match="remote store unavailable"):
        worker.start(timeout=5)
    assert not worker.is_running


@pytest.mark.asyncio
async def test_client_search(worker):
    client = WorkerClient(worker)
    results = await client.search("Martin")
    assert results[0]["name"] == "Martin"
    assert client.pending_count == 0
    client.close()


@pytest.mark.asyncio
async def test_client_concurrent_requests_are_correlated(worker):
    client = WorkerClient(worker)
    queries = ["jean", "marie", "sophie", "julie"]
    results = await asyncio.gather(*(client.search(q) for q in queries))
    for query, found in zip(queries, results):
        assert all(r["firstName"].lower() == query for r in found)
    client.close()


@pytest.mark.asyncio
async def test_client_raises_on_error_reply(worker):
    client = WorkerClient(worker)
    with pytest.raises(WorkerError, match="Unrecognized message type: BOGUS"):
        await client.request("BOGUS")
    assert client.pending_count == 0
    client.close()


@pytest.mark.asyncio
async def test_client_forward_keeps_caller_id(worker):
    client = WorkerClient(worker)
    reply = await client.forward({"type": "BOGUS", "payload": None, "id": "t2"})
    assert reply["id"] == "t2"
    assert reply["type"] == "ERROR"
    client.close()


@pytest.mark.asyncio
async def test_client_timeout_drops_pending_request(worker):
    client = WorkerClient(worker)
    with pytest.raises(asyncio.TimeoutError):
        await client.request("SYNC_DATA", {"delaySeconds": 0.3}, timeout=0.05)
    assert client.pending_count == 0
    client.close()


@pytest.mark.asyncio
async def test_client_cache_and_sync_invalidation(worker):
    client = WorkerClient(worker, cache=SearchCache())
    first = await client.search("martin")
    second = await client.search("martin")
    assert second is first

    payload = await client.sync({"delaySeconds": 0})
    assert payload["success"] is True
    assert len(client.cache) == 0

    third = await client.search("martin")
    assert third is not first
    assert third == first
    client.close()


class SlowSearchDispatcher(MessageDispatcher):
    async def handle(self, message):
        if message.get("type") == "SEARCH_PATIENTS":
            await asyncio.sleep(0.5)
        return await super().handle(message)


def test_stop_refuses_new_messages(worker):
    worker.stop(timeout=10)
    with pytest.raises(RuntimeError, match="not running"):
        worker.post_message({"type": "SEARCH_PATIENTS", "payload": {"query": "a"}, "id": "after"})


def test_messages_behind_stop_marker_get_error_reply():
    worker = SearchWorker(MessageDispatcher(CorpusStore(SyntheticCorpusProvider(10))))
    received = queue.Queue()
    worker.add_listener(received.put)
    worker.start(timeout=5)

    queued = {"type": "SEARCH_PATIENTS", "payload": {"query": "a"}, "id": "queued"}

    def enqueue_behind_stop():
        worker._inbound.put_nowait(_STOP)
        worker._inbound.put_nowait(queued)

    worker._loop.call_soon_threadsafe(enqueue_behind_stop)
    worker.stop(timeout=10)

    reply = received.get_nowait()
    assert reply["type"] == "ERROR"
    assert reply["id"] == "queued"
    assert "stopped" in reply["error"]


@pytest.mark.asyncio
async def test_forwarded_sync_clears_search_cache():
    worker = SearchWorker(MessageDispatcher(CorpusStore(GrowingProvider())))
    worker.start(timeout=5)
    client = WorkerClient(worker, cache=SearchCache())
    try:
        assert len(await client.search("jean")) == 1

        reply = await client.forward({"type": "SYNC_DATA", "payload": {"delaySeconds": 0}, "id": "s"})
        assert reply["type"] == "SYNC_COMPLETE"
        assert reply["id"] == "s"

        assert len(await client.search("jean")) == 2
    finally:
        client.close()
        worker.stop(timeout=10)


@pytest.mark.asyncio
async def test_search_falls_back_in_process_when_worker_stopped(worker):
    client = WorkerClient(worker)
    expected = await client.search("Martin")
    worker.stop(timeout=10)

    results = await client.search("Martin")

    assert results == expected
    assert results[0]["name"] == "Martin"
    client.close()


@pytest.mark.asyncio
async def test_search_falls_back_in_process_on_timeout():
    worker = SearchWorker(SlowSearchDispatcher(CorpusStore(SyntheticCorpusProvider(100))))
    worker.start(timeout=5)
    client = WorkerClient(worker, timeout=0.05)
    try:
        results = await client.search("jean", {"site": "Delta"})
        assert [r["id"] for r in results] == ["1", "11", "21", "31", "41", "51", "61", "71", "81", "91"]
        assert client.pending_count == 0
    finally:
        client.close()
        worker.stop(timeout=10)


@pytest.mark.asyncio
async def test_error_reply_is_not_retried_in_process(worker):
    client = WorkerClient(worker)
    with pytest.raises(WorkerError):
        await client.search("Martin", limit=0)
    client.close()
