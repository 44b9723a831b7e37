import asyncio
import pytest

from src.core.dispatcher import MessageDispatcher
from src.core.models import Patient
from src.data.loader import CorpusStore
from src.data.synthetic import SyntheticCorpusProvider, generate_patients


class CountingProvider:
    """Synthetic provider that records how often it was asked"""

    def __init__(self, size: int = 100):
        self.size = size
        self.calls = 0

    async def provide(self):
        self.calls += 1
        return generate_patients(self.size)


class FailingProvider:
    def __init__(self, message: str = "remote store unavailable"):
        self.message = message

    async def provide(self):
        raise ConnectionError(self.message)


def make_patient(**overrides) -> Patient:
    fields = {
        "id": "p1",
        "name": "Dubois",
        "firstName": "Claire",
        "room": "305",
        "bed": "2",
        "floor": "Chirurgie",
        "site": "Horta",
        "birthDate": "1982-07-14",
        "socialSecurityNumber": "820714123",
    }
    fields.update(overrides)
    return Patient.model_validate(fields)


@pytest.fixture
def corpus():
    return generate_patients(100)


@pytest.fixture
def store() -> CorpusStore:
    """
    Store over the default 100-patient synthetic corpus, already loaded.
    """
    store = CorpusStore(SyntheticCorpusProvider(100))
    asyncio.run(store.load())
    return store


@pytest.fixture
def dispatcher(store) -> MessageDispatcher:
    return MessageDispatcher(store)


class GrowingProvider:
    """Each call adds ten patients, so a refresh is visible in results"""

    def __init__(self):
        self.calls = 0

    async def provide(self):
        self.calls += 1
        return generate_patients(10 * self.calls)
