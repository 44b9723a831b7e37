"""Message dispatcher for the patient search worker"""
import logging
from collections.abc import Mapping
from typing import Any, Dict, List
from ..config.settings import settings
from ..data.loader import CorpusStore
from .models import MessageType, ResponseMessage, SearchRequest, SyncConfig
from .ranking import search_patients
from .sync import sync_patient_data

logger = logging.getLogger(__name__)


def error_response(message_id: Any, error: str) -> Dict[str, Any]:
    return ResponseMessage(type=MessageType.ERROR, payload=None, id=message_id, error=error).to_message()


class MessageDispatcher:
    """Turns one request envelope into one correlated response envelope.

    `handle` never raises: unknown types and any failure while handling a
    known type come back as ERROR replies carrying the request id.
    """

    def __init__(self, store: CorpusStore):
        self.store = store

    @staticmethod
    def is_deferred(message: Any) -> bool:
        """Messages that must not hold up the inbound channel"""
        return isinstance(message, Mapping) and message.get("type") == MessageType.SYNC_DATA.value

    async def handle(self, message: Any) -> Dict[str, Any]:
        message_id = message.get("id") if isinstance(message, Mapping) else None
        try:
            if not isinstance(message, Mapping):
                raise TypeError(f"Message must be an object, got {type(message).__name__}")

            message_type = message.get("type")
            payload = message.get("payload")

            if message_type == MessageType.SEARCH_PATIENTS.value:
                results = self.search(payload)
                return ResponseMessage(
                    type=MessageType.SEARCH_RESULTS, payload=results, id=message_id
                ).to_message()

            if message_type == MessageType.SYNC_DATA.value:
                result = await sync_patient_data(SyncConfig.model_validate(payload or {}), self.store)
                return ResponseMessage(
                    type=MessageType.SYNC_COMPLETE,
                    payload=result.model_dump(by_alias=True),
                    id=message_id,
                ).to_message()

            logger.warning(f"Unrecognized message type: {message_type}")
            return error_response(message_id, f"Unrecognized message type: {message_type}")

        except Exception as e:
            logger.error(f"Error handling message {message_id!r}: {e}")
            return error_response(message_id, str(e))

    def search(self, payload: Any) -> List[Dict[str, Any]]:
        request = SearchRequest.model_validate(payload)
        corpus = self.store.snapshot()
        limit = request.limit or settings.DEFAULT_SEARCH_LIMIT
        results = search_patients(corpus, request.query, request.filters, limit)
        return [result.model_dump(by_alias=True) for result in results]
