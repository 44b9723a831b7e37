"""Pydantic models for Patient Search Engine"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Optional


class MessageType(str, Enum):
    SEARCH_PATIENTS = "SEARCH_PATIENTS"
    SYNC_DATA = "SYNC_DATA"
    SEARCH_RESULTS = "SEARCH_RESULTS"
    SYNC_COMPLETE = "SYNC_COMPLETE"
    ERROR = "ERROR"


class Patient(BaseModel):
    """Read-only patient record; wire names are camelCase"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    first_name: str = Field(alias="firstName")
    room: str
    bed: str
    floor: str
    site: str
    birth_date: str = Field(alias="birthDate")
    social_security_number: str = Field(alias="socialSecurityNumber")


class SearchFilters(BaseModel):
    site: Optional[str] = None
    floor: Optional[str] = None


class SearchRequest(BaseModel):
    query: str
    filters: SearchFilters = Field(default_factory=SearchFilters)
    limit: Optional[int] = Field(default=None, gt=0)

    @field_validator("filters", mode="before")
    @classmethod
    def _null_filters(cls, value):
        return {} if value is None else value


class ScoredResult(Patient):
    relevance_score: int = Field(alias="relevanceScore", gt=0)
    matched_fields: List[str] = Field(alias="matchedFields")


class SyncConfig(BaseModel):
    """Opaque to the dispatcher; only the sync task reads it"""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    delay_seconds: Optional[float] = Field(default=None, alias="delaySeconds", ge=0)
    regenerate: bool = True


class SyncResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    patient_count: int = Field(default=0, alias="patientCount")
    duration_seconds: float = Field(default=0.0, alias="durationSeconds")


class RequestMessage(BaseModel):
    type: Any = None
    payload: Any = None
    id: Any = None


class ResponseMessage(BaseModel):
    type: MessageType
    payload: Any = None
    id: Any = None
    error: Optional[str] = None

    def to_message(self) -> Dict[str, Any]:
        """Plain dict for the channel; `error` only on ERROR replies"""
        message = {"type": self.type.value, "payload": self.payload, "id": self.id}
        if self.error is not None:
            message["error"] = self.error
        return message


class SearchResponse(BaseModel):
    results: List[ScoredResult]
    total: int


class CorpusStats(BaseModel):
    total: int
    sites: Dict[str, int]
    floors: Dict[str, int]
