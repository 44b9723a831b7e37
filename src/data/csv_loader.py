"""CSV patient corpus provider"""
import asyncio
import logging
import polars as pl
from typing import Tuple
from ..core.models import Patient

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = [
    "id", "name", "firstName", "room", "bed", "floor", "site", "birthDate", "socialSecurityNumber"
]

# Headers of the legacy patient export
LEGACY_COLUMNS = {
    "pat_id": "id",
    "lastname": "name",
    "firstname": "firstName",
    "birth_date": "birthDate",
    "social_security_number": "socialSecurityNumber",
}


def read_patient_csv(path: str) -> pl.DataFrame:
    """Read every column as text; missing values become empty strings"""
    df = pl.read_csv(path, infer_schema_length=0)
    renames = {old: new for old, new in LEGACY_COLUMNS.items() if old in df.columns and new not in df.columns}
    if renames:
        df = df.rename(renames)

    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"Patient CSV {path} is missing columns: {', '.join(missing)}")

    return df.select(REQUIRED_COLUMNS).fill_null("")


class CsvCorpusProvider:
    def __init__(self, path: str):
        self.path = path

    async def provide(self) -> Tuple[Patient, ...]:
        df = await asyncio.to_thread(read_patient_csv, self.path)
        patients = tuple(Patient.model_validate(row) for row in df.to_dicts())
        logger.info(f"✅ CSV corpus {self.path}: {len(patients)} patients")
        return patients
