"""Deterministic synthetic patient corpus"""
import logging
from typing import Tuple
from ..core.models import Patient

logger = logging.getLogger(__name__)

FIRST_NAMES = ["Jean", "Marie", "Pierre", "Sophie", "Michel", "Claire", "Paul", "Anne", "Jacques", "Julie"]
LAST_NAMES = ["Martin", "Dubois", "Moreau", "Bernard", "Roux", "Leroy", "Petit", "Fournier", "Garnier", "Lambert"]
SITES = ["Delta", "Waterloo", "Saint-Pierre", "Horta", "Nivelles"]
FLOORS = ["Chirurgie", "Médecine", "Réa", "Consultation", "Radiologie"]


def build_patient(index: int) -> Patient:
    """Derive every field of one patient from its index"""
    year = 1950 + (index % 50)
    month = (index % 12) + 1
    day = (index % 28) + 1

    return Patient(
        id=str(index + 1),
        name=LAST_NAMES[(index // len(FIRST_NAMES)) % len(LAST_NAMES)],
        first_name=FIRST_NAMES[index % len(FIRST_NAMES)],
        room=str(100 + index),
        bed=str((index % 4) + 1),
        floor=FLOORS[index % len(FLOORS)],
        site=SITES[index % len(SITES)],
        birth_date=f"{year}-{month:02d}-{day:02d}",
        social_security_number=f"{year % 100:02d}{month:02d}{day:02d}{index % 1000:03d}",
    )


def generate_patients(size: int = 100) -> Tuple[Patient, ...]:
    """Same size, same corpus: no randomness, no external state"""
    return tuple(build_patient(i) for i in range(size))


class SyntheticCorpusProvider:
    def __init__(self, size: int = 100):
        self.size = size

    async def provide(self) -> Tuple[Patient, ...]:
        patients = generate_patients(self.size)
        logger.info(f"✅ Synthetic corpus: {len(patients)} patients")
        return patients
