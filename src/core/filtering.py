"""Structural pre-filtering of the patient corpus"""
import logging
from typing import Iterable, List
from .models import Patient, SearchFilters

logger = logging.getLogger(__name__)


def passes_filters(patient: Patient, filters: SearchFilters) -> bool:
    """Exact, case-sensitive site/floor match; an unset filter keeps everyone"""
    if filters.site and patient.site != filters.site:
        return False
    if filters.floor and patient.floor != filters.floor:
        return False
    return True


def filter_patients(patients: Iterable[Patient], filters: SearchFilters) -> List[Patient]:
    """Keep corpus order, drop patients outside the requested site/floor"""
    patients = list(patients)
    if not filters.site and not filters.floor:
        return patients

    before_count = len(patients)
    kept = [patient for patient in patients if passes_filters(patient, filters)]
    logger.info(f"Site/floor filter (site={filters.site!r}, floor={filters.floor!r}): {before_count} → {len(kept)}")
    return kept
