"""Relevance scoring for patient search"""
from typing import List, Tuple
from .models import Patient

# Points per matched field
NAME_PREFIX_POINTS = 100
NAME_CONTAINS_POINTS = 80
ROOM_POINTS = 90
NISS_POINTS = 95
BIRTH_DATE_POINTS = 70
LOCATION_POINTS = 60

MATCHABLE_FIELDS = ("name", "firstName", "room", "niss", "birthDate", "location")


def normalize_query(query: str) -> str:
    """Lower-case and trim a raw query"""
    return query.lower().strip()


def _name_points(value: str, term: str) -> int:
    value = value.lower()
    if term not in value:
        return 0
    return NAME_PREFIX_POINTS if value.startswith(term) else NAME_CONTAINS_POINTS


def score_patient(term: str, patient: Patient) -> Tuple[int, List[str]]:
    """Score one patient against an already normalized term.

    Every rule is evaluated and the points are summed, so a patient can match
    several fields. Room, NISS and birth date are compared against the raw
    values; name, first name, site and floor are compared lower-cased.
    Matched fields come back in a fixed order.
    """
    score = 0
    matched_fields = []

    # === NAME / FIRST NAME ===
    pts = _name_points(patient.name, term)
    if pts:
        matched_fields.append("name")
        score += pts

    pts = _name_points(patient.first_name, term)
    if pts:
        matched_fields.append("firstName")
        score += pts

    # === ROOM / NISS / BIRTH DATE (raw values) ===
    if term in patient.room:
        matched_fields.append("room")
        score += ROOM_POINTS

    if term in patient.social_security_number:
        matched_fields.append("niss")
        score += NISS_POINTS

    if term in patient.birth_date:
        matched_fields.append("birthDate")
        score += BIRTH_DATE_POINTS

    # === LOCATION (counted once) ===
    if term in patient.site.lower() or term in patient.floor.lower():
        matched_fields.append("location")
        score += LOCATION_POINTS

    return score, matched_fields
