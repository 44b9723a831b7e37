"""Ranking and the search pipeline"""
import logging
from typing import Iterable, List, Optional
from .filtering import filter_patients
from .models import Patient, ScoredResult, SearchFilters
from .scoring import normalize_query, score_patient

logger = logging.getLogger(__name__)


def rank_results(results: Iterable[ScoredResult]) -> List[ScoredResult]:
    """Sort by score, best first; equal scores keep corpus order (stable sort)"""
    return sorted(results, key=lambda r: r.relevance_score, reverse=True)


def search_patients(
    corpus: Iterable[Patient],
    query: str,
    filters: Optional[SearchFilters] = None,
    limit: Optional[int] = None,
) -> List[ScoredResult]:
    """Filter → score → rank over one corpus snapshot.

    An empty or whitespace-only query returns no results instead of matching
    every patient.
    """
    filters = filters or SearchFilters()
    term = normalize_query(query)
    if not term:
        logger.info("Empty query - returning no results")
        return []

    candidates = filter_patients(corpus, filters)

    results = []
    for patient in candidates:
        score, matched_fields = score_patient(term, patient)
        if score > 0:
            results.append(
                ScoredResult(
                    **patient.model_dump(),
                    relevance_score=score,
                    matched_fields=matched_fields,
                )
            )

    ranked = rank_results(results)
    logger.info(f"Query '{term}': {len(ranked)} of {len(candidates)} candidates matched")

    if limit is not None:
        return ranked[:limit]
    return ranked
