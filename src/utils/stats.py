"""Corpus statistics"""
import polars as pl
from typing import Dict, Iterable
from ..core.models import CorpusStats, Patient
from ..data.csv_loader import REQUIRED_COLUMNS


def patients_to_frame(patients: Iterable[Patient]) -> pl.DataFrame:
    rows = [patient.model_dump(by_alias=True) for patient in patients]
    return pl.DataFrame(rows, schema={name: pl.Utf8 for name in REQUIRED_COLUMNS})


def _counts(df: pl.DataFrame, column: str) -> Dict[str, int]:
    counts = df.group_by(column).agg(pl.len().alias("count")).sort(column)
    return dict(zip(counts[column].to_list(), counts["count"].to_list()))


def corpus_stats(patients: Iterable[Patient]) -> CorpusStats:
    """Patient counts per site and per floor"""
    df = patients_to_frame(patients)
    return CorpusStats(
        total=df.shape[0],
        sites=_counts(df, "site"),
        floors=_counts(df, "floor"),
    )
