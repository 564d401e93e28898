# matching/matcher.py
"""
Exact / nearest record lookup.

An exact match wins outright (score 0). Otherwise every record gets a weighted
dissimilarity score and the lowest one is returned; on ties the first record
scanned is kept.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

import structlog

from domain.vehicle import VehicleQuery, VehicleRecord

logger = structlog.get_logger(__name__)

ENGINE_VOLUME_EPSILON = 0.001

# attribute -> penalty added when record and query disagree
CATEGORICAL_PENALTIES = {
    "manufacturer": 5.0,
    "model": 5.0,
    "category": 3.0,
    "fuel_type": 3.0,
    "gearbox_type": 2.0,
    "drive_wheels": 2.0,
    "leather_interior": 1.0,
}

# attribute -> weight of |record - query| / max(query, 1)
NUMERIC_WEIGHTS = {
    "engine_volume": 2.0,
    "mileage": 1.0,
    "airbags": 1.0,
}

YEAR_WEIGHT = 3.0
YEAR_SPAN = 10.0

# compared for plain equality in the exact pass (engine volume uses the epsilon)
EXACT_FIELDS = (
    "manufacturer", "model", "production_year", "category", "leather_interior",
    "fuel_type", "gearbox_type", "drive_wheels", "doors", "wheel", "airbags", "mileage",
)


@dataclass(frozen=True)
class MatchResult:
    record: Optional[VehicleRecord]
    score: float
    exact: bool

    @property
    def found(self) -> bool:
        return self.record is not None

    @property
    def predicted_price(self) -> Optional[float]:
        return self.record.predicted_price if self.record is not None else None


def is_exact_match(record: VehicleRecord, query: VehicleQuery) -> bool:
    for attr in EXACT_FIELDS:
        if getattr(record, attr) != getattr(query, attr):
            return False
    return abs(record.engine_volume - query.engine_volume) < ENGINE_VOLUME_EPSILON


def _relative_diff(value: float, reference: float) -> float:
    # a zero (unset) query value falls back to an absolute difference
    return abs(value - reference) / (reference or 1)


def score_record(record: VehicleRecord, query: VehicleQuery) -> float:
    """Weighted dissimilarity, >= 0; lower is closer."""
    score = 0.0
    for attr, penalty in CATEGORICAL_PENALTIES.items():
        if getattr(record, attr) != getattr(query, attr):
            score += penalty

    engine_diff = _relative_diff(record.engine_volume, query.engine_volume)
    mileage_diff = _relative_diff(record.mileage, query.mileage)
    year_diff = abs(record.production_year - query.production_year) / YEAR_SPAN
    airbags_diff = _relative_diff(record.airbags, query.airbags)

    score += (
        engine_diff * NUMERIC_WEIGHTS["engine_volume"]
        + mileage_diff * NUMERIC_WEIGHTS["mileage"]
        + year_diff * YEAR_WEIGHT
        + airbags_diff * NUMERIC_WEIGHTS["airbags"]
    )
    return score


def find_match(query: VehicleQuery, dataset: Iterable[VehicleRecord]) -> MatchResult:
    """
    Exact match if one exists, otherwise the nearest record.
    An empty dataset gives MatchResult(record=None, score=inf, exact=False).
    """
    records = tuple(dataset)

    for r in records:
        if is_exact_match(r, query):
            logger.debug("match.exact", size=len(records))
            return MatchResult(record=r, score=0.0, exact=True)

    best: Optional[VehicleRecord] = None
    best_score = math.inf
    for r in records:
        s = score_record(r, query)
        if s < best_score:
            best, best_score = r, s

    if best is None:
        logger.debug("match.none", size=len(records))
    else:
        logger.debug("match.approximate", size=len(records), score=round(best_score, 4))
    return MatchResult(record=best, score=best_score, exact=False)
