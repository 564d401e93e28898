# matching/engine.py
from __future__ import annotations

from typing import Iterable, Union

import numpy as np
import pandas as pd

from domain.vehicle import FIELD_ATTRS, VehicleQuery, VehicleRecord
from matching.dataset import Dataset
from matching.matcher import (
    CATEGORICAL_PENALTIES,
    ENGINE_VOLUME_EPSILON,
    EXACT_FIELDS,
    NUMERIC_WEIGHTS,
    YEAR_SPAN,
    YEAR_WEIGHT,
)

ATTR_FIELDS = {attr: key for key, attr in FIELD_ATTRS.items()}


def _as_frame(dataset: Union[Dataset, Iterable[VehicleRecord]]) -> pd.DataFrame:
    if isinstance(dataset, Dataset):
        return dataset.to_frame()
    return Dataset.from_records(list(dataset)).to_frame()


def _relative_diff(col: pd.Series, reference: float) -> np.ndarray:
    values = pd.to_numeric(col, errors="coerce").to_numpy(dtype=float)
    return np.abs(values - reference) / (reference or 1)


def score_frame(query: VehicleQuery, dataset: Union[Dataset, Iterable[VehicleRecord]]) -> pd.DataFrame:
    """All records as rows, with the nearest-match `score` and the `exact` flag."""
    df = _as_frame(dataset)
    if df.empty:
        df["score"] = pd.Series(dtype=float)
        df["exact"] = pd.Series(dtype=bool)
        return df

    score = np.zeros(len(df), dtype=float)
    for attr, penalty in CATEGORICAL_PENALTIES.items():
        mismatch = (df[ATTR_FIELDS[attr]] != getattr(query, attr)).to_numpy()
        score = score + penalty * mismatch

    engine_diff = _relative_diff(df["Engine Volume"], query.engine_volume)
    mileage_diff = _relative_diff(df["Mileage"], query.mileage)
    year = pd.to_numeric(df["Production Year"], errors="coerce").to_numpy(dtype=float)
    year_diff = np.abs(year - query.production_year) / YEAR_SPAN
    airbags_diff = _relative_diff(df["Airbags"], query.airbags)

    score = score + (
        engine_diff * NUMERIC_WEIGHTS["engine_volume"]
        + mileage_diff * NUMERIC_WEIGHTS["mileage"]
        + year_diff * YEAR_WEIGHT
        + airbags_diff * NUMERIC_WEIGHTS["airbags"]
    )

    exact = np.ones(len(df), dtype=bool)
    for attr in EXACT_FIELDS:
        exact &= (df[ATTR_FIELDS[attr]] == getattr(query, attr)).to_numpy()
    ev = pd.to_numeric(df["Engine Volume"], errors="coerce").to_numpy(dtype=float)
    exact &= np.abs(ev - query.engine_volume) < ENGINE_VOLUME_EPSILON

    out = df.copy()
    out["score"] = np.where(exact, 0.0, score)
    out["exact"] = exact
    return out


def rank_candidates(query: VehicleQuery, dataset: Union[Dataset, Iterable[VehicleRecord]],
                    top_n: int = 5) -> pd.DataFrame:
    """Closest `top_n` records: exact matches first, then ascending score, scan order on ties."""
    df = score_frame(query, dataset)
    if df.empty:
        return df
    ranked = df.sort_values(["exact", "score"], ascending=[False, True], kind="mergesort")
    return ranked.head(max(int(top_n), 0)).reset_index(drop=True)
