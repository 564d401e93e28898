# app/form.py
from __future__ import annotations

import random
from typing import Any, Dict, List, Mapping, Optional

from domain.vehicle import CATEGORICAL_FIELDS, FIELD_ATTRS, VehicleQuery, VehicleRecord
from matching.dataset import Dataset, SummaryStats
from matching.matcher import MatchResult, find_match

REQUIRED_MESSAGE = "Please fill in at least Manufacturer, Model, and Production Year"
EXPLAIN_EXACT = "Exact match found in dataset"
EXPLAIN_NEAREST = "Nearest match from dataset (similar car)"
EXPLAIN_NONE = "No match found"
HINT_NONE = "Try adjusting your search criteria"


class QueryValidationError(ValueError):
    """Form is missing one of the required fields."""
    pass


def _blank(val: Any) -> bool:
    return val is None or (isinstance(val, str) and not val.strip())


def _to_int_or_none(val: Any) -> Optional[int]:
    if _blank(val):
        return None
    try:
        return int(float(val))
    except (TypeError, ValueError):
        return None


def _to_int_or_zero(val: Any) -> int:
    v = _to_int_or_none(val)
    return v if v is not None else 0


def _to_float_or_zero(val: Any) -> float:
    if _blank(val):
        return 0.0
    try:
        return float(val)
    except (TypeError, ValueError):
        return 0.0


def _to_bool(val: Any) -> bool:
    if isinstance(val, str):
        return val.strip().lower() in ("1", "true", "yes", "on")
    return bool(val)


def _code(val: Any) -> Any:
    # selects hand back the original code; blank selection means "unset"
    if val is None:
        return ""
    return val.strip() if isinstance(val, str) else val


def build_query(values: Mapping[str, Any]) -> VehicleQuery:
    """Raw form values (display keys) -> VehicleQuery; raises QueryValidationError."""
    manufacturer = _code(values.get("Manufacturer"))
    model = _code(values.get("Model"))
    year = _to_int_or_none(values.get("Production Year"))
    if _blank(manufacturer) or _blank(model) or not year:
        raise QueryValidationError(REQUIRED_MESSAGE)

    return VehicleQuery(
        manufacturer=manufacturer,
        model=model,
        production_year=year,
        category=_code(values.get("Category")),
        leather_interior=_to_bool(values.get("Leather Interior", False)),
        fuel_type=_code(values.get("Fuel Type")),
        engine_volume=_to_float_or_zero(values.get("Engine Volume")),
        mileage=_to_int_or_zero(values.get("Mileage")),
        gearbox_type=_code(values.get("Gearbox Type")),
        drive_wheels=_code(values.get("Drive Wheels")),
        doors=_code(values.get("Doors")),
        wheel=_code(values.get("Wheel")),
        airbags=_to_int_or_zero(values.get("Airbags")),
    )


def format_price(value: Any) -> str:
    try:
        v = float(value)
    except (TypeError, ValueError):
        return "N/A"
    return f"${int(round(v, 0)):,}"


def stats_line(stats: SummaryStats) -> str:
    line = (
        f"Dataset: {stats.count} cars, "
        f"{stats.distinct_manufacturers} manufacturers, "
        f"{stats.distinct_models} models"
    )
    if stats.min_price is not None and stats.max_price is not None:
        line += f" | Price range: {format_price(stats.min_price)} - {format_price(stats.max_price)}"
    return line


def match_details(record: VehicleRecord, dataset: Dataset) -> List[str]:
    engine = f"{record.engine_volume:g}"
    return [
        f"Manufacturer: {dataset.decode('Manufacturer', record.manufacturer)}",
        f"Model: {dataset.decode('Model', record.model)}",
        f"Year: {record.production_year}",
        f"Engine: {engine}L",
        f"Mileage: {record.mileage:,} km",
    ]


def render_result(result: MatchResult, dataset: Dataset) -> Dict[str, Any]:
    """MatchResult -> plain dict the UI can show as-is."""
    if not result.found:
        return {
            "found": False,
            "exact": False,
            "score": None,
            "price": None,
            "price_text": EXPLAIN_NONE,
            "explain": HINT_NONE,
            "details": [],
            "record": None,
        }
    return {
        "found": True,
        "exact": result.exact,
        "score": result.score,
        "price": result.predicted_price,
        "price_text": format_price(result.predicted_price),
        "explain": EXPLAIN_EXACT if result.exact else EXPLAIN_NEAREST,
        "details": match_details(result.record, dataset),
        "record": result.record.to_row(),
    }


def predict(values: Mapping[str, Any], dataset: Dataset) -> Dict[str, Any]:
    query = build_query(values)
    return render_result(find_match(query, dataset), dataset)


def sample_values(dataset: Dataset, rng: Optional[random.Random] = None) -> Dict[str, Any]:
    """Form values of a random record ("Load Sample"); empty dict for an empty dataset."""
    record = dataset.sample_record(rng)
    if record is None:
        return {}
    return {key: record.get(key) for key in FIELD_ATTRS}


def coerce_codes(values: Mapping[str, Any], dataset: Dataset) -> Dict[str, Any]:
    """
    Text input (CLI, query string) -> the dataset's own code objects, so "4"
    matches an integer Doors code 4. Values with no known code are kept as typed.
    """
    out = dict(values)
    for key in CATEGORICAL_FIELDS:
        raw = out.get(key)
        if not isinstance(raw, str) or _blank(raw):
            continue
        for code in dataset.unique_values(key):
            if str(code) == raw.strip():
                out[key] = code
                break
    return out
