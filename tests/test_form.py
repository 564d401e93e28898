import random

import pytest

from app.form import (
    EXPLAIN_EXACT,
    EXPLAIN_NEAREST,
    REQUIRED_MESSAGE,
    QueryValidationError,
    build_query,
    coerce_codes,
    format_price,
    predict,
    sample_values,
    stats_line,
)
from conftest import make_row
from domain.vehicle import VehicleRecord
from matching.dataset import Dataset
from matching.labels import LabelMapping


def _values(**overrides):
    v = make_row()
    v.pop("predicted_price")
    v.update(overrides)
    return v


@pytest.mark.parametrize("missing", ["Manufacturer", "Model", "Production Year"])
def test_required_fields(missing):
    with pytest.raises(QueryValidationError, match=REQUIRED_MESSAGE):
        build_query(_values(**{missing: ""}))


def test_year_zero_is_missing():
    with pytest.raises(QueryValidationError):
        build_query(_values(**{"Production Year": 0}))


def test_optional_fields_default():
    q = build_query({"Manufacturer": "A", "Model": "X", "Production Year": "2015"})
    assert q.production_year == 2015
    assert q.category == ""
    assert q.leather_interior is False
    assert q.engine_volume == 0.0
    assert q.mileage == 0
    assert q.airbags == 0


def test_numeric_coercion_from_text():
    q = build_query(_values(**{"Engine Volume": "1.6", "Mileage": "", "Airbags": "4",
                               "Leather Interior": "yes"}))
    assert q.engine_volume == 1.6
    assert q.mileage == 0
    assert q.airbags == 4
    assert q.leather_interior is True


def test_predict_exact(small_dataset):
    res = predict(_values(), small_dataset)
    assert res["found"] and res["exact"]
    assert res["price"] == 12000
    assert res["price_text"] == "$12,000"
    assert res["explain"] == EXPLAIN_EXACT
    assert "Mileage: 50,000 km" in res["details"]
    assert "Engine: 2L" in res["details"]


def test_predict_nearest(small_dataset):
    res = predict(_values(**{"Production Year": 2016}), small_dataset)
    assert res["found"] and not res["exact"]
    assert res["score"] == pytest.approx(0.3)
    assert res["explain"] == EXPLAIN_NEAREST


def test_predict_empty_dataset():
    res = predict(_values(), Dataset())
    assert res["found"] is False
    assert res["price"] is None
    assert res["price_text"] == "No match found"


def test_details_are_decoded():
    ds = Dataset.from_records(
        [VehicleRecord.from_row(make_row(Manufacturer="Manufacturer 44"))],
        labels=LabelMapping.from_document({"Manufacturer": {"TOYOTA": 44}}),
    )
    res = predict(_values(Manufacturer="Manufacturer 44"), ds)
    assert res["details"][0] == "Manufacturer: TOYOTA"


def test_format_price():
    assert format_price(12000) == "$12,000"
    assert format_price(9120.5) == "$9,120"
    assert format_price(None) == "N/A"


def test_stats_line(small_dataset):
    line = stats_line(small_dataset.summary_stats())
    assert line.startswith("Dataset: 4 cars, 2 manufacturers, 3 models")
    assert line.endswith("Price range: $9,000 - $20,000")
    assert stats_line(Dataset().summary_stats()) == "Dataset: 0 cars, 0 manufacturers, 0 models"


def test_sample_values_round_trip_to_exact(small_dataset):
    values = sample_values(small_dataset, random.Random(7))
    assert set(values) >= {"Manufacturer", "Model", "Production Year"}
    assert predict(values, small_dataset)["exact"] is True
    assert sample_values(Dataset()) == {}


def test_coerce_codes_maps_text_to_dataset_codes():
    ds = Dataset.from_records([VehicleRecord.from_row(make_row(Doors=1))])
    out = coerce_codes(_values(Doors="1", Wheel="L"), ds)
    assert out["Doors"] == 1
    assert out["Wheel"] == "L"
    assert predict(out, ds)["exact"] is True
