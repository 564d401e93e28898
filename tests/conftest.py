import json

import pytest

from domain.vehicle import VehicleRecord
from matching.dataset import Dataset


def make_row(**overrides):
    row = {
        "Manufacturer": "A",
        "Model": "X",
        "Production Year": 2015,
        "Category": "C1",
        "Leather Interior": True,
        "Fuel Type": "F1",
        "Engine Volume": 2.0,
        "Mileage": 50000,
        "Gearbox Type": "G1",
        "Drive Wheels": "D1",
        "Doors": "4",
        "Wheel": "L",
        "Airbags": 6,
        "predicted_price": 12000,
    }
    row.update(overrides)
    return row


@pytest.fixture
def scenario_row():
    return make_row()


@pytest.fixture
def small_dataset():
    rows = [
        make_row(),
        make_row(Manufacturer="B", Model="Y", **{"Production Year": 2018, "predicted_price": 20000}),
        make_row(Model="Z", **{"Engine Volume": 1.6, "Mileage": 80000, "predicted_price": 9000}),
        make_row(**{"Fuel Type": "F2", "Airbags": 4, "predicted_price": 11000}),
    ]
    return Dataset.from_records([VehicleRecord.from_row(r) for r in rows])


@pytest.fixture
def write_json(tmp_path):
    def _write(name, doc):
        p = tmp_path / name
        p.write_text(json.dumps(doc), encoding="utf-8")
        return str(p)
    return _write
