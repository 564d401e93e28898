# domain/vehicle.py
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Union

# Categorical values arrive as opaque codes ("Manufacturer 22", 4, ...)
Code = Union[int, str]

# display key (as used in data.json) -> attribute name
FIELD_ATTRS: Dict[str, str] = {
    "Manufacturer": "manufacturer",
    "Model": "model",
    "Production Year": "production_year",
    "Category": "category",
    "Leather Interior": "leather_interior",
    "Fuel Type": "fuel_type",
    "Engine Volume": "engine_volume",
    "Mileage": "mileage",
    "Gearbox Type": "gearbox_type",
    "Drive Wheels": "drive_wheels",
    "Doors": "doors",
    "Wheel": "wheel",
    "Airbags": "airbags",
}

PRICE_KEY = "predicted_price"

TRUE_WORDS = ("1", "true", "yes")
FALSE_WORDS = ("0", "false", "no", "")

CATEGORICAL_FIELDS = (
    "Manufacturer", "Model", "Category", "Fuel Type",
    "Gearbox Type", "Drive Wheels", "Doors", "Wheel",
)


def _to_bool(val: Any) -> bool:
    """Strict flag parsing: true/false, 1/0, yes/no; anything else is a ValueError."""
    if isinstance(val, bool):
        return val
    if isinstance(val, int) and val in (0, 1):
        return bool(val)
    if isinstance(val, str):
        s = val.strip().lower()
        if s in TRUE_WORDS:
            return True
        if s in FALSE_WORDS:
            return False
    raise ValueError(f"not a boolean: {val!r}")


@dataclass(frozen=True)
class VehicleQuery:
    manufacturer: Code
    model: Code
    production_year: int
    category: Code = ""
    leather_interior: bool = False
    fuel_type: Code = ""
    engine_volume: float = 0.0
    mileage: int = 0
    gearbox_type: Code = ""
    drive_wheels: Code = ""
    doors: Code = ""
    wheel: Code = ""
    airbags: int = 0

    @classmethod
    def from_record(cls, record: "VehicleRecord") -> "VehicleQuery":
        """Query describing `record` exactly (price left out)."""
        return cls(**{f.name: getattr(record, f.name) for f in fields(cls)})

    def get(self, field: str) -> Any:
        return getattr(self, FIELD_ATTRS[field])


@dataclass(frozen=True)
class VehicleRecord:
    manufacturer: Code
    model: Code
    production_year: int
    category: Code
    leather_interior: bool
    fuel_type: Code
    engine_volume: float
    mileage: int
    gearbox_type: Code
    drive_wheels: Code
    doors: Code
    wheel: Code
    airbags: int
    predicted_price: float

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "VehicleRecord":
        kwargs = {attr: row[key] for key, attr in FIELD_ATTRS.items()}
        kwargs["production_year"] = int(kwargs["production_year"])
        kwargs["leather_interior"] = _to_bool(kwargs["leather_interior"])
        kwargs["engine_volume"] = float(kwargs["engine_volume"])
        kwargs["mileage"] = int(kwargs["mileage"])
        kwargs["airbags"] = int(kwargs["airbags"])
        return cls(predicted_price=float(row[PRICE_KEY]), **kwargs)

    def to_row(self) -> Dict[str, Any]:
        row = {key: getattr(self, attr) for key, attr in FIELD_ATTRS.items()}
        row[PRICE_KEY] = self.predicted_price
        return row

    def get(self, field: str) -> Any:
        if field == PRICE_KEY:
            return self.predicted_price
        return getattr(self, FIELD_ATTRS[field])
