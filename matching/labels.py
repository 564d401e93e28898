# matching/labels.py
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional

# dataset field -> key inside label_mappings.json
FIELD_TO_MAPPING_KEY: Dict[str, str] = {
    "Manufacturer": "Manufacturer",
    "Model": "Model",
    "Category": "Category",
    "Fuel Type": "Fuel type",
    "Gearbox Type": "Gear box type",
    "Drive Wheels": "Drive wheels",
    "Doors": "Doors",
    "Wheel": "Wheel",
    "Color": "Color",
}


def _code_number(code: Any) -> Optional[int]:
    """Integer part of a code: 5 -> 5, "Fuel 5" -> 5, "Manual" / "Model ²" -> None."""
    if isinstance(code, bool):
        return None
    if isinstance(code, int):
        return code
    if isinstance(code, str):
        token = code.strip().rsplit(" ", 1)[-1]
        if token.isdecimal():
            try:
                return int(token)
            except ValueError:
                return None
    return None


@dataclass(frozen=True)
class LabelMapping:
    """Code -> label tables per dataset field, inverted once from the source document."""
    labels: Mapping[str, Mapping[int, str]] = field(default_factory=dict)

    @classmethod
    def from_document(cls, doc: Mapping[str, Mapping[str, Any]]) -> "LabelMapping":
        if not isinstance(doc, Mapping):
            raise ValueError("label mapping document must be an object")
        tables: Dict[str, Mapping[int, str]] = {}
        for field_name, key in FIELD_TO_MAPPING_KEY.items():
            mapping = doc.get(key)
            if not mapping:
                continue
            inverted: Dict[int, str] = {}
            for label, code in mapping.items():
                # keep the first label when two labels share a code
                inverted.setdefault(int(code), str(label))
            tables[field_name] = MappingProxyType(inverted)
        return cls(labels=MappingProxyType(tables))

    def decode(self, field_name: str, code: Any) -> Any:
        table = self.labels.get(field_name)
        if not table:
            return code
        number = _code_number(code)
        if number is None:
            return code
        return table.get(number, code)

    def resolve(self, field_name: str, codes: Iterable[Any]) -> Mapping[Any, str]:
        """Explicit {code: label} table for the codes a dataset actually holds."""
        if field_name not in self.labels:
            return MappingProxyType({})
        table: Dict[Any, str] = {}
        labels = self.labels[field_name]
        for code in codes:
            number = _code_number(code)
            if number is not None and number in labels:
                table[code] = labels[number]
        return MappingProxyType(table)

    def __contains__(self, field_name: str) -> bool:
        return field_name in self.labels
