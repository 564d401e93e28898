# matching/dataset.py
from __future__ import annotations

import json
import pathlib
import random
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import pandas as pd
import structlog

from domain.vehicle import FIELD_ATTRS, PRICE_KEY, Code, VehicleRecord
from matching.labels import LabelMapping
from services.http import Http, SourceError, is_url

logger = structlog.get_logger(__name__)


class DatasetError(RuntimeError):
    """Dataset or label mapping could not be loaded."""
    pass


@dataclass(frozen=True)
class SummaryStats:
    count: int
    distinct_manufacturers: int
    distinct_models: int
    min_price: Optional[float]
    max_price: Optional[float]
    mean_price: Optional[float]


@dataclass(frozen=True)
class Dataset:
    records: Tuple[VehicleRecord, ...] = ()
    unique: Mapping[str, Tuple[Code, ...]] = field(default_factory=dict)
    labels: Optional[LabelMapping] = None
    # field -> {code: label}, built once for the codes this dataset holds
    decoded: Mapping[str, Mapping[Code, str]] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "records", tuple(self.records))
        frozen_unique = {k: tuple(v) for k, v in (self.unique or {}).items()}
        object.__setattr__(self, "unique", MappingProxyType(frozen_unique))

        tables: Dict[str, Mapping[Code, str]] = {}
        if self.labels is not None:
            for field_name in FIELD_ATTRS:
                if field_name in self.labels:
                    codes = set(self.unique_values(field_name))
                    codes.update(r.get(field_name) for r in self.records)
                    tables[field_name] = self.labels.resolve(field_name, codes)
        object.__setattr__(self, "decoded", MappingProxyType(tables))

    # ---------------- Construction ----------------
    @classmethod
    def from_records(cls, records: Sequence[VehicleRecord],
                     unique: Optional[Mapping[str, Sequence[Code]]] = None,
                     labels: Optional[LabelMapping] = None) -> "Dataset":
        return cls(records=records, unique=unique or {}, labels=labels)

    @classmethod
    def from_document(cls, doc: Mapping[str, Any], labels: Optional[LabelMapping] = None) -> "Dataset":
        """Build from the {"rows": [...], "unique": {...}} document."""
        if not isinstance(doc, Mapping):
            raise DatasetError("dataset document must be an object")
        rows = doc.get("rows")
        if not isinstance(rows, list):
            raise DatasetError("dataset document has no 'rows' list")
        unique = doc.get("unique") or {}
        if not isinstance(unique, Mapping):
            raise DatasetError("'unique' must map field names to lists of codes")

        records: List[VehicleRecord] = []
        for i, row in enumerate(rows):
            try:
                records.append(VehicleRecord.from_row(row))
            except KeyError as e:
                raise DatasetError(f"row {i}: missing field {e}") from e
            except (TypeError, ValueError) as e:
                raise DatasetError(f"row {i}: {e}") from e
        return cls.from_records(records, unique=unique, labels=labels)

    # ---------------- Read-only projections ----------------
    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[VehicleRecord]:
        return iter(self.records)

    def unique_values(self, field_name: str) -> Tuple[Code, ...]:
        """Choices for a field: the source's list, else distinct values in first-seen order."""
        if field_name not in FIELD_ATTRS:
            raise KeyError(field_name)
        if field_name in self.unique:
            return self.unique[field_name]
        seen: Dict[Any, None] = {}
        for r in self.records:
            seen.setdefault(r.get(field_name), None)
        return tuple(seen)

    def summary_stats(self) -> SummaryStats:
        prices = [r.predicted_price for r in self.records]
        return SummaryStats(
            count=len(self.records),
            distinct_manufacturers=len(self.unique_values("Manufacturer")),
            distinct_models=len(self.unique_values("Model")),
            min_price=min(prices) if prices else None,
            max_price=max(prices) if prices else None,
            mean_price=sum(prices) / len(prices) if prices else None,
        )

    def decode(self, field_name: str, code: Any) -> Any:
        table = self.decoded.get(field_name)
        if not table:
            return code
        try:
            return table.get(code, code)
        except TypeError:
            # unhashable value, not a code
            return code

    def sample_record(self, rng: Optional[random.Random] = None) -> Optional[VehicleRecord]:
        if not self.records:
            return None
        return (rng or random).choice(self.records)

    def to_frame(self) -> pd.DataFrame:
        columns = list(FIELD_ATTRS) + [PRICE_KEY]
        return pd.DataFrame([r.to_row() for r in self.records], columns=columns)


# ---------------- IO ----------------
def _read_json(source: str, http: Optional[Http] = None) -> Any:
    if is_url(source):
        try:
            return (http or Http()).get_json(source)
        except SourceError as e:
            raise DatasetError(str(e)) from e
    path = pathlib.Path(source)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise DatasetError(f"Cannot read {path}: {e}") from e
    except ValueError as e:
        raise DatasetError(f"Invalid JSON in {path}: {e}") from e


def load_label_mapping(source: str, http: Optional[Http] = None) -> LabelMapping:
    doc = _read_json(source, http)
    try:
        mapping = LabelMapping.from_document(doc)
    except (AttributeError, TypeError, ValueError) as e:
        raise DatasetError(f"Invalid label mapping {source}: {e}") from e
    logger.info("labels.loaded", source=source, fields=len(mapping.labels))
    return mapping


def load_dataset(source: str, labels_source: Optional[str] = None,
                 http: Optional[Http] = None) -> Dataset:
    """Load data.json (and optionally label_mappings.json) from a path or URL."""
    if not source:
        raise DatasetError("No dataset source configured")
    doc = _read_json(source, http)
    labels = load_label_mapping(labels_source, http) if labels_source else None
    ds = Dataset.from_document(doc, labels=labels)

    stats = ds.summary_stats()
    logger.info(
        "dataset.loaded",
        source=source,
        count=stats.count,
        manufacturers=stats.distinct_manufacturers,
        min_price=stats.min_price,
        max_price=stats.max_price,
    )
    return ds
