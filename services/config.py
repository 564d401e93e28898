# services/config.py
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_DATA = "data/data.json"
DEFAULT_LABELS = "data/label_mappings.json"


def _to_int_or_default(val: Optional[str], default: int) -> int:
    try:
        v = int(val)
        return v if v > 0 else default
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Settings:
    data_source: str = DEFAULT_DATA
    labels_source: Optional[str] = DEFAULT_LABELS
    http_timeout: int = 10
    http_retries: int = 3
    log_level: str = "INFO"
    log_format: str = "console"  # "console" / "json"


def get_settings() -> Settings:
    """Settings from the environment (a local .env is honoured)."""
    load_dotenv()
    labels = os.getenv("CARPRICE_LABELS", DEFAULT_LABELS)
    return Settings(
        data_source=os.getenv("CARPRICE_DATA", DEFAULT_DATA),
        # empty value disables label decoding
        labels_source=labels or None,
        http_timeout=_to_int_or_default(os.getenv("CARPRICE_HTTP_TIMEOUT"), 10),
        http_retries=_to_int_or_default(os.getenv("CARPRICE_HTTP_RETRIES"), 3),
        log_level=os.getenv("CARPRICE_LOG_LEVEL", "INFO"),
        log_format=os.getenv("CARPRICE_LOG_FORMAT", "console").lower(),
    )


def detect_source(explicit: Optional[str], candidates: list) -> Optional[str]:
    """First existing local path (or any URL) among explicit + candidates."""
    for p in [explicit, *candidates]:
        if not p:
            continue
        if str(p).startswith(("http://", "https://")) or os.path.exists(p):
            return p
    return None


def detect_data_path(settings: Optional[Settings] = None, explicit: Optional[str] = None) -> Optional[str]:
    settings = settings or get_settings()
    return detect_source(explicit, [settings.data_source, DEFAULT_DATA, "data.json"])


def detect_labels_path(settings: Optional[Settings] = None, explicit: Optional[str] = None) -> Optional[str]:
    settings = settings or get_settings()
    if settings.labels_source is None and explicit is None:
        return None
    return detect_source(explicit, [settings.labels_source, DEFAULT_LABELS, "label_mappings.json"])
