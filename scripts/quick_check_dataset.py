# scripts/quick_check_dataset.py
import sys

import pandas as pd

from app.form import stats_line
from matching.dataset import DatasetError, load_dataset
from services.config import detect_data_path, detect_labels_path, get_settings


def main(n: int = 5) -> int:
    settings = get_settings()
    path = detect_data_path(settings)
    if not path:
        print(f"Dataset not found: {settings.data_source}")
        return 2
    try:
        ds = load_dataset(path, detect_labels_path(settings))
    except DatasetError as e:
        print(f"Error loading data: {e}")
        return 2

    print(stats_line(ds.summary_stats()))
    df = ds.to_frame()
    print(len(df), "rows")
    print(df.columns.tolist())

    # a few rows with the columns people ask about first
    pd.set_option("display.max_columns", None)
    print(df.sample(min(n, len(df)))[[
        "Manufacturer",
        "Model",
        "Production Year",
        "Engine Volume",
        "Mileage",
        "predicted_price",
    ]])
    return 0


if __name__ == "__main__":
    sys.exit(main())
