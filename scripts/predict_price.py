# scripts/predict_price.py
import argparse
import sys
from typing import List, Optional

import pandas as pd

from app.form import QueryValidationError, build_query, coerce_codes, predict
from matching.dataset import DatasetError, load_dataset
from matching.engine import rank_candidates
from services.config import detect_data_path, detect_labels_path, get_settings
from services.http import Http
from services.log import setup_logging

# CLI flag -> dataset field
FLAGS = {
    "manufacturer": "Manufacturer",
    "model": "Model",
    "year": "Production Year",
    "category": "Category",
    "fuel_type": "Fuel Type",
    "engine_volume": "Engine Volume",
    "mileage": "Mileage",
    "gearbox_type": "Gearbox Type",
    "drive_wheels": "Drive Wheels",
    "doors": "Doors",
    "wheel": "Wheel",
    "airbags": "Airbags",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Look up / approximate a car's predicted price")
    parser.add_argument("--data", type=str, default=None, help="data.json path or URL")
    parser.add_argument("--labels", type=str, default=None, help="label_mappings.json path or URL")
    for flag in FLAGS:
        parser.add_argument(f"--{flag}", type=str, default="")
    parser.add_argument("--leather", action="store_true", help="leather interior")
    parser.add_argument("--top", type=int, default=0, help="also show the N closest records")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    data_path = detect_data_path(settings, args.data)
    if not data_path:
        print(f"Dataset not found: {args.data or settings.data_source}")
        return 2
    try:
        http = Http(timeout=settings.http_timeout, max_retries=settings.http_retries)
        dataset = load_dataset(data_path, detect_labels_path(settings, args.labels), http=http)
    except DatasetError as e:
        print(f"Error loading data: {e}")
        return 2

    values = {field: getattr(args, flag) for flag, field in FLAGS.items()}
    values["Leather Interior"] = args.leather
    values = coerce_codes(values, dataset)

    try:
        res = predict(values, dataset)
    except QueryValidationError as e:
        print(e)
        return 2

    print(res["price_text"])
    print(res["explain"])
    if not res["found"]:
        return 2
    print(f"score={res['score']:.3f}")
    for line in res["details"]:
        print("  -", line)

    if args.top > 0:
        ranked = rank_candidates(build_query(values), dataset, top_n=args.top)
        pd.set_option("display.max_columns", None)
        print("\nClosest records:\n")
        print(ranked.to_string(index=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
