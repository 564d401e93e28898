import pytest

from conftest import make_row
from scripts import predict_price, quick_check_dataset
from services import config


@pytest.fixture
def data_file(write_json, monkeypatch):
    monkeypatch.setattr(config, "load_dotenv", lambda: False)
    monkeypatch.setenv("CARPRICE_LABELS", "")
    rows = [make_row(Doors=1), make_row(Model="Y", Doors=1, predicted_price=15000)]
    return write_json("data.json", {"rows": rows, "unique": {"Doors": [1]}})


def _args(data_file, *extra):
    return ["--data", data_file, "--manufacturer", "A", "--model", "X", "--year", "2015",
            "--category", "C1", "--fuel_type", "F1", "--engine_volume", "2.0",
            "--mileage", "50000", "--gearbox_type", "G1", "--drive_wheels", "D1",
            "--doors", "1", "--wheel", "L", "--airbags", "6", "--leather", *extra]


def test_exact_lookup(data_file, capsys):
    assert predict_price.main(_args(data_file)) == 0
    out = capsys.readouterr().out
    assert "$12,000" in out
    assert "Exact match found in dataset" in out


def test_top_candidates_table(data_file, capsys):
    assert predict_price.main(_args(data_file, "--top", "2")) == 0
    out = capsys.readouterr().out
    assert "Closest records" in out
    assert "15000" in out


def test_validation_failure_exit_code(data_file, capsys):
    assert predict_price.main(["--data", data_file, "--manufacturer", "A"]) == 2
    assert "Please fill in at least" in capsys.readouterr().out


def test_missing_dataset(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(config, "load_dotenv", lambda: False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CARPRICE_DATA", raising=False)
    assert predict_price.main(["--data", str(tmp_path / "none.json")]) == 2
    assert "Dataset not found" in capsys.readouterr().out


def test_quick_check_reports_unreadable_dataset(tmp_path, monkeypatch, capsys):
    bad = tmp_path / "data.json"
    bad.write_text("{not json", encoding="utf-8")
    monkeypatch.setattr(config, "load_dotenv", lambda: False)
    monkeypatch.setenv("CARPRICE_DATA", str(bad))
    monkeypatch.setenv("CARPRICE_LABELS", "")
    assert quick_check_dataset.main() == 2
    assert "Error loading data" in capsys.readouterr().out


def test_quick_check_prints_stats(data_file, monkeypatch, capsys):
    monkeypatch.setenv("CARPRICE_DATA", data_file)
    assert quick_check_dataset.main(n=2) == 0
    out = capsys.readouterr().out
    assert "2 rows" in out
    assert "predicted_price" in out
