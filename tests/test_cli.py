"""Terminal client smoke tests."""
import json

from cli_search import main


def _write_catalog(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(
        json.dumps(
            [
                {"id": "1", "name": "iPhone 14", "brand": {"id": "b1", "name": "Apple", "slug": "apple"}, "price": 799, "stock_quantity": 10},
                {"id": "2", "name": "Pixel 8", "brand": {"id": "b2", "name": "Google", "slug": "google"}, "price": 699, "stock_quantity": 0},
            ]
        ),
        encoding="utf-8",
    )
    return path


def test_single_query_prints_ranked_rows(tmp_path, capsys):
    path = _write_catalog(tmp_path)

    assert main(["--catalog", str(path), "iphone"]) == 0

    out = capsys.readouterr().out
    assert "Query: iphone | results: 1" in out
    assert "iPhone 14 | $799.00 | medium_stock" in out


def test_batch_mode_runs_every_line(tmp_path, capsys):
    path = _write_catalog(tmp_path)
    queries = tmp_path / "queries.txt"
    queries.write_text("pixel\n\napple\n", encoding="utf-8")

    assert main(["--catalog", str(path), "--batch", str(queries), "--in-stock"]) == 0

    out = capsys.readouterr().out
    assert "Query: pixel | results: 0" in out
    assert "Query: apple | results: 1" in out
