from __future__ import annotations

import csv
import json
from pathlib import Path

from typer.testing import CliRunner

from ordenpdf.main import app
from _orders import RAW_ORDER

runner = CliRunner()


def test_render_command(tmp_path: Path, out_dir: Path) -> None:
    record = tmp_path / "orden.json"
    record.write_text(json.dumps(RAW_ORDER, ensure_ascii=False), encoding="utf-8")
    target = tmp_path / "pdfs"
    result = runner.invoke(app, ["render", str(record), "--out", str(target), "--logo", str(tmp_path / "none.png")])
    assert result.exit_code == 0, result.output
    pdfs = list(target.glob("Orden_Autorizacion_Compra_OC_2025_001_*.pdf"))
    assert len(pdfs) == 1
    assert str(pdfs[0]) in result.output


def test_render_command_rejects_invalid_record(tmp_path: Path, out_dir: Path) -> None:
    record = tmp_path / "orden.json"
    record.write_text(json.dumps(dict(RAW_ORDER, autoriza="Nadie")), encoding="utf-8")
    result = runner.invoke(app, ["render", str(record)])
    assert result.exit_code == 2
    assert not out_dir.exists() or not list(out_dir.glob("*.pdf"))


def test_build_command(tmp_path: Path, out_dir: Path) -> None:
    path = tmp_path / "orders.csv"
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=list(RAW_ORDER.keys()))
        writer.writeheader()
        writer.writerow(RAW_ORDER)
        writer.writerow(dict(RAW_ORDER, folio="OC-2025-002"))
    result = runner.invoke(app, ["build", "--csv", str(path), "--out", str(tmp_path / "batch")])
    assert result.exit_code == 0, result.output
    assert "Ingested 2 orders" in result.output
    assert "READY: 2" in result.output
    assert len(list((tmp_path / "batch").glob("*.pdf"))) == 2
