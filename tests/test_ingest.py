from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest

from ordenpdf.models import AmountMode
from ordenpdf.pipeline.ingest import load_record, load_records, load_rows, parse_record
from _orders import RAW_ORDER


def _write_csv(path: Path, rows: list[dict]) -> Path:
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=list(rows[0].keys()))
        writer.writeheader()
        writer.writerows(rows)
    return path


def test_parse_record_accepts_form_field_names() -> None:
    record = parse_record(RAW_ORDER)
    assert record.folio == "OC-2025-001"
    assert record.description == "Compra de racks selectivos"
    assert record.amount == 150000
    assert record.amount_mode is AmountMode.PLUS_TAX
    assert record.min_pay_date == "2025-02-01"
    assert record.max_pay_date == "2025-03-15"
    assert record.comments == ""


def test_parse_record_defaults_and_rounding() -> None:
    raw = dict(RAW_ORDER, monto="1234.567", tipoMonto="", fechaMinPago="", fechaMaxPago=None)
    raw.pop("comentarios")
    record = parse_record(raw)
    assert record.amount == 1234.57
    assert record.amount_mode is AmountMode.TAX_INCLUDED
    assert record.min_pay_date is None
    assert record.max_pay_date is None
    assert record.comments == ""


def test_parse_record_accepts_english_keys() -> None:
    record = parse_record(
        {
            "folio": "A-1",
            "description": "Servicio de mantenimiento",
            "amount": 10,
            "amount_mode": "integrado",
            "created_date": "2025-05-01",
            "authorizer": "Dirección Tecnología",
        }
    )
    assert record.amount_mode is AmountMode.TAX_INCLUDED
    assert record.authorizer == "Dirección Tecnología"


@pytest.mark.parametrize(
    "overrides, field",
    [
        ({"folio": ""}, "folio: required"),
        ({"folio": "OC 2025/001"}, "folio: only letters"),
        ({"folio": "X" * 51}, "folio: at most"),
        ({"descripcion": "corta"}, "description: at least"),
        ({"descripcion": "x" * 1001}, "description: at most"),
        ({"monto": -5}, "amount: must be greater than 0"),
        ({"monto": "mucho"}, "amount: must be a number"),
        ({"monto": 1_000_000_000}, "amount: exceeds"),
        ({"tipoMonto": "sin_iva"}, "amount_mode"),
        ({"fechaCreacion": ""}, "created_date: required"),
        ({"fechaCreacion": "ayer"}, "created_date: invalid"),
        ({"fechaMinPago": "2025-04-01", "fechaMaxPago": "2025-03-01"}, "max_pay_date: minimum payment"),
        ({"autoriza": "Gerencia"}, "authorizer"),
        ({"comentarios": "y" * 2001}, "comments: at most"),
    ],
)
def test_parse_record_rejects_bad_fields(overrides, field) -> None:
    with pytest.raises(ValueError) as info:
        parse_record(dict(RAW_ORDER, **overrides))
    assert field in str(info.value)


def test_parse_record_reports_every_problem() -> None:
    with pytest.raises(ValueError) as info:
        parse_record({"folio": "OC-1"})
    message = str(info.value)
    for field in ("description", "amount", "created_date", "authorizer"):
        assert field in message


def test_load_record_json(tmp_path: Path) -> None:
    path = tmp_path / "orden.json"
    path.write_text(json.dumps(RAW_ORDER, ensure_ascii=False), encoding="utf-8")
    assert load_record(path).folio == "OC-2025-001"

    bad = tmp_path / "bad.json"
    bad.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_record(bad)
    with pytest.raises(FileNotFoundError):
        load_record(tmp_path / "missing.json")


def test_load_records_csv(tmp_path: Path) -> None:
    second = dict(RAW_ORDER, folio="OC-2025-002", monto="99.5", comentarios="Urgente")
    path = _write_csv(tmp_path / "orders.csv", [RAW_ORDER, second])
    records = load_records(path)
    assert [r.folio for r in records] == ["OC-2025-001", "OC-2025-002"]
    assert records[1].amount == 99.5
    assert records[1].comments == "Urgente"


def test_load_records_rejects_duplicates(tmp_path: Path) -> None:
    path = _write_csv(tmp_path / "orders.csv", [RAW_ORDER, dict(RAW_ORDER, folio="oc-2025-001")])
    with pytest.raises(ValueError, match="Duplicate folio"):
        load_records(path)


def test_load_rows_checks_shape(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_rows(tmp_path / "missing.csv")

    no_columns = tmp_path / "columns.csv"
    no_columns.write_text("folio,monto\nOC-1,10\n", encoding="utf-8")
    with pytest.raises(ValueError, match="missing columns"):
        load_rows(no_columns)

    empty = tmp_path / "empty.csv"
    empty.write_text("", encoding="utf-8")
    with pytest.raises(ValueError, match="no header"):
        load_rows(empty)

    header_only = tmp_path / "header.csv"
    header_only.write_text(",".join(RAW_ORDER.keys()) + "\n,,,,,,,,\n", encoding="utf-8")
    with pytest.raises(ValueError, match="no data rows"):
        load_rows(header_only)
