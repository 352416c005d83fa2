from __future__ import annotations

import csv
import json
import math
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import (
    AMOUNT_MAX,
    AUTHORIZERS,
    COMMENTS_MAX_LEN,
    DESCRIPTION_MAX_LEN,
    DESCRIPTION_MIN_LEN,
    FOLIO_MAX_LEN,
)
from ..models import AmountMode, OrderRecord
from .formatting import parse_date


FOLIO_RE = re.compile(r"^[A-Z0-9-]+$", re.IGNORECASE)

# Spanish form field names accepted as aliases of the record fields
FIELD_ALIASES: Dict[str, str] = {
    "descripcion": "description",
    "monto": "amount",
    "tipoMonto": "amount_mode",
    "fechaCreacion": "created_date",
    "fechaMinPago": "min_pay_date",
    "fechaMaxPago": "max_pay_date",
    "autoriza": "authorizer",
    "comentarios": "comments",
}

REQUIRED_COLUMNS = {"folio", "description", "amount", "created_date", "authorizer"}


def _canonical(raw: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        name = FIELD_ALIASES.get(str(key).strip(), str(key).strip())
        out[name] = value.strip() if isinstance(value, str) else value
    return out


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_amount(value: Any, errors: List[str]) -> float:
    if value is None or value == "":
        errors.append("amount: required")
        return 0.0
    if isinstance(value, bool):
        errors.append("amount: must be a number")
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        errors.append("amount: must be a number")
        return 0.0
    if not math.isfinite(amount) or amount <= 0:
        errors.append("amount: must be greater than 0")
    elif amount > AMOUNT_MAX:
        errors.append("amount: exceeds the allowed limit")
    return round(amount, 2)


def _parse_mode(value: Any, errors: List[str]) -> AmountMode:
    if value is None or value == "":
        return AmountMode.TAX_INCLUDED
    try:
        return AmountMode(str(value))
    except ValueError:
        errors.append(f"amount_mode: must be one of {', '.join(m.value for m in AmountMode)}")
        return AmountMode.TAX_INCLUDED


def parse_record(raw: Dict[str, Any]) -> OrderRecord:
    """Validate one raw mapping and build an OrderRecord; ValueError lists every bad field."""
    data = _canonical(raw)
    errors: List[str] = []

    folio = str(data.get("folio") or "")
    if not folio:
        errors.append("folio: required")
    elif len(folio) > FOLIO_MAX_LEN:
        errors.append(f"folio: at most {FOLIO_MAX_LEN} characters")
    elif not FOLIO_RE.match(folio):
        errors.append("folio: only letters, digits and hyphens")

    description = str(data.get("description") or "")
    if len(description) < DESCRIPTION_MIN_LEN:
        errors.append(f"description: at least {DESCRIPTION_MIN_LEN} characters")
    elif len(description) > DESCRIPTION_MAX_LEN:
        errors.append(f"description: at most {DESCRIPTION_MAX_LEN} characters")

    amount = _parse_amount(data.get("amount"), errors)
    mode = _parse_mode(data.get("amount_mode"), errors)

    created = _optional_text(data.get("created_date"))
    if created is None:
        errors.append("created_date: required")
    elif parse_date(created) is None:
        errors.append("created_date: invalid date")

    min_pay = _optional_text(data.get("min_pay_date"))
    max_pay = _optional_text(data.get("max_pay_date"))
    min_parsed = parse_date(min_pay) if min_pay else None
    max_parsed = parse_date(max_pay) if max_pay else None
    if min_pay and min_parsed is None:
        errors.append("min_pay_date: invalid date")
    if max_pay and max_parsed is None:
        errors.append("max_pay_date: invalid date")
    if min_parsed and max_parsed and min_parsed > max_parsed:
        errors.append("max_pay_date: minimum payment date must be on or before the maximum")

    authorizer = str(data.get("authorizer") or "")
    if authorizer not in AUTHORIZERS:
        errors.append(f"authorizer: must be one of {', '.join(AUTHORIZERS)}")

    comments = str(data.get("comments") or "")
    if len(comments) > COMMENTS_MAX_LEN:
        errors.append(f"comments: at most {COMMENTS_MAX_LEN} characters")

    if errors:
        label = folio or "<no folio>"
        raise ValueError(f"Invalid order {label}: " + "; ".join(errors))

    return OrderRecord(
        folio=folio,
        description=description,
        amount=amount,
        amount_mode=mode,
        created_date=created,
        min_pay_date=min_pay,
        max_pay_date=max_pay,
        authorizer=authorizer,
        comments=comments,
    )


def load_record(json_path: Path) -> OrderRecord:
    if not json_path.exists():
        raise FileNotFoundError(f"Record not found: {json_path}")
    with json_path.open("r", encoding="utf-8") as handle:
        try:
            raw = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Record is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise ValueError("Record must be a JSON object")
    return parse_record(raw)


def load_rows(csv_path: Path) -> List[dict]:
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV not found: {csv_path}")
    with csv_path.open("r", encoding="utf-8-sig") as handle:
        reader = csv.DictReader(handle)
        if reader.fieldnames is None:
            raise ValueError("CSV has no header")
        columns = {FIELD_ALIASES.get(name.strip(), name.strip()) for name in reader.fieldnames}
        missing = REQUIRED_COLUMNS - columns
        if missing:
            raise ValueError(f"CSV missing columns: {', '.join(sorted(missing))}")
        rows = [row for row in reader if any(isinstance(v, str) and v.strip() for v in row.values())]
    if not rows:
        raise ValueError("CSV has no data rows")
    return rows


def load_records(csv_path: Path) -> List[OrderRecord]:
    records: List[OrderRecord] = []
    seen = set()
    for row in load_rows(csv_path):
        record = parse_record(row)
        key = record.folio.lower()
        if key in seen:
            raise ValueError(f"Duplicate folio in CSV: {record.folio}")
        seen.add(key)
        records.append(record)
    return records
