# engine/storage.py
"""JSON snapshot and CSV file formats, plus on-disk session persistence.

The JSON export is a structural dump of the application state with camelCase
keys and ISO dates. Importing reverses it: every date-valued field is parsed
back into a `datetime.date` before the payload is handed to the reducer.
Exports written by the older flat layout (``startingSIP``, ``annualInflation``
and friends) are accepted as well.
"""
from __future__ import annotations

import csv
import datetime as dt
import io
import json
import logging
import math
import os
import re
from typing import Any, Dict, Iterable, List

from ..dates import parse_date
from ..data_model import (
    ApplicationState,
    InflationObservation,
    Investment,
    PlanParameters,
)
from ..data_model.plan import DEFAULT_CURRENCY

logger = logging.getLogger(__name__)

FORMAT_VERSION = "1.0"
_INT_PATTERN = re.compile(r"^[+-]?\d+$")
# CSV columns whose cells stay text on import
INVESTMENT_TEXT_COLUMNS = ("tag",)


class SnapshotError(ValueError):
    """Raised when an imported document cannot be turned into records."""


def ensure_user_data_dir(path: str) -> None:
    folder = os.path.dirname(path)
    if folder and not os.path.exists(folder):
        os.makedirs(folder, exist_ok=True)


def _sanitize_json_compat(value: Any):
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return value
    if isinstance(value, dict):
        return {key: _sanitize_json_compat(val) for key, val in value.items()}
    if isinstance(value, (list, tuple)):
        return [_sanitize_json_compat(item) for item in value]
    return value


def _extract_payload_value(payload: dict, *keys: str, default=None):
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return default


def _as_float(raw: Any, path: str) -> float:
    if isinstance(raw, bool):
        raise SnapshotError(f"{path}: expected a number")
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise SnapshotError(f"{path}: expected a number, got {raw!r}") from exc


def _as_date(raw: Any, path: str) -> dt.date:
    try:
        return parse_date(raw)
    except (TypeError, ValueError) as exc:
        raise SnapshotError(f"{path}: unparseable date {raw!r}") from exc


def _as_list(raw: Any, path: str) -> list:
    if not isinstance(raw, list):
        raise SnapshotError(f"{path}: expected an array")
    return raw


def _as_dict(raw: Any, path: str) -> dict:
    if not isinstance(raw, dict):
        raise SnapshotError(f"{path}: expected an object")
    return raw


# ---------------------------------------------------------------------------
# record <-> dict


def investment_to_dict(record: Investment) -> Dict[str, Any]:
    return {
        "investedAmount": record.invested_amount,
        "currentValue": record.current_value,
        "recordDate": record.record_date.isoformat(),
        "tag": record.tag,
    }


def inflation_to_dict(record: InflationObservation) -> Dict[str, Any]:
    return {
        "inflation": record.inflation,
        "recordDate": record.record_date.isoformat(),
    }


def plan_parameters_to_dict(params: PlanParameters) -> Dict[str, Any]:
    return {
        "startDate": params.start_date.isoformat(),
        "startingContribution": params.starting_contribution,
        "targetIncome": params.target_income,
        "currency": params.currency,
        "expectedInflation": params.expected_inflation,
        "expectedGrowthRate": params.expected_growth_rate,
        "stepUpRate": params.step_up_rate,
    }


def investment_from_dict(row: dict, path: str = "investment") -> Investment:
    row = _as_dict(row, path)
    tag = _csv_cell(_extract_payload_value(row, "tag", default="")).strip()
    return Investment(
        invested_amount=_as_float(_extract_payload_value(row, "investedAmount", default=0.0), f"{path}.investedAmount"),
        current_value=_as_float(_extract_payload_value(row, "currentValue", default=0.0), f"{path}.currentValue"),
        record_date=_as_date(row.get("recordDate"), f"{path}.recordDate"),
        tag=tag,
    )


def inflation_from_dict(row: dict, path: str = "inflation") -> InflationObservation:
    row = _as_dict(row, path)
    return InflationObservation(
        inflation=_as_float(_extract_payload_value(row, "inflation", default=0.0), f"{path}.inflation"),
        record_date=_as_date(row.get("recordDate"), f"{path}.recordDate"),
    )


PLAN_KEY_ALIASES = {
    "startingSIP": "startingContribution",
    "incomeAtMaturity": "targetIncome",
    "expectedAnnualInflation": "expectedInflation",
    "sipGrowthRate": "stepUpRate",
}


def normalize_plan_keys(data: dict) -> Dict[str, Any]:
    """Rename legacy plan keys; a current key present alongside its alias wins."""
    out: Dict[str, Any] = {}
    for key, value in data.items():
        name = PLAN_KEY_ALIASES.get(key, key)
        if value is None or (name != key and data.get(name) is not None):
            continue
        out[name] = value
    return out


def plan_parameters_from_dict(data: dict, path: str = "planParameters") -> PlanParameters:
    """Build plan parameters; missing fields fall back to their defaults."""
    data = normalize_plan_keys(_as_dict(data, path))
    start_raw = data.get("startDate")
    start_date = dt.date.today() if start_raw is None else _as_date(start_raw, f"{path}.startDate")

    def number(key: str) -> float:
        return _as_float(_extract_payload_value(data, key, default=0.0), f"{path}.{key}")

    return PlanParameters(
        start_date=start_date,
        starting_contribution=number("startingContribution"),
        target_income=number("targetIncome"),
        currency=str(_extract_payload_value(data, "currency", default=DEFAULT_CURRENCY)),
        expected_inflation=number("expectedInflation"),
        expected_growth_rate=number("expectedGrowthRate"),
        step_up_rate=number("stepUpRate"),
    )


# ---------------------------------------------------------------------------
# JSON snapshot

_LEGACY_PLAN_KEYS = (
    "startDate",
    "startingSIP",
    "incomeAtMaturity",
    "currency",
    "expectedAnnualInflation",
    "expectedGrowthRate",
    "sipGrowthRate",
)


def snapshot_to_dict(state: ApplicationState, export_date: dt.datetime | None = None) -> Dict[str, Any]:
    stamp = export_date or dt.datetime.now(dt.timezone.utc)
    return {
        "version": FORMAT_VERSION,
        "exportDate": stamp.isoformat(),
        "planParameters": plan_parameters_to_dict(state.plan_parameters),
        "retireDate": state.retire_date.isoformat(),
        "investments": [investment_to_dict(record) for record in state.investments],
        "inflationObservations": [inflation_to_dict(record) for record in state.inflation_observations],
        "investmentPlan": [investment_to_dict(record) for record in state.investment_plan],
    }


def dumps_snapshot(state: ApplicationState) -> str:
    return json.dumps(_sanitize_json_compat(snapshot_to_dict(state)), indent=2, allow_nan=False)


def snapshot_from_dict(data: Any) -> Dict[str, Any]:
    """Rehydrate an exported document into a LOAD_SNAPSHOT payload.

    Only the fields present in the document appear in the payload, so the
    reducer fills the rest from the default state.
    """
    data = _as_dict(data, "snapshot")
    payload: Dict[str, Any] = {}

    if "planParameters" in data:
        payload["plan_parameters"] = plan_parameters_from_dict(data["planParameters"])
    elif any(key in data for key in _LEGACY_PLAN_KEYS):
        payload["plan_parameters"] = plan_parameters_from_dict(
            {key: data[key] for key in _LEGACY_PLAN_KEYS if key in data}, "snapshot"
        )

    if data.get("retireDate") is not None:
        payload["retire_date"] = _as_date(data["retireDate"], "retireDate")

    investments = _extract_payload_value(data, "investments", "investmentList")
    if investments is not None:
        payload["investments"] = tuple(
            investment_from_dict(row, f"investments[{index}]")
            for index, row in enumerate(_as_list(investments, "investments"))
        )

    inflation = _extract_payload_value(data, "inflationObservations", "annualInflation", "inflationList")
    if inflation is not None:
        payload["inflation_observations"] = tuple(
            inflation_from_dict(row, f"inflationObservations[{index}]")
            for index, row in enumerate(_as_list(inflation, "inflationObservations"))
        )

    plan = data.get("investmentPlan")
    if plan is not None:
        payload["investment_plan"] = tuple(
            investment_from_dict(row, f"investmentPlan[{index}]")
            for index, row in enumerate(_as_list(plan, "investmentPlan"))
        )
    return payload


def loads_snapshot(text: str | bytes) -> Dict[str, Any]:
    if isinstance(text, bytes):
        text = text.decode("utf-8-sig", errors="replace")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"Invalid JSON document: {exc}") from exc
    return snapshot_from_dict(data)


def save_snapshot(path: str, state: ApplicationState) -> None:
    ensure_user_data_dir(path)
    tmp_path = f"{path}.tmp"
    clean = _sanitize_json_compat(snapshot_to_dict(state))
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(clean, f, allow_nan=False)
    os.replace(tmp_path, path)


def load_snapshot(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw_text = f.read().strip()
            if not raw_text:
                return {}
            return loads_snapshot(raw_text)
    except (SnapshotError, OSError) as exc:
        logger.warning("Ignoring unreadable snapshot %s: %s", path, exc)
        return {}


# ---------------------------------------------------------------------------
# CSV


def _csv_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dt.date):
        return value.isoformat()
    return str(value)


def _coerce_csv_value(raw: str | None) -> Any:
    value = (raw or "").strip()
    if not value:
        return ""
    if value in ("true", "false"):
        return value == "true"
    if _INT_PATTERN.match(value):
        return int(value)
    try:
        number = float(value)
    except ValueError:
        return value
    return number if math.isfinite(number) else value


def records_to_csv(rows: List[Dict[str, Any]]) -> str:
    """Header row plus one fully quoted line per row."""
    if not rows:
        raise ValueError("Data must be a non-empty list of rows")
    headers = list(rows[0].keys())
    stream = io.StringIO()
    writer = csv.writer(stream, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_csv_cell(row.get(header)) for header in headers])
    return stream.getvalue().rstrip("\n")


def parse_csv_text(text: str | bytes, text_columns: Iterable[str] = ()) -> List[Dict[str, Any]]:
    """Rows keyed by header; values are coerced except in `text_columns`, kept as stripped text."""
    if isinstance(text, bytes):
        text = text.decode("utf-8-sig", errors="replace")
    text = text.strip()
    if not text:
        return []
    keep = set(text_columns)
    reader = csv.DictReader(io.StringIO(text))
    rows: List[Dict[str, Any]] = []
    for raw in reader:
        row: Dict[str, Any] = {}
        for key, value in raw.items():
            if key is None:
                continue
            name = str(key).strip()
            row[name] = (value or "").strip() if name in keep else _coerce_csv_value(value)
        rows.append(row)
    return rows


def investments_to_rows(records: Iterable[Investment]) -> List[Dict[str, Any]]:
    return [investment_to_dict(record) for record in records]


def inflation_to_rows(records: Iterable[InflationObservation]) -> List[Dict[str, Any]]:
    return [inflation_to_dict(record) for record in records]


def investments_from_rows(rows: Iterable[Dict[str, Any]]) -> List[Investment]:
    return [investment_from_dict(row, f"row {index + 1}") for index, row in enumerate(rows)]


def inflation_from_rows(rows: Iterable[Dict[str, Any]]) -> List[InflationObservation]:
    return [inflation_from_dict(row, f"row {index + 1}") for index, row in enumerate(rows)]
