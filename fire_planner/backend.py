"""REST backend for the FIRE planner session."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Dict, List

from flask import Flask, Response, jsonify, request

from fire_planner.config import Settings, configure_logging, load_settings
from fire_planner.data_model import (
    ApplicationState,
    InflationTableModel,
    InvestmentTableModel,
)
from fire_planner.data_model.base import TableModel
from fire_planner.data_model.validation import (
    ValidationError,
    ValidationIssue,
    raise_for_issues,
    suggest_tags,
    validate_inflation,
    validate_investment,
    validate_plan_parameters,
    warnings_only,
)
from fire_planner.engine.aggregate import (
    TIME_WINDOW_DAYS,
    aggregate_period,
    filter_time_window,
    portfolio_summary,
    records_to_frame,
    tag_breakdown,
)
from fire_planner.engine.planner import limit_date_for, reached_limit
from fire_planner.engine.reconcile import compute_variance, merge_with_plan, value_to_price
from fire_planner.engine.reducer import Action, ActionType
from fire_planner.engine.state import SessionState
from fire_planner.engine.storage import (
    INVESTMENT_TEXT_COLUMNS,
    SnapshotError,
    inflation_from_dict,
    inflation_from_rows,
    inflation_to_rows,
    investment_from_dict,
    investment_to_dict,
    investments_from_rows,
    investments_to_rows,
    loads_snapshot,
    normalize_plan_keys,
    parse_csv_text,
    plan_parameters_from_dict,
    plan_parameters_to_dict,
    records_to_csv,
    snapshot_from_dict,
    snapshot_to_dict,
)

logger = logging.getLogger(__name__)

INVESTMENT_MODEL = InvestmentTableModel()
INFLATION_MODEL = InflationTableModel()

FREQ_OPTIONS = [
    {"label": "Monthly", "value": "M"},
    {"label": "Quarterly", "value": "Q"},
    {"label": "Yearly", "value": "Y"},
]


def _model_payload(model: TableModel) -> Dict[str, Any]:
    columns: List[Dict[str, Any]] = []
    for col in model.columns:
        columns.append(
            {
                "field": col.field,
                "label": col.label,
                "kind": col.kind,
                "default": col.default,
                "options": col.options or [],
                "min": col.min_value,
                "max": col.max_value,
                "step": col.step,
                "format": col.format,
                "help": col.help,
            }
        )
    return {
        "name": model.name,
        "columns": columns,
        "defaults": model.create_default_df().to_dict("records"),
    }


def _issues_response(message: str, exc: ValidationError):
    return jsonify({"error": message, "issues": [issue.to_dict() for issue in exc.issues]}), 400


def _records_from_payload(payload: Any, key: str) -> List[dict]:
    if isinstance(payload, dict) and isinstance(payload.get(key), list):
        payload = payload[key]
    if isinstance(payload, dict):
        return [payload]
    if isinstance(payload, list):
        return payload
    return []


def _state_payload(state: ApplicationState) -> Dict[str, Any]:
    payload = snapshot_to_dict(state)
    payload["reachedLimit"] = bool(state.investment_plan) and reached_limit(state.plan_parameters, state.retire_date)
    payload["tags"] = suggest_tags(state.investments)
    return payload


def _merged_row(record) -> Dict[str, Any]:
    row = investment_to_dict(record)
    row["valueToPrice"] = value_to_price(record)
    return row


def _variance_payload(rows) -> List[Dict[str, Any]]:
    return [
        {
            "recordDate": row.record_date.isoformat(),
            "plannedInvested": row.planned_invested,
            "plannedValue": row.planned_value,
            "actualInvested": row.actual_invested,
            "actualValue": row.actual_value,
            "toPay": row.to_pay,
            "toEarn": row.to_earn,
        }
        for row in rows
    ]


def _frame_records(df) -> List[Dict[str, Any]]:
    if df.empty:
        return []
    out = df.copy()
    out["RecordDate"] = out["RecordDate"].dt.strftime("%Y-%m-%d")
    return out.to_dict(orient="records")


def _plan_warnings(state: ApplicationState, issues: List[ValidationIssue]) -> List[Dict[str, str]]:
    warnings = [issue.to_dict() for issue in warnings_only(issues)]
    if reached_limit(state.plan_parameters, state.retire_date):
        limit = limit_date_for(state.plan_parameters.start_date)
        warnings.append(
            ValidationIssue(
                "retireDate",
                f"Target not reached before {limit.isoformat()}; the plan may not be realistic",
                severity="warning",
            ).to_dict()
        )
    return warnings


def create_app(session: SessionState | None = None, settings: Settings | None = None) -> Flask:
    settings = settings or load_settings()
    session = session if session is not None else SessionState(settings.state_path)

    app = Flask(__name__)
    app.config["FIRE_SESSION"] = session

    @app.after_request
    def apply_cors_headers(response):
        response.headers["Access-Control-Allow-Origin"] = "*"
        response.headers["Access-Control-Allow-Methods"] = "GET,POST,DELETE,OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response

    @app.get("/api/health")
    def healthcheck():
        return jsonify({"status": "ok"})

    @app.get("/api/schema")
    def get_schema():
        defaults = plan_parameters_to_dict(session.state.plan_parameters)
        defaults["currency"] = settings.currency
        payload = {
            "planDefaults": defaults,
            "investments": _model_payload(INVESTMENT_MODEL),
            "inflation": _model_payload(INFLATION_MODEL),
            "freqOptions": FREQ_OPTIONS,
            "timeWindows": list(TIME_WINDOW_DAYS.keys()),
        }
        return jsonify(payload)

    @app.get("/api/state")
    def get_state():
        return jsonify(_state_payload(session.state))

    @app.post("/api/state/reset")
    def reset_state():
        session.reset()
        return jsonify(_state_payload(session.state))

    @app.post("/api/state/load")
    def load_state():
        data = request.get_json(silent=True)
        if data is None:
            return jsonify({"error": "Snapshot body must be JSON."}), 400
        try:
            payload = snapshot_from_dict(data)
        except SnapshotError as exc:
            return jsonify({"error": str(exc)}), 400
        session.dispatch(Action(ActionType.LOAD_SNAPSHOT, payload))
        return jsonify(_state_payload(session.state))

    @app.post("/api/plan")
    def update_plan():
        payload = request.get_json(silent=True) or {}
        if not isinstance(payload, dict):
            return jsonify({"error": "Plan parameters must be an object."}), 400
        merged = {**plan_parameters_to_dict(session.state.plan_parameters), **normalize_plan_keys(payload)}
        try:
            params = plan_parameters_from_dict(merged)
        except SnapshotError as exc:
            return jsonify({"error": str(exc)}), 400
        issues = validate_plan_parameters(params)
        try:
            raise_for_issues(issues)
        except ValidationError as exc:
            return _issues_response("Invalid plan parameters.", exc)
        state = session.dispatch(Action(ActionType.RECOMPUTE_PLAN, params))
        logger.info("Plan recomputed: %d records, retire date %s", len(state.investment_plan), state.retire_date)
        return jsonify(
            {
                "planParameters": plan_parameters_to_dict(state.plan_parameters),
                "retireDate": state.retire_date.isoformat(),
                "investmentPlan": [investment_to_dict(record) for record in state.investment_plan],
                "warnings": _plan_warnings(state, issues),
            }
        )

    @app.get("/api/investments")
    def list_investments():
        state = session.state
        return jsonify({"investments": investments_to_rows(state.investments), "tags": suggest_tags(state.investments)})

    @app.post("/api/investments")
    def add_investments():
        rows = _records_from_payload(request.get_json(silent=True), "investments")
        if not rows:
            return jsonify({"error": "At least one investment record is required."}), 400
        try:
            records = [investment_from_dict(row, f"investments[{i}]") for i, row in enumerate(rows)]
        except SnapshotError as exc:
            return jsonify({"error": str(exc)}), 400
        issues: List[ValidationIssue] = []
        for index, record in enumerate(records):
            issues.extend(validate_investment(record, f"investments[{index}]"))
        try:
            raise_for_issues(issues)
        except ValidationError as exc:
            return _issues_response("Invalid investment records.", exc)
        state = session.dispatch(Action(ActionType.RECORD_INVESTMENTS, [*session.state.investments, *records]))
        return jsonify({"investments": investments_to_rows(state.investments), "tags": suggest_tags(state.investments)})

    @app.delete("/api/investments/<int:index>")
    def delete_investment(index: int):
        current = session.state.investments
        if index >= len(current):
            return jsonify({"error": "Investment not found."}), 404
        remaining = [record for i, record in enumerate(current) if i != index]
        state = session.dispatch(Action(ActionType.RECORD_INVESTMENTS, remaining))
        return jsonify({"investments": investments_to_rows(state.investments)})

    @app.get("/api/inflation")
    def list_inflation():
        return jsonify({"inflation": inflation_to_rows(session.state.inflation_observations)})

    @app.post("/api/inflation")
    def add_inflation():
        rows = _records_from_payload(request.get_json(silent=True), "inflation")
        if not rows:
            return jsonify({"error": "At least one inflation record is required."}), 400
        try:
            records = [inflation_from_dict(row, f"inflation[{i}]") for i, row in enumerate(rows)]
        except SnapshotError as exc:
            return jsonify({"error": str(exc)}), 400
        known = list(session.state.inflation_observations)
        issues: List[ValidationIssue] = []
        for index, record in enumerate(records):
            issues.extend(validate_inflation(record, known, f"inflation[{index}]"))
            known.append(record)
        try:
            raise_for_issues(issues)
        except ValidationError as exc:
            return _issues_response("Invalid inflation records.", exc)
        state = session.dispatch(Action(ActionType.RECORD_INFLATION, known))
        return jsonify({"inflation": inflation_to_rows(state.inflation_observations)})

    @app.delete("/api/inflation/<int:index>")
    def delete_inflation(index: int):
        current = session.state.inflation_observations
        if index >= len(current):
            return jsonify({"error": "Inflation record not found."}), 404
        remaining = [record for i, record in enumerate(current) if i != index]
        state = session.dispatch(Action(ActionType.RECORD_INFLATION, remaining))
        return jsonify({"inflation": inflation_to_rows(state.inflation_observations)})

    @app.get("/api/status")
    def get_status():
        freq = (request.args.get("freq") or "M").upper()
        window = (request.args.get("window") or "all").lower()
        if freq not in {opt["value"] for opt in FREQ_OPTIONS}:
            return jsonify({"error": f"Unknown frequency: {freq}"}), 400
        if window not in TIME_WINDOW_DAYS:
            return jsonify({"error": f"Unknown time window: {window}"}), 400

        state = session.state
        merged = merge_with_plan(state.investments, state.investment_plan)
        summary = portfolio_summary(state.investments)
        frame = filter_time_window(records_to_frame(merged), window)
        return jsonify(
            {
                "merged": [_merged_row(record) for record in merged],
                "variance": _variance_payload(compute_variance(merged)),
                "summary": {
                    "totalInvested": summary.total_invested,
                    "totalCurrent": summary.total_current,
                    "totalGains": summary.total_gains,
                    "totalReturn": summary.total_return_pct,
                },
                "tags": [
                    {
                        "tag": row.tag,
                        "invested": row.invested,
                        "current": row.current,
                        "gain": row.gain,
                        "returnPct": row.return_pct,
                    }
                    for row in tag_breakdown(state.investments)
                ],
                "freq": freq,
                "window": window,
                "periods": _frame_records(aggregate_period(frame, freq=freq)),
            }
        )

    @app.get("/api/export")
    def export_state():
        stamp = dt.date.today().strftime("%Y%m%d")
        return Response(
            session.export_json(),
            mimetype="application/json",
            headers={"Content-Disposition": f"attachment; filename=fire_data_{stamp}.json"},
        )

    @app.get("/api/export/csv")
    def export_csv():
        table = (request.args.get("table") or "investments").lower()
        state = session.state
        if table == "investments":
            rows = investments_to_rows(state.investments)
        elif table == "inflation":
            rows = inflation_to_rows(state.inflation_observations)
        else:
            return jsonify({"error": f"Unknown table: {table}"}), 400
        if not rows:
            return jsonify({"error": "No records to export."}), 400
        return Response(
            records_to_csv(rows),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={table}.csv"},
        )

    @app.post("/api/import")
    def import_file():
        """Upload a JSON snapshot or a CSV table.

        Form fields:
          - file: multipart file (.json or .csv)
          - table: for CSV uploads, "investments" (default) or "inflation"
        """
        if "file" not in request.files:
            return jsonify({"error": "Missing file"}), 400
        upload = request.files["file"]
        filename = (upload.filename or "").lower()
        data = upload.read()
        try:
            if filename.endswith(".json"):
                payload = loads_snapshot(data)
                state = session.dispatch(Action(ActionType.LOAD_SNAPSHOT, payload))
                logger.info("Imported snapshot %s", upload.filename)
                return jsonify({"status": "imported", "state": _state_payload(state)})
            if filename.endswith(".csv"):
                return _import_csv(data, (request.form.get("table") or "investments").lower())
        except SnapshotError as exc:
            return jsonify({"error": str(exc)}), 400
        return jsonify({"error": "Unsupported file type. Please upload a JSON or CSV file."}), 400

    def _import_csv(data: bytes, table: str):
        if table == "investments":
            rows = parse_csv_text(data, INVESTMENT_TEXT_COLUMNS)
            records = investments_from_rows(rows)
            issues: List[ValidationIssue] = []
            for index, record in enumerate(records):
                issues.extend(validate_investment(record, f"row {index + 1}"))
            try:
                raise_for_issues(issues)
            except ValidationError as exc:
                return _issues_response("Invalid investment rows.", exc)
            state = session.dispatch(Action(ActionType.RECORD_INVESTMENTS, records))
            return jsonify({"status": "imported", "investments": investments_to_rows(state.investments)})
        if table == "inflation":
            records = inflation_from_rows(parse_csv_text(data))
            issues = []
            for index, record in enumerate(records):
                issues.extend(validate_inflation(record, records[:index], f"row {index + 1}"))
            try:
                raise_for_issues(issues)
            except ValidationError as exc:
                return _issues_response("Invalid inflation rows.", exc)
            state = session.dispatch(Action(ActionType.RECORD_INFLATION, records))
            return jsonify({"status": "imported", "inflation": inflation_to_rows(state.inflation_observations)})
        return jsonify({"error": f"Unknown table: {table}"}), 400

    return app


if __name__ == "__main__":
    settings = load_settings()
    configure_logging(settings.log_level)
    create_app(settings=settings).run(host=settings.host, debug=settings.debug, port=settings.port)
