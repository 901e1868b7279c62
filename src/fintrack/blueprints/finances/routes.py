"""Finance record routes."""

from __future__ import annotations

from typing import Any

from flask import g, jsonify, request

from ...exceptions import FinanceError, InvalidParameter
from ...extensions import get_finance_service
from ...logging_config import get_logger
from . import bp
from .auth import protect

logger = get_logger("blueprints.finances")


@bp.errorhandler(FinanceError)
def handle_finance_error(exc: FinanceError):
    """Render typed failures as JSON with their status code."""

    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc.message, extra={"path": request.path})
    return jsonify(exc.to_dict()), exc.status_code


def _json_body() -> dict[str, Any]:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise InvalidParameter("Request body must be a JSON object")
    return payload


@bp.get("/")
@protect
def list_records():
    records = get_finance_service().list_all(g.owner_id)
    return jsonify([record.to_dict() for record in records])


@bp.post("/")
@protect
def create_record():
    record = get_finance_service().create(g.owner_id, _json_body())
    return jsonify(record.to_dict()), 201


@bp.put("/<int:record_id>")
@protect
def update_record(record_id: int):
    record = get_finance_service().update(g.owner_id, record_id, _json_body())
    return jsonify(record.to_dict())


@bp.delete("/<int:record_id>")
@protect
def delete_record(record_id: int):
    get_finance_service().delete(g.owner_id, record_id)
    return jsonify({"message": "Record deleted", "id": record_id})


@bp.get("/filter")
@protect
def filter_records():
    """Filter by type, category, keyword, amount bounds and date hints."""

    records = get_finance_service().filter(g.owner_id, request.args)
    return jsonify([record.to_dict() for record in records])


@bp.get("/summary")
@protect
def summary():
    return jsonify(get_finance_service().summary(g.owner_id).to_dict())


@bp.get("/category-stats")
@protect
def category_stats():
    rows = get_finance_service().category_stats(g.owner_id, request.args)
    return jsonify([row.to_dict() for row in rows])


@bp.get("/monthly-stats")
@protect
def monthly_stats():
    rows = get_finance_service().monthly_stats(g.owner_id, request.args)
    return jsonify([row.to_dict() for row in rows])


@bp.get("/report")
@protect
def period_report():
    report = get_finance_service().period_report(g.owner_id, request.args)
    return jsonify(report.to_dict())
