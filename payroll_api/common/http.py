# payroll_api/common/http.py
from flask import jsonify


def ok(data=None, status=200, **meta):
    payload = {"success": True, "data": data}
    if meta:
        payload["meta"] = meta
    return jsonify(payload), status


def batch(results, errors, skipped=(), **meta):
    """Envelope for per-employee batch work: 200 when clean, 207 (Multi-Status) when any item failed."""
    data = {"results": list(results), "errors": list(errors), "skipped": list(skipped)}
    return ok(data, status=207 if data["errors"] else 200, **meta)


def fail(message="Bad Request", status=400, code=None, detail=None, errors=None):
    err = {"message": message}
    if code:
        err["code"] = code
    if detail:
        err["detail"] = detail
    if errors:
        err["errors"] = errors
    return jsonify({"success": False, "error": err}), status
