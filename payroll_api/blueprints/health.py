from flask import Blueprint
from sqlalchemy import text

from payroll_api.common.http import ok
from payroll_api.extensions import db

bp = Blueprint("health", __name__, url_prefix="/api/v1/health")

@bp.get("")
def health():
    db_ok = True
    try:
        db.session.execute(text("SELECT 1"))
    except Exception:
        db_ok = False
    return ok({"status": "ok" if db_ok else "degraded", "db": db_ok})
