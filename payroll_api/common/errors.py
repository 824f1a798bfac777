# payroll_api/common/errors.py
from flask import Blueprint, current_app
from werkzeug.exceptions import HTTPException
from sqlalchemy.exc import IntegrityError
from payroll_api.common.http import fail

bp_errors = Blueprint("errors", __name__)


class APIError(Exception):
    """Custom API Error class."""
    def __init__(self, code, message, status_code=400, payload=None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.payload = payload


class ValidationError(APIError):
    """Input breaks a payroll rule (bad Basic Salary, percentage out of range, ...)."""
    def __init__(self, message, payload=None):
        super().__init__("VALIDATION_ERROR", message, status_code=422, payload=payload)


class ComponentInUseError(ValidationError):
    def __init__(self, message, payload=None):
        super().__init__(message, payload=payload)
        self.code = "COMPONENT_IN_USE"
        self.status_code = 409


class ComponentReferenceError(APIError):
    """An assigned component id has no definition in the component library."""
    def __init__(self, component_id, payload=None):
        super().__init__(
            "REFERENCE_ERROR",
            f"Salary component {component_id!r} not found in component library",
            status_code=422,
            payload=payload,
        )
        self.component_id = component_id


class NotFoundError(APIError):
    def __init__(self, message, payload=None):
        super().__init__("NOT_FOUND", message, status_code=404, payload=payload)


class PartialBatchError(APIError):
    """
    Raised for a bulk run where at least one employee failed.
    Carries the successful payslips alongside the per-employee errors.
    """
    def __init__(self, payslips, errors):
        super().__init__(
            "PARTIAL_BATCH",
            f"Payroll generated with {len(errors)} error(s)",
            status_code=207,
            payload={"errors": [e.to_dict() for e in errors]},
        )
        self.payslips = list(payslips)
        self.errors = list(errors)


@bp_errors.app_errorhandler(HTTPException)
def _http(e: HTTPException):
    return fail(message=e.description or "HTTP error", status=e.code or 400)

@bp_errors.app_errorhandler(IntegrityError)
def _integrity(e: IntegrityError):
    # 409 for unique/FK violations
    return fail(message="Conflict / integrity error", status=409, code="CONSTRAINT_ERROR",
                detail=str(e.orig) if getattr(e, "orig", None) else str(e))

@bp_errors.app_errorhandler(APIError)
def _api_error(e: APIError):
    return fail(message=e.message, status=e.status_code, code=e.code, detail=e.payload)

@bp_errors.app_errorhandler(Exception)
def _unhandled(e: Exception):
    current_app.logger.exception(e)
    return fail(message="Internal Server Error", status=500)
