"""DRF exception handler producing one error envelope for every failure.

Shape::

    {
        "type": "validation_error" | "client_error" | "server_error",
        "errors": [{"code": "...", "detail": "...", "attr": "field" | null}]
    }

Domain errors are translated by ``kind``; Pydantic validation errors raised
while building DTOs become ``400``; everything DRF already knows about
(authentication, parse errors, 404 routing) is re-shaped into the envelope.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from modules.core.exceptions import DomainError, ErrorKind

logger = structlog.get_logger(__name__)

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.WRITE_FAILED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _error_type(status_code: int) -> str:
    if status_code == status.HTTP_400_BAD_REQUEST:
        return "validation_error"
    if status_code >= 500:
        return "server_error"
    return "client_error"


def _envelope(status_code: int, errors: List[Dict[str, Any]]) -> Response:
    return Response(
        {"type": _error_type(status_code), "errors": errors},
        status=status_code,
    )


def _error(code: str, detail: str, attr: Optional[str] = None) -> Dict[str, Any]:
    return {"code": code, "detail": detail, "attr": attr}


def _flatten_drf_detail(data: Any, default_code: str, attr: Optional[str] = None):
    """Walk a DRF ``ErrorDetail`` tree and yield envelope entries."""
    if isinstance(data, dict):
        for key, value in data.items():
            child = None if key in ("detail", "non_field_errors") else key
            if attr and child:
                child = f"{attr}.{child}"
            yield from _flatten_drf_detail(value, default_code, child or attr)
    elif isinstance(data, list):
        for item in data:
            yield from _flatten_drf_detail(item, default_code, attr)
    else:
        yield _error(getattr(data, "code", default_code), str(data), attr)


def api_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    if isinstance(exc, DomainError):
        status_code = STATUS_BY_KIND[exc.kind]
        if exc.kind is ErrorKind.WRITE_FAILED:
            logger.error("api.write_failed", error=exc.message)
        return _envelope(status_code, [_error(exc.kind.value, exc.message)])

    if isinstance(exc, PydanticValidationError):
        errors = [
            _error(
                err["type"],
                err["msg"],
                ".".join(str(part) for part in err["loc"]) or None,
            )
            for err in exc.errors()
        ]
        return _envelope(status.HTTP_400_BAD_REQUEST, errors)

    response = drf_exception_handler(exc, context)
    if response is None:
        return None

    default_code = (
        exc.default_code if isinstance(exc, APIException) else "error"
    )
    errors = list(_flatten_drf_detail(response.data, default_code))
    response.data = {"type": _error_type(response.status_code), "errors": errors}
    return response
