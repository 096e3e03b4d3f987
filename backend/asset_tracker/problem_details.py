"""RFC 7807 Problem Details helpers."""
from __future__ import annotations

from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .domain_errors import DomainError, InvalidQuantityError, validation_error


def build_problem_details_response(exc: DomainError) -> JSONResponse:
    """Render DomainError as RFC 7807 payload with stable domain code."""
    try:
        title = HTTPStatus(exc.http_status).phrase
    except ValueError:
        title = "Domain Error"

    payload: dict[str, object] = {
        "type": f"https://api.asset-tracker.local/problems/{exc.code.lower()}",
        "title": title,
        "status": exc.http_status,
        "detail": exc.message,
        "code": exc.code,
    }
    if exc.details is not None:
        payload["details"] = exc.details

    headers = {"WWW-Authenticate": "Bearer"} if exc.http_status == 401 else None
    return JSONResponse(
        status_code=exc.http_status,
        content=payload,
        media_type="application/problem+json",
        headers=headers,
    )


async def _handle_domain_error(_: Request, exc: DomainError) -> JSONResponse:
    return build_problem_details_response(exc)


def request_validation_problem(exc: RequestValidationError) -> DomainError:
    """Map request parsing failures onto domain errors.

    A quantity that is not an integer is an INVALID_QUANTITY like any other
    bad quantity; everything else is a plain VALIDATION_ERROR.
    """
    errors = [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]
    quantity_errors = [error for error in errors if error["loc"] and error["loc"][-1] == "quantity"]
    if quantity_errors:
        return InvalidQuantityError(details={"errors": quantity_errors})
    return validation_error("Request validation failed", details={"errors": errors})


async def _handle_request_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    return build_problem_details_response(request_validation_problem(exc))


def register_problem_details(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation_error)
