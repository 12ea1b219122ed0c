"""Map domain exceptions to HTTP responses"""

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from smartshop.api.dependencies import get_request_id
from smartshop.domain.exceptions import BusinessRuleViolation, NotFoundError, ValidationFailure


def _error_response(request: Request, status_code: int, exc: Exception) -> JSONResponse:
    logging.warning(
        f"{type(exc).__name__}: {exc}",
        extra={"request_id": get_request_id(request), "path": request.url.path, "status": status_code},
    )
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    """NotFound -> 404, business rule -> 422, validation -> 400"""

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error_response(request, 404, exc)

    @app.exception_handler(BusinessRuleViolation)
    async def business_rule_handler(request: Request, exc: BusinessRuleViolation):
        return _error_response(request, 422, exc)

    @app.exception_handler(ValidationFailure)
    async def validation_handler(request: Request, exc: ValidationFailure):
        return _error_response(request, 400, exc)
