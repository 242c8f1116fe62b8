"""
Translation of service outcomes into HTTP responses.
"""

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from campus_reservations.config.logging import get_logger
from campus_reservations.core.exceptions import BaseAppException
from campus_reservations.services.base import ServiceResult

logger = get_logger(__name__)


def result_response(result: ServiceResult[Any], success_status: int = status.HTTP_200_OK) -> JSONResponse:
    """
    Successful results return their data as the body; failures return
    ``{"error": {...}}`` with the status code carried by the service error.
    """
    if result.is_success:
        return JSONResponse(status_code=success_status, content=jsonable_encoder(result.data))

    error = result.error
    return JSONResponse(
        status_code=error.status_code if error else status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=jsonable_encoder({"error": error.to_dict() if error else {"message": result.message}}),
    )


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    logger.info(
        f"{request.method} {request.url.path} failed: {exc.error_code.value}",
        extra={"request_id": getattr(request.state, "request_id", None)},
    )
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BaseAppException, app_exception_handler)
