"""Exception handlers turning validation failures into 400 field lists."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.responses import JSONResponse

from src.servemee.core.validation.errors import DtoValidationError, field_errors


async def _dto_validation_error(request: Request, exc: DtoValidationError) -> JSONResponse:
    logger.bind(fields=sorted(exc.fields)).info("request.validation_error")
    return JSONResponse(status_code=400, content=exc.to_response())


async def _request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return await _dto_validation_error(
        request, DtoValidationError(field_errors(exc.errors()))
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DtoValidationError, _dto_validation_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
