"""
Обработчики ошибок (Exception Handlers) для API.

Все ошибки доходят до клиента в одном формате (ErrorResponse) с одним
человекочитаемым сообщением. Повторных попыток этот слой не делает.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ..core.exceptions import (
    BackupFormatError,
    NeonTodoError,
    NotFoundError,
    ProtectedResourceError,
    ValidationError,
)
from ..core.logging import get_logger
from .schemas import ErrorBody, ErrorDetail, ErrorResponse

logger = get_logger(__name__)

# Доменное исключение -> HTTP статус
STATUS_BY_ERROR: dict[type[NeonTodoError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    BackupFormatError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ProtectedResourceError: status.HTTP_409_CONFLICT,
}


def error_response(
    status_code: int, code: str, message: str, details: list[ErrorDetail] | None = None
) -> JSONResponse:
    body = ErrorResponse(error=ErrorBody(code=code, message=message, details=details))
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def domain_error_handler(request: Request, exc: NeonTodoError) -> JSONResponse:
    """
    Обработчик для доменных ошибок сервисного слоя.

    Отказ в операции (валидация, "Входящие", формат бэкапа) - это не сбой,
    логируем как warning.
    """
    status_code = next(
        (code for cls, code in STATUS_BY_ERROR.items() if isinstance(exc, cls)),
        status.HTTP_400_BAD_REQUEST,
    )
    logger.warning(f"API Error: {exc.code} - {exc}")
    return error_response(status_code, exc.code, str(exc))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Обработчик для ошибок валидации Pydantic (422).

    Преобразуем формат Pydantic в наш:
    {"error": {"code": "VALIDATION_ERROR", "message": "...", "details": [{"field": "name", ...}]}}
    """
    logger.warning(f"Validation Error: {exc.errors()}")

    details = []
    for error in exc.errors():
        field_path = error.get("loc", [])
        field_name = field_path[-1] if field_path else "unknown"

        # Если поле в body, убираем "body" из пути
        if len(field_path) > 1 and field_path[0] == "body":
            field_name = ".".join(str(p) for p in field_path[1:])

        details.append(ErrorDetail(field=str(field_name), message=error.get("msg", "Invalid value")))

    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Request validation failed",
        details,
    )


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """
    Обработчик для ошибок хранилища (500).

    Транзакция к этому моменту уже откачена. Детали драйвера
    клиенту не показываем.
    """
    logger.error(f"Storage Error: {type(exc).__name__}: {exc}", exc_info=True)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "STORAGE_ERROR",
        "The operation failed and was rolled back",
    )


def register_error_handlers(app: FastAPI) -> None:
    """
    Регистрирует все error handlers в приложении FastAPI.

    Вызывается из main.py.
    """
    app.add_exception_handler(NeonTodoError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)

    logger.info("Error handlers registered")
