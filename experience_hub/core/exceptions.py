from fastapi.responses import JSONResponse

from experience_hub.core.response_code import (
    HTTP_STATUS_ERROR_CODES,
    ErrorCode,
    ResponseCode,
)


class BaseException(Exception):
    """The base exception class for the service and data access layers."""

    error_code: str = "UNKNOWN_ERROR"
    status_code: int = 500
    message: str = "Unknown Error"
    meta_data: dict = {}

    def __init__(self, message: str | None = None, meta_data: dict | None = None):
        if message:
            self.message = message
        self.meta_data = meta_data or {}
        super().__init__(self.message)

    def __repr__(self):
        return "{}(error_code: {}, status_code: {}, message: {}, meta_data: {})".format(
            self.__class__.__name__,
            self.error_code,
            self.status_code,
            self.message,
            self.meta_data,
        )

    def __str__(self):
        return "{}(error_code: {}, status_code: {}, message: {}, meta_data: {})".format(
            self.__class__.__name__,
            self.error_code,
            self.status_code,
            self.message,
            self.meta_data,
        )


def create_exception_response(execption: BaseException):
    error = {"error_code": execption.error_code, "message": execption.message}

    if execption.meta_data:
        error.update(execption.meta_data)

    headers = None
    if execption.status_code == ResponseCode.UNAUTHORIZED.value:
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=execption.status_code,
        content={"detail": error},
        headers=headers,
    )


def create_http_error_response(status_code: int, detail=None):
    """Render a framework HTTP error in the same shape as service exceptions"""
    error_code = HTTP_STATUS_ERROR_CODES.get(status_code, ErrorCode.UNKNOWN_ERROR)
    message = detail if isinstance(detail, str) and detail else error_code.value

    return JSONResponse(
        status_code=status_code,
        content={"detail": {"error_code": error_code.name, "message": message}},
    )


class RequestValidationException(BaseException):
    status_code = ResponseCode.BAD_REQUEST.value
    error_code = ErrorCode.REQUEST_VALIDATION_ERROR.name
    message = ErrorCode.REQUEST_VALIDATION_ERROR.value

    def __init__(self, errors=None):
        super().__init__(meta_data={"errors": format_validation_errors(errors)})


class ValidationException(BaseException):
    status_code = ResponseCode.BAD_REQUEST.value
    error_code = ErrorCode.VALIDATION_ERROR.name
    message = ErrorCode.VALIDATION_ERROR.value


class AuthenticationException(BaseException):
    status_code = ResponseCode.UNAUTHORIZED.value
    error_code = ErrorCode.AUTHENTICATION_REQUIRED.name
    message = ErrorCode.AUTHENTICATION_REQUIRED.value


class AuthorizationException(BaseException):
    status_code = ResponseCode.PERMISSION_DENIED.value
    error_code = ErrorCode.PERMISSION_DENIED.name
    message = ErrorCode.PERMISSION_DENIED.value


class NotFoundException(BaseException):
    status_code = ResponseCode.NOT_FOUND.value
    error_code = ErrorCode.NOT_FOUND.name
    message = ErrorCode.NOT_FOUND.value


class ConflictException(BaseException):
    status_code = ResponseCode.CONFLICT.value
    error_code = ErrorCode.CONFLICT.name
    message = ErrorCode.CONFLICT.value


class InternalException(BaseException):
    status_code = ResponseCode.INTERNAL_SERVER_ERROR.value
    error_code = ErrorCode.INTERNAL_SERVER_ERROR.name
    message = ErrorCode.INTERNAL_SERVER_ERROR.value


class ExternalAPIException(BaseException):
    status_code = ResponseCode.BAD_GATEWAY.value
    error_code = ErrorCode.EXTERNAL_API_ERROR.name
    message = ErrorCode.EXTERNAL_API_ERROR.value


def format_validation_errors(errors) -> list[str]:
    """Flatten pydantic error dicts into "field: message" strings"""
    if not errors:
        return []

    formatted = []
    for error in errors:
        if isinstance(error, dict):
            location = ".".join(
                str(part) for part in error.get("loc", ()) if part != "body"
            )
            formatted.append(f"{location}: {error.get('msg', '')}".strip(": "))
        else:
            formatted.append(str(error))

    return formatted
