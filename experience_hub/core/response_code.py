from enum import Enum


class ErrorCode(Enum):
    BAD_REQUEST = "Bad Request"
    AUTHENTICATION_REQUIRED = "Authentication required"
    PERMISSION_DENIED = "Permission denied"
    NOT_FOUND = "Not found"
    METHOD_NOT_ALLOWED = "Method not allowed"
    CONFLICT = "Conflict"
    VALIDATION_ERROR = "Validation error"
    REQUEST_VALIDATION_ERROR = "Request validation error"
    INTERNAL_SERVER_ERROR = "Internal server error"
    EXTERNAL_API_ERROR = "External API error"
    UNKNOWN_ERROR = "Unknown error"


class ResponseCode(Enum):
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    PERMISSION_DENIED = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    CONFLICT = 409
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502


HTTP_STATUS_ERROR_CODES = {
    ResponseCode.BAD_REQUEST.value: ErrorCode.BAD_REQUEST,
    ResponseCode.UNAUTHORIZED.value: ErrorCode.AUTHENTICATION_REQUIRED,
    ResponseCode.PERMISSION_DENIED.value: ErrorCode.PERMISSION_DENIED,
    ResponseCode.NOT_FOUND.value: ErrorCode.NOT_FOUND,
    ResponseCode.METHOD_NOT_ALLOWED.value: ErrorCode.METHOD_NOT_ALLOWED,
    ResponseCode.CONFLICT.value: ErrorCode.CONFLICT,
}
