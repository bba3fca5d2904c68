from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.requests import Request

from experience_hub.core.exceptions import (
    BaseException,
    InternalException,
    create_exception_response,
)
from experience_hub.core.log import logger


class ExceptionMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            response = await call_next(request)

        except BaseException as e:
            logger.exception(e)
            response = create_exception_response(e)

        except Exception as e:
            # Never echo the exception text back to the client
            logger.exception(e)
            response = create_exception_response(InternalException())

        return response
