from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from experience_hub.core.config import CORS_ORIGINS, validate_settings
from experience_hub.core.exceptions import (
    BaseException,
    InternalException,
    RequestValidationException,
    create_exception_response,
    create_http_error_response,
)
from experience_hub.core.log import configure_logging, logger
from experience_hub.middlewares.exceptions import ExceptionMiddleware

from experience_hub.api.auth.router import router as auth_router
from experience_hub.api.experiences.router import router as experiences_router
from experience_hub.api.prompts.router import router as prompts_router
from experience_hub.api.users.router import router as users_router


configure_logging()
validate_settings()
app = FastAPI(title="Experience Hub")


# Include Routers
app.include_router(auth_router, prefix="/api/v1/auth")
app.include_router(experiences_router, prefix="/api/v1/experiences")
app.include_router(prompts_router, prefix="/api/v1/prompts")
app.include_router(users_router, prefix="/api/v1/users")


@app.exception_handler(BaseException)
async def app_exception_handler(request: Request, exc: BaseException):
    return create_exception_response(exc)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return create_exception_response(RequestValidationException(exc.errors()))


@app.exception_handler(ValidationError)
async def pydantic_validation_exception_handler(request: Request, exc: ValidationError):
    return create_exception_response(RequestValidationException(exc.errors()))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return create_http_error_response(exc.status_code, exc.detail)


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(exc)
    return create_exception_response(InternalException("Persistence failure"))


app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ExceptionMiddleware)
