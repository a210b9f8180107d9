"""Entry point for the Fragments service."""

import time
import uuid
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from common.logging_config import setup_logging
from fragments import config
from fragments.auth import HtpasswdAuthenticator
from fragments.exceptions import (
    AuthenticationError,
    BackendError,
    ConversionError,
    FragmentNotFoundError,
    FragmentsException,
    PayloadTooLargeError,
    UnsupportedConversionError,
    UnsupportedMediaTypeError,
    ValidationError
)
from fragments.repositories import StorageBackend, create_backend
from fragments.routes import fragment_router
from fragments.schemas.common import HealthResponse, create_error_response

logger = setup_logging('fragments')


def error_response(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=create_error_response(status_code, message),
        headers=headers
    )


def create_app(
    backend: Optional[StorageBackend] = None,
    authenticator: Optional[HtpasswdAuthenticator] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        backend: Storage backend; built from configuration at startup when omitted
        authenticator: Credential checker; loaded from HTPASSWD_FILE at startup when omitted
    """
    app = FastAPI(
        title="Fragments",
        description="Fragment storage service with format conversion",
        version=config.SERVICE_VERSION
    )
    app.state.backend = backend
    app.state.authenticator = authenticator

    @app.on_event("startup")
    async def startup_event():
        """
        Build the storage backend and authenticator once per process.
        """
        logger.info("Fragments service starting up...")

        if app.state.backend is None:
            app.state.backend = create_backend()
        logger.info(f"Using {app.state.backend.name} storage backend")

        if app.state.authenticator is None:
            app.state.authenticator = HtpasswdAuthenticator.from_config()
        logger.info("Authentication configured")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Fragments service shutting down...")

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """
        Middleware to log all HTTP requests and responses.
        """
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        start_time = time.time()

        logger.info(
            f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
        )

        response = await call_next(request)

        duration = time.time() - start_time
        user_id = getattr(request.state, 'user_id', None)

        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"status={response.status_code} duration={duration:.3f}s "
            f"[request_id={request_id}] [user_id={user_id or 'anonymous'}]"
        )

        response.headers["X-Request-ID"] = request_id

        return response

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(request: Request, exc: AuthenticationError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.warning(
            f"Authentication error: {exc} [request_id={request_id}] path={request.url.path}"
        )
        return error_response(
            status.HTTP_401_UNAUTHORIZED,
            "Unauthorized",
            headers={"WWW-Authenticate": 'Basic realm="fragments"'}
        )

    @app.exception_handler(PayloadTooLargeError)
    async def payload_too_large_handler(request: Request, exc: PayloadTooLargeError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.warning(
            f"Payload too large: {exc} [request_id={request_id}] path={request.url.path}"
        )
        return error_response(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, str(exc))

    @app.exception_handler(UnsupportedMediaTypeError)
    async def unsupported_media_type_handler(request: Request, exc: UnsupportedMediaTypeError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.warning(
            f"Unsupported media type: {exc} [request_id={request_id}] path={request.url.path}"
        )
        return error_response(status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, str(exc))

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.warning(
            f"Validation error: {exc} [request_id={request_id}] path={request.url.path}"
        )
        return error_response(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(FragmentNotFoundError)
    async def fragment_not_found_handler(request: Request, exc: FragmentNotFoundError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.warning(
            f"Fragment not found error: {exc} [request_id={request_id}] path={request.url.path}"
        )
        return error_response(status.HTTP_404_NOT_FOUND, "Fragment not found")

    @app.exception_handler(UnsupportedConversionError)
    async def unsupported_conversion_handler(request: Request, exc: UnsupportedConversionError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.warning(
            f"Unsupported conversion: {exc} [request_id={request_id}] path={request.url.path}"
        )
        return error_response(status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, str(exc))

    @app.exception_handler(ConversionError)
    async def conversion_error_handler(request: Request, exc: ConversionError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.warning(
            f"Conversion error: {exc} [request_id={request_id}] path={request.url.path}"
        )
        return error_response(status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, f"Error converting fragment: {exc}")

    @app.exception_handler(BackendError)
    async def backend_error_handler(request: Request, exc: BackendError):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.error(
            f"Storage backend error: {exc} [request_id={request_id}] path={request.url.path}",
            exc_info=True
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Storage backend error")

    @app.exception_handler(FragmentsException)
    async def fragments_exception_handler(request: Request, exc: FragmentsException):
        request_id = getattr(request.state, 'request_id', 'unknown')
        logger.error(
            f"Fragments exception: {exc} [request_id={request_id}] path={request.url.path}",
            exc_info=True
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = "not found" if exc.status_code == status.HTTP_404_NOT_FOUND else str(exc.detail)
        return error_response(exc.status_code, message)

    app.include_router(fragment_router)

    @app.get("/", response_model=HealthResponse)
    async def health_check(response: Response):
        """
        Health check endpoint. Never cached.
        """
        response.headers["Cache-Control"] = "no-cache"
        return HealthResponse(version=config.SERVICE_VERSION, githubUrl=config.GITHUB_URL)

    return app


app = create_app()


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "fragments.main:app",
        host=config.FRAGMENTS_HOST,
        port=config.FRAGMENTS_PORT
    )


if __name__ == "__main__":
    main()
