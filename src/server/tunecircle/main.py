import logging
from contextlib import asynccontextmanager

import tunecircle.routers.auth_router as auth_router
import tunecircle.routers.playlists_router as playlists_router
import tunecircle.routers.search_router as search_router
import tunecircle.routers.uploads_router as uploads_router
import tunecircle.routers.users_router as users_router
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import Histogram, make_wsgi_app
from starlette.exceptions import HTTPException
from starlette.middleware.wsgi import WSGIMiddleware
from tunecircle.db.database import create_tables
from tunecircle.exceptions import INTERNAL_ERROR_MESSAGE, AppError
from tunecircle.services.utils import configure_logging

logger = logging.getLogger(__name__)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds", "Duration of HTTP requests in seconds", ["method", "endpoint"]
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": {"message": message}})


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    configure_logging()
    await create_tables()
    yield


app = FastAPI(lifespan=app_lifespan)


@app.middleware("http")
async def track_request_duration(request: Request, call_next):
    method = request.method
    endpoint = request.url.path

    with REQUEST_DURATION.labels(method=method, endpoint=endpoint).time():
        response = await call_next(request)
    return response


@app.exception_handler(AppError)
async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message)


@app.exception_handler(HTTPException)
async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    message = errors[0]["msg"] if errors else "Validation error"
    return error_response(status.HTTP_400_BAD_REQUEST, message)


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


app.include_router(auth_router.router)
app.include_router(users_router.router)
app.include_router(playlists_router.router)
app.include_router(search_router.router)
app.include_router(uploads_router.router)
app.mount("/metrics", WSGIMiddleware(make_wsgi_app()))
