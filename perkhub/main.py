import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .api import router as api_router
from .db import Base, engine
from .errors import PerkHubError
from .logging_config import setup_logging
from .settings import settings

logger = logging.getLogger(__name__)


def _message(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, **extra})


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PerkHubError)
    async def _perkhub_error(request: Request, exc: PerkHubError):
        response = _message(exc.status_code, exc.message)
        if exc.status_code == 401:
            response.headers["WWW-Authenticate"] = "Bearer"
        return response

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError):
        errors = jsonable_encoder(exc.errors(), exclude={"ctx", "input", "url"})
        first = errors[0] if errors else {}
        field = ".".join(str(p) for p in first.get("loc", ())[1:])
        detail = first.get("msg", "Invalid request")
        message = f"{field}: {detail}" if field else detail
        return _message(400, message, errors=errors)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        response = _message(exc.status_code, str(exc.detail))
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return _message(500, "Internal server error")


def create_app() -> FastAPI:
    setup_logging(settings.log_level)

    app = FastAPI(title="PerkHub API", version=__version__)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.resolved_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.on_event("startup")
    def _startup():
        # create tables (NOTE: does not perform migrations)
        if settings.db_auto_create:
            Base.metadata.create_all(bind=engine)
        logger.info("PerkHub API started")

    # prefix must match the frontend calls: /api/perks, /api/auth/...
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
