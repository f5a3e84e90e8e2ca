from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog_api.api.routes import attributes, auth, health, products, upload
from catalog_api.core.config import settings
from catalog_api.core.exceptions import ValidationException
from catalog_api.core.logging import configure_logging, get_logger
from catalog_api.db.session import dispose_engine, get_sessionmaker, init_models
from catalog_api.services.user_service import user_service

logger = get_logger(__name__)

CORS_ALLOW_METHODS = "GET,OPTIONS,PATCH,DELETE,POST,PUT"
CORS_ALLOW_HEADERS = (
    "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
    "Content-MD5, Content-Type, Date, X-Api-Version, Authorization"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables, bootstrap the admin account
    await init_models()
    if settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD:
        async with get_sessionmaker()() as db:
            await user_service.ensure_admin(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
    logger.info(f"{settings.PROJECT_NAME} is starting up...")
    yield
    # Shutdown
    await dispose_engine()
    logger.info(f"{settings.PROJECT_NAME} is shutting down...")


def _error_list(exc: RequestValidationError) -> List[Dict[str, Any]]:
    errors = []
    for error in exc.errors():
        loc = list(error.get("loc", ()))
        location = str(loc[0]) if loc else "body"
        path = loc[1:]
        # A bare index (e.g. a JSON decode offset) names no field
        field = ".".join(str(part) for part in path) if any(isinstance(part, str) for part in path) else location
        errors.append(
            {
                "field": field,
                "message": error.get("msg", "Invalid value"),
                "location": location,
            }
        )
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationException)
    async def validation_exception_handler(request: Request, exc: ValidationException):
        content: Dict[str, Any] = {"success": False, "message": exc.detail}
        if exc.errors:
            content["errors"] = exc.errors
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "errors": _error_list(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            message = "Method not allowed"
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "message": "Server error"},
        )


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth", tags=["Auth"])
    app.include_router(products.router, prefix=f"{settings.API_PREFIX}/products", tags=["Products"])
    app.include_router(attributes.router, prefix=f"{settings.API_PREFIX}/attributes", tags=["Attributes"])
    app.include_router(upload.router, prefix=f"{settings.API_PREFIX}/upload", tags=["Upload"])

    # Serve locally stored media
    if settings.MEDIA_STORAGE_BACKEND.lower() == "local":
        upload_dir = Path(settings.UPLOAD_DIR)
        upload_dir.mkdir(parents=True, exist_ok=True)
        app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=str(upload_dir)), name="uploads")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    # Every OPTIONS request gets an empty 200, preflight or not
    @app.middleware("http")
    async def answer_options(request: Request, call_next):
        if request.method == "OPTIONS":
            origin = request.headers.get("origin")
            allowed = settings.allowed_origins
            if origin and ("*" in allowed or origin in allowed):
                allow_origin = origin
            else:
                allow_origin = "*" if "*" in allowed else ""
            return Response(
                status_code=status.HTTP_200_OK,
                headers={
                    "Access-Control-Allow-Origin": allow_origin,
                    "Access-Control-Allow-Credentials": "true",
                    "Access-Control-Allow-Methods": CORS_ALLOW_METHODS,
                    "Access-Control-Allow-Headers": CORS_ALLOW_HEADERS,
                },
            )
        return await call_next(request)

    return app


app = create_app()
