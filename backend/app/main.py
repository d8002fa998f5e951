from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from .db.dynamodb.errors import DdbError
from .middleware import REQUEST_ID_HEADER, AccessLogMiddleware, RequestContextMiddleware, build_allowed_origins
from .modules.catalog.errors import CatalogError, ConsistencyError, ValidationError
from .observability.logging import configure_logging, get_logger
from .problem_details import problem_response, request_id_of
from .routers.health import router as health_router
from .routers.questions import router as questions_router
from .routers.topics import router as topics_router
from .settings import settings

API_PREFIX = "/api"


def create_app() -> FastAPI:
    configure_logging(level=settings.log_level)
    get_logger("startup").info("app_starting", settings=settings.to_log_safe_dict())

    app = FastAPI(
        title="Topic/Question Catalog",
        version="1.0.0",
        default_response_class=ORJSONResponse,
        redirect_slashes=False,
    )
    _add_middleware(app)
    _add_error_handlers(app)

    app.include_router(health_router)
    app.include_router(topics_router, prefix=API_PREFIX)
    app.include_router(questions_router, prefix=API_PREFIX)
    return app


def _add_middleware(app: FastAPI) -> None:
    # Last added runs first: request id, then CORS, then the access log.
    app.add_middleware(AccessLogMiddleware, exclude_paths={"/"})
    app.add_middleware(
        CORSMiddleware,
        allow_origins=build_allowed_origins(
            frontend_base_url=settings.frontend_base_url,
            frontend_urls=settings.frontend_urls,
            include_dev_origins=not settings.is_production,
        ),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
        max_age=3000,
    )
    app.add_middleware(RequestContextMiddleware)


def _add_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(CatalogError, _catalog_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(DdbError, _ddb_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_exception_handler)


def _catalog_error_handler(request: Request, exc: CatalogError) -> Response:
    extensions: dict[str, object] = {}
    if exc.entity:
        extensions["entity"] = exc.entity
    if exc.entity_id:
        extensions["id"] = exc.entity_id

    errors = None
    if isinstance(exc, ValidationError) and exc.field:
        errors = [{"path": exc.field, "message": exc.message, "type": "missing_or_empty"}]

    if isinstance(exc, ConsistencyError):
        extensions["operation"] = exc.operation
        extensions["compensated"] = bool(exc.compensated)
        # compensated=False means the repair worker has something to fix.
        get_logger("catalog").error(
            "consistency_error",
            operation=exc.operation,
            compensated=bool(exc.compensated),
            entity=exc.entity,
            entity_id=exc.entity_id,
            error=exc.message,
        )

    return problem_response(
        request=request,
        status_code=exc.http_status,
        title=exc.title,
        detail=exc.message,
        errors=errors,
        extensions=extensions or None,
    )


def _ddb_error_handler(request: Request, exc: DdbError) -> Response:
    log = get_logger("dynamodb")
    (log.error if exc.http_status >= 500 else log.warning)(
        "ddb_error",
        operation=exc.operation,
        table=exc.table_name,
        key=exc.key,
        aws_request_id=exc.aws_request_id,
        error=exc.message,
    )
    return problem_response(
        request=request,
        status_code=exc.http_status,
        title=exc.title,
        detail=exc.message,
        extensions=exc.to_extensions(),
    )


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    status_code = int(exc.status_code or 500)
    detail = str(exc.detail) if exc.detail is not None else None
    if status_code == 404 and detail in (None, "", "Not Found"):
        detail = "Route not found"
    return problem_response(request=request, status_code=status_code, detail=detail)


def _validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
    # Malformed bodies (wrong JSON types). Missing or blank fields are a
    # CatalogValidator concern and come back as 400 instead.
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in (err.get("loc") or ())]
        errors.append(
            {
                "location": loc,
                "path": ".".join(part for part in loc if part != "body"),
                "message": err.get("msg", "Invalid value"),
                "type": err.get("type"),
            }
        )
    return problem_response(
        request=request,
        status_code=422,
        title="Validation Failed",
        detail="Request validation failed",
        errors=errors,
    )


def _unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    get_logger("unhandled").exception(
        "unhandled_exception",
        request_id=request_id_of(request),
        http_method=request.method.upper(),
        path=request.url.path,
    )
    return problem_response(request=request, status_code=500, detail=str(exc) or None)


app = create_app()
