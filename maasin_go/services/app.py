# maasin_go/services/app.py
"""
FastAPI приложение Maasin Go.

Endpoints:
- POST /driver/update - водитель публикует статус (Bearer, роль driver)
- GET /drivers - снимок активных водителей (?vehicleType=all|tricycle|multicab)
- GET /fares - справочник тарифов
- POST /feedback - отзыв о поездке (Bearer)
- GET /profile, PUT /profile - профиль (Bearer)
- POST /signup, POST /login - регистрация и вход
- GET /health - проверка здоровья
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from maasin_go import __version__
from maasin_go.common.constants import TypeMsg
from maasin_go.common.errors import CommuteError, ValidationError
from maasin_go.common.logger import log_error, log_info, setup_logging
from maasin_go.config import Settings, settings as default_settings
from maasin_go.infra.kv_store import KeyValueStore
from maasin_go.services import dependencies
from maasin_go.services.fares.routes import router as fares_router
from maasin_go.services.feedback.routes import router as feedback_router
from maasin_go.services.identity.routes import router as identity_router
from maasin_go.services.presence.routes import router as presence_router
from maasin_go.services.profiles.routes import router as profiles_router
from maasin_go.shared.models.common import ErrorResponse, HealthStatus

SERVICE_NAME = "maasin_go_api"


def error_response(error: CommuteError) -> JSONResponse:
    """Тело ошибки {"error": ..., "errorCode": ...}."""
    body = ErrorResponse(error=error.message, error_code=error.error_code, details=error.details)
    return JSONResponse(
        status_code=error.status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


async def commute_error_handler(request: Request, exc: CommuteError) -> JSONResponse:
    if exc.status_code >= 500:
        await log_error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Ошибки валидации тела и параметров запроса -> 400."""
    fields = sorted({
        ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        for err in exc.errors()
    })
    return error_response(
        ValidationError(
            f"Invalid request: {', '.join(f for f in fields if f) or 'malformed body'}",
            details={"fields": [f for f in fields if f]},
        )
    )


def create_app(store: KeyValueStore | None = None, config: Settings | None = None) -> FastAPI:
    """
    Создаёт приложение.

    Args:
        store: Хранилище (None: подключиться к Redis из конфига при старте)
        config: Настройки (None: глобальные настройки)
    """
    config = config or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Жизненный цикл приложения."""
        setup_logging()
        await log_info("Maasin Go API запускается...", type_msg=TypeMsg.INFO)

        redis_client = None
        active_store = store
        if active_store is None:
            from maasin_go.infra.redis_client import init_redis

            redis_client = await init_redis()
            active_store = redis_client

        dependencies.init_dependencies(active_store, config)

        yield

        dependencies.cleanup_dependencies()
        if redis_client is not None:
            await redis_client.disconnect()
        await log_info("Maasin Go API остановлен", type_msg=TypeMsg.INFO)

    app = FastAPI(
        title="Maasin Go API",
        description="Живая доступность трициклов и мультикабов Maasin City, тарифы, отзывы, профили",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(CommuteError, commute_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    @app.get("/health", response_model=HealthStatus, tags=["Health"])
    async def health_check() -> HealthStatus:
        """Проверка здоровья сервиса."""
        reachable = await dependencies.get_store().ping()
        return HealthStatus(
            service=SERVICE_NAME,
            status="healthy" if reachable else "degraded",
            version=__version__,
            dependencies={"store": "healthy" if reachable else "unhealthy"},
        )

    app.include_router(identity_router)
    app.include_router(presence_router)
    app.include_router(fares_router)
    app.include_router(feedback_router)
    app.include_router(profiles_router)

    return app


app = create_app()
