"""
FastAPI application for the quote API.
Application factory, lifespan store loading, error handlers and system endpoints.
"""

import json
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from store import QueryEngine, QuoteStore
from utils import (
    api_logger,
    config_manager,
    UnifiedConfigManager,
    QuoteSystemError,
    create_error_response,
    resolve_path,
)

from .middleware import setup_middleware
from .models import HealthResponse, InfoResponse
from .routes import router, available_routes, endpoint_docs


class PrettyJSONResponse(JSONResponse):
    """缩进格式化的JSON响应"""

    def render(self, content: Any) -> bytes:
        return json.dumps(
            content,
            ensure_ascii=False,
            allow_nan=False,
            indent=2,
            separators=(",", ": "),
        ).encode("utf-8")


def _log_startup_banner(app: FastAPI) -> None:
    settings = app.state.settings
    rate_limit = settings.get_rate_limit_config()
    app_config = settings.get_app_config()
    api_config = settings.get_api_config()

    api_logger.info(f"[API] {app_config.name} {app_config.version} ready")
    api_logger.info(f"[API] Environment: {app_config.env}")
    if rate_limit.enabled:
        api_logger.info(f"[API] Rate Limit: {rate_limit.max_requests} requests per {rate_limit.window_seconds:g} seconds")
    else:
        api_logger.info("[API] Rate Limit: Disabled")
    api_logger.info(f"[API] Security Headers: {'Enabled' if settings.get_security_config().headers_enabled else 'Disabled'}")
    api_logger.info(f"[API] Debug Mode: {'Enabled' if app_config.debug else 'Disabled'}")
    api_logger.info(f"[API] Total Quotes: {len(app.state.quote_store)}")
    if app_config.debug:
        api_logger.info(f"[API] API Endpoints: {api_config.prefix}/*")


def install_store(app: FastAPI, store: QuoteStore, engine: Optional[QueryEngine] = None) -> None:
    """把只读语录集合注入应用状态"""
    app.state.quote_store = store
    app.state.query_engine = engine or QueryEngine(store)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理：启动时一次性加载语录数据，失败则拒绝启动"""
    if getattr(app.state, "quote_store", None) is None:
        quotes_config = app.state.settings.get_quotes_config()
        # DataLoadError 在此向上抛出，服务器不会开始接收请求
        store = QuoteStore.load(
            resolve_path(quotes_config.source_path),
            strict_length=quotes_config.strict_length
        )
        install_store(app, store)

    app.state.started_at = time.monotonic()
    _log_startup_banner(app)

    yield

    api_logger.info("[API] Shutting down Quote API...")


def register_exception_handlers(app: FastAPI) -> None:
    """注册请求边界上的结构化错误处理"""
    prefix = app.state.settings.get_api_config().prefix

    @app.exception_handler(QuoteSystemError)
    async def quote_system_error_handler(request: Request, exc: QuoteSystemError):
        if exc.status_code >= 500:
            api_logger.error(f"[API] {request.method} {request.url.path} failed: {exc}")
        else:
            api_logger.debug(f"[API] {request.method} {request.url.path} -> {exc.status_code}: {exc}")
        return JSONResponse(status_code=exc.status_code, content=create_error_response(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # 路由层面的 404/405 都视为未匹配路由
        if exc.status_code in (404, 405):
            return JSONResponse(
                status_code=404,
                content={
                    "error": "Route not found",
                    "message": f"The requested route {request.method} {request.url.path} does not exist.",
                    "availableRoutes": available_routes(prefix)
                }
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None)
        )


def create_app(settings: Optional[UnifiedConfigManager] = None,
               store: Optional[QuoteStore] = None,
               engine: Optional[QueryEngine] = None) -> FastAPI:
    """创建应用；未传入 store 时在启动阶段从配置的数据源加载"""
    settings = settings or config_manager
    app_config = settings.get_app_config()
    api_config = settings.get_api_config()

    pretty = app_config.pretty_print_json and app_config.is_development

    app = FastAPI(
        title=app_config.name,
        description="A lightweight read-only quotation API with filtering, search and pagination",
        version=app_config.version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        default_response_class=PrettyJSONResponse if pretty else JSONResponse,
    )
    app.state.settings = settings
    app.state.quote_store = None
    app.state.query_engine = None
    app.state.started_at = time.monotonic()

    if store is not None:
        install_store(app, store, engine)

    setup_middleware(
        app,
        app_config=app_config,
        api_config=api_config,
        rate_limit_config=settings.get_rate_limit_config(),
        security_config=settings.get_security_config()
    )
    register_exception_handlers(app)

    app.include_router(router, prefix=api_config.prefix)

    @app.get("/", response_model=InfoResponse, tags=["System"])
    async def root(request: Request):
        """根路径：接口说明"""
        store = request.app.state.quote_store
        return InfoResponse(
            name=app_config.name,
            version=app_config.version,
            environment=app_config.env,
            base_url=str(request.base_url).rstrip("/"),
            docs="/docs",
            total_quotes=len(store) if store is not None else 0,
            endpoints=endpoint_docs(api_config.prefix)
        )

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health_check(request: Request):
        """健康检查端点"""
        return HealthResponse(
            status="healthy",
            timestamp=datetime.now(timezone.utc).isoformat(),
            uptime=round(time.monotonic() - request.app.state.started_at, 3),
            environment=app_config.env,
            version=app_config.version
        )

    return app


# 默认应用实例（uvicorn api.app:app）
app = create_app()


def run(host: Optional[str] = None, port: Optional[int] = None, reload: Optional[bool] = None) -> None:
    """启动API服务器"""
    api_config = config_manager.get_api_config()
    host = host or api_config.host
    port = port or api_config.port
    reload = api_config.reload if reload is None else reload

    api_logger.info(f"[API] Starting server on {host}:{port}")

    if reload:
        uvicorn.run(
            "api.app:app",
            host=host,
            port=port,
            reload=True,
            server_header=False,
            log_level="info"
        )
    else:
        uvicorn.run(
            "api.app:app",
            host=host,
            port=port,
            workers=api_config.workers,
            server_header=False,
            log_level="info"
        )


if __name__ == "__main__":
    run()
