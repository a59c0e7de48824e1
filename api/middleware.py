"""
Middleware for the quote API.
Provides CORS, rate limiting, security headers, debug logging and error handling.
"""

import math
import time
from typing import Callable, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware

from utils import (
    api_logger,
    AppConfig,
    ApiConfig,
    RateLimitConfig,
    SecurityConfig,
    RateLimiter,
    SecurityHeaders,
)


class LoggingMiddleware(BaseHTTPMiddleware):
    """调试日志中间件"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        client_ip = request.client.host if request.client else "unknown"

        api_logger.info(f"[API] {request.method} {request.url.path} from {client_ip}")

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            api_logger.error(f"[API] {request.method} {request.url.path} - ERROR - {process_time:.3f}s - {str(e)}")
            raise

        process_time = time.time() - start_time
        api_logger.info(f"[API] {request.method} {request.url.path} - {response.status_code} - {process_time:.3f}s")
        response.headers["X-Process-Time"] = f"{process_time:.6f}"
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """兜底错误处理中间件：未处理异常统一转换为500"""

    def __init__(self, app, expose_details: bool = False):
        super().__init__(app)
        self.expose_details = expose_details

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except Exception as e:
            api_logger.error(f"[API] Unexpected error on {request.method} {request.url.path}: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error",
                    "message": str(e) if self.expose_details else "Something went wrong!"
                }
            )


class RateLimitMiddleware(BaseHTTPMiddleware):
    """按客户端IP的滑动窗口限流，仅作用于数据路由前缀"""

    def __init__(self, app, max_requests: int = 60, window_seconds: float = 60,
                 path_prefix: str = "", limiter: Optional[RateLimiter] = None):
        super().__init__(app)
        self.path_prefix = path_prefix
        self.limiter = limiter or RateLimiter(max_requests=max_requests, window_seconds=window_seconds)

    def _applies_to(self, path: str) -> bool:
        if not self.path_prefix:
            return True
        return path == self.path_prefix or path.startswith(self.path_prefix + "/")

    def _rate_limit_headers(self, client_ip: str) -> dict:
        return {
            "RateLimit-Limit": str(self.limiter.max_requests),
            "RateLimit-Remaining": str(self.limiter.get_remaining_requests(client_ip)),
            "RateLimit-Reset": str(self.limiter.get_reset_seconds(client_ip)),
        }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self._applies_to(request.url.path):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"

        if not self.limiter.is_allowed(client_ip):
            api_logger.warning(f"[API] Rate limit exceeded for IP: {client_ip}")
            headers = self._rate_limit_headers(client_ip)
            headers["Retry-After"] = headers["RateLimit-Reset"]
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Too many requests, try again later.",
                    "retryAfter": math.ceil(self.limiter.window_seconds)
                },
                headers=headers
            )

        response = await call_next(request)
        response.headers.update(self._rate_limit_headers(client_ip))
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """安全头中间件"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers.update(SecurityHeaders.get_security_headers())
        return response


def setup_cors(app, api_config: ApiConfig):
    """设置CORS"""
    cors_origins = list(api_config.cors_origins)

    if cors_origins == ["*"]:
        api_logger.warning("[CORS] Using wildcard origin")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials="*" not in cors_origins,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )


def setup_middleware(app, app_config: AppConfig, api_config: ApiConfig,
                     rate_limit_config: RateLimitConfig, security_config: SecurityConfig):
    """设置所有中间件（后添加的在外层）"""
    if rate_limit_config.enabled:
        app.add_middleware(
            RateLimitMiddleware,
            max_requests=rate_limit_config.max_requests,
            window_seconds=rate_limit_config.window_seconds,
            path_prefix=api_config.prefix
        )

    if security_config.headers_enabled:
        app.add_middleware(SecurityHeadersMiddleware)

    app.add_middleware(ErrorHandlingMiddleware, expose_details=app_config.is_development)

    if app_config.debug:
        app.add_middleware(LoggingMiddleware)

    # 最外层：429 与 500 响应也经过 CORS
    setup_cors(app, api_config)

    api_logger.info("[API] Middleware setup completed")
