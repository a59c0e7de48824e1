"""
工具模块包
提供项目所需的通用工具和功能
"""

# 导出核心工具
from .config_manager import (
    config_manager,
    UnifiedConfigManager,
    AppConfig,
    ApiConfig,
    RateLimitConfig,
    SecurityConfig,
    QuotesConfig,
    LoggingConfig,
)
from .exceptions import (
    QuoteSystemError,
    ConfigurationError,
    DataLoadError,
    ValidationError,
    MissingParameterError,
    NotFoundError,
    ErrorCodes,
    create_error_response,
)
from .logging_manager import (
    LogContext,
    logging_manager,
    logger,
    LogConfig,
    initialize_logging,
    ModuleLoggers,
    api_logger,
    store_logger,
    query_logger,
    config_logger,
    main_logger,
)
from .security_utils import SecurityHeaders, RateLimiter
from .path_utils import BASE_DIR, CONFIG_DIR, LOG_DIR, resolve_path

# 版本信息
__version__ = "1.0.0"

__all__ = [
    # 配置管理
    "config_manager",
    "UnifiedConfigManager",
    "AppConfig",
    "ApiConfig",
    "RateLimitConfig",
    "SecurityConfig",
    "QuotesConfig",
    "LoggingConfig",

    # 异常处理
    "QuoteSystemError",
    "ConfigurationError",
    "DataLoadError",
    "ValidationError",
    "MissingParameterError",
    "NotFoundError",
    "ErrorCodes",
    "create_error_response",

    # 日志工具
    "LogContext",
    "logging_manager",
    "logger",
    "LogConfig",
    "initialize_logging",
    "ModuleLoggers",
    "api_logger",
    "store_logger",
    "query_logger",
    "config_logger",
    "main_logger",

    # 安全工具
    "SecurityHeaders",
    "RateLimiter",

    # 路径工具
    "BASE_DIR",
    "CONFIG_DIR",
    "LOG_DIR",
    "resolve_path",
]
