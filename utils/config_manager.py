"""
统一的配置管理模块
整合配置文件加载、环境变量覆盖和应用层类型安全访问
"""

import json
import logging
import os
from typing import Any, Optional, Dict, List, TypeVar, Callable
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .exceptions import ConfigurationError, ErrorCodes
from .path_utils import BASE_DIR, CONFIG_DIR

# 获取配置专用日志器
config_logger = logging.getLogger("Config")

# 为泛型类型定义一个TypeVar
T = TypeVar('T')

# ============================================================================
# 配置数据类型定义
# ============================================================================

@dataclass
class LoggingModuleConfig:
    """模块日志配置"""
    level: str = "INFO"
    enabled: bool = True

@dataclass
class FileLoggingConfig:
    """文件日志配置"""
    enabled: bool = True
    directory: str = "log"
    filename: str = "sys.log"
    rotation: Optional[Dict[str, Any]] = None

@dataclass
class ConsoleLoggingConfig:
    """控制台日志配置"""
    enabled: bool = True

@dataclass
class LoggingConfig:
    """完整日志配置"""
    level: str = "INFO"
    format: str = "[%(levelname)s][%(asctime)s][%(filename)s:%(lineno)d] - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file_config: FileLoggingConfig = field(default_factory=FileLoggingConfig)
    console_config: ConsoleLoggingConfig = field(default_factory=ConsoleLoggingConfig)
    modules: Dict[str, LoggingModuleConfig] = field(default_factory=dict)

@dataclass
class AppConfig:
    """应用配置"""
    name: str = "Quote API"
    env: str = "development"
    version: str = "v1"
    debug: bool = False
    pretty_print_json: bool = False

    @property
    def is_development(self) -> bool:
        return self.env == "development"

@dataclass
class ApiConfig:
    """API配置"""
    host: str = "0.0.0.0"
    port: int = 3000
    prefix: str = "/api"
    workers: int = 1
    reload: bool = False
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

@dataclass
class RateLimitConfig:
    """限流配置"""
    enabled: bool = True
    window_ms: int = 60000
    max_requests: int = 60

    @property
    def window_seconds(self) -> float:
        return self.window_ms / 1000

@dataclass
class SecurityConfig:
    """安全头配置"""
    headers_enabled: bool = False

@dataclass
class QuotesConfig:
    """语录数据源配置"""
    source_path: str = "data/quotes.json"
    strict_length: bool = False


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("true", "1", "yes", "on"):
        return True
    if lowered in ("false", "0", "no", "off", ""):
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _normalize_prefix(prefix: str) -> str:
    prefix = "/" + prefix.strip().strip("/")
    return "" if prefix == "/" else prefix


# 环境变量 -> (配置路径, 类型转换)
# NODE_ENV / HELMET_ENABLED 为旧部署沿用的名称，同时设置时 APP_ENV / SECURITY_HEADERS_ENABLED 优先
ENV_OVERRIDES: Dict[str, tuple] = {
    "NODE_ENV": ("app_config.env", str),
    "APP_ENV": ("app_config.env", str),
    "API_VERSION": ("app_config.version", str),
    "DEBUG": ("app_config.debug", _parse_bool),
    "PRETTY_PRINT_JSON": ("app_config.pretty_print_json", _parse_bool),
    "API_HOST": ("api_config.host", str),
    "PORT": ("api_config.port", int),
    "API_PREFIX": ("api_config.prefix", str),
    "RATE_LIMIT_WINDOW": ("rate_limit_config.window_ms", int),
    "RATE_LIMIT_MAX": ("rate_limit_config.max_requests", int),
    "RATE_LIMIT_ENABLED": ("rate_limit_config.enabled", _parse_bool),
    "HELMET_ENABLED": ("security_config.headers_enabled", _parse_bool),
    "SECURITY_HEADERS_ENABLED": ("security_config.headers_enabled", _parse_bool),
    "QUOTES_PATH": ("quotes_config.source_path", str),
    "LOG_LEVEL": ("logging_config.level", str),
}


# ============================================================================
# 统一配置管理器
# ============================================================================

class UnifiedConfigManager:
    """统一配置管理器 - 整合配置文件、环境变量和类型化访问"""

    def __init__(self, config_dir: Optional[str] = None, use_env: bool = True):
        self._config_dir = Path(config_dir) if config_dir else CONFIG_DIR
        self._use_env = use_env
        self._config_data: Dict[str, Any] = {}

        # 类型化配置缓存
        self._typed_cache: Dict[str, Any] = {}

        # 初始化配置
        self._load_config()

    def _load_config(self) -> None:
        """加载配置文件并应用环境变量覆盖"""
        merged_config: Dict[str, Any] = {}
        config_logger.info(f"Loading configuration from directory: {self._config_dir}")

        if not self._config_dir.is_dir():
            raise ConfigurationError(
                f"Configuration path is not a directory: {self._config_dir}",
                ErrorCodes.CONFIG_NOT_FOUND
            )

        # 按文件名排序加载，确保加载顺序一致
        config_files = sorted(self._config_dir.glob('*.json'))
        if not config_files:
            raise ConfigurationError(
                f"No configuration files (.json) found in: {self._config_dir}",
                ErrorCodes.CONFIG_NOT_FOUND
            )

        for config_file in config_files:
            try:
                with open(config_file, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigurationError(
                    f"Invalid JSON in configuration file {config_file.name}: {e}",
                    ErrorCodes.CONFIG_INVALID_FORMAT
                ) from e
            if not isinstance(data, dict):
                raise ConfigurationError(
                    f"Configuration file must contain an object: {config_file.name}",
                    ErrorCodes.CONFIG_INVALID_FORMAT
                )
            for key, value in data.items():
                if isinstance(value, dict) and isinstance(merged_config.get(key), dict):
                    merged_config[key].update(value)
                else:
                    merged_config[key] = value
            config_logger.debug(f"Loaded and merged: {config_file.name}")

        self._config_data = merged_config
        config_logger.info(f"Configuration loaded and merged from {len(config_files)} files.")

        if self._use_env:
            self._apply_env_overrides()

        # 清除类型化缓存
        self._typed_cache.clear()

    def _apply_env_overrides(self) -> None:
        """应用环境变量覆盖（支持 .env 文件）"""
        load_dotenv(BASE_DIR / ".env")

        for env_name, (path, cast) in ENV_OVERRIDES.items():
            raw = os.getenv(env_name)
            if raw is None:
                continue
            try:
                value = cast(raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for environment variable {env_name}: {raw!r}",
                    ErrorCodes.CONFIG_INVALID_VALUE,
                    context={"variable": env_name}
                ) from e
            self.set_nested(path, value)
            config_logger.debug(f"Environment override applied: {env_name} -> {path}")

    # ========================================================================
    # 底层访问方法
    # ========================================================================

    def get_nested(self, path: str, default: Optional[T] = None) -> Optional[T]:
        """获取嵌套配置值，支持点分隔路径"""
        keys = path.split('.')
        current = self._config_data

        for key in keys:
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default

        return current

    def set_nested(self, path: str, value: Any) -> None:
        """设置嵌套配置值"""
        keys = path.split('.')
        current = self._config_data

        for key in keys[:-1]:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value
        self._typed_cache.pop(keys[0], None)

    # ========================================================================
    # 类型安全访问方法
    # ========================================================================

    def _typed(self, section: str, builder: Callable[[Dict[str, Any]], T]) -> T:
        """解析并缓存类型化配置节"""
        if section not in self._typed_cache:
            try:
                self._typed_cache[section] = builder(self.get_nested(section, {}) or {})
            except (TypeError, ValueError, AttributeError) as e:
                raise ConfigurationError(
                    f"Failed to parse {section}: {e}",
                    ErrorCodes.CONFIG_INVALID_VALUE
                ) from e

        return self._typed_cache[section]

    def get_logging_config(self) -> LoggingConfig:
        """获取日志配置（类型安全）"""
        def build(data: Dict[str, Any]) -> LoggingConfig:
            file_data = data.get('file_config', {})
            console_data = data.get('console_config', {})
            modules = {
                name: LoggingModuleConfig(
                    level=module.get('level', 'INFO'),
                    enabled=module.get('enabled', True)
                )
                for name, module in data.get('modules', {}).items()
            }
            return LoggingConfig(
                level=data.get('level', 'INFO'),
                format=data.get('format', LoggingConfig.format),
                date_format=data.get('date_format', LoggingConfig.date_format),
                file_config=FileLoggingConfig(
                    enabled=file_data.get('enabled', True),
                    directory=file_data.get('directory', 'log'),
                    filename=file_data.get('filename', 'sys.log'),
                    rotation=file_data.get('rotation')
                ),
                console_config=ConsoleLoggingConfig(
                    enabled=console_data.get('enabled', True)
                ),
                modules=modules
            )

        return self._typed('logging_config', build)

    def get_app_config(self) -> AppConfig:
        """获取应用配置（类型安全）"""
        def build(data: Dict[str, Any]) -> AppConfig:
            return AppConfig(
                name=str(data.get('name', 'Quote API')),
                env=str(data.get('env', 'development')),
                version=str(data.get('version', 'v1')),
                debug=bool(data.get('debug', False)),
                pretty_print_json=bool(data.get('pretty_print_json', False))
            )

        return self._typed('app_config', build)

    def get_api_config(self) -> ApiConfig:
        """获取API配置（类型安全）"""
        def build(data: Dict[str, Any]) -> ApiConfig:
            return ApiConfig(
                host=data.get('host', '0.0.0.0'),
                port=int(data.get('port', 3000)),
                prefix=_normalize_prefix(data.get('prefix', '/api')),
                workers=int(data.get('workers', 1)),
                reload=bool(data.get('reload', False)),
                cors_origins=list(data.get('cors_origins', ['*']))
            )

        return self._typed('api_config', build)

    def get_rate_limit_config(self) -> RateLimitConfig:
        """获取限流配置（类型安全）"""
        def build(data: Dict[str, Any]) -> RateLimitConfig:
            config = RateLimitConfig(
                enabled=bool(data.get('enabled', True)),
                window_ms=int(data.get('window_ms', 60000)),
                max_requests=int(data.get('max_requests', 60))
            )
            if config.window_ms <= 0 or config.max_requests <= 0:
                raise ValueError("window_ms and max_requests must be positive")
            return config

        return self._typed('rate_limit_config', build)

    def get_security_config(self) -> SecurityConfig:
        """获取安全头配置（类型安全）"""
        def build(data: Dict[str, Any]) -> SecurityConfig:
            return SecurityConfig(headers_enabled=bool(data.get('headers_enabled', False)))

        return self._typed('security_config', build)

    def get_quotes_config(self) -> QuotesConfig:
        """获取语录数据源配置（类型安全）"""
        def build(data: Dict[str, Any]) -> QuotesConfig:
            return QuotesConfig(
                source_path=str(data.get('source_path', 'data/quotes.json')),
                strict_length=bool(data.get('strict_length', False))
            )

        return self._typed('quotes_config', build)


# ============================================================================
# 全局单例实例
# ============================================================================

config_manager = UnifiedConfigManager()
