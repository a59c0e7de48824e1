"""
统一异常定义模块
提供语录服务特定的异常类和错误响应构造
"""

from typing import Optional, Dict, Any


class QuoteSystemError(Exception):
    """语录服务基础异常类"""

    # 请求边界上映射的HTTP状态码
    status_code = 500

    def __init__(self, message: str, error_code: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class ConfigurationError(QuoteSystemError):
    """配置相关错误"""
    pass


class DataLoadError(QuoteSystemError):
    """语录数据加载错误（启动期致命）"""
    pass


class ValidationError(QuoteSystemError):
    """客户端输入错误"""
    status_code = 400


class MissingParameterError(ValidationError):
    """缺少必需参数"""
    pass


class NotFoundError(QuoteSystemError):
    """资源不存在"""
    status_code = 404


# 错误代码常量
class ErrorCodes:
    """错误代码常量"""

    # 配置错误
    CONFIG_NOT_FOUND = "CONFIG_001"
    CONFIG_INVALID_FORMAT = "CONFIG_002"
    CONFIG_INVALID_VALUE = "CONFIG_003"

    # 数据加载错误
    DATA_SOURCE_NOT_FOUND = "DATA_001"
    DATA_INVALID_FORMAT = "DATA_002"
    DATA_INVALID_RECORD = "DATA_003"
    DATA_DUPLICATE_ID = "DATA_004"
    DATA_LENGTH_MISMATCH = "DATA_005"

    # 验证错误
    VALIDATION_MISSING_PARAMETER = "VAL_001"

    # 资源错误
    QUOTE_NOT_FOUND = "NF_001"
    COLLECTION_EMPTY = "NF_002"

    # 其他
    INTERNAL_ERROR = "INTERNAL_001"


def create_error_response(error: QuoteSystemError,
                          include_context: bool = False) -> Dict[str, Any]:
    """创建标准化的错误响应"""
    response = {
        "error": error.message,
        "error_code": error.error_code,
    }

    if include_context and error.context:
        response["context"] = error.context

    return response
