"""
API data models for the quote API.
Pydantic response envelopes around the store's Quote model.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from store.models import Quote


class PaginatedQuotesResponse(BaseModel):
    """分页响应"""
    page: int = Field(..., description="页码")
    limit: int = Field(..., description="每页数量")
    total: int = Field(..., description="集合总数")
    results: List[Quote] = Field(default_factory=list, description="当前页语录")


class SearchResponse(BaseModel):
    """全文搜索响应"""
    query: str = Field(..., description="搜索词（原样回显）")
    total: int = Field(..., description="匹配数量")
    results: List[Quote] = Field(default_factory=list)


class AuthorResponse(BaseModel):
    """按作者过滤响应"""
    author: str
    total: int
    results: List[Quote] = Field(default_factory=list)


class TagResponse(BaseModel):
    """按标签过滤响应"""
    tag: str
    total: int
    results: List[Quote] = Field(default_factory=list)


class DateResponse(BaseModel):
    """按日期前缀过滤响应"""
    date: str
    total: int
    results: List[Quote] = Field(default_factory=list)


class LengthFilter(BaseModel):
    """长度过滤条件"""
    min: int
    max: Union[int, str] = Field(..., description="上限，未设置时为 'unlimited'")


class LengthResponse(BaseModel):
    """按长度过滤响应"""
    filter: LengthFilter
    total: int
    results: List[Quote] = Field(default_factory=list)


class TagListResponse(BaseModel):
    """标签列表响应"""
    total: int
    tags: List[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """健康检查响应"""
    status: str = "healthy"
    timestamp: str
    uptime: float = Field(..., description="进程运行秒数")
    environment: str
    version: str


class EndpointInfo(BaseModel):
    """接口说明"""
    method: str = "GET"
    path: str
    description: str
    params: Optional[Dict[str, str]] = None


class InfoResponse(BaseModel):
    """根路径说明文档"""
    name: str
    version: str
    environment: str
    base_url: str
    docs: str
    total_quotes: int
    endpoints: List[EndpointInfo] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """错误响应"""
    error: str
    error_code: Optional[str] = None
    message: Optional[str] = None
    details: Optional[Any] = None
