"""
API routes for the quote API.
Each data route maps onto exactly one query engine operation.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Request

from store import Quote, QueryEngine, parse_int
from utils import QuoteSystemError, ErrorCodes
from .models import (
    PaginatedQuotesResponse,
    SearchResponse,
    AuthorResponse,
    TagResponse,
    DateResponse,
    LengthResponse,
    TagListResponse,
    ErrorResponse,
    EndpointInfo,
)

router = APIRouter()

# (路径模板, 说明, 参数说明)，供根路径文档和404路由列表使用
DATA_ROUTES = [
    ("/quote/random", "Get a random quote", None),
    ("/quotes", "List quotes with optional pagination", {"page": "page number (default 1)", "limit": "page size (default all)"}),
    ("/quotes/search", "Case-insensitive search in quote content", {"q": "search text (required)"}),
    ("/quotes/author/:name", "Quotes whose author contains the name", None),
    ("/quotes/tag/:tag", "Quotes carrying the tag (case-insensitive exact match)", None),
    ("/quote/:id", "Get a quote by id", None),
    ("/quotes/date/:date", "Quotes added on a date prefix (YYYY, YYYY-MM or YYYY-MM-DD)", None),
    ("/quotes/length", "Quotes within an inclusive length range", {"min": "minimum length (default 0)", "max": "maximum length (default unlimited)"}),
    ("/tags", "All tags, deduplicated and sorted", None),
]


def available_routes(prefix: str) -> List[str]:
    """全部可用路由（用于404响应）"""
    return (
        ["GET /"]
        + [f"GET {prefix}{path}" for path, _, _ in DATA_ROUTES]
        + ["GET /health"]
    )


def endpoint_docs(prefix: str) -> List[EndpointInfo]:
    """根路径文档中的接口列表"""
    return [
        EndpointInfo(path=f"{prefix}{path}", description=description, params=params)
        for path, description, params in DATA_ROUTES
    ]


def get_query_engine(request: Request) -> QueryEngine:
    """从应用状态中取出注入的查询引擎"""
    engine = getattr(request.app.state, "query_engine", None)
    if engine is None:
        raise QuoteSystemError("Quote store is not initialized", ErrorCodes.INTERNAL_ERROR)
    return engine


NOT_FOUND = {404: {"model": ErrorResponse}}
BAD_REQUEST = {400: {"model": ErrorResponse}}


@router.get("/quote/random", response_model=Quote, responses=NOT_FOUND, tags=["Quotes"])
async def get_random_quote(engine: QueryEngine = Depends(get_query_engine)):
    """随机语录"""
    return engine.random_quote()


@router.get("/quotes", response_model=PaginatedQuotesResponse, tags=["Quotes"])
async def list_quotes(
    page: Optional[str] = Query(None, description="页码，默认1"),
    limit: Optional[str] = Query(None, description="每页数量，默认全部"),
    engine: QueryEngine = Depends(get_query_engine)
):
    """分页列出语录"""
    return engine.paginate(page=parse_int(page), limit=parse_int(limit))


@router.get("/quotes/search", response_model=SearchResponse, responses=BAD_REQUEST, tags=["Quotes"])
async def search_quotes(
    q: Optional[str] = Query(None, description="搜索词"),
    engine: QueryEngine = Depends(get_query_engine)
):
    """按正文搜索"""
    return engine.search(q)


@router.get("/quotes/author/{name}", response_model=AuthorResponse, tags=["Quotes"])
async def get_quotes_by_author(
    name: str = Path(..., description="作者名（子串）"),
    engine: QueryEngine = Depends(get_query_engine)
):
    """按作者过滤"""
    return engine.by_author(name)


@router.get("/quotes/tag/{tag}", response_model=TagResponse, tags=["Quotes"])
async def get_quotes_by_tag(
    tag: str = Path(..., description="标签"),
    engine: QueryEngine = Depends(get_query_engine)
):
    """按标签过滤"""
    return engine.by_tag(tag)


@router.get("/quote/{quote_id}", response_model=Quote, responses=NOT_FOUND, tags=["Quotes"])
async def get_quote_by_id(
    quote_id: str = Path(..., description="语录ID"),
    engine: QueryEngine = Depends(get_query_engine)
):
    """按ID获取语录"""
    return engine.by_id(quote_id)


@router.get("/quotes/date/{date}", response_model=DateResponse, tags=["Quotes"])
async def get_quotes_by_date(
    date: str = Path(..., description="日期前缀"),
    engine: QueryEngine = Depends(get_query_engine)
):
    """按添加日期前缀过滤"""
    return engine.by_date(date)


@router.get("/quotes/length", response_model=LengthResponse, tags=["Quotes"])
async def get_quotes_by_length(
    min_length: Optional[str] = Query(None, alias="min", description="最小长度，默认0"),
    max_length: Optional[str] = Query(None, alias="max", description="最大长度，默认不限"),
    engine: QueryEngine = Depends(get_query_engine)
):
    """按长度闭区间过滤"""
    return engine.by_length(min_length=parse_int(min_length), max_length=parse_int(max_length))


@router.get("/tags", response_model=TagListResponse, tags=["Tags"])
async def list_tags(engine: QueryEngine = Depends(get_query_engine)):
    """所有标签"""
    return engine.list_tags()
