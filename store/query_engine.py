"""
Query engine for the quote store.
Pure, read-only filter / pagination / aggregation operations over the loaded
collection. Every result envelope carries ``total`` plus the echoed filter
parameters around a ``results`` sequence.
"""

import random
from typing import Any, Dict, List, Optional

from utils import query_logger, MissingParameterError, NotFoundError, ErrorCodes
from .models import Quote
from .quote_store import QuoteStore

UNLIMITED = "unlimited"

_default_rng = random.Random()


def parse_int(value: Optional[str]) -> Optional[int]:
    """宽松解析查询参数中的整数，无法解析时返回 None 由调用方取默认值"""
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


class QueryEngine:
    """语录查询引擎（无状态，可并发调用）"""

    def __init__(self, store: QuoteStore, rng: Optional[random.Random] = None):
        self.store = store
        self.rng = rng or _default_rng

    def _envelope(self, results: List[Quote], **params: Any) -> Dict[str, Any]:
        envelope: Dict[str, Any] = dict(params)
        envelope["total"] = len(results)
        envelope["results"] = results
        return envelope

    def random_quote(self) -> Quote:
        """均匀随机选取一条语录"""
        quotes = self.store.all()
        if not quotes:
            raise NotFoundError("No quotes available", ErrorCodes.COLLECTION_EMPTY)
        return quotes[self.rng.randrange(len(quotes))]

    def paginate(self, page: Optional[int] = None, limit: Optional[int] = None) -> Dict[str, Any]:
        """分页；缺省或非法的 page 回退为1，limit 回退为全部，越界页返回空结果"""
        quotes = self.store.all()
        if page is None or page < 1:
            page = 1
        if limit is None or limit < 0:
            limit = len(quotes)

        start = (page - 1) * limit
        end = start + limit
        return {
            "page": page,
            "limit": limit,
            "total": len(quotes),
            "results": list(quotes[start:end]),
        }

    def search(self, q: Optional[str]) -> Dict[str, Any]:
        """正文大小写不敏感子串搜索，缺少 q 为客户端错误"""
        if not q:
            raise MissingParameterError(
                "Missing search query",
                ErrorCodes.VALIDATION_MISSING_PARAMETER,
                context={"parameter": "q"}
            )
        needle = q.lower()
        results = [quote for quote in self.store.all() if needle in quote.content.lower()]
        query_logger.debug(f"[Query] search q={q!r} matched {len(results)}")
        return self._envelope(results, query=q)

    def by_author(self, name: str) -> Dict[str, Any]:
        """作者名大小写不敏感子串匹配"""
        needle = name.lower()
        results = [quote for quote in self.store.all() if needle in quote.author.lower()]
        return self._envelope(results, author=name)

    def by_tag(self, tag: str) -> Dict[str, Any]:
        """标签大小写不敏感精确匹配"""
        results = [quote for quote in self.store.all() if quote.has_tag(tag)]
        return self._envelope(results, tag=tag)

    def by_id(self, quote_id: str) -> Quote:
        quote = self.store.get(quote_id)
        if quote is None:
            raise NotFoundError(
                "Quote not found",
                ErrorCodes.QUOTE_NOT_FOUND,
                context={"id": quote_id}
            )
        return quote

    def by_date(self, date: str) -> Dict[str, Any]:
        """按日期前缀匹配（支持只给年份或年月）"""
        results = [quote for quote in self.store.all() if quote.date_added.startswith(date)]
        return self._envelope(results, date=date)

    def by_length(self, min_length: Optional[int] = None,
                  max_length: Optional[int] = None) -> Dict[str, Any]:
        """长度闭区间过滤；min 缺省或为负时取0，max 为 None 表示不设上限"""
        lower = 0 if min_length is None or min_length < 0 else min_length
        results = [
            quote for quote in self.store.all()
            if quote.length >= lower and (max_length is None or quote.length <= max_length)
        ]
        return self._envelope(
            results,
            filter={"min": lower, "max": UNLIMITED if max_length is None else max_length},
        )

    def list_tags(self) -> Dict[str, Any]:
        """所有标签去重（大小写不敏感，保留首次出现的写法）后升序排列"""
        seen: Dict[str, str] = {}
        for quote in self.store.all():
            for tag in quote.tags:
                seen.setdefault(tag.lower(), tag)
        tags = sorted(seen.values())
        return {"total": len(tags), "tags": tags}

    def stats(self) -> Dict[str, int]:
        """集合概要"""
        quotes = self.store.all()
        return {
            "total_quotes": len(quotes),
            "total_authors": len({quote.author for quote in quotes}),
            "total_tags": self.list_tags()["total"],
        }
