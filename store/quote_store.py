"""
Quote store.
Loads the static quote collection once at startup and exposes it read-only.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError

from utils import store_logger, DataLoadError, ErrorCodes, LogContext
from .models import Quote


class QuoteStore:
    """只读语录集合，保持原始插入顺序"""

    def __init__(self, quotes: Iterable[Quote], source: Optional[str] = None):
        self._quotes: Tuple[Quote, ...] = tuple(quotes)
        self._index: Dict[str, Quote] = {}
        self.source = source

        for position, quote in enumerate(self._quotes):
            if quote.id in self._index:
                raise DataLoadError(
                    f"Duplicate quote id '{quote.id}' at position {position}",
                    ErrorCodes.DATA_DUPLICATE_ID,
                    context={"id": quote.id, "position": position}
                )
            self._index[quote.id] = quote

    @classmethod
    def load(cls, source: Union[str, Path], strict_length: bool = False) -> "QuoteStore":
        """从静态JSON文件加载语录集合，失败即致命"""
        path = Path(source)
        with LogContext("Store", "load", {"source": path.name}):
            if not path.is_file():
                raise DataLoadError(
                    f"Quote source not found: {path}",
                    ErrorCodes.DATA_SOURCE_NOT_FOUND,
                    context={"source": str(path)}
                )

            try:
                with open(path, 'r', encoding='utf-8') as f:
                    payload = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise DataLoadError(
                    f"Quote source is not valid JSON: {path}: {e}",
                    ErrorCodes.DATA_INVALID_FORMAT,
                    context={"source": str(path)}
                ) from e

            store = cls.from_records(_extract_records(payload), strict_length=strict_length,
                                     source=str(path))

        store_logger.info(f"[Store] Loaded {len(store)} quotes from {path}")
        return store

    @classmethod
    def from_records(cls, records: Iterable[Union[Quote, Dict[str, Any]]],
                     strict_length: bool = False, source: Optional[str] = None) -> "QuoteStore":
        """从内存记录构建语录集合"""
        quotes: List[Quote] = []
        mismatched: List[str] = []

        for position, record in enumerate(records):
            if isinstance(record, Quote):
                quote = record
            else:
                try:
                    quote = Quote.model_validate(record)
                except PydanticValidationError as e:
                    raise DataLoadError(
                        f"Invalid quote record at position {position}: {e.error_count()} validation error(s)",
                        ErrorCodes.DATA_INVALID_RECORD,
                        context={"position": position, "errors": e.errors(include_url=False)}
                    ) from e

            if not quote.length_consistent:
                mismatched.append(quote.id)
            quotes.append(quote)

        if mismatched:
            if strict_length:
                raise DataLoadError(
                    f"Stored length does not match content for {len(mismatched)} quote(s)",
                    ErrorCodes.DATA_LENGTH_MISMATCH,
                    context={"ids": mismatched}
                )
            store_logger.warning(
                f"[Store] Stored length differs from content length for {len(mismatched)} quote(s): "
                f"{', '.join(mismatched[:10])}"
            )

        return cls(quotes, source=source)

    def all(self) -> Tuple[Quote, ...]:
        """返回完整集合（原始顺序）"""
        return self._quotes

    def get(self, quote_id: str) -> Optional[Quote]:
        """按ID精确查找"""
        return self._index.get(quote_id)

    @property
    def count(self) -> int:
        return len(self._quotes)

    def __len__(self) -> int:
        return len(self._quotes)

    def __iter__(self) -> Iterator[Quote]:
        return iter(self._quotes)

    def __contains__(self, quote: object) -> bool:
        return isinstance(quote, Quote) and self._index.get(quote.id) == quote

    def __repr__(self) -> str:
        return f"QuoteStore(count={len(self._quotes)}, source={self.source!r})"


def _extract_records(payload: Any) -> List[Any]:
    """支持 {"quotes": [...]} 和顶层数组两种格式"""
    if isinstance(payload, dict):
        payload = payload.get("quotes")
    if not isinstance(payload, list):
        raise DataLoadError(
            "Quote source must be an array or an object with a 'quotes' array",
            ErrorCodes.DATA_INVALID_FORMAT
        )
    return payload
