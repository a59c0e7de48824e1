"""
Store module for the quote API.
Provides the immutable quote collection and the query engine over it.
"""

from .models import Quote
from .quote_store import QuoteStore
from .query_engine import QueryEngine, UNLIMITED, parse_int

__all__ = ['models', 'quote_store', 'query_engine', 'Quote', 'QuoteStore', 'QueryEngine', 'UNLIMITED', 'parse_int']
