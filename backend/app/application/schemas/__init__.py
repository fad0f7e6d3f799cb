from .intake import IntakeRequest, IntakeResponse
from .search import SearchRequest, SearchResponse, SearchSummarySchema

__all__ = [
    "IntakeRequest",
    "IntakeResponse",
    "SearchRequest",
    "SearchResponse",
    "SearchSummarySchema",
]
