"""Search use case — filter the store, aggregate matches, enrich with an avatar."""

import logging
from dataclasses import dataclass

from app.application.interfaces import AvatarResolver, RecordStore
from app.application.services.card_renderer import build_search_card
from app.application.services.query_engine import (
    MAX_LIST_ITEMS,
    MAX_TIMESTAMPS,
    aggregate,
    search_records,
)
from app.domain.entities import Card, SearchField, SearchSummary
from app.domain.entities.device_record import clean

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "No matching records."


@dataclass
class SearchOutcome:
    """Result of one search: match count plus summary (None when nothing matched)."""

    field: SearchField
    raw_field: str
    query: str
    matches: int
    summary: SearchSummary | None = None
    avatar_url: str | None = None

    def to_card(self) -> Card | None:
        if self.summary is None:
            return None
        return build_search_card(
            self.raw_field, self.query, self.matches, self.summary, self.avatar_url
        )


class SearchService:
    """Runs keyword searches over the record store."""

    def __init__(
        self,
        store: RecordStore,
        avatar_resolver: AvatarResolver | None = None,
        *,
        max_items: int = MAX_LIST_ITEMS,
        max_timestamps: int = MAX_TIMESTAMPS,
    ):
        self._store = store
        self._avatar_resolver = avatar_resolver
        self._max_items = max_items
        self._max_timestamps = max_timestamps

    async def search(self, field: str | SearchField | None, value: str | None) -> SearchOutcome:
        search_field = SearchField.parse(field)
        raw_field = field.value if isinstance(field, SearchField) else clean(field) or search_field.value
        query = clean(value)

        records = await self._store.all_records()
        results = search_records(records, search_field, query)
        logger.info(
            "Search field=%s query=%r matched %d of %d record(s)",
            search_field.value, query, len(results), len(records),
        )

        outcome = SearchOutcome(
            field=search_field, raw_field=raw_field, query=query, matches=len(results)
        )
        if not results:
            return outcome

        outcome.summary = aggregate(
            results, max_items=self._max_items, max_timestamps=self._max_timestamps
        )
        if self._avatar_resolver is not None and outcome.summary.avatar_name:
            outcome.avatar_url = await self._avatar_resolver.resolve(outcome.summary.avatar_name)
        return outcome
