"""Record search endpoint — the HTTP twin of the /search slash command."""

from fastapi import APIRouter, Depends

from app.application.schemas.search import SearchRequest, SearchResponse, SearchSummarySchema
from app.application.services import SearchService
from app.infrastructure.dependencies import get_search_service, require_intake_auth

router = APIRouter(tags=["Search"], dependencies=[Depends(require_intake_auth)])


@router.post("/search", response_model=SearchResponse)
async def search_records(
    data: SearchRequest,
    service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    """Filter records by field and substring; returns an aggregated summary."""
    outcome = await service.search(data.field, data.value)
    return SearchResponse(
        field=outcome.field.value,
        query=outcome.query,
        matches=outcome.matches,
        summary=(
            SearchSummarySchema.model_validate(outcome.summary, from_attributes=True)
            if outcome.summary is not None
            else None
        ),
        avatar_url=outcome.avatar_url,
    )
