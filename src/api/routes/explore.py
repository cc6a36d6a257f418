from dataclasses import asdict
from datetime import datetime

from fastapi import APIRouter, Depends, Query

from src.api.deps import get_now, get_ranker_config, get_search_config, get_store
from src.api.schemas import (
    CandidateResponse,
    CreatorSummary,
    PostSummary,
    SearchResponse,
    SectionResponse,
    SectionsResponse,
    SuggestionResponse,
    SuggestionsResponse,
)
from src.components.ranking import Candidate, RankerConfig, rank
from src.components.search import (
    SearchConfig,
    SearchFilters,
    SortBy,
    search_creators,
    search_suggestions,
)
from src.domain.entities import AuthenticatedViewer, Creator, Post
from src.ports.store import SnapshotStorePort

router = APIRouter()


def _creator_summary(creator: Creator) -> CreatorSummary:
    return CreatorSummary.model_validate(creator.model_dump())


def _candidate_response(
    candidate: Candidate, creators_by_id: dict[str, Creator]
) -> CandidateResponse:
    item = candidate.item
    creator = item if isinstance(item, Creator) else creators_by_id.get(candidate.creator_id)
    post = None
    if isinstance(item, Post):
        post = PostSummary.model_validate(item.model_dump())

    return CandidateResponse(
        kind=candidate.kind,
        id=candidate.id,
        creator_id=candidate.creator_id,
        score=candidate.score,
        reason=candidate.reason,
        reason_details=candidate.reason_details,
        category=candidate.category,
        entitlement=candidate.entitlement.value if candidate.entitlement else None,
        creator=_creator_summary(creator) if creator is not None else None,
        post=post,
    )


@router.get("/sections", response_model=SectionsResponse)
def get_explore_sections(
    viewer_id: str | None = None,
    store: SnapshotStorePort = Depends(get_store),
    config: RankerConfig = Depends(get_ranker_config),
    now: datetime | None = Depends(get_now),
) -> SectionsResponse:
    """Ranked Explore sections for a viewer (anonymous when unknown)."""
    viewer = store.get_viewer_snapshot(viewer_id)
    pool = store.get_candidate_pool()
    creators_by_id = pool.creator_by_id()

    sections = rank(viewer, pool, config, now=now)
    return SectionsResponse(
        viewer_id=viewer.id if isinstance(viewer, AuthenticatedViewer) else None,
        sections=[
            SectionResponse(
                type=section.type,
                title=section.title,
                category=section.category,
                items=[_candidate_response(c, creators_by_id) for c in section.candidates],
            )
            for section in sections
        ],
    )


@router.get("/search", response_model=SearchResponse)
def search_explore_creators(
    q: str = "",
    category: str | None = None,
    country: str | None = None,
    verified_only: bool = False,
    online_only: bool = False,
    sort_by: SortBy = "relevance",
    viewer_id: str | None = None,
    store: SnapshotStorePort = Depends(get_store),
    config: SearchConfig = Depends(get_search_config),
    now: datetime | None = Depends(get_now),
) -> SearchResponse:
    """Search creators by name, category, bio or country."""
    filters = SearchFilters(
        categories=(category,) if category else (),
        countries=(country,) if country else (),
        verified_only=verified_only,
        online_only=online_only,
        sort_by=sort_by,
    )
    viewer = store.get_viewer_snapshot(viewer_id)
    creators = store.get_candidate_pool().creators

    found = search_creators(q, creators, filters, viewer, config, now=now)
    return SearchResponse(
        query=q,
        total=len(found),
        creators=[_creator_summary(c) for c in found],
    )


@router.get("/suggestions", response_model=SuggestionsResponse)
def get_search_suggestions(
    q: str = "",
    recent: list[str] = Query(default=[]),
    store: SnapshotStorePort = Depends(get_store),
    config: SearchConfig = Depends(get_search_config),
) -> SuggestionsResponse:
    """Search box suggestions; recent searches are supplied by the client."""
    creators = store.get_candidate_pool().creators
    suggestions = search_suggestions(q, creators, recent, config)
    return SuggestionsResponse(
        query=q,
        suggestions=[SuggestionResponse(**asdict(s)) for s in suggestions],
    )
