"""POST /search — company search."""

from fastapi import APIRouter, Depends

from leadagent.deps import get_exa_client
from leadagent.schemas.search import SearchRequest, SearchResponse
from leadagent.services.search import ExaClient

router = APIRouter(prefix="/search", tags=["search"])


@router.post("", response_model=SearchResponse, response_model_exclude_none=True)
async def search(data: SearchRequest, exa: ExaClient = Depends(get_exa_client)):
    return SearchResponse(results=await exa.search_companies(data.query))
