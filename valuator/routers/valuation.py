from fastapi import APIRouter, Depends, Header, Response
from ..schemas import ComparablesRequest, ComparablesResponse, ValuationRequest, ValuationResponse
from ..services.valuation_service import ValuationService
from ..core.security import require_api_key, rate_limit

router = APIRouter()

def service_dep() -> ValuationService:
    # Clients are cheap to build; override in tests to inject fakes.
    return ValuationService()

@router.post("/valuation", response_model=ValuationResponse)
async def post_valuation(
    body: ValuationRequest,
    response: Response,
    if_none_match: str | None = Header(default=None),
    _auth = Depends(require_api_key),
    _lim  = Depends(rate_limit),
    svc: ValuationService = Depends(service_dep),
):
    payload, from_cache, etag = await svc.value_property(body)
    if if_none_match and if_none_match == etag:
        return Response(status_code=304, headers={"ETag": etag})
    payload["cached"] = from_cache
    payload["etag"] = etag
    response.headers["ETag"] = etag
    return payload

@router.post("/comparables", response_model=ComparablesResponse)
async def post_comparables(
    body: ComparablesRequest,
    _auth = Depends(require_api_key),
    _lim  = Depends(rate_limit),
    svc: ValuationService = Depends(service_dep),
):
    return await svc.search_comparables(body)
