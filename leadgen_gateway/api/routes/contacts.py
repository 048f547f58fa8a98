from typing import Any

from fastapi import APIRouter, Depends, Query

from ...errors import ValidationError
from ...models import BulkEnrichRequest, RevealRequest
from ...services.gateway_service import GatewayService
from ...services.utils.validation import is_valid_linkedin_url
from ..dependencies import get_gateway, get_organization_id
from ..responses import success

router = APIRouter(prefix="/contacts", tags=["contacts"])


@router.post("/reveal")
async def reveal_contacts(
    payload: RevealRequest,
    gateway: GatewayService = Depends(get_gateway),
    organization_id: str = Depends(get_organization_id),
) -> dict[str, Any]:
    result = await gateway.reveal_contacts(payload.linkedin_url, payload.reveal_types, organization_id)
    return success(result)


@router.get("/availability")
async def contact_availability(
    linkedin_url: str = Query(...),
    gateway: GatewayService = Depends(get_gateway),
    organization_id: str = Depends(get_organization_id),
) -> dict[str, Any]:
    if not is_valid_linkedin_url(linkedin_url):
        raise ValidationError(details=["linkedin_url: Invalid LinkedIn URL format"])
    return success(await gateway.check_availability(linkedin_url, organization_id))


@router.post("/bulk-enrich")
async def submit_bulk_enrichment(
    payload: BulkEnrichRequest,
    gateway: GatewayService = Depends(get_gateway),
    organization_id: str = Depends(get_organization_id),
) -> dict[str, Any]:
    result = await gateway.submit_bulk_enrichment(
        payload.linkedin_urls, payload.include_phone, organization_id
    )
    return success(result)


@router.get("/bulk-enrich/{job_id}")
async def bulk_enrichment_status(
    job_id: str,
    gateway: GatewayService = Depends(get_gateway),
    organization_id: str = Depends(get_organization_id),
) -> dict[str, Any]:
    return success(await gateway.bulk_enrichment_status(job_id, organization_id))
