from typing import Any

from fastapi import APIRouter, Depends

from ...models import EmailRequest
from ...services.gateway_service import GatewayService
from ..dependencies import get_gateway, get_organization_id
from ..responses import success

router = APIRouter(prefix="/email", tags=["email"])


@router.post("/verify")
async def verify_email(
    payload: EmailRequest,
    gateway: GatewayService = Depends(get_gateway),
    organization_id: str = Depends(get_organization_id),
) -> dict[str, Any]:
    return success(await gateway.verify_email(payload.email, organization_id))


@router.post("/enrich")
async def enrich_email(
    payload: EmailRequest,
    gateway: GatewayService = Depends(get_gateway),
    organization_id: str = Depends(get_organization_id),
) -> dict[str, Any]:
    result = await gateway.enrich_email(payload.email, payload.include_work_email, organization_id)
    return success(result)
