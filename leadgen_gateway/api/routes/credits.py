from typing import Any

from fastapi import APIRouter, Depends

from ...services.gateway_service import GatewayService
from ..dependencies import get_gateway, get_organization_id
from ..responses import success

router = APIRouter(tags=["credits"])


@router.get("/credits")
async def credits(
    period: str | None = None,
    gateway: GatewayService = Depends(get_gateway),
    organization_id: str = Depends(get_organization_id),
) -> dict[str, Any]:
    return success(await gateway.usage_stats(organization_id, period))
