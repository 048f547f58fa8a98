from typing import Any

from fastapi import APIRouter, Depends

from ...errors import ValidationError
from ...services.gateway_service import GatewayService
from ..dependencies import get_gateway, get_organization_id
from ..responses import success

router = APIRouter(tags=["company"])

MAX_COMPANY_NAME_LENGTH = 100


@router.get("/company-employees")
async def company_employees(
    company: str | None = None,
    gateway: GatewayService = Depends(get_gateway),
    organization_id: str = Depends(get_organization_id),
) -> dict[str, Any]:
    name = (company or "").strip()
    if not name:
        raise ValidationError(
            "Company parameter is required",
            details=["company: example /company-employees?company=Microsoft"],
        )
    if len(name) > MAX_COMPANY_NAME_LENGTH:
        raise ValidationError(
            details=[f"company: must be at most {MAX_COMPANY_NAME_LENGTH} characters"]
        )
    return success(await gateway.company_employees(name, organization_id))
