from typing import Any

from fastapi import APIRouter, Depends

from ...errors import ValidationError
from ...services.gateway_service import GatewayService
from ...services.utils.validation import validate_domain
from ..dependencies import get_gateway, get_organization_id
from ..responses import success

router = APIRouter(prefix="/company", tags=["company"])


def _checked_domain(domain: str) -> str:
    problems = validate_domain(domain)
    if problems:
        raise ValidationError(details=[f"domain: {problem}" for problem in problems])
    return domain.lower()


@router.get("/{domain}")
async def company_info(
    domain: str,
    gateway: GatewayService = Depends(get_gateway),
    organization_id: str = Depends(get_organization_id),
) -> dict[str, Any]:
    return success(await gateway.company_info(_checked_domain(domain), organization_id))


@router.get("/{domain}/decision-makers")
async def decision_makers(
    domain: str,
    reveal_info: bool = False,
    gateway: GatewayService = Depends(get_gateway),
    organization_id: str = Depends(get_organization_id),
) -> dict[str, Any]:
    result = await gateway.decision_makers(_checked_domain(domain), reveal_info, organization_id)
    return success(result)
