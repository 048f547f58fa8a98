from fastapi import Header, Request

from ..services.gateway_service import GatewayService
from ..services.utils.constants import DEFAULT_ORGANIZATION


def get_gateway(request: Request) -> GatewayService:
    return request.app.state.gateway


def get_organization_id(x_organization_id: str | None = Header(default=None)) -> str:
    return (x_organization_id or "").strip() or DEFAULT_ORGANIZATION
