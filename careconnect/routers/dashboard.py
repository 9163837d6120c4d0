# careconnect/routers/dashboard.py
from fastapi import APIRouter, Depends, Request

from ..client import MarketplaceClient
from ..loaders import load_parent_dashboard
from ..middleware.rate_limit import limiter, READ_LIMIT
from ..schemas.dashboard import ParentDashboard
from ..security import get_marketplace_client

router = APIRouter()

@router.get("/parent", response_model=ParentDashboard)
@limiter.limit(READ_LIMIT)
async def parent_dashboard(
    request: Request,
    client: MarketplaceClient = Depends(get_marketplace_client),
):
    """
    Perfil, trabajos, cuidadores, reservas e hijos en una sola llamada.
    Lo que falle llega vacío y su nombre aparece en `failed`.
    """
    return await load_parent_dashboard(client)
