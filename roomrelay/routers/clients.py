from __future__ import annotations

from fastapi import APIRouter, Depends

from ..registry import ClientRegistry
from ..schemas import ClientList, HealthResponse
from ..state import get_registry

router = APIRouter(prefix="", tags=["clients"])


@router.get("/", response_model=HealthResponse)
async def health():
    return HealthResponse()


@router.get("/clients", response_model=ClientList)
async def list_clients(registry: ClientRegistry = Depends(get_registry)):
    identities = await registry.identities()
    return ClientList(count=len(identities), identities=identities)
