from typing import Dict

from fastapi import APIRouter, Depends

from ros_bridge.dependencies import get_dispatcher
from ros_bridge.schemas.config import AliasDetail
from ros_bridge.services.dispatcher import BridgeDispatcher

router = APIRouter(prefix="/api/v1", tags=["Aliases"])


@router.get("/aliases", response_model=Dict[str, AliasDetail])
async def list_aliases(dispatcher: BridgeDispatcher = Depends(get_dispatcher)):
    """Configured aliases keyed by name"""
    return dispatcher.list_aliases()
