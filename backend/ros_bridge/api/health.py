from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ros_bridge.dependencies import get_dispatcher
from ros_bridge.services.dispatcher import BridgeDispatcher


class HealthOut(BaseModel):
    status: str = "ok"
    devices: int
    aliases: int


router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthOut)
async def health(dispatcher: BridgeDispatcher = Depends(get_dispatcher)):
    # no device is contacted here
    return HealthOut(devices=len(dispatcher.config.devices), aliases=len(dispatcher.config.aliases))
