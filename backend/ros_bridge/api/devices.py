from typing import List

from fastapi import APIRouter, Depends

from ros_bridge.dependencies import get_dispatcher
from ros_bridge.schemas.config import DeviceDetail
from ros_bridge.services.dispatcher import BridgeDispatcher

router = APIRouter(prefix="/api/v1", tags=["Devices"])


@router.get("/devices", response_model=List[DeviceDetail])
async def list_devices(dispatcher: BridgeDispatcher = Depends(get_dispatcher)):
    """Configured devices, password masked"""
    return dispatcher.list_devices()
