"""
Item Endpoints - generic CRUD over a device alias

    GET    /api/v1/devices/{dev}/{alias}        list       200
    POST   /api/v1/devices/{dev}/{alias}        create     201
    GET    /api/v1/devices/{dev}/{alias}/{id}   get        200 / 404
    PATCH  /api/v1/devices/{dev}/{alias}/{id}   update     202
    DELETE /api/v1/devices/{dev}/{alias}/{id}   delete     204

Error Codes:
- 400: body is not a JSON object of strings
- 404: unknown device/alias/id, or operation disabled on the alias
- 500: device unreachable, TLS trust failure, login rejected, device trap
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from ros_bridge.dependencies import get_dispatcher
from ros_bridge.schemas.command import BridgeResponse
from ros_bridge.services.dispatcher import BridgeDispatcher

router = APIRouter(prefix="/api/v1/devices", tags=["Items"])

ATTRIBUTES_BODY = {
    "requestBody": {
        "required": True,
        "content": {
            "application/json": {
                "schema": {
                    "type": "object",
                    "additionalProperties": {"type": "string"},
                    "example": {"address": "10.0.0.1/24", "interface": "ether1"},
                }
            }
        },
    }
}


def to_response(result: BridgeResponse) -> Response:
    if result.body is None:
        return Response(status_code=result.status_code)
    return JSONResponse(status_code=result.status_code, content=result.body)


@router.get("/{dev}/{alias}")
async def list_items(dev: str, alias: str, dispatcher: BridgeDispatcher = Depends(get_dispatcher)):
    """All records under the alias path"""
    return to_response(await run_in_threadpool(dispatcher.list_items, dev, alias))


@router.post("/{dev}/{alias}", status_code=201, openapi_extra=ATTRIBUTES_BODY)
async def create_item(
    dev: str,
    alias: str,
    request: Request,
    dispatcher: BridgeDispatcher = Depends(get_dispatcher),
):
    """Add a record; the response carries the record as read back from the device"""
    body = await request.body()
    return to_response(await run_in_threadpool(dispatcher.create_item, dev, alias, body))


@router.get("/{dev}/{alias}/{id}")
async def get_item(dev: str, alias: str, id: str, dispatcher: BridgeDispatcher = Depends(get_dispatcher)):
    return to_response(await run_in_threadpool(dispatcher.get_item, dev, alias, id))


@router.patch("/{dev}/{alias}/{id}", status_code=202, openapi_extra=ATTRIBUTES_BODY)
async def patch_item(
    dev: str,
    alias: str,
    id: str,
    request: Request,
    dispatcher: BridgeDispatcher = Depends(get_dispatcher),
):
    body = await request.body()
    return to_response(await run_in_threadpool(dispatcher.update_item, dev, alias, id, body))


@router.delete("/{dev}/{alias}/{id}", status_code=204)
async def delete_item(dev: str, alias: str, id: str, dispatcher: BridgeDispatcher = Depends(get_dispatcher)):
    return to_response(await run_in_threadpool(dispatcher.delete_item, dev, alias, id))
