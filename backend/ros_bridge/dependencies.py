"""Request-scoped access to the dispatcher built at startup"""

from fastapi import HTTPException, Request

from ros_bridge.services.dispatcher import BridgeDispatcher


def get_dispatcher(request: Request) -> BridgeDispatcher:
    dispatcher = getattr(request.app.state, "dispatcher", None)
    if dispatcher is None:
        raise HTTPException(
            status_code=500,
            detail="Bridge is not configured. Server is starting up."
        )
    return dispatcher
