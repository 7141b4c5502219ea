"""
Reply Interpreter - device Reply -> BridgeResponse

    list    200 + array of records (possibly empty)
    get     404 without body when nothing matched, else first record
    create  re-read by returned id -> 201
    update  re-read by returned id (or the request id) -> 202
    delete  204 on "!done", DeviceError otherwise

Any "!trap" becomes DeviceError (HTTP 500).
"""
from ros_bridge.builders.sentences import build_get
from ros_bridge.core.errors import DeviceError
from ros_bridge.core.logging import logger
from ros_bridge.schemas.command import BridgeResponse, Operation, OperationIntent, Reply

STATUS_AFTER = {
    Operation.GET: 200,
    Operation.CREATE: 201,
    Operation.UPDATE: 202,
}


def ensure_success(reply: Reply) -> Reply:
    if not reply.done:
        raise DeviceError(reply.status, reply.message)
    return reply


def list_response(reply: Reply) -> BridgeResponse:
    ensure_success(reply)
    return BridgeResponse(status_code=200, body=list(reply.records))


def item_response(reply: Reply, status_code: int) -> BridgeResponse:
    ensure_success(reply)
    if not reply.records:
        return BridgeResponse(status_code=404)
    return BridgeResponse(status_code=status_code, body=reply.records[0])


def delete_response(reply: Reply) -> BridgeResponse:
    if reply.done:
        return BridgeResponse(status_code=204)
    raise DeviceError(reply.status, reply.message)


class ReplyInterpreter:
    def interpret(self, intent: OperationIntent, reply: Reply, session) -> BridgeResponse:
        """
        Args:
            intent: the operation that produced reply
            reply: device answer to the intent's sentence
            session: live RouterOSSession, used to re-read created/updated items
        """
        op = intent.operation
        if op == Operation.LIST:
            return list_response(reply)
        if op == Operation.GET:
            return item_response(reply, STATUS_AFTER[op])
        if op == Operation.DELETE:
            return delete_response(reply)
        if op in (Operation.CREATE, Operation.UPDATE):
            ensure_success(reply)
            item_id = self._returned_id(intent, reply)
            follow_up = session.run(build_get(intent.path, item_id))
            return item_response(follow_up, STATUS_AFTER[op])
        raise ValueError(f"unsupported operation: {op}")

    def _returned_id(self, intent: OperationIntent, reply: Reply) -> str:
        if reply.returned_ids:
            return reply.returned_ids[0]
        # "set" does not return an id on RouterOS
        if intent.item_id is not None:
            return intent.item_id
        logger.error(f"device returned no id for {intent.operation.value} on {intent.path}")
        raise DeviceError(reply.status, "no id returned by device")
