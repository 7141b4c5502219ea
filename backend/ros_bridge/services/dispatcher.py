"""
Bridge Dispatcher - core service behind the REST endpoints

Flow (per request, no state shared between requests):
-----
1. Resolve device by name            -> NotFoundError "no such device"
2. Resolve alias by name             -> NotFoundError "no such alias"
3. Check alias capability flag       -> NotFoundError (no session opened)
4. Decode request body (create/update) -> BadRequestError
5. Open device session
6. Build sentence from OperationIntent
7. Run sentence on the device
8. Interpret reply into BridgeResponse
9. Close session (always)

Methods are blocking; the API layer runs them in the thread pool.
"""
from typing import Dict, List, Optional, Tuple

from ros_bridge.builders.sentences import build_sentence, parse_body
from ros_bridge.clients.routeros_client import RouterOSSessionManager
from ros_bridge.core.errors import NotFoundError
from ros_bridge.core.logging import logger
from ros_bridge.schemas.command import BridgeResponse, Operation, OperationIntent
from ros_bridge.schemas.config import AliasDetail, Config, DeviceDetail
from ros_bridge.services.reply_interpreter import ReplyInterpreter

# alias flag guarding each mutating operation; list/get are always allowed
CAPABILITY_FLAGS = {
    Operation.CREATE: "create",
    Operation.UPDATE: "update",
    Operation.DELETE: "delete",
}


class BridgeDispatcher:

    def __init__(
        self,
        config: Config,
        sessions: Optional[RouterOSSessionManager] = None,
        interpreter: Optional[ReplyInterpreter] = None,
    ):
        self.config = config
        self.sessions = sessions or RouterOSSessionManager()
        self.interpreter = interpreter or ReplyInterpreter()
        # pre-computed, password masked
        self._redacted_devices = [device.redacted() for device in config.devices.values()]

    # ===== Configuration views =====

    def list_devices(self) -> List[Dict]:
        return [device.model_dump() for device in self._redacted_devices]

    def list_aliases(self) -> Dict[str, Dict]:
        return {name: alias.model_dump() for name, alias in self.config.aliases.items()}

    # ===== Item operations =====

    def list_items(self, dev: str, alias: str) -> BridgeResponse:
        return self._dispatch(dev, alias, Operation.LIST)

    def get_item(self, dev: str, alias: str, item_id: str) -> BridgeResponse:
        return self._dispatch(dev, alias, Operation.GET, item_id=item_id)

    def create_item(self, dev: str, alias: str, raw_body: Optional[bytes]) -> BridgeResponse:
        return self._dispatch(dev, alias, Operation.CREATE, raw_body=raw_body)

    def update_item(self, dev: str, alias: str, item_id: str, raw_body: Optional[bytes]) -> BridgeResponse:
        return self._dispatch(dev, alias, Operation.UPDATE, item_id=item_id, raw_body=raw_body)

    def delete_item(self, dev: str, alias: str, item_id: str) -> BridgeResponse:
        return self._dispatch(dev, alias, Operation.DELETE, item_id=item_id)

    # ===== Internals =====

    def resolve(self, dev: str, alias: str) -> Tuple[DeviceDetail, AliasDetail]:
        device = self.config.devices.get(dev)
        if device is None:
            raise NotFoundError(f"no such device: {dev}")
        alias_detail = self.config.aliases.get(alias)
        if alias_detail is None:
            raise NotFoundError(f"no such alias: {alias}")
        return device, alias_detail

    def _dispatch(
        self,
        dev: str,
        alias: str,
        operation: Operation,
        item_id: Optional[str] = None,
        raw_body: Optional[bytes] = None,
    ) -> BridgeResponse:
        logger.debug(f"dispatch op={operation.value} dev={dev} alias={alias} id={item_id}")
        device, alias_detail = self.resolve(dev, alias)

        flag = CAPABILITY_FLAGS.get(operation)
        if flag is not None and not getattr(alias_detail, flag):
            logger.info(f"{operation.value} not allowed on alias={alias}")
            raise NotFoundError()

        body = parse_body(raw_body) if operation in (Operation.CREATE, Operation.UPDATE) else {}
        intent = OperationIntent(operation=operation, path=alias_detail.path, item_id=item_id, body=body)

        with self.sessions.session(device) as session:
            reply = session.run(build_sentence(intent))
            return self.interpreter.interpret(intent, reply, session)
