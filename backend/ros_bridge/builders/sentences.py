"""
Sentence builders: OperationIntent -> RouterOS API words

    list    <path>/print
    get     <path>/print   ?.id=<id>
    create  <path>/add     =<key>=<value> ...
    update  <path>/set     ?.id=<id>  =<key>=<value> ...
    delete  <path>/remove  ?.id=<id>

Capability flags are enforced by the dispatcher, never here.
"""
import json
from typing import Dict, Mapping, Optional, Tuple

from ros_bridge.core.errors import BadRequestError
from ros_bridge.schemas.command import Operation, OperationIntent

Sentence = Tuple[str, ...]


def command_word(path: str, action: str) -> str:
    return f"{path}/{action}"


def id_query(item_id: str) -> str:
    return f"?.id={item_id}"


def encode_attributes(body: Mapping[str, str]) -> Sentence:
    return tuple(f"={key}={value}" for key, value in body.items())


def build_list(path: str) -> Sentence:
    return (command_word(path, "print"),)


def build_get(path: str, item_id: str) -> Sentence:
    return (command_word(path, "print"), id_query(item_id))


def build_create(path: str, body: Mapping[str, str]) -> Sentence:
    return (command_word(path, "add"),) + encode_attributes(body)


def build_update(path: str, item_id: str, body: Mapping[str, str]) -> Sentence:
    return (command_word(path, "set"), id_query(item_id)) + encode_attributes(body)


def build_delete(path: str, item_id: str) -> Sentence:
    return (command_word(path, "remove"), id_query(item_id))


def _require_id(intent: OperationIntent) -> str:
    if intent.item_id is None:
        raise ValueError(f"operation '{intent.operation.value}' needs an item id")
    return intent.item_id


def build_sentence(intent: OperationIntent) -> Sentence:
    op = intent.operation
    if op == Operation.LIST:
        return build_list(intent.path)
    if op == Operation.GET:
        return build_get(intent.path, _require_id(intent))
    if op == Operation.CREATE:
        return build_create(intent.path, intent.body)
    if op == Operation.UPDATE:
        return build_update(intent.path, _require_id(intent), intent.body)
    if op == Operation.DELETE:
        return build_delete(intent.path, _require_id(intent))
    raise ValueError(f"unsupported operation: {op}")


def parse_body(raw: Optional[bytes]) -> Dict[str, str]:
    """
    Decode a create/update request body

    The payload must be a JSON object whose values are all strings,
    e.g. {"address": "10.0.0.1/24", "interface": "ether1"}.

    Raises:
        BadRequestError: empty body, invalid JSON, non-object or non-string value
    """
    if not raw:
        raise BadRequestError("request body must be a JSON object")
    try:
        payload = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise BadRequestError(f"invalid JSON body: {e}") from e

    if not isinstance(payload, dict):
        raise BadRequestError("request body must be a JSON object")
    for key, value in payload.items():
        if not isinstance(value, str):
            raise BadRequestError(f"value of '{key}' must be a string, got {type(value).__name__}")
    return payload
