"""
Command Schemas

- Operation / OperationIntent: what the REST caller asked for
- Reply: what the device answered to one sentence
- BridgeResponse: HTTP-level outcome handed back to the API layer
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

REPLY_DONE = "!done"
REPLY_TRAP = "!trap"


class Operation(str, Enum):
    LIST = "list"
    GET = "get"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class OperationIntent(BaseModel):
    model_config = ConfigDict(frozen=True)

    operation: Operation
    path: str                           # device-side path, e.g. "/ip/address"
    item_id: Optional[str] = None       # ".id" for item-scoped operations
    body: Dict[str, str] = {}           # attributes for create/update


class Reply(BaseModel):
    records: List[Dict[str, str]] = []  # one map per "!re" sentence
    status: str = REPLY_DONE            # terminal status word
    message: Optional[str] = None       # "=message=" of a "!trap"
    returned_ids: List[str] = []        # "=ret=" values of "!done"

    @property
    def done(self) -> bool:
        return self.status == REPLY_DONE


class BridgeResponse(BaseModel):
    status_code: int = 200
    body: Optional[Any] = None          # None means "no body"
