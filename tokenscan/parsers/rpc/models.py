from typing import Any

from pydantic import BaseModel


class JsonRpcError(BaseModel):
    code: int = 0
    message: str = ""
    data: Any = None

    model_config = {"extra": "ignore"}


class JsonRpcResponse(BaseModel):
    jsonrpc: str = "2.0"
    id: int | str | None = None
    result: Any = None
    error: JsonRpcError | None = None

    model_config = {"extra": "ignore"}
