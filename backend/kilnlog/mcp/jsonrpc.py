from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

# JSON-RPC 2.0 error codes used by the tool server
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
TOOL_ERROR = -32000

RequestId = str | int | None


class JsonRpcError(BaseModel):
    code: int
    message: str
    data: Any | None = None


class JsonRpcRequest(BaseModel):
    jsonrpc: Literal["2.0"] = "2.0"
    id: RequestId = None
    method: str
    params: dict[str, Any] | None = None


class JsonRpcResponse(BaseModel):
    jsonrpc: Literal["2.0"] = "2.0"
    id: RequestId = None
    result: Any | None = None
    error: JsonRpcError | None = None

    @classmethod
    def ok(cls, *, id: RequestId, result: Any) -> "JsonRpcResponse":
        return cls(id=id, result=result)

    @classmethod
    def content(cls, *, id: RequestId, model: BaseModel | None) -> "JsonRpcResponse":
        """Wrap a tool's pydantic output the way tools/call returns it."""
        payload = model.model_dump(mode="json") if model is not None else None
        return cls(id=id, result={"content": payload})

    @classmethod
    def fail(cls, *, id: RequestId, code: int, message: str, data: Any | None = None) -> "JsonRpcResponse":
        return cls(id=id, error=JsonRpcError(code=code, message=message, data=data))


class ToolCallParams(BaseModel):
    name: str = Field(..., min_length=1)
    arguments: dict[str, Any] = Field(default_factory=dict)
