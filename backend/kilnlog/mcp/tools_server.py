from __future__ import annotations

import logging
from typing import Any, Callable

from fastapi import APIRouter
from pydantic import BaseModel, Field, ValidationError

from ..reference import cone_temperature
from ..schemas import FiringRecord, HardwareComponent, HealthStatus, ZoneOffsetSet
from ..tools.firing_stats import success_rate
from ..tools.hardware_health import classify_health
from ..tools.offset_advisor import suggest_offsets
from .jsonrpc import (
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    TOOL_ERROR,
    JsonRpcRequest,
    JsonRpcResponse,
    ToolCallParams,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class SuggestOffsetsInputs(BaseModel):
    history: list[FiringRecord] = Field(default_factory=list, description="Oldest first")
    current_offsets: ZoneOffsetSet = Field(default_factory=ZoneOffsetSet)


class ClassifyHealthInputs(BaseModel):
    component: HardwareComponent
    name: str | None = None


class SuccessRateInputs(BaseModel):
    history: list[FiringRecord] = Field(default_factory=list)


class SuccessRateResult(BaseModel):
    success_rate: int
    total_firings: int


class ConeTemperatureInputs(BaseModel):
    cone: str


class ConeTemperatureResult(BaseModel):
    cone: str
    temp_f: int | None = None


def _run_suggest_offsets(args: dict[str, Any]) -> BaseModel | None:
    inp = SuggestOffsetsInputs.model_validate(args)
    return suggest_offsets(inp.history, inp.current_offsets)


def _run_classify_health(args: dict[str, Any]) -> BaseModel:
    inp = ClassifyHealthInputs.model_validate(args)
    return classify_health(inp.component, name=inp.name)


def _run_success_rate(args: dict[str, Any]) -> BaseModel:
    inp = SuccessRateInputs.model_validate(args)
    return SuccessRateResult(success_rate=success_rate(inp.history), total_firings=len(inp.history))


def _run_cone_temperature(args: dict[str, Any]) -> BaseModel:
    inp = ConeTemperatureInputs.model_validate(args)
    return ConeTemperatureResult(cone=inp.cone, temp_f=cone_temperature(inp.cone))


_TOOLS: dict[str, tuple[str, type[BaseModel], Any, Callable[[dict[str, Any]], BaseModel | None]]] = {
    "suggest_offsets": (
        "Suggest next top/middle/bottom offsets from the last five firings",
        SuggestOffsetsInputs,
        ZoneOffsetSet,
        _run_suggest_offsets,
    ),
    "classify_health": (
        "Hardware wear status (Excellent / Monitor / Replace Soon)",
        ClassifyHealthInputs,
        HealthStatus,
        _run_classify_health,
    ),
    "success_rate": (
        "Percentage of firings that hit their target cone",
        SuccessRateInputs,
        SuccessRateResult,
        _run_success_rate,
    ),
    "cone_temperature": (
        "Reference temperature (deg F) for a pyrometric cone",
        ConeTemperatureInputs,
        ConeTemperatureResult,
        _run_cone_temperature,
    ),
}


def _tool_schemas() -> dict[str, dict[str, Any]]:
    return {
        name: {
            "description": description,
            "inputSchema": inputs.model_json_schema(),
            "outputSchema": outputs.model_json_schema(),
        }
        for name, (description, inputs, outputs, _) in _TOOLS.items()
    }


@router.post("/mcp/tools")
async def mcp_tools(req: JsonRpcRequest) -> JsonRpcResponse:
    if req.method == "tools/list":
        tools = [
            {"name": name, "description": meta["description"], "inputSchema": meta["inputSchema"]}
            for name, meta in _tool_schemas().items()
        ]
        return JsonRpcResponse.ok(id=req.id, result={"tools": tools})

    if req.method == "tools/call":
        try:
            params = ToolCallParams.model_validate(req.params or {})
        except ValidationError as e:
            return JsonRpcResponse.fail(id=req.id, code=INVALID_PARAMS, message="Invalid params", data=str(e))

        tool = _TOOLS.get(params.name)
        if tool is None:
            return JsonRpcResponse.fail(id=req.id, code=METHOD_NOT_FOUND, message=f"Unknown tool: {params.name}")

        run = tool[3]
        try:
            out = run(params.arguments)
        except ValidationError as e:
            return JsonRpcResponse.fail(id=req.id, code=INVALID_PARAMS, message="Invalid arguments", data=str(e))
        except ValueError as e:
            logger.warning(f"Tool {params.name} failed: {e}")
            return JsonRpcResponse.fail(id=req.id, code=TOOL_ERROR, message="Tool execution error", data=str(e))
        return JsonRpcResponse.content(id=req.id, model=out)

    return JsonRpcResponse.fail(id=req.id, code=METHOD_NOT_FOUND, message=f"Method not found: {req.method}")
