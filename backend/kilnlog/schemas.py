from __future__ import annotations

import math
import re
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .core.config import settings
from .reference import CONE_TEMPS

Zone = Literal["top", "middle", "bottom"]

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def coerce_int(value: Any) -> int:
    """Lenient integer parse for form input: leading digits win, garbage becomes 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    match = _LEADING_INT.match(str(value or ""))
    return int(match.group(1)) if match else 0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


class FiringType(str, Enum):
    bisque = "bisque"
    glaze = "glaze"
    test = "test"


class LoadDensity(str, Enum):
    full = "full"
    partial = "partial"
    test = "test"


class HealthLevel(str, Enum):
    excellent = "Excellent"
    monitor = "Monitor"
    replace_soon = "Replace Soon"


class ZoneOffsetSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    top: int = Field(default=settings.default_zone_offset, ge=0, le=100, description="deg F")
    middle: int = Field(default=settings.default_zone_offset, ge=0, le=100, description="deg F")
    bottom: int = Field(default=settings.default_zone_offset, ge=0, le=100, description="deg F")

    @field_validator("top", "middle", "bottom", mode="before")
    @classmethod
    def _coerce_offset(cls, v: Any) -> int:
        return max(0, min(100, coerce_int(v)))

    def get(self, zone: str) -> int:
        return getattr(self, zone)


class ZoneOffsetPatch(BaseModel):
    top: int | None = None
    middle: int | None = None
    bottom: int | None = None

    @field_validator("top", "middle", "bottom", mode="before")
    @classmethod
    def _coerce_offset(cls, v: Any) -> int | None:
        if v is None:
            return None
        return max(0, min(100, coerce_int(v)))


class ZoneResults(BaseModel):
    model_config = ConfigDict(frozen=True)

    top: str = ""
    middle: str = ""
    bottom: str = ""

    @field_validator("top", "middle", "bottom", mode="before")
    @classmethod
    def _none_to_blank(cls, v: Any) -> str:
        return "" if v is None else str(v)

    def get(self, zone: str) -> str:
        return getattr(self, zone)


def _check_cone(v: Any) -> str:
    cone = str(v).strip()
    if cone not in CONE_TEMPS:
        raise ValueError(f"unknown cone {cone!r}; expected one of {', '.join(CONE_TEMPS)}")
    return cone


class FiringDraft(BaseModel):
    """Firing form as submitted; may be rejected by the reducer when the result is blank."""
    target_cone: str = "6"
    overall_result: str = Field(
        default="",
        validation_alias=AliasChoices("overall_result", "actual_result"),
        description="Witness cone / controller result, e.g. 'hot cone 6'",
    )
    zone_results: ZoneResults = Field(default_factory=ZoneResults)
    firing_type: FiringType = FiringType.glaze
    clay_body: str = ""
    glaze_type: str = ""
    load_density: LoadDensity = LoadDensity.full
    notes: str = ""

    @field_validator("target_cone", mode="before")
    @classmethod
    def _validate_cone(cls, v: Any) -> str:
        return _check_cone(v)


class FiringRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    target_cone: str
    overall_result: str = Field(..., min_length=1, validation_alias=AliasChoices("overall_result", "actual_result"))
    zone_results: ZoneResults = Field(default_factory=ZoneResults)
    zone_offsets: ZoneOffsetSet = Field(..., description="Offsets in effect at firing time (snapshot)")
    firing_type: FiringType = FiringType.glaze
    clay_body: str = ""
    glaze_type: str = ""
    load_density: LoadDensity = LoadDensity.full
    notes: str = ""
    created: datetime = Field(default_factory=_utcnow)

    @field_validator("target_cone", mode="before")
    @classmethod
    def _validate_cone(cls, v: Any) -> str:
        return _check_cone(v)


class HardwareComponent(BaseModel):
    model_config = ConfigDict(frozen=True)

    installed: str | None = Field(default=None, description="Install date, ISO YYYY-MM-DD")
    firing_count: int = Field(default=0, ge=0)
    max_life: int = Field(..., description="Rated life in firings")

    @field_validator("firing_count", "max_life", mode="before")
    @classmethod
    def _coerce_count(cls, v: Any) -> int:
        return coerce_int(v)


class HardwarePatch(BaseModel):
    installed: str | None = None
    firing_count: int | None = Field(default=None, ge=0)
    max_life: int | None = None

    @field_validator("firing_count", "max_life", mode="before")
    @classmethod
    def _coerce_count(cls, v: Any) -> int | None:
        return None if v is None else coerce_int(v)


class HealthStatus(BaseModel):
    component: str | None = None
    status: HealthLevel
    usage_percent: float = Field(..., description="firing_count / max_life * 100, unclamped")
    display_percent: float = Field(..., ge=0, le=100, description="usage_percent capped at 100 for progress bars")


class MaintenanceAlert(BaseModel):
    component: str
    level: Literal["monitor", "replace"]
    message: str
    usage_percent: float


class ProgramDraft(BaseModel):
    name: str = ""
    type: FiringType = FiringType.glaze
    target_temp: int = Field(default=2165, description="deg F")
    ramp_rate: int = Field(default=150, description="deg F per hour")
    hold_time: int = Field(default=10, description="minutes")
    clay_body: str = ""
    notes: str = ""

    @field_validator("target_temp", "ramp_rate", "hold_time", mode="before")
    @classmethod
    def _coerce_number(cls, v: Any) -> int:
        return coerce_int(v)


class FiringProgram(ProgramDraft):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    name: str = Field(..., min_length=1)
    created: datetime = Field(default_factory=_utcnow)


class FiringTypeShare(BaseModel):
    count: int
    percent: int


class FiringAnalytics(BaseModel):
    total_firings: int
    success_rate: int = Field(..., ge=0, le=100)
    average_middle_offset: int | None = None
    top_clay_body: str = "None"
    zone_average_offsets: dict[str, int] | None = None
    firing_type_counts: dict[str, FiringTypeShare] = Field(default_factory=dict)


def _default_hardware() -> dict[str, HardwareComponent]:
    return {name: HardwareComponent(max_life=life) for name, life in settings.default_max_life.items()}


class KilnState(BaseModel):
    """The whole persisted state. Firings are stored oldest first."""
    model_config = ConfigDict(frozen=True)

    firings: list[FiringRecord] = Field(default_factory=list)
    zone_offsets: ZoneOffsetSet = Field(default_factory=ZoneOffsetSet)
    hardware: dict[str, HardwareComponent] = Field(default_factory=_default_hardware)
    programs: list[FiringProgram] = Field(default_factory=list)


class ExportDocument(BaseModel):
    firings: list[FiringRecord] = Field(default_factory=list)
    zone_offsets: ZoneOffsetSet = Field(
        default_factory=ZoneOffsetSet,
        validation_alias=AliasChoices("zone_offsets", "zoneOffsets"),
    )
    hardware: dict[str, HardwareComponent] = Field(default_factory=_default_hardware)
    programs: list[FiringProgram] = Field(default_factory=list)
    exported: datetime = Field(default_factory=_utcnow)


class OffsetSuggestion(BaseModel):
    current: ZoneOffsetSet
    suggested: ZoneOffsetSet | None = Field(default=None, description="None when there is no firing history")
    changed_zones: list[Zone] = Field(default_factory=list)
