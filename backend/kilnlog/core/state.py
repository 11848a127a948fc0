"""
Kiln state transitions.

Every function here takes a KilnState and returns a new one; inputs are never
mutated. Persistence happens outside, after each transition (see kilnlog.db.store).
A draft that fails its precondition (blank result, blank program name) yields
the very same state object, so callers can detect a no-op with `is`.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from ..reference import ZONES
from ..schemas import (
    ExportDocument,
    FiringDraft,
    FiringProgram,
    FiringRecord,
    HardwareComponent,
    HardwarePatch,
    KilnState,
    ProgramDraft,
    ZoneOffsetPatch,
    ZoneOffsetSet,
)
from ..tools.offset_advisor import suggest_offsets
from .logger import log_event

logger = logging.getLogger(__name__)


def initial_state() -> KilnState:
    return KilnState()


def apply_new_firing(state: KilnState, draft: FiringDraft, now: datetime | None = None) -> KilnState:
    overall = draft.overall_result.strip()
    if not overall:
        logger.warning("Firing rejected: overall result is blank")
        return state

    record = FiringRecord(
        target_cone=draft.target_cone,
        overall_result=overall,
        zone_results=draft.zone_results,
        zone_offsets=state.zone_offsets.model_copy(),
        firing_type=draft.firing_type,
        clay_body=draft.clay_body,
        glaze_type=draft.glaze_type,
        load_density=draft.load_density,
        notes=draft.notes.strip(),
        created=now or datetime.now(timezone.utc),
    )

    hardware = {
        name: component.model_copy(update={"firing_count": component.firing_count + 1})
        for name, component in state.hardware.items()
    }

    log_event(logger, "Firing logged", cone=record.target_cone, result=record.overall_result, firing_id=record.id)
    return state.model_copy(update={"firings": [*state.firings, record], "hardware": hardware})


def set_zone_offsets(state: KilnState, patch: ZoneOffsetPatch) -> KilnState:
    changes = patch.model_dump(exclude_none=True)
    if not changes:
        return state
    offsets = state.zone_offsets.model_copy(update=changes)
    return state.model_copy(update={"zone_offsets": offsets})


def set_zone_offset(state: KilnState, zone: str, value: int | str) -> KilnState:
    if zone not in ZONES:
        raise KeyError(zone)
    return set_zone_offsets(state, ZoneOffsetPatch(**{zone: value}))


def apply_offset_suggestion(state: KilnState, zone: str) -> KilnState:
    if zone not in ZONES:
        raise KeyError(zone)

    suggested = suggest_offsets(state.firings, state.zone_offsets)
    if suggested is None or suggested.get(zone) == state.zone_offsets.get(zone):
        return state

    logger.info(f"Applying suggested {zone} offset: {state.zone_offsets.get(zone)} -> {suggested.get(zone)}")
    return set_zone_offset(state, zone, suggested.get(zone))


def update_hardware(state: KilnState, name: str, patch: HardwarePatch) -> KilnState:
    if name not in state.hardware:
        raise KeyError(name)

    # null leaves the field unchanged
    changes = patch.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        return state

    hardware = dict(state.hardware)
    hardware[name] = HardwareComponent.model_validate({**hardware[name].model_dump(), **changes})
    return state.model_copy(update={"hardware": hardware})


def add_program(state: KilnState, draft: ProgramDraft, now: datetime | None = None) -> KilnState:
    name = draft.name.strip()
    if not name:
        logger.warning("Program rejected: name is blank")
        return state

    program = FiringProgram(
        **draft.model_dump(exclude={"name"}),
        name=name,
        created=now or datetime.now(timezone.utc),
    )
    # Newest program first
    return state.model_copy(update={"programs": [program, *state.programs]})


def replace_state(document: ExportDocument) -> KilnState:
    log_event(logger, "Importing kiln data", firings=len(document.firings), programs=len(document.programs))
    return KilnState(
        firings=list(document.firings),
        zone_offsets=document.zone_offsets,
        hardware=dict(document.hardware),
        programs=list(document.programs),
    )


def export_state(state: KilnState, now: datetime | None = None) -> ExportDocument:
    return ExportDocument(
        firings=list(state.firings),
        zone_offsets=state.zone_offsets,
        hardware=dict(state.hardware),
        programs=list(state.programs),
        exported=now or datetime.now(timezone.utc),
    )


def suggested_offsets(state: KilnState) -> ZoneOffsetSet | None:
    return suggest_offsets(state.firings, state.zone_offsets)
