import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncGenerator

from fastapi import FastAPI, Depends, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from kilnlog.core.config import settings
from kilnlog.core.logger import generate_trace_id, set_trace_id, setup_logging
from kilnlog.core import state as transitions
from kilnlog.db.base import get_db, init_db
from kilnlog.db.store import load_state, save_state
from kilnlog.mcp.tools_server import router as tools_router
from kilnlog.reference import CLAY_BODIES, PROGRAM_DEFAULTS, ZONES, list_cones
from kilnlog.schemas import (
    ExportDocument,
    FiringAnalytics,
    FiringDraft,
    HardwarePatch,
    KilnState,
    OffsetSuggestion,
    ProgramDraft,
    ZoneOffsetPatch,
)
from kilnlog.tools.firing_stats import firing_analytics
from kilnlog.tools.hardware_health import classify_health, maintenance_alerts

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)

VERSION = "1.0.0"

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    logger.info("Starting up KilnLog backend...")
    await init_db()
    yield
    # Shutdown
    logger.info("Shutting down KilnLog backend...")

app = FastAPI(
    title="KilnLog API",
    version=VERSION,
    lifespan=lifespan
)

# Include JSON-RPC tool router
app.include_router(tools_router, prefix="/api")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def trace_requests(request: Request, call_next):
    trace_id = request.headers.get("X-Trace-Id")
    if trace_id:
        set_trace_id(trace_id)
    else:
        trace_id = generate_trace_id()
    response = await call_next(request)
    response.headers["X-Trace-Id"] = trace_id
    return response

@app.get("/health")
async def health_check():
    return {"status": "ok", "version": VERSION}


async def current_state(session: AsyncSession = Depends(get_db)) -> KilnState:
    return await load_state(session)


def _suggestion(state: KilnState) -> OffsetSuggestion:
    suggested = transitions.suggested_offsets(state)
    changed = []
    if suggested is not None:
        changed = [zone for zone in ZONES if suggested.get(zone) != state.zone_offsets.get(zone)]
    return OffsetSuggestion(current=state.zone_offsets, suggested=suggested, changed_zones=changed)


def _hardware_report(state: KilnState) -> list[dict[str, Any]]:
    try:
        return [
            {
                "name": name,
                **component.model_dump(mode="json"),
                "health": classify_health(component, name=name).model_dump(mode="json"),
            }
            for name, component in state.hardware.items()
        ]
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@app.get("/api/state")
async def get_state(state: KilnState = Depends(current_state)) -> KilnState:
    return state


# --- Firing Log ---

@app.get("/api/firings")
async def get_firings(
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.history_page_size, ge=1),
    state: KilnState = Depends(current_state),
) -> list[dict[str, Any]]:
    newest_first = list(reversed(state.firings))
    return [f.model_dump(mode="json") for f in newest_first[skip:skip + limit]]

@app.post("/api/firings")
async def log_firing(draft: FiringDraft, session: AsyncSession = Depends(get_db)):
    state = await load_state(session)
    new_state = transitions.apply_new_firing(state, draft)
    if new_state is state:
        raise HTTPException(status_code=400, detail="overall_result is required")

    try:
        await save_state(session, new_state)
    except Exception as e:
        logger.error(f"Error saving firing: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "status": "success",
        "firing": new_state.firings[-1].model_dump(mode="json"),
        "suggestion": _suggestion(new_state).model_dump(mode="json"),
    }


# --- Zone Offsets ---

@app.get("/api/offsets")
async def get_offsets(state: KilnState = Depends(current_state)):
    return state.zone_offsets

@app.put("/api/offsets")
async def put_offsets(patch: ZoneOffsetPatch, session: AsyncSession = Depends(get_db)):
    state = await load_state(session)
    new_state = transitions.set_zone_offsets(state, patch)
    try:
        await save_state(session, new_state)
    except Exception as e:
        logger.error(f"Error saving zone offsets: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return new_state.zone_offsets

@app.get("/api/offsets/suggestion", response_model=OffsetSuggestion)
async def get_offset_suggestion(state: KilnState = Depends(current_state)):
    return _suggestion(state)

@app.post("/api/offsets/{zone}/apply")
async def apply_suggestion(zone: str, session: AsyncSession = Depends(get_db)):
    if zone not in ZONES:
        raise HTTPException(status_code=404, detail=f"Unknown zone: {zone}")

    state = await load_state(session)
    new_state = transitions.apply_offset_suggestion(state, zone)
    applied = new_state is not state
    if applied:
        try:
            await save_state(session, new_state)
        except Exception as e:
            logger.error(f"Error applying {zone} offset: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    return {"zone": zone, "applied": applied, "zone_offsets": new_state.zone_offsets.model_dump()}


# --- Hardware ---

@app.get("/api/hardware")
async def get_hardware(state: KilnState = Depends(current_state)) -> list[dict[str, Any]]:
    return _hardware_report(state)

@app.patch("/api/hardware/{name}")
async def patch_hardware(name: str, patch: HardwarePatch, session: AsyncSession = Depends(get_db)):
    state = await load_state(session)
    try:
        new_state = transitions.update_hardware(state, name, patch)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown hardware component: {name}")

    try:
        await save_state(session, new_state)
    except Exception as e:
        logger.error(f"Error saving hardware {name}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return {"name": name, **new_state.hardware[name].model_dump(mode="json")}

@app.get("/api/hardware/alerts")
async def get_maintenance_alerts(state: KilnState = Depends(current_state)):
    try:
        alerts = maintenance_alerts(state.hardware)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "alerts": [a.model_dump() for a in alerts],
        "all_excellent": not alerts,
    }


# --- Programs ---

@app.get("/api/programs")
async def get_programs(state: KilnState = Depends(current_state)) -> list[dict[str, Any]]:
    return [p.model_dump(mode="json") for p in state.programs]

@app.post("/api/programs")
async def create_program(draft: ProgramDraft, session: AsyncSession = Depends(get_db)):
    state = await load_state(session)
    new_state = transitions.add_program(state, draft)
    if new_state is state:
        raise HTTPException(status_code=400, detail="name is required")

    try:
        await save_state(session, new_state)
    except Exception as e:
        logger.error(f"Error saving program: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    return {"status": "success", "program": new_state.programs[0].model_dump(mode="json")}


# --- Analytics & Reference ---

@app.get("/api/analytics", response_model=FiringAnalytics)
async def get_analytics(state: KilnState = Depends(current_state)):
    return firing_analytics(state.firings)

@app.get("/api/reference/cones")
async def get_cones():
    return {"cones": list_cones(), "program_defaults": PROGRAM_DEFAULTS}

@app.get("/api/reference/clay-bodies")
async def get_clay_bodies():
    return {"clay_bodies": CLAY_BODIES}


# --- Export / Import ---

@app.get("/api/export")
async def export_data(state: KilnState = Depends(current_state)):
    document = transitions.export_state(state)
    filename = f"kiln-data-{datetime.now(timezone.utc).date().isoformat()}.json"
    return JSONResponse(
        content=document.model_dump(mode="json"),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

@app.post("/api/import")
async def import_data(document: ExportDocument, session: AsyncSession = Depends(get_db)):
    new_state = transitions.replace_state(document)
    try:
        await save_state(session, new_state)
    except Exception as e:
        logger.error(f"Error importing data: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "status": "success",
        "firings": len(new_state.firings),
        "programs": len(new_state.programs),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("kilnlog.main:app", host="127.0.0.1", port=8000)
