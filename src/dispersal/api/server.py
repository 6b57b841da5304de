"""FastAPI application exposing the placement query and mutation surface."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field

from dispersal.core.bus import AIRCRAFT_UPDATED, DOMES_UPDATED, POSITIONS_UPDATED
from dispersal.core.types import GroundState, Operator, OperatorRole
from dispersal.distribution.config import DistributionParams, DistributionStrategy
from dispersal.distribution.manager import PlacementManager
from dispersal.io.table import (
    CsvFormatError,
    build_table_rows,
    export_csv,
    filter_rows,
    import_csv,
)

logger = logging.getLogger(__name__)


class AssignRequest(BaseModel):
    aircraft_id: str
    position_id: str


class AircraftRequest(BaseModel):
    aircraft_id: str


class DistributeRequest(BaseModel):
    strategy: DistributionStrategy | None = None
    max_per_position: int | None = Field(default=None, ge=0)


class LocationRequest(BaseModel):
    latitude: float
    longitude: float
    location: GroundState


class SuspicionRequest(BaseModel):
    reason: str


class DomeAssignRequest(BaseModel):
    aircraft_id: str
    dome_id: str


def _forbidden() -> JSONResponse:
    return JSONResponse(content={"error": "Admin role required"}, status_code=403)


def create_app(manager: PlacementManager) -> FastAPI:
    """Create the FastAPI application around one session's manager.

    Mutating endpoints honour the ``X-Operator`` / ``X-Operator-Role``
    headers: a viewer gets 403.  Headers apply to their own request only;
    without them the session's current operator decides.

    ``revision`` in ``/api/status`` counts published store changes so
    polling clients can tell when to refetch.
    """
    app = FastAPI(title="DISPERSAL", version="0.1.0")
    app.state.manager = manager
    app.state.notes = {}
    app.state.revision = 0

    def _on_store_change(ids: list[str]) -> None:
        app.state.revision += 1

    for event in (AIRCRAFT_UPDATED, DOMES_UPDATED, POSITIONS_UPDATED):
        manager.store.bus.subscribe(event, _on_store_change)

    def _authorize(request: Request) -> tuple[bool, Operator | None]:
        """Return ``(allowed, operator)`` for one request."""
        username = request.headers.get("x-operator")
        role_str = request.headers.get("x-operator-role")
        if not (username or role_str):
            operator = manager.store.current_operator
            return operator is None or operator.is_admin, operator
        try:
            role = OperatorRole(role_str or "viewer")
        except ValueError:
            return False, None
        name = username or "anonymous"
        operator = Operator(id=name, username=name, role=role)
        return operator.is_admin, operator

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @app.get("/api/status")
    async def get_status():
        return JSONResponse(content={**manager.get_status(), "revision": app.state.revision})

    @app.get("/api/bases")
    async def get_bases():
        out = []
        for base in manager.store.bases:
            occupied, capacity = manager.base_occupancy(base.id)
            out.append({**base.to_dict(), "occupied": occupied, "position_capacity": capacity})
        return JSONResponse(content=out)

    @app.get("/api/positions")
    async def get_positions():
        occ = manager.occupancy_map()
        return JSONResponse(content=[
            {
                **p.to_dict(),
                "occupancy": occ[p.id],
                "available": manager.get_available_capacity(p.id),
            }
            for p in manager.store.positions
        ])

    @app.get("/api/positions/{position_id}/aircraft")
    async def get_position_aircraft(position_id: str):
        return JSONResponse(content=[
            a.to_dict() for a in manager.get_assigned_aircraft(position_id)
        ])

    @app.get("/api/aircraft")
    async def get_aircraft(situation: str | None = None):
        try:
            aircraft = (
                manager.filter_aircraft(situation) if situation else manager.store.aircraft
            )
        except ValueError:
            return JSONResponse(
                content={"error": f"Unknown situation '{situation}'"}, status_code=400,
            )
        return JSONResponse(content=[a.to_dict() for a in aircraft])

    @app.get("/api/aircraft/unassigned")
    async def get_unassigned():
        return JSONResponse(content=[a.to_dict() for a in manager.get_unassigned_aircraft()])

    @app.get("/api/bases/{base_id}/domes")
    async def get_dome_summary(base_id: str):
        return JSONResponse(content=manager.base_dome_summary(base_id).to_dict())

    @app.get("/api/table")
    async def get_table(q: str = ""):
        rows = build_table_rows(manager, app.state.notes)
        if q:
            rows = filter_rows(rows, q)
        return JSONResponse(content=[r.to_dict() for r in rows])

    @app.get("/api/table.csv")
    async def get_table_csv():
        rows = build_table_rows(manager, app.state.notes)
        filename = f"aircraft_assignments_{date.today().isoformat()}.csv"
        return PlainTextResponse(
            content=export_csv(rows),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @app.post("/api/table.csv")
    async def import_table_csv(request: Request):
        """Replace the table notes from an exported CSV body."""
        allowed, _ = _authorize(request)
        if not allowed:
            return _forbidden()
        text = (await request.body()).decode("utf-8-sig")
        try:
            notes = import_csv(text, manager.store.positions)
        except CsvFormatError as e:
            return JSONResponse(content={"error": str(e)}, status_code=400)
        app.state.notes = notes
        return JSONResponse(content={"imported": len(notes)})

    # ------------------------------------------------------------------
    # Position assignment
    # ------------------------------------------------------------------

    @app.post("/api/assign")
    async def assign(body: AssignRequest, request: Request):
        allowed, _ = _authorize(request)
        if not allowed:
            return _forbidden()
        ok = manager.assign_aircraft(body.aircraft_id, body.position_id)
        return JSONResponse(content={"assigned": ok}, status_code=200 if ok else 409)

    @app.post("/api/unassign")
    async def unassign(body: AircraftRequest, request: Request):
        allowed, _ = _authorize(request)
        if not allowed:
            return _forbidden()
        manager.unassign_aircraft(body.aircraft_id)
        return JSONResponse(content={"unassigned": body.aircraft_id})

    @app.post("/api/distribute")
    async def distribute(body: DistributeRequest, request: Request):
        allowed, _ = _authorize(request)
        if not allowed:
            return _forbidden()
        params = None
        if body.max_per_position is not None:
            params = DistributionParams(max_per_position=body.max_per_position)
        result = manager.run_auto_distribute(body.strategy, params)
        return JSONResponse(content=result.to_dict())

    @app.post("/api/clear")
    async def clear(request: Request):
        allowed, _ = _authorize(request)
        if not allowed:
            return _forbidden()
        manager.clear_all_assignments()
        return JSONResponse(content=manager.get_status())

    # ------------------------------------------------------------------
    # Status updates
    # ------------------------------------------------------------------

    @app.post("/api/aircraft/{aircraft_id}/location")
    async def update_location(aircraft_id: str, body: LocationRequest, request: Request):
        allowed, _ = _authorize(request)
        if not allowed:
            return _forbidden()
        manager.update_aircraft_location(
            aircraft_id, body.latitude, body.longitude, body.location,
        )
        aircraft = manager.store.get_aircraft(aircraft_id)
        return JSONResponse(content=aircraft.to_dict() if aircraft else None)

    @app.post("/api/aircraft/{aircraft_id}/suspicious")
    async def mark_suspicious(aircraft_id: str, body: SuspicionRequest, request: Request):
        allowed, operator = _authorize(request)
        if not allowed:
            return _forbidden()
        manager.mark_aircraft_as_suspicious(aircraft_id, body.reason, operator)
        aircraft = manager.store.get_aircraft(aircraft_id)
        return JSONResponse(content=aircraft.to_dict() if aircraft else None)

    # ------------------------------------------------------------------
    # Domes
    # ------------------------------------------------------------------

    @app.post("/api/domes/assign")
    async def assign_dome(body: DomeAssignRequest, request: Request):
        allowed, _ = _authorize(request)
        if not allowed:
            return _forbidden()
        ok = manager.assign_dome(body.aircraft_id, body.dome_id)
        return JSONResponse(content={"assigned": ok}, status_code=200 if ok else 409)

    @app.post("/api/domes/release")
    async def release_dome(body: AircraftRequest, request: Request):
        allowed, _ = _authorize(request)
        if not allowed:
            return _forbidden()
        manager.release_dome(body.aircraft_id)
        return JSONResponse(content={"released": body.aircraft_id})

    @app.post("/api/domes/reconcile")
    async def reconcile_domes(request: Request):
        allowed, _ = _authorize(request)
        if not allowed:
            return _forbidden()
        return JSONResponse(content={"repaired": manager.reconcile_dome_links()})

    return app
