"""Load fleet fixture data (bases, positions, aircraft, hierarchy) from YAML."""

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Any

from omegaconf import OmegaConf

from dispersal.core.clock import Clock
from dispersal.core.types import (
    Aircraft,
    AircraftSize,
    AircraftStatus,
    AircraftType,
    Base,
    Dome,
    GroundState,
    Operator,
    Position,
    PositionType,
    Shelter,
    Squadron,
)
from dispersal.fleet.store import FleetStore

logger = logging.getLogger(__name__)


class FixtureError(ValueError):
    """Fixture data that cannot be turned into entities."""


def _enum(enum_cls: type[enum.Enum], value: Any, where: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise FixtureError(f"{where}: invalid value {value!r} (expected one of {allowed})") from None


def _require(entry: dict, key: str, where: str) -> Any:
    if entry.get(key) is None:
        raise FixtureError(f"{where}: missing required field '{key}'")
    return entry[key]


def _opt_float(value: Any) -> float | None:
    return None if value is None else float(value)


def _base(d: dict) -> Base:
    where = f"base {d.get('id', '?')}"
    return Base(
        id=str(_require(d, "id", where)),
        name=str(d.get("name", d["id"])),
        latitude=float(_require(d, "latitude", where)),
        longitude=float(_require(d, "longitude", where)),
        capacity=int(d.get("capacity", 0)),
        metadata=dict(d.get("metadata") or {}),
    )


def _position(d: dict) -> Position:
    where = f"position {d.get('id', '?')}"
    capacity = int(_require(d, "capacity", where))
    if capacity < 0:
        raise FixtureError(f"{where}: capacity must be >= 0, got {capacity}")
    return Position(
        id=str(_require(d, "id", where)),
        base_id=str(_require(d, "base_id", where)),
        name=str(d.get("name", d["id"])),
        latitude=float(_require(d, "latitude", where)),
        longitude=float(_require(d, "longitude", where)),
        type=_enum(PositionType, _require(d, "type", where), where),
        capacity=capacity,
    )


def _aircraft(d: dict) -> Aircraft:
    where = f"aircraft {d.get('id', '?')}"
    status = _enum(AircraftStatus, d.get("status", "unassigned"), where)
    position_id = d.get("assigned_position_id")
    if status is AircraftStatus.MAINTENANCE and position_id is not None:
        logger.warning("%s is in maintenance; dropping position %s", where, position_id)
        position_id = None
    location = d.get("location")
    return Aircraft(
        id=str(_require(d, "id", where)),
        type=_enum(AircraftType, _require(d, "type", where), where),
        callsign=str(_require(d, "callsign", where)),
        size=_enum(AircraftSize, d.get("size", "medium"), where),
        status=status,
        assigned_position_id=position_id,
        assigned_dome_id=d.get("assigned_dome_id"),
        home_latitude=_opt_float(d.get("home_latitude")),
        home_longitude=_opt_float(d.get("home_longitude")),
        location=_enum(GroundState, location, where) if location else None,
        location_uncertain=bool(d.get("location_uncertain", False)),
        uncertain_latitude=_opt_float(d.get("uncertain_latitude")),
        uncertain_longitude=_opt_float(d.get("uncertain_longitude")),
        suspicion_reason=d.get("suspicion_reason"),
    )


def _shelter(d: dict) -> Shelter:
    where = f"shelter {d.get('id', '?')}"
    return Shelter(
        id=str(_require(d, "id", where)),
        squadron_id=str(_require(d, "squadron_id", where)),
        name=str(d.get("name", d["id"])),
        aircraft_type=_enum(AircraftType, _require(d, "aircraft_type", where), where),
        latitude=_opt_float(d.get("latitude")),
        longitude=_opt_float(d.get("longitude")),
    )


def load_fixture(
    source: str | Path | Any,
    clock: Clock | None = None,
    operator: Operator | None = None,
) -> FleetStore:
    """Build a :class:`FleetStore` from a YAML file, OmegaConf node or dict.

    Raises:
        FileNotFoundError: If *source* is a path that does not exist.
        FixtureError: If an entity is missing fields or has invalid values.
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Fixture not found: {path}")
        source = OmegaConf.load(path)
    if OmegaConf.is_config(source):
        source = OmegaConf.to_container(source, resolve=True)
    data: dict = dict(source or {})

    store = FleetStore(
        bases=[_base(d) for d in data.get("bases") or []],
        positions=[_position(d) for d in data.get("positions") or []],
        aircraft=[_aircraft(d) for d in data.get("aircraft") or []],
        squadrons=[
            Squadron(id=str(d["id"]), base_id=str(d["base_id"]), name=str(d.get("name", d["id"])))
            for d in data.get("squadrons") or []
        ],
        shelters=[_shelter(d) for d in data.get("shelters") or []],
        domes=[
            Dome(
                id=str(d["id"]),
                shelter_id=str(d["shelter_id"]),
                name=str(d.get("name", d["id"])),
                aircraft_id=d.get("aircraft_id"),
            )
            for d in data.get("domes") or []
        ],
        clock=clock,
        operator=operator,
    )
    _warn_dangling(store)
    logger.info("Loaded fixture: %r", store)
    return store


def _warn_dangling(store: FleetStore) -> None:
    for p in store.positions:
        if store.get_base(p.base_id) is None:
            logger.warning("Position %s references unknown base %s", p.id, p.base_id)
    for a in store.aircraft:
        if a.assigned_position_id and store.get_position(a.assigned_position_id) is None:
            logger.warning(
                "Aircraft %s references unknown position %s", a.id, a.assigned_position_id,
            )
