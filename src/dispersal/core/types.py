"""Core data types for the DISPERSAL placement dashboard."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class PositionType(enum.Enum):
    HARDPOINT = "hardpoint"
    HANGAR = "hangar"
    APRON = "apron"
    RUNWAY = "runway"


class AircraftType(enum.Enum):
    FIGHTER = "fighter"
    BOMBER = "bomber"
    TRANSPORT = "transport"
    RECON = "recon"
    HELICOPTER = "helicopter"


class AircraftSize(enum.Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class AircraftStatus(enum.Enum):
    ASSIGNED = "assigned"
    UNASSIGNED = "unassigned"
    MAINTENANCE = "maintenance"
    DEPLOYED = "deployed"


class GroundState(enum.Enum):
    """Where an aircraft was last reported to be."""

    GROUND = "ground"
    AIR = "air"


class OperatorRole(enum.Enum):
    ADMIN = "admin"
    VIEWER = "viewer"


class Situation(enum.Enum):
    """Situation-panel filter categories."""

    ALL = "all"
    SUSPICIOUS = "suspicious"
    AIR = "air"
    GROUND = "ground"


@dataclass(frozen=True)
class Base:
    """A named facility.  ``capacity`` is informational only."""

    id: str
    name: str
    latitude: float
    longitude: float
    capacity: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "capacity": self.capacity,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class Position:
    """A capacity-bounded parking slot belonging to one base."""

    id: str
    base_id: str
    name: str
    latitude: float
    longitude: float
    type: PositionType
    capacity: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "base_id": self.base_id,
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "type": self.type.value,
            "capacity": self.capacity,
        }


@dataclass(frozen=True)
class StatusUpdater:
    """Audit identity stamped onto status changes."""

    name: str
    personal_number: str = "N/A"
    phone: str = "N/A"

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "personal_number": self.personal_number,
            "phone": self.phone,
        }


@dataclass(frozen=True)
class Aircraft:
    """A trackable airframe.

    Records are immutable; the store publishes replacements built with
    :func:`dataclasses.replace`.  ``assigned_position_id`` and
    ``assigned_dome_id`` are two independent assignment relations.
    """

    id: str
    type: AircraftType
    callsign: str
    size: AircraftSize
    status: AircraftStatus = AircraftStatus.UNASSIGNED
    assigned_position_id: str | None = None
    assigned_dome_id: str | None = None

    # Last known / home coordinates
    home_latitude: float | None = None
    home_longitude: float | None = None

    # Situation reporting
    location: GroundState | None = None
    location_uncertain: bool = False
    uncertain_latitude: float | None = None
    uncertain_longitude: float | None = None
    suspicion_reason: str | None = None

    # Audit
    last_status_update: float | None = None  # epoch seconds
    last_status_updated_by: StatusUpdater | None = None

    @property
    def has_home(self) -> bool:
        return self.home_latitude is not None and self.home_longitude is not None

    @property
    def in_maintenance(self) -> bool:
        return self.status is AircraftStatus.MAINTENANCE

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "callsign": self.callsign,
            "size": self.size.value,
            "status": self.status.value,
            "assigned_position_id": self.assigned_position_id,
            "assigned_dome_id": self.assigned_dome_id,
            "home_latitude": self.home_latitude,
            "home_longitude": self.home_longitude,
            "location": self.location.value if self.location else None,
            "location_uncertain": self.location_uncertain,
            "uncertain_latitude": self.uncertain_latitude,
            "uncertain_longitude": self.uncertain_longitude,
            "suspicion_reason": self.suspicion_reason,
            "last_status_update": self.last_status_update,
            "last_status_updated_by": (
                self.last_status_updated_by.to_dict()
                if self.last_status_updated_by
                else None
            ),
        }


@dataclass(frozen=True)
class Squadron:
    id: str
    base_id: str
    name: str


@dataclass(frozen=True)
class Shelter:
    """A group of domes reserved for one aircraft type."""

    id: str
    squadron_id: str
    name: str
    aircraft_type: AircraftType
    latitude: float | None = None
    longitude: float | None = None


@dataclass(frozen=True)
class Dome:
    """Single-aircraft slot inside a shelter.  Occupied iff ``aircraft_id``."""

    id: str
    shelter_id: str
    name: str
    aircraft_id: str | None = None

    @property
    def occupied(self) -> bool:
        return self.aircraft_id is not None


@dataclass(frozen=True)
class Operator:
    """The user acting on the dashboard."""

    id: str
    username: str
    role: OperatorRole = OperatorRole.VIEWER

    @property
    def is_admin(self) -> bool:
        return self.role is OperatorRole.ADMIN
