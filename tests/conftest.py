"""Shared pytest fixtures for DISPERSAL tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from omegaconf import OmegaConf

from dispersal.core.clock import SimClock
from dispersal.core.types import (
    Aircraft,
    AircraftSize,
    AircraftStatus,
    AircraftType,
    Base,
    Dome,
    Position,
    PositionType,
    Shelter,
    Squadron,
)
from dispersal.distribution.manager import PlacementManager
from dispersal.fleet.store import FleetStore
from dispersal.io.fixtures import load_fixture


@pytest.fixture(autouse=True)
def _reset_dispersal_logger():
    """setup_logging() detaches the dispersal logger from root; undo that so
    caplog keeps working in later tests."""
    yield
    root = logging.getLogger("dispersal")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)
    root.propagate = True


@pytest.fixture
def project_root() -> Path:
    return Path(__file__).parent.parent


@pytest.fixture
def config_path(project_root: Path) -> Path:
    return project_root / "config" / "default.yaml"


@pytest.fixture
def fixture_path(project_root: Path) -> Path:
    return project_root / "config" / "fixtures" / "sample.yaml"


@pytest.fixture
def default_config(config_path: Path):
    return OmegaConf.load(config_path)


@pytest.fixture
def sim_clock() -> SimClock:
    return SimClock(start_epoch=1_700_000_000.0)


@pytest.fixture
def sample_store(fixture_path: Path, sim_clock: SimClock) -> FleetStore:
    """The shipped sample fixture on a deterministic clock."""
    return load_fixture(fixture_path, clock=sim_clock)


@pytest.fixture
def sample_manager(sample_store: FleetStore) -> PlacementManager:
    return PlacementManager(sample_store)


@pytest.fixture
def small_store(sim_clock: SimClock) -> FleetStore:
    """Two empty positions of capacity 3 at one base, four unassigned fighters,
    one maintenance fighter, plus a one-shelter dome hierarchy."""
    return FleetStore(
        bases=[Base(id="B1", name="Alpha", latitude=0.0, longitude=0.0, capacity=6)],
        positions=[
            Position(id="P1", base_id="B1", name="Apron 1", latitude=0.0,
                     longitude=1.0, type=PositionType.APRON, capacity=3),
            Position(id="P2", base_id="B1", name="Hangar 2", latitude=0.0,
                     longitude=5.0, type=PositionType.HANGAR, capacity=3),
        ],
        aircraft=[
            Aircraft(id=f"A{i}", type=AircraftType.FIGHTER, callsign=f"TFA-00{i}",
                     size=AircraftSize.SMALL)
            for i in range(1, 5)
        ] + [
            Aircraft(id="M1", type=AircraftType.FIGHTER, callsign="TFA-900",
                     size=AircraftSize.SMALL, status=AircraftStatus.MAINTENANCE),
        ],
        squadrons=[Squadron(id="SQ1", base_id="B1", name="First")],
        shelters=[
            Shelter(id="SH1", squadron_id="SQ1", name="North",
                    aircraft_type=AircraftType.FIGHTER),
            Shelter(id="SH2", squadron_id="SQ1", name="Heavy",
                    aircraft_type=AircraftType.BOMBER),
        ],
        domes=[
            Dome(id="D1", shelter_id="SH1", name="N-1"),
            Dome(id="D2", shelter_id="SH1", name="N-2"),
            Dome(id="D3", shelter_id="SH2", name="H-1"),
        ],
        clock=sim_clock,
    )


@pytest.fixture
def small_manager(small_store: FleetStore) -> PlacementManager:
    return PlacementManager(small_store)
