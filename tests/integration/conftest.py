"""Shared fixtures for integration tests."""

from __future__ import annotations

import pytest
from omegaconf import OmegaConf


def _session_config(fixture_path, **overrides):
    """Build a full config tree pointing at *fixture_path*."""
    cfg = OmegaConf.create(
        {
            "dispersal": {
                "system": {
                    "name": "DISPERSAL-TEST",
                    "version": "0.0.1",
                    "log_level": "WARNING",
                    "validate_config": True,
                },
                "time": {"mode": "simulated", "start_epoch": 1_700_000_000.0},
                "distribution": {"strategy": "spread-evenly", "max_per_position": 0},
                "operator": {"id": "ops-1", "username": "ops", "role": "admin"},
                "fixture": str(fixture_path),
                "api": {"enabled": False, "host": "127.0.0.1", "port": 8080},
            }
        }
    )
    if overrides:
        cfg = OmegaConf.merge(cfg, OmegaConf.create({"dispersal": overrides}))
    return cfg


@pytest.fixture
def session_config_file(tmp_path, fixture_path):
    """Write a session config into a throwaway project layout."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    path = config_dir / "default.yaml"
    OmegaConf.save(_session_config(fixture_path), path)
    return path
