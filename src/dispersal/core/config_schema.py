"""Pydantic schema for DISPERSAL configuration validation.

Mirrors the YAML structure in config/default.yaml. Used when
``validate=True`` is passed to ``DispersalConfig.load()``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class SystemConfig(BaseModel):
    name: str = "DISPERSAL"
    version: str = "0.1.0"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    validate_config: bool = False
    log_file: str | None = None
    log_json: bool = False


class TimeConfig(BaseModel):
    mode: Literal["realtime", "simulated"] = "realtime"
    start_epoch: float = Field(default=1_000_000.0, ge=0)


class DistributionSchema(BaseModel):
    strategy: Literal["spread-evenly", "cluster", "minimize-distance"] = "spread-evenly"
    max_per_position: int = Field(default=0, ge=0)

    # Accepted for compatibility with older configs, never read
    randomness_factor: float | None = None
    distance_weight: float | None = None


class OperatorSchema(BaseModel):
    id: str = "guest"
    username: str = "guest"
    role: Literal["admin", "viewer"] = "viewer"


class ApiConfig(BaseModel):
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = Field(default=8080, gt=0, le=65535)


class DispersalRootConfig(BaseModel):
    system: SystemConfig = Field(default_factory=SystemConfig)
    time: TimeConfig = Field(default_factory=TimeConfig)
    distribution: DistributionSchema = Field(default_factory=DistributionSchema)
    operator: OperatorSchema = Field(default_factory=OperatorSchema)
    fixture: str | None = None
    api: ApiConfig = Field(default_factory=ApiConfig)

    model_config = {"extra": "allow"}


class DispersalConfigSchema(BaseModel):
    """Top-level wrapper matching YAML root key ``dispersal:``."""

    dispersal: DispersalRootConfig

    model_config = {"extra": "allow"}


def validate_config(cfg_dict: dict) -> DispersalConfigSchema:
    """Validate a raw config dict (e.g. from OmegaConf) against the schema.

    Raises ``pydantic.ValidationError`` on invalid config.
    """
    return DispersalConfigSchema.model_validate(cfg_dict)
