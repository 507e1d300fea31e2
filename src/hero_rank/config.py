"""Configuration for Hero Rank.

This module provides the EloConfig class for tuning the rating engine and
HeroRankConfig for loading a complete setup (engine plus store) from YAML.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .models import Progress

DEFAULT_DB_PATH = "hero_rank.db"
DB_PATH_ENV_VAR = "HERO_RANK_DB_PATH"


class ConfidenceThresholds(BaseModel):
    """Game-count thresholds for the High/Medium/Low confidence labels.

    Attributes:
        high: Minimum games for "High" confidence.
        medium: Minimum games for "Medium" confidence.
    """

    high: int = Field(default=30, ge=0)
    medium: int = Field(default=10, ge=0)

    @model_validator(mode="after")
    def check_order(self) -> ConfidenceThresholds:
        """Ensure the High threshold is not below the Medium threshold."""
        if self.high < self.medium:
            raise ValueError(
                f"high threshold ({self.high}) must be >= medium threshold ({self.medium})"
            )
        return self


class EloConfig(BaseModel):
    """Configuration for the rating engine.

    Attributes:
        k_factor: K-factor for established heroes.
        provisional_k_factor: K-factor while a hero has fewer than
            provisional_threshold games.
        provisional_threshold: Games before the K-factor drops to k_factor.
        provisional_flag_threshold: Games before is_provisional turns False.
        initial_rating: Rating given to a hero the first time it appears.
        confidence_level: Confidence level for Wilson score bounds.
        confidence_thresholds: Game counts for the confidence labels.
    """

    k_factor: int = Field(default=32, ge=1)
    provisional_k_factor: int = Field(default=48, ge=1)
    provisional_threshold: int = Field(default=10, ge=0)
    provisional_flag_threshold: int = Field(default=20, ge=0)
    initial_rating: float = 1500.0
    confidence_level: float = Field(default=0.95, gt=0.0, lt=1.0)
    confidence_thresholds: ConfidenceThresholds = Field(default_factory=ConfidenceThresholds)


class StoreConfig(BaseModel):
    """Configuration for the rating store backend.

    Attributes:
        backend: Store backend name ("memory" or "sqlite").
        path: SQLite database path (defaults to $HERO_RANK_DB_PATH).
    """

    backend: str = "memory"
    path: str | None = None

    @field_validator("backend")
    @classmethod
    def validate_backend(cls, v: str) -> str:
        """Validate the backend name is supported."""
        valid_backends = {"memory", "sqlite"}
        if v not in valid_backends:
            raise ValueError(
                f"Invalid backend '{v}'. Must be one of: {', '.join(sorted(valid_backends))}"
            )
        return v

    def model_post_init(self, __context: Any) -> None:
        """Load the database path from the environment if not provided."""
        if self.path is None:
            self.path = os.environ.get(DB_PATH_ENV_VAR, DEFAULT_DB_PATH)


class HeroRankConfig(BaseModel):
    """Full Hero Rank configuration, typically loaded from YAML.

    Example YAML:
        ```yaml
        elo:
          k_factor: 24
          provisional_threshold: 5
        store:
          backend: sqlite
          path: ./ratings.db
        ```
    """

    elo: EloConfig = Field(default_factory=EloConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> HeroRankConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file.

        Returns:
            HeroRankConfig instance.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            ValueError: If the YAML is invalid.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Invalid config file: expected dict, got {type(data).__name__}")

        return cls(**data)


# Type alias for progress callback
ProgressCallback = Callable[[Progress], None]
