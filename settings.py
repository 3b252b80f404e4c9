"""
Global settings shared by the program model and the surrounding search.

One ``Settings`` instance (``SETTINGS``) is consulted at render time; name
rendering is a global mode, never per-node state.
"""

import os
from contextlib import contextmanager
from typing import Any, Iterator

import yaml
from pydantic import BaseModel, ConfigDict, Field


class Settings(BaseModel):
    """Recognized synthesis options"""
    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    verbose: int = Field(1, ge=0, description="0 silent, >1 generation/run counters, >2 per-fragment usefulness trace")
    mine_fragments: bool = Field(True, description="Harvest fragments from known-good programs")
    use_angelic_conditions: bool = Field(True, description="Allow unresolved if/loop conditions")
    use_simple_name: bool = Field(False, description="Render unqualified component and type names")
    log_timing: bool = Field(False, description="Collect the timing breakdown")
    sypet_mode: bool = Field(False, description="SyPet-style benchmark mode")


SETTINGS = Settings()


def configure(**overrides: Any) -> Settings:
    """Update the global settings in place and return them."""
    for key, value in overrides.items():
        if key not in Settings.model_fields:
            raise ValueError(f"Unknown setting: {key}")
        setattr(SETTINGS, key, value)
    return SETTINGS


def load_settings(path: str) -> Settings:
    """Apply the options found in a YAML file to the global settings."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Could not find settings file at {path}")
    with open(path, "r") as f:
        overrides = yaml.safe_load(f) or {}
    # Validate the whole file before touching the globals
    Settings(**overrides)
    return configure(**overrides)


@contextmanager
def simple_names(enabled: bool = True) -> Iterator[None]:
    """Temporarily switch between qualified and simplified name rendering."""
    old_value = SETTINGS.use_simple_name
    SETTINGS.use_simple_name = enabled
    try:
        yield
    finally:
        SETTINGS.use_simple_name = old_value
