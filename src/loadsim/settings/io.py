"""
Settings import/export and simulation construction from settings.

Imports are all-or-nothing: a payload that is not a well-formed JSON
object raises MalformedImportError and nothing else happens.
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any

import numpy as np
from pydantic import ValidationError

from loadsim.core.errors import MalformedImportError
from loadsim.core.simulation import Simulation
from loadsim.settings.model import MILLIS_PER_SECOND, SimulationSettings

log = logging.getLogger(__name__)


def parse_settings(data: Any) -> SimulationSettings:
    """Validate an already-decoded settings record."""
    if not isinstance(data, dict):
        log.warning("Rejected settings import: expected an object, got %s", type(data).__name__)
        raise MalformedImportError(
            f"settings must be a JSON object, got {type(data).__name__}"
        )
    try:
        return SimulationSettings.model_validate(data)
    except ValidationError as exc:
        log.warning("Rejected settings import: %d invalid field(s)", exc.error_count())
        raise MalformedImportError(f"invalid settings: {exc}") from exc


def load_settings(payload: str | bytes) -> SimulationSettings:
    """Decode and validate a JSON settings payload."""
    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        log.warning("Rejected settings import: not valid JSON (%s)", exc)
        raise MalformedImportError(f"settings are not valid JSON: {exc}") from exc
    return parse_settings(data)


def dump_settings(settings: SimulationSettings, resolved: bool = True) -> str:
    """
    Serialize settings with their camelCase keys.

    With resolved=True every field is written with its effective value,
    so the export reproduces the same simulation regardless of defaults.
    """
    if resolved:
        settings = settings.resolved()
    return settings.model_dump_json(by_alias=True, exclude_none=True, indent=2)


def read_settings(path: str | Path) -> SimulationSettings:
    """Import settings from a JSON file."""
    path = Path(path)
    settings = load_settings(path.read_bytes())
    log.info("Imported settings from %s", path)
    return settings


def write_settings(settings: SimulationSettings, path: str | Path) -> Path:
    """Export settings to a JSON file."""
    path = Path(path)
    path.write_text(dump_settings(settings), encoding="utf-8")
    log.info("Exported settings to %s", path)
    return path


def build_simulation(
    settings: SimulationSettings | None = None,
    rng: np.random.Generator | None = None,
    start_time: float = 0.0,
) -> Simulation:
    """
    Build a simulation with every session group from the settings.

    The simulation clock is in milliseconds; drive it with step=1000 for
    one tick per simulated second.
    """
    if settings is None:
        settings = SimulationSettings()

    simulation = Simulation(settings.to_config(), rng=rng, start_time=start_time)
    for group in settings.session_groups():
        for label in group.labels():
            simulation.add_session(
                label,
                job_size_mean=group.job_size_mean,
                job_size_spread=group.job_size_spread,
                interval_mean=group.interval_mean * MILLIS_PER_SECOND,
                interval_spread=group.interval_spread * MILLIS_PER_SECOND,
            )
    return simulation
