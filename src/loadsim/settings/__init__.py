"""
Settings layer: the serialized form of a simulation's configuration.

IMPORTANT: The core never reads settings. This layer turns a flat
settings record into a SimulationConfig plus registered sessions.
"""

from loadsim.settings.model import (
    MILLIS_PER_SECOND,
    SESSION_GROUP_DEFAULTS,
    SessionGroup,
    SimulationSettings,
)
from loadsim.settings.io import (
    parse_settings,
    load_settings,
    dump_settings,
    read_settings,
    write_settings,
    build_simulation,
)

__all__ = [
    "MILLIS_PER_SECOND",
    "SESSION_GROUP_DEFAULTS",
    "SessionGroup",
    "SimulationSettings",
    "parse_settings",
    "load_settings",
    "dump_settings",
    "read_settings",
    "write_settings",
    "build_simulation",
]
