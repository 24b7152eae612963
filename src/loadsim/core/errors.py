"""Exceptions raised by the simulator."""


class LoadSimError(Exception):
    """Base class for simulator errors."""


class ConfigurationError(LoadSimError, ValueError):
    """Invalid construction-time parameters (segment count, cores, capacity...)."""


class MalformedImportError(LoadSimError, ValueError):
    """An externally supplied settings payload is not well-formed."""
