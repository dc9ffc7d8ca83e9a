# errors.py


class PathTracerError(Exception):
    """Base class for errors raised by the path tracer."""


class ConfigError(PathTracerError, ValueError):
    """Invalid image, camera or scene configuration. Raised before rendering starts."""


class SceneError(ConfigError):
    """A scene description (file or built-in name) could not be turned into a world."""
