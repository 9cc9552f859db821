from __future__ import annotations


class DppMapError(ValueError):
    """Base class for caller-visible input-shape failures."""


class SchemaShapeError(DppMapError):
    """A schema node does not have the shape JSON Schema requires."""

    def __init__(self, path: str, message: str):
        self.path = path or "<root>"
        super().__init__(f"{self.path}: {message}")


class MappingFileError(DppMapError):
    pass


class ConfigError(DppMapError):
    pass


class PathConflictError(DppMapError):
    """Two mapped paths disagree on the container shape at a segment."""
