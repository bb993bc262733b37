"""Exceptions raised when a load cannot produce a consistent volume."""


class ReconstructionError(ValueError):
    """Raised when a set of slices cannot be reconstructed into a volume."""


class GeometryError(ReconstructionError):
    """Raised when slices disagree on rows, columns or orientation."""
