"""Errors raised while building operators and running simulations."""


class MimeticError(Exception):
    """Base class for mimetica errors."""
    pass


class InvalidParameter(MimeticError, ValueError):
    """Bad accuracy order, cell count, spacing, bounds or weights."""
    pass


class DimensionMismatch(MimeticError, ValueError):
    """Operators or fields of incompatible shapes were combined or composed."""

    def __init__(self, message: str, left: tuple[int, ...], right: tuple[int, ...]):
        super().__init__(f"{message}: {left} vs {right}")
        self.left = tuple(left)
        self.right = tuple(right)


class ConfigLoadError(MimeticError):
    """Error loading a run configuration file."""
    pass
