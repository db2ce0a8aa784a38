"""Model reflection from PHP source."""

from modeldoc.reflection.ops import PhpModelReflector, normalize_cast_type

__all__ = ["PhpModelReflector", "normalize_cast_type"]
