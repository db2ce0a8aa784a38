"""Normalized type expressions for docblock annotations.

A type is one of:

- ``NamedType("int")``                       -> ``int``
- ``NullableType(NamedType("int"))``         -> ``?int``
- ``GenericType("array", (k, v))``           -> ``array<k, v>``

Nullability is always an explicit wrapper and wrapping is idempotent, so a
name never carries a ``?`` prefix of its own.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass


class TypeExpression(abc.ABC):
    """Base for rendered type expressions."""

    __slots__ = ()

    @abc.abstractmethod
    def render(self) -> str: ...

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True, slots=True)
class NamedType(TypeExpression):
    name: str

    def render(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class NullableType(TypeExpression):
    inner: TypeExpression

    def render(self) -> str:
        return f"?{self.inner.render()}"


@dataclass(frozen=True, slots=True)
class GenericType(TypeExpression):
    name: str
    arguments: tuple[TypeExpression, ...]

    def render(self) -> str:
        args = ", ".join(arg.render() for arg in self.arguments)
        return f"{self.name}<{args}>"


MIXED = NamedType("mixed")


def nullable(type_: TypeExpression) -> TypeExpression:
    """Wrap in a nullable wrapper unless already wrapped."""
    if isinstance(type_, NullableType):
        return type_
    return NullableType(type_)


def generic(name: str, *arguments: str | TypeExpression) -> GenericType:
    """Build a generic type; string arguments become named types."""
    return GenericType(
        name,
        tuple(NamedType(arg) if isinstance(arg, str) else arg for arg in arguments),
    )
