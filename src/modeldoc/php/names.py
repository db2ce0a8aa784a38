"""PHP name resolution: namespaces and ``use`` imports."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_ALIAS_SPLIT = re.compile(r"\s+as\s+", re.IGNORECASE)
_COMMENTS = re.compile(r"/\*.*?\*/|//[^\n]*|#[^\n]*", re.DOTALL)

# Reserved words that are never class names in a type position.
BUILTIN_TYPES = frozenset(
    {
        "array", "bool", "callable", "false", "float", "int", "iterable", "mixed",
        "never", "null", "object", "string", "true", "void",
    }
)  # fmt: skip

RELATIVE_SCOPES = frozenset({"self", "static", "parent"})


@dataclass
class NameContext:
    """Namespace plus class imports visible at some point in a file.

    Import aliases are matched case-insensitively, as PHP does.
    """

    namespace: str = ""
    imports: dict[str, str] = field(default_factory=dict)

    def add_use_declaration(self, text: str) -> None:
        """Register a ``use ...;`` statement from its source text.

        Handles aliases and group uses; function and constant imports are
        ignored since they never name classes.
        """
        body = _COMMENTS.sub("", text).strip()
        if body[:3].lower() == "use":
            body = body[3:]
        body = body.strip().rstrip(";").strip()
        if _is_function_or_const(body):
            return

        if "{" in body:
            prefix, _, group = body.partition("{")
            prefix = prefix.strip().strip("\\")
            for clause in group.rstrip("}").split(","):
                clause = clause.strip()
                if clause and not _is_function_or_const(clause):
                    self._add_clause(f"{prefix}\\{clause}")
            return

        for clause in body.split(","):
            if clause.strip():
                self._add_clause(clause)

    def _add_clause(self, clause: str) -> None:
        parts = _ALIAS_SPLIT.split(clause.strip(), maxsplit=1)
        target = parts[0].strip().lstrip("\\")
        alias = parts[1].strip() if len(parts) > 1 else target.rsplit("\\", 1)[-1]
        self.imports[alias.lower()] = target

    def resolve(self, name: str) -> str:
        """Fully qualified class name, without a leading backslash."""
        name = name.strip()
        if name.startswith("\\"):
            return name[1:]
        if name.lower().startswith("namespace\\"):
            return self._qualify(name[len("namespace\\") :])

        first, sep, rest = name.partition("\\")
        imported = self.imports.get(first.lower())
        if imported is not None:
            return f"{imported}{sep}{rest}"
        return self._qualify(name)

    def _qualify(self, name: str) -> str:
        return f"{self.namespace}\\{name}" if self.namespace else name


def _is_function_or_const(text: str) -> bool:
    head = text.split(None, 1)[0].lower() if text.split() else ""
    return head in ("function", "const")


def same_class(a: str, b: str) -> bool:
    """Class names compare case-insensitively and ignore a leading backslash."""
    return a.lstrip("\\").lower() == b.lstrip("\\").lower()
