"""Class index over a project's PHP sources, and model file discovery."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from modeldoc.annotate.cast_types import FRAMEWORK_CAST_CLASSES
from modeldoc.core.errors import SourceError
from modeldoc.core.logging import get_logger
from modeldoc.php.declarations import ClassDeclaration, extract_declarations
from modeldoc.php.names import same_class
from modeldoc.php.parser import PhpParser

log = get_logger("php.classes")


@dataclass(frozen=True, slots=True)
class ClassInfo:
    """Index entry for one declaration. Holds no syntax tree."""

    name: str
    kind: str  # class, interface, trait, enum
    path: Path
    parent: str | None = None
    traits: tuple[str, ...] = ()
    is_abstract: bool = False

    @classmethod
    def from_declaration(cls, declaration: ClassDeclaration) -> ClassInfo:
        return cls(
            name=declaration.name,
            kind=declaration.kind,
            path=declaration.path,
            parent=declaration.parent,
            traits=tuple(declaration.traits),
            is_abstract=declaration.is_abstract,
        )


def iter_php_files(root: Path, exclude_dirs: Iterable[str] = ()) -> Iterator[Path]:
    """PHP files under ``root`` in sorted order, pruning excluded directory names."""
    excluded = frozenset(exclude_dirs)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in excluded)
        for filename in sorted(filenames):
            if filename.endswith(".php"):
                yield Path(dirpath) / filename


class ClassIndex:
    """Declarations found under the configured source roots.

    Lookups are case-insensitive, as PHP class names are. The index is
    built once, then only read, so it can be shared between workers.

    Usage::

        index = ClassIndex.scan([root / "app"], exclude_dirs=["vendor"])
        info = index.get("App\\Models\\User")
    """

    def __init__(self, entries: Iterable[ClassInfo] = ()) -> None:
        self._entries: dict[str, ClassInfo] = {}
        for entry in entries:
            self.add(entry)

    @classmethod
    def scan(
        cls,
        roots: Iterable[Path],
        *,
        exclude_dirs: Iterable[str] = (),
        parser: PhpParser | None = None,
    ) -> ClassIndex:
        parser = parser or PhpParser()
        index = cls()
        files = 0
        for root in roots:
            if not root.is_dir():
                log.debug("source_root_missing", root=str(root))
                continue
            for path in iter_php_files(root, exclude_dirs):
                files += 1
                try:
                    parsed = parser.parse_file(path)
                except SourceError as e:
                    log.warning("class_scan_failed", path=str(path), error=e.message)
                    continue
                for declaration in extract_declarations(parsed):
                    if declaration.short_name:
                        index.add(ClassInfo.from_declaration(declaration))
        log.debug("class_index_built", files=files, classes=len(index))
        return index

    def add(self, entry: ClassInfo) -> None:
        # First declaration wins, like the autoloader finding one file per class
        self._entries.setdefault(entry.name.lower(), entry)

    def get(self, name: str) -> ClassInfo | None:
        return self._entries.get(name.lstrip("\\").lower())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ClassInfo]:
        return iter(self._entries.values())

    def class_exists(self, name: str) -> bool:
        """PHP ``class_exists``: classes and enums, plus the framework cast classes."""
        if any(same_class(name, known) for known in FRAMEWORK_CAST_CLASSES):
            return True
        info = self.get(name)
        return info is not None and info.kind in ("class", "enum")

    def type_exists(self, name: str) -> bool:
        """Class, enum or interface: the existence check used for cast types."""
        if self.class_exists(name):
            return True
        info = self.get(name)
        return info is not None and info.kind == "interface"

    def ancestors(self, name: str) -> list[str]:
        """Parent chain, nearest first, including parents outside the index.

        The walk stops at the first parent that is not indexed.
        """
        chain: list[str] = []
        seen = {name.lstrip("\\").lower()}
        info = self.get(name)
        while info is not None and info.parent:
            if info.parent.lower() in seen:
                break
            seen.add(info.parent.lower())
            chain.append(info.parent)
            info = self.get(info.parent)
        return chain


class ModelFinder:
    """Maps the PHP files of a directory to the classes they declare."""

    def __init__(self, parser: PhpParser | None = None, exclude_dirs: Iterable[str] = ()) -> None:
        self._parser = parser or PhpParser()
        self._exclude_dirs = tuple(exclude_dirs)

    def find_models(self, directory: Path) -> list[tuple[str, Path]]:
        """``(class_name, path)`` for the first named class in each file.

        Returns an empty list when the directory does not exist.
        """
        if not directory.is_dir():
            return []

        models: list[tuple[str, Path]] = []
        for path in iter_php_files(directory, self._exclude_dirs):
            try:
                parsed = self._parser.parse_file(path)
            except SourceError as e:
                log.warning("model_scan_failed", path=str(path), error=e.message)
                continue
            for declaration in extract_declarations(parsed):
                if declaration.kind == "class" and declaration.short_name:
                    models.append((declaration.name, path))
                    break
        return models
