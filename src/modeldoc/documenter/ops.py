"""Model documentation orchestration.

Ties the collaborators together per model: reflect the class, read its
table's columns, generate the docblock, then either write it into the file
or compare it with what the file already has. Every per-model failure ends up
in a result object; directory runs always process every model.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar

from modeldoc.annotate.cast_types import CastTypeResolver
from modeldoc.annotate.generator import AnnotationGenerator
from modeldoc.annotate.models import SchemaProvider
from modeldoc.config.models import ModelDocConfig
from modeldoc.core.errors import ErrorCode, ModelDocError, ModelError
from modeldoc.core.logging import get_logger
from modeldoc.drift.ops import EditOperation, diff_lines, is_up_to_date, split_block
from modeldoc.php.classes import ClassIndex, ModelFinder
from modeldoc.php.parser import PhpParser
from modeldoc.reflection.ops import PhpModelReflector
from modeldoc.rewrite.ops import SourceRewriter
from modeldoc.schema.ops import SchemaInspector

log = get_logger("documenter.ops")

R = TypeVar("R")


@dataclass
class ModelResult:
    """Outcome of generating the docblock for one model."""

    identifier: str
    success: bool
    path: Path | None = None
    error: str | None = None
    code: ErrorCode | None = None


@dataclass
class CheckResult:
    """Outcome of comparing a model's docblock with the generated one."""

    identifier: str
    success: bool
    path: Path | None = None
    up_to_date: bool = False
    current: str | None = None
    expected: str | None = None
    diff: list[EditOperation] = field(default_factory=list)
    error: str | None = None
    code: ErrorCode | None = None

    @property
    def has_comment(self) -> bool:
        return self.current is not None

    @property
    def outdated(self) -> bool:
        return self.success and not self.up_to_date


def _failure_details(error: Exception) -> tuple[str, ErrorCode]:
    if isinstance(error, ModelDocError):
        return error.message, error.code
    return str(error) or type(error).__name__, ErrorCode.INTERNAL_ERROR


class ModelDocumenter:
    """Generates and checks model docblocks for a Laravel project.

    Collaborators are injectable; by default the class index is scanned from
    the configured source roots and columns are read through SQLAlchemy.

    Usage::

        documenter = ModelDocumenter(config, project_root)
        results = documenter.generate_for_directory(project_root / "app/Models")
        documenter.close()
    """

    def __init__(
        self,
        config: ModelDocConfig,
        project_root: Path,
        *,
        index: ClassIndex | None = None,
        schema: SchemaProvider | None = None,
        generator: AnnotationGenerator | None = None,
    ) -> None:
        self.config = config
        self.project_root = project_root
        self._owns_schema = schema is None
        self._schema = schema
        self._index = index
        self._generator = generator
        self._local = threading.local()

    @property
    def source_roots(self) -> list[Path]:
        return [self.project_root / root for root in self.config.models.source_roots]

    @property
    def index(self) -> ClassIndex:
        if self._index is None:
            self._index = ClassIndex.scan(
                self.source_roots,
                exclude_dirs=self.config.models.exclude_dirs,
                parser=self._parser(),
            )
        return self._index

    def include_directory(self, directory: Path) -> None:
        """Make the classes under ``directory`` resolvable.

        Directories inside a source root are already indexed. Anything else
        (a package's models, a workbench app) is scanned and merged in;
        classes already indexed keep their first declaration.
        """
        resolved = directory.resolve()
        if any(resolved.is_relative_to(root.resolve()) for root in self.source_roots):
            return
        extra = ClassIndex.scan(
            [directory], exclude_dirs=self.config.models.exclude_dirs, parser=self._parser()
        )
        for entry in extra:
            self.index.add(entry)
        log.debug("directory_indexed", directory=str(directory), classes=len(extra))

    @property
    def generator(self) -> AnnotationGenerator:
        if self._generator is None:
            resolver = CastTypeResolver(class_exists=self.index.type_exists)
            self._generator = AnnotationGenerator(cast_resolver=resolver)
        return self._generator

    @property
    def schema(self) -> SchemaProvider:
        if self._schema is None:
            self._schema = SchemaInspector(self.config.database)
        return self._schema

    @property
    def models_path(self) -> Path:
        return self.project_root / self.config.models.path

    def _parser(self) -> PhpParser:
        """The calling thread's parser; tree-sitter parsers are not shared."""
        parser = getattr(self._local, "parser", None)
        if parser is None:
            parser = PhpParser()
            self._local.parser = parser
        return parser

    # ------------------------------------------------------------------
    # Single model
    # ------------------------------------------------------------------

    def path_of(self, class_name: str) -> Path:
        info = self.index.get(class_name)
        if info is None:
            raise ModelError.not_found(class_name)
        return info.path

    def expected_block(self, class_name: str) -> str:
        """Docblock the model should carry right now.

        Raises:
            ModelError: The class is missing, abstract or not a model.
            SchemaError: Its table cannot be introspected.
        """
        model = PhpModelReflector(class_name, self.index, self._parser())
        columns = self.schema.get_columns(model.table, model.connection)
        log.debug("model_reflected", model=model.class_name, table=model.table, columns=len(columns))
        return self.generator.generate(columns, model)

    def generate_for_model(self, class_name: str, path: Path | None = None) -> ModelResult:
        """Write the generated docblock into the model's file."""
        identifier = class_name.lstrip("\\")
        try:
            target = path or self.path_of(identifier)
            block = self.expected_block(identifier)
            SourceRewriter(self._parser()).update_declaration_comment(target, block, identifier)
        except Exception as e:
            message, code = _failure_details(e)
            log.debug("model_failed", model=identifier, code=code.name, error=message)
            return ModelResult(identifier=identifier, success=False, path=path, error=message, code=code)

        log.info("model_documented", model=identifier, path=str(target))
        return ModelResult(identifier=identifier, success=True, path=target)

    def check_model(self, class_name: str, path: Path | None = None) -> CheckResult:
        """Compare the file's docblock with the generated one, writing nothing."""
        identifier = class_name.lstrip("\\")
        try:
            target = path or self.path_of(identifier)
            expected = self.expected_block(identifier)
            current = SourceRewriter(self._parser()).read_declaration_comment(target, identifier)
        except Exception as e:
            message, code = _failure_details(e)
            log.debug("model_check_failed", model=identifier, code=code.name, error=message)
            return CheckResult(identifier=identifier, success=False, path=path, error=message, code=code)

        up_to_date = is_up_to_date(current, expected)
        log.debug("model_checked", model=identifier, up_to_date=up_to_date)
        return CheckResult(
            identifier=identifier,
            success=True,
            path=target,
            up_to_date=up_to_date,
            current=current,
            expected=expected,
            diff=diff_lines(split_block(current), split_block(expected)),
        )

    # ------------------------------------------------------------------
    # Directories
    # ------------------------------------------------------------------

    def generate_for_directory(self, directory: Path | None = None) -> list[ModelResult]:
        return self._run_directory(directory, self.generate_for_model)

    def check_directory(self, directory: Path | None = None) -> list[CheckResult]:
        return self._run_directory(directory, self.check_model)

    def _run_directory(
        self, directory: Path | None, task: Callable[[str, Path], R]
    ) -> list[R]:
        """Run ``task`` for every model in the directory, in file order.

        Raises:
            ModelError: DIRECTORY_NOT_FOUND when the directory does not exist.
        """
        directory = directory or self.models_path
        if not directory.is_dir():
            raise ModelError.directory_not_found(str(directory))

        models = ModelFinder(self._parser(), self.config.models.exclude_dirs).find_models(directory)
        # Build shared state before any worker touches it
        self.include_directory(directory)
        _ = self.generator, self.schema

        workers = min(self.config.runner.max_workers, max(len(models), 1))
        log.debug("directory_run", directory=str(directory), models=len(models), workers=workers)
        if workers == 1:
            return [task(class_name, path) for class_name, path in models]

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="modeldoc") as pool:
            return list(pool.map(lambda item: task(*item), models))

    def close(self) -> None:
        if self._owns_schema and isinstance(self._schema, SchemaInspector):
            self._schema.close()
