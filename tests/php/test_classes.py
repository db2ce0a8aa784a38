"""Tests for the class index and model discovery.

Covers:
- iter_php_files() ordering and pruning
- ClassIndex scanning, lookups and existence predicates
- ClassIndex.ancestors()
- ModelFinder.find_models()
"""

from __future__ import annotations

from pathlib import Path

from modeldoc.annotate.cast_types import AS_COLLECTION
from modeldoc.php.classes import ClassIndex, ClassInfo, ModelFinder, iter_php_files


def _write(path: Path, source: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source)
    return path


def _project(tmp_path: Path) -> Path:
    app = tmp_path / "app"
    _write(
        app / "Models" / "User.php",
        "<?php\nnamespace App\\Models;\n\nuse Illuminate\\Database\\Eloquent\\Model;\n\n"
        "class User extends Model\n{\n    use HasRoles;\n}\n",
    )
    _write(
        app / "Models" / "Admin.php",
        "<?php\nnamespace App\\Models;\n\nclass Admin extends User {}\n",
    )
    _write(
        app / "Enums" / "Status.php",
        "<?php\nnamespace App\\Enums;\n\nenum Status: string\n{\n    case Active = 'active';\n}\n",
    )
    _write(
        app / "Contracts" / "HasLabel.php",
        "<?php\nnamespace App\\Contracts;\n\ninterface HasLabel {}\n",
    )
    _write(app / "vendor" / "Hidden.php", "<?php\nclass Hidden {}\n")
    _write(app / "README.md", "not php")
    return app


class TestIterPhpFiles:
    def test_sorted_and_pruned(self, tmp_path: Path) -> None:
        app = _project(tmp_path)

        files = [p.relative_to(app).as_posix() for p in iter_php_files(app, ["vendor"])]

        assert files == [
            "Contracts/HasLabel.php",
            "Enums/Status.php",
            "Models/Admin.php",
            "Models/User.php",
        ]


class TestClassIndex:
    """ClassIndex tests."""

    def test_given_source_root_when_scanned_then_indexes_declarations(self, tmp_path: Path) -> None:
        # Given
        app = _project(tmp_path)

        # When
        index = ClassIndex.scan([app], exclude_dirs=["vendor"])

        # Then
        assert len(index) == 4
        user = index.get("App\\Models\\User")
        assert user is not None
        assert user.kind == "class"
        assert user.parent == "Illuminate\\Database\\Eloquent\\Model"
        assert user.traits == ("App\\Models\\HasRoles",)
        assert "Hidden" not in index

    def test_lookup_is_case_insensitive(self, tmp_path: Path) -> None:
        index = ClassIndex.scan([_project(tmp_path)])

        assert index.get("\\app\\models\\USER") is not None
        assert "App\\Enums\\status" in index

    def test_missing_root_is_skipped(self, tmp_path: Path) -> None:
        index = ClassIndex.scan([tmp_path / "nope"])

        assert len(index) == 0

    def test_first_declaration_wins(self, tmp_path: Path) -> None:
        index = ClassIndex()
        index.add(ClassInfo("App\\A", "class", tmp_path / "one.php"))
        index.add(ClassInfo("App\\a", "class", tmp_path / "two.php"))

        info = index.get("App\\A")
        assert info is not None
        assert info.path == tmp_path / "one.php"

    def test_class_exists_covers_classes_and_enums(self, tmp_path: Path) -> None:
        index = ClassIndex.scan([_project(tmp_path)])

        assert index.class_exists("App\\Models\\User")
        assert index.class_exists("App\\Enums\\Status")
        assert not index.class_exists("App\\Contracts\\HasLabel")
        assert not index.class_exists("App\\Models\\Missing")

    def test_framework_cast_classes_always_exist(self) -> None:
        index = ClassIndex()

        assert index.class_exists(AS_COLLECTION)
        assert index.class_exists("\\" + AS_COLLECTION.lower())

    def test_type_exists_includes_interfaces(self, tmp_path: Path) -> None:
        index = ClassIndex.scan([_project(tmp_path)])

        assert index.type_exists("App\\Contracts\\HasLabel")

    def test_ancestors_include_first_unindexed_parent(self, tmp_path: Path) -> None:
        index = ClassIndex.scan([_project(tmp_path)])

        assert index.ancestors("App\\Models\\Admin") == [
            "App\\Models\\User",
            "Illuminate\\Database\\Eloquent\\Model",
        ]

    def test_ancestors_stop_on_cycles(self, tmp_path: Path) -> None:
        index = ClassIndex(
            [
                ClassInfo("A", "class", tmp_path / "a.php", parent="B"),
                ClassInfo("B", "class", tmp_path / "b.php", parent="A"),
            ]
        )

        assert index.ancestors("A") == ["B"]


class TestModelFinder:
    """ModelFinder tests."""

    def test_given_models_directory_when_scanned_then_first_class_per_file(
        self, tmp_path: Path
    ) -> None:
        # Given
        app = _project(tmp_path)
        _write(
            app / "Models" / "Multi.php",
            "<?php\nnamespace App\\Models;\n\ninterface Marker {}\nclass Multi {}\nclass Extra {}\n",
        )

        # When
        models = ModelFinder().find_models(app / "Models")

        # Then
        assert models == [
            ("App\\Models\\Admin", app / "Models" / "Admin.php"),
            ("App\\Models\\Multi", app / "Models" / "Multi.php"),
            ("App\\Models\\User", app / "Models" / "User.php"),
        ]

    def test_files_without_classes_are_skipped(self, tmp_path: Path) -> None:
        _write(tmp_path / "helpers.php", "<?php\nfunction helper() {}\n")

        assert ModelFinder().find_models(tmp_path) == []

    def test_missing_directory(self, tmp_path: Path) -> None:
        assert ModelFinder().find_models(tmp_path / "missing") == []

    def test_excluded_directories(self, tmp_path: Path) -> None:
        app = _project(tmp_path)

        models = ModelFinder(exclude_dirs=["Models", "vendor"]).find_models(app)

        assert models == []
