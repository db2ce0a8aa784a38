"""modeldoc generate command - write or check model docblocks."""

import sys
from pathlib import Path

import click
from rich.markup import escape

from modeldoc.cli.utils import find_project_root
from modeldoc.config.loader import load_config
from modeldoc.core.errors import ConfigError
from modeldoc.core.formatting import pluralize
from modeldoc.core.logging import configure_logging, set_run_id
from modeldoc.core.progress import get_console, spinner, status
from modeldoc.documenter.ops import CheckResult, ModelDocumenter
from modeldoc.drift.ops import EditKind, count_changes

_DIFF_STYLES = {
    EditKind.EQUAL: ("white", "✓"),
    EditKind.DELETE: ("red", "-"),
    EditKind.INSERT: ("green", "+"),
}


def display_comparison(result: CheckResult) -> None:
    """Print the line diff between the current and expected docblock."""
    console = get_console()
    console.print(f"[yellow]Comparison for {escape(result.identifier)}:[/yellow]", highlight=False)
    console.print(f"[yellow]{'=' * 80}[/yellow]", highlight=False)

    for op in result.diff:
        color, marker = _DIFF_STYLES[op.kind]
        console.print(f"[{color}]  {marker} {escape(op.line)}[/{color}]", highlight=False)

    if result.up_to_date:
        status("PHPDoc is up to date!", style="success")
    else:
        removed, added = count_changes(result.diff)
        status(
            f"PHPDoc needs to be updated "
            f"({pluralize(removed, 'line')} removed, {pluralize(added, 'line')} added)",
            style="error",
        )


def _report_check(result: CheckResult, ci_mode: bool) -> None:
    if not result.success:
        status(f"Failed to check {escape(result.identifier)}: {escape(result.error or '')}", style="error")
        return
    if ci_mode:
        return
    status(f"Testing documentation for model: {escape(result.identifier)}", style="none")
    if not result.has_comment:
        status("No existing PHPDoc block found", style="warning")
    display_comparison(result)


def _run_single(documenter: ModelDocumenter, model: str, test_mode: bool, ci_mode: bool) -> int:
    if documenter.index.get(model) is None:
        status(f"Model class not found: {escape(model)}", style="error")
        return 1

    if test_mode:
        result = documenter.check_model(model)
        _report_check(result, ci_mode)
        if not result.success:
            return 1
        if ci_mode and result.outdated:
            status(f"PHPDoc outdated: {escape(result.identifier)}", style="error")
            return 1
        return 0

    status(f"Generating documentation for model: {escape(model)}", style="none")
    generated = documenter.generate_for_model(model)
    if generated.success:
        status(f"Successfully processed {escape(generated.identifier)}.", style="success")
        return 0
    status(
        f"Failed to process {escape(generated.identifier)}: {escape(generated.error or '')}",
        style="error",
    )
    return 1


def _run_directory(documenter: ModelDocumenter, path: Path, test_mode: bool, ci_mode: bool) -> int:
    if not path.is_dir():
        status(f"Directory not found: {escape(str(path))}", style="error")
        return 1

    if test_mode:
        if not ci_mode:
            status(f"Testing documentation for models in: {escape(str(path))}", style="none")
        with spinner("Comparing docblocks"):
            checks = documenter.check_directory(path)

        for check in checks:
            _report_check(check, ci_mode)
            if not ci_mode and check.success:
                get_console().print()

        failed = [c for c in checks if not c.success]
        outdated = [c for c in checks if c.outdated]
        if ci_mode:
            if outdated:
                status(f"PHPDoc outdated in {pluralize(len(outdated), 'model')}:", style="error")
                for check in outdated:
                    status(f"- {escape(check.identifier)}", style="none", indent=2)
            elif not failed:
                status("All PHPDoc blocks are up to date", style="success")
        return 1 if failed or (ci_mode and outdated) else 0

    status(f"Generating documentation for models in: {escape(str(path))}", style="none")
    with spinner("Documenting models"):
        results = documenter.generate_for_directory(path)

    successful = [r for r in results if r.success]
    failed_results = [r for r in results if not r.success]

    status(f"Successfully processed {pluralize(len(successful), 'model')}", style="none")
    if failed_results:
        status(f"Failed to process {pluralize(len(failed_results), 'model')}:", style="warning")
        for result in failed_results:
            status(f"- {escape(result.identifier)}: {escape(result.error or '')}", style="error", indent=2)
    for result in successful:
        status(f"{escape(result.identifier)}.", style="success", indent=2)

    return 1 if failed_results else 0


@click.command()
@click.option(
    "--path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Models directory (default: models.path from config)",
)
@click.option("--model", default=None, help="Fully qualified model class to document")
@click.option("--test", "test_mode", is_flag=True, help="Compare existing docblocks with the expected ones")
@click.option("--ci", "ci_mode", is_flag=True, help="Silent test mode; exit status 1 when outdated")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Laravel project root (default: detected from the current directory)",
)
@click.pass_context
def generate_command(
    ctx: click.Context,
    path: Path | None,
    model: str | None,
    test_mode: bool,
    ci_mode: bool,
    root: Path | None,
) -> None:
    """Generate PHPDoc blocks for Eloquent models.

    Documents every model under the models directory, or only --model.
    With --test nothing is written; the current and expected docblocks are
    compared instead. --ci implies --test and reports only outdated models.
    """
    verbose = bool(ctx.obj and ctx.obj.get("verbose"))
    project_root = find_project_root(root)

    try:
        config = load_config(project_root)
    except ConfigError as e:
        raise click.ClickException(e.message) from e

    logging_config = config.logging
    if verbose:
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    configure_logging(config=logging_config)
    set_run_id()

    if ci_mode:
        test_mode = True

    documenter = ModelDocumenter(config, project_root)
    try:
        if model:
            exit_code = _run_single(documenter, model, test_mode, ci_mode)
        else:
            directory = path if path is not None else documenter.models_path
            exit_code = _run_directory(documenter, directory, test_mode, ci_mode)
    finally:
        documenter.close()

    if exit_code:
        sys.exit(exit_code)
